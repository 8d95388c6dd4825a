"""
Slot Range Value Object

A contiguous run of shift slots, expressed as a start index and a length.
The run covers the inclusive indices [start_slot, end_slot].
"""

from pydantic import Field

from ...shared.base import ValueObject


class SlotRange(ValueObject):
    """Contiguous run of slots on one machine."""

    start_slot: int = Field(ge=0)
    duration_slots: int = Field(ge=1)

    @property
    def end_slot(self) -> int:
        """Last slot index covered by the run (inclusive)."""
        return self.start_slot + self.duration_slots - 1

    def overlaps_with(self, other: "SlotRange") -> bool:
        """
        Check if two runs share at least one slot.

        Adjacent runs (one ends at slot 3, the other starts at slot 4) do not
        overlap.
        """
        return self.start_slot <= other.end_slot and other.start_slot <= self.end_slot

    def contains(self, slot_index: int) -> bool:
        return self.start_slot <= slot_index <= self.end_slot

    def slots(self) -> range:
        return range(self.start_slot, self.end_slot + 1)

    def __str__(self) -> str:
        return f"[{self.start_slot}..{self.end_slot}]"
