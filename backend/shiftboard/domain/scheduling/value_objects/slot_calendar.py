"""
Slot Calendar Value Object

Defines the fixed, ordered sequence of time slots that make up one shift.
Slots are addressed by index 0..N-1; the calendar only maps indices to
display labels and answers bounds questions. It holds no scheduling state.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta


class SlotCalendar:
    """
    Ordered, gap-free sequence of slot labels for one shift.

    Can be built from explicit labels or generated from a shift start time,
    slot length and slot count.
    """

    def __init__(self, labels: Iterable[str]) -> None:
        """
        Initialize a SlotCalendar.

        Args:
            labels: Display label for each slot, in shift order

        Raises:
            ValueError: If no labels are given or labels repeat
        """
        self._labels: tuple[str, ...] = tuple(labels)
        if not self._labels:
            raise ValueError("A shift must have at least one slot")
        if len(set(self._labels)) != len(self._labels):
            raise ValueError("Slot labels must be unique")

    @classmethod
    def for_shift(
        cls, start: str = "08:00", slot_minutes: int = 60, slot_count: int = 8
    ) -> "SlotCalendar":
        """
        Generate HH:MM labels for a shift.

        Args:
            start: Shift start as "HH:MM"
            slot_minutes: Length of one slot in minutes
            slot_count: Number of slots in the shift

        Raises:
            ValueError: If the start time is malformed or sizes are not positive
        """
        if slot_minutes < 1:
            raise ValueError("Slot length must be at least one minute")
        if slot_count < 1:
            raise ValueError("A shift must have at least one slot")

        first = datetime.strptime(start, "%H:%M")
        step = timedelta(minutes=slot_minutes)
        return cls((first + step * index).strftime("%H:%M") for index in range(slot_count))

    @property
    def labels(self) -> Sequence[str]:
        return self._labels

    @property
    def size(self) -> int:
        """Number of slots (N) in the shift."""
        return len(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def indices(self) -> range:
        return range(len(self._labels))

    def label_for(self, slot_index: int) -> str:
        """
        Get the display label of a slot.

        Raises:
            IndexError: If the index is outside the shift
        """
        if not 0 <= slot_index < len(self._labels):
            raise IndexError(f"Slot {slot_index} is outside 0..{len(self._labels) - 1}")
        return self._labels[slot_index]

    def contains(self, start_slot: int, duration_slots: int) -> bool:
        """Check that a run of slots lies entirely inside the shift."""
        if duration_slots < 1 or start_slot < 0:
            return False
        return start_slot + duration_slots - 1 <= len(self._labels) - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotCalendar):
            return False
        return self._labels == other._labels

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"SlotCalendar({list(self._labels)!r})"
