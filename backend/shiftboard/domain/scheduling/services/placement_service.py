"""
Scheduling Engine

Decides whether a job may occupy a run of slots on a machine. Validation is a
pure function of the requested run and an occupancy snapshot; callers that
commit a placement must compute that snapshot inside the repository's write
scope for the machine.
"""

from uuid import UUID

from ...shared.exceptions import ConflictError, OutOfRangeError
from ...shared.result import Failure, Result, Success
from ..value_objects.slot_calendar import SlotCalendar
from ..value_objects.slot_range import SlotRange
from .schedule_grid import Occupancy


class SchedulingEngine:
    """
    Placement validation against a shift calendar.

    The calendar is reference data and is injected once; occupancy is passed
    per call.
    """

    def __init__(self, calendar: SlotCalendar) -> None:
        self._calendar = calendar

    @property
    def calendar(self) -> SlotCalendar:
        return self._calendar

    def validate_placement(
        self,
        machine_id: str,
        start_slot: int,
        duration_slots: int,
        occupancy: Occupancy,
        exclude_job_id: UUID | None = None,
    ) -> Result[SlotRange, OutOfRangeError | ConflictError]:
        """
        Check a requested run against the calendar and existing occupancy.

        Args:
            machine_id: Machine the run is requested on
            start_slot: First slot index
            duration_slots: Number of slots
            occupancy: Active runs per machine
            exclude_job_id: Job being moved, whose current run is ignored

        Returns:
            Success with the validated SlotRange, Failure with OutOfRangeError
            when the run leaves the shift or has no length, or Failure with
            ConflictError listing every overlapping job
        """
        if not self._calendar.contains(start_slot, duration_slots):
            return Failure(
                OutOfRangeError(start_slot, duration_slots, self._calendar.size)
            )

        requested = SlotRange(start_slot=start_slot, duration_slots=duration_slots)
        conflicts = [
            run.summary()
            for run in occupancy.get(machine_id, [])
            if run.job_id != exclude_job_id and run.slot_range.overlaps_with(requested)
        ]
        if conflicts:
            return Failure(
                ConflictError(machine_id, start_slot, duration_slots, conflicts)
            )

        return Success(requested)

    def find_free_runs(self, machine_id: str, occupancy: Occupancy) -> list[SlotRange]:
        """Maximal runs of free slots on a machine, in slot order."""
        taken = [False] * self._calendar.size
        for run in occupancy.get(machine_id, []):
            for slot in run.slot_range.slots():
                if slot < self._calendar.size:
                    taken[slot] = True

        free_runs: list[SlotRange] = []
        run_start: int | None = None
        for slot, is_taken in enumerate(taken):
            if not is_taken and run_start is None:
                run_start = slot
            elif is_taken and run_start is not None:
                free_runs.append(
                    SlotRange(start_slot=run_start, duration_slots=slot - run_start)
                )
                run_start = None
        if run_start is not None:
            free_runs.append(
                SlotRange(
                    start_slot=run_start,
                    duration_slots=self._calendar.size - run_start,
                )
            )
        return free_runs
