"""
Schedule Grid

Projects jobs onto a machine x slot matrix. The same occupancy snapshot feeds
both the rendered grid and placement validation, so what the grid shows as
free is exactly what the scheduling engine accepts.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from ..entities.job import Job
from ..value_objects.machine import Machine
from ..value_objects.slot_calendar import SlotCalendar
from ..value_objects.slot_range import SlotRange


@dataclass(frozen=True)
class OccupiedRun:
    """One active job's run of slots on a machine."""

    job_id: UUID
    job_number: str
    name: str
    slot_range: SlotRange

    def summary(self) -> dict[str, str]:
        return {"id": str(self.job_id), "jobId": self.job_number, "name": self.name}


Occupancy = dict[str, list[OccupiedRun]]


def compute_occupancy(jobs: Iterable[Job]) -> Occupancy:
    """
    Group active jobs by machine, ordered by start slot.

    Cancelled jobs are left out: they keep their record but no longer hold
    slots.
    """
    occupancy: Occupancy = {}
    for job in jobs:
        if not job.is_active:
            continue
        occupancy.setdefault(job.machine_id, []).append(
            OccupiedRun(
                job_id=job.id,
                job_number=job.job_number,
                name=job.name,
                slot_range=job.slot_range,
            )
        )
    for runs in occupancy.values():
        runs.sort(key=lambda run: (run.slot_range.start_slot, str(run.job_id)))
    return occupancy


@dataclass(frozen=True)
class EmptyCell:
    occupied: bool = False


@dataclass(frozen=True)
class OccupiedCell:
    job_id: UUID
    is_first_slot_of_run: bool
    occupied: bool = True


Cell = EmptyCell | OccupiedCell

EMPTY = EmptyCell()


@dataclass(frozen=True)
class ScheduleGrid:
    """Machine x slot matrix; ``cells[machine_id][slot]``."""

    calendar: SlotCalendar
    machine_ids: tuple[str, ...]
    cells: dict[str, tuple[Cell, ...]] = field(default_factory=dict)

    def cell(self, machine_id: str, slot_index: int) -> Cell:
        return self.cells[machine_id][slot_index]

    def row(self, machine_id: str) -> tuple[Cell, ...]:
        return self.cells[machine_id]

    def __getitem__(self, machine_id: str) -> tuple[Cell, ...]:
        return self.cells[machine_id]


def build_grid(
    machines: Sequence[Machine],
    jobs: Iterable[Job],
    calendar: SlotCalendar,
) -> ScheduleGrid:
    """
    Build the schedule grid for the given machines.

    Every machine gets a full row of ``calendar.size`` cells. Slots outside
    the calendar are clipped. If stored data overlaps (written before overlap
    checks existed), the earliest-starting job owns the shared cells.
    Jobs on machines that are not listed are ignored.
    """
    occupancy = compute_occupancy(jobs)
    cells: dict[str, tuple[Cell, ...]] = {}

    for machine in machines:
        row: list[Cell] = [EMPTY] * calendar.size
        for run in occupancy.get(machine.id, []):
            for slot in run.slot_range.slots():
                if slot >= calendar.size:
                    break
                if isinstance(row[slot], OccupiedCell):
                    continue
                row[slot] = OccupiedCell(
                    job_id=run.job_id,
                    is_first_slot_of_run=slot == run.slot_range.start_slot,
                )
        cells[machine.id] = tuple(row)

    return ScheduleGrid(
        calendar=calendar,
        machine_ids=tuple(machine.id for machine in machines),
        cells=cells,
    )
