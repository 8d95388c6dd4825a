"""Schedule, machine and error DTOs."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from shiftboard.domain.scheduling.services import OccupiedCell, ScheduleGrid
from shiftboard.domain.scheduling.value_objects import Machine, SlotCalendar, SlotRange

from .job_dtos import JobResponse


class MachineResponse(BaseModel):
    id: str
    name: str
    department: str

    @classmethod
    def from_domain(cls, machine: Machine) -> "MachineResponse":
        return cls(id=machine.id, name=machine.name, department=machine.department)


class SlotResponse(BaseModel):
    index: int
    label: str


class SlotsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot_count: int = Field(alias="slotCount")
    slots: list[SlotResponse]

    @classmethod
    def from_calendar(cls, calendar: SlotCalendar) -> "SlotsResponse":
        return cls(
            slot_count=calendar.size,
            slots=[
                SlotResponse(index=index, label=calendar.label_for(index))
                for index in calendar.indices()
            ],
        )


class SlotRangeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_slot: int = Field(alias="startSlot")
    duration_slots: int = Field(alias="durationSlots")
    end_slot: int = Field(alias="endSlot")

    @classmethod
    def from_domain(cls, slot_range: SlotRange) -> "SlotRangeResponse":
        return cls(
            start_slot=slot_range.start_slot,
            duration_slots=slot_range.duration_slots,
            end_slot=slot_range.end_slot,
        )


class GridCellResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot: int
    occupied: bool
    job_id: UUID | None = Field(None, alias="jobId")
    is_first_slot_of_run: bool = Field(False, alias="isFirstSlotOfRun")


class GridRowResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    machine: MachineResponse
    cells: list[GridCellResponse]
    free_runs: list[SlotRangeResponse] = Field(alias="freeRuns")


class ScheduleGridResponse(BaseModel):
    """Machine x slot grid with the jobs it references."""

    slots: list[SlotResponse]
    rows: list[GridRowResponse]
    jobs: list[JobResponse]

    @classmethod
    def from_grid(
        cls,
        grid: ScheduleGrid,
        machines: list[Machine],
        free_runs: dict[str, list[SlotRange]],
        jobs: list[JobResponse],
    ) -> "ScheduleGridResponse":
        rows = []
        for machine in machines:
            cells = []
            for slot, cell in enumerate(grid.row(machine.id)):
                if isinstance(cell, OccupiedCell):
                    cells.append(
                        GridCellResponse(
                            slot=slot,
                            occupied=True,
                            job_id=cell.job_id,
                            is_first_slot_of_run=cell.is_first_slot_of_run,
                        )
                    )
                else:
                    cells.append(GridCellResponse(slot=slot, occupied=False))
            rows.append(
                GridRowResponse(
                    machine=MachineResponse.from_domain(machine),
                    cells=cells,
                    free_runs=[
                        SlotRangeResponse.from_domain(run)
                        for run in free_runs.get(machine.id, [])
                    ],
                )
            )
        return cls(
            slots=SlotsResponse.from_calendar(grid.calendar).slots,
            rows=rows,
            jobs=jobs,
        )


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    error: str
    type: str
    details: dict[str, Any] = {}
