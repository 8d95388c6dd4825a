"""Schedule grid and slot calendar routes."""

from fastapi import APIRouter, Query

from shiftboard.api.deps import CurrentPrincipal, JobServiceDep
from shiftboard.api.errors import ERROR_RESPONSES, unwrap
from shiftboard.application.dtos import (
    JobResponse,
    ScheduleGridResponse,
    SlotsResponse,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get(
    "/grid",
    summary="Schedule grid",
    description=(
        "Machine x slot grid for the shift. Cancelled jobs leave their cells "
        "empty; each row lists its free runs of slots."
    ),
    response_model=ScheduleGridResponse,
    responses=ERROR_RESPONSES,
)
def get_schedule_grid(
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
    department: str | None = Query(None),
) -> ScheduleGridResponse:
    view = unwrap(job_service.build_schedule(caller, department))
    return ScheduleGridResponse.from_grid(
        view.grid,
        view.machines,
        view.free_runs,
        [
            JobResponse.from_domain(job, job_service.department_of(job.machine_id))
            for job in view.jobs
        ],
    )


@router.get(
    "/slots",
    summary="Shift slots",
    response_model=SlotsResponse,
    responses=ERROR_RESPONSES,
)
def get_slots(caller: CurrentPrincipal, job_service: JobServiceDep) -> SlotsResponse:
    return SlotsResponse.from_calendar(unwrap(job_service.get_calendar(caller)))
