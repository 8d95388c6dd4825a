"""Machine reference data routes."""

from fastapi import APIRouter, Query

from shiftboard.api.deps import CurrentPrincipal, JobServiceDep
from shiftboard.api.errors import ERROR_RESPONSES, unwrap
from shiftboard.application.dtos import MachineResponse

router = APIRouter(prefix="/machines", tags=["machines"])


@router.get(
    "",
    summary="List machines",
    response_model=list[MachineResponse],
    responses=ERROR_RESPONSES,
)
def list_machines(
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
    department: str | None = Query(None),
) -> list[MachineResponse]:
    machines = unwrap(job_service.list_machines(caller, department))
    return [MachineResponse.from_domain(machine) for machine in machines]
