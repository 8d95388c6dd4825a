"""
Jobs API Routes.

CRUD and status management for scheduled jobs. Every mutation returns the
stored job so clients can update their view without re-fetching the list.
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from shiftboard.api.deps import CurrentPrincipal, JobServiceDep
from shiftboard.api.errors import ERROR_RESPONSES, unwrap
from shiftboard.application.dtos import (
    CreateJobRequest,
    ErrorResponse,
    JobResponse,
    StatusTransitionRequest,
    UpdateJobRequest,
)
from shiftboard.application.services import JobService
from shiftboard.domain.scheduling.entities import Job
from shiftboard.domain.scheduling.value_objects import JobStatus

router = APIRouter(prefix="/jobs", tags=["jobs"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Job not found"}}
INVALID = {422: {"model": ErrorResponse, "description": "Invalid job data"}}


def _to_response(service: JobService, job: Job) -> JobResponse:
    return JobResponse.from_domain(job, service.department_of(job.machine_id))


@router.get(
    "",
    summary="List jobs",
    description="List jobs ordered by machine and start slot.",
    response_model=list[JobResponse],
    responses={**ERROR_RESPONSES, **INVALID},
)
def list_jobs(
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
    machine_id: str | None = Query(None, alias="machineId"),
    status_filter: JobStatus | None = Query(None, alias="status"),
    department: str | None = Query(None),
) -> list[JobResponse]:
    jobs = unwrap(
        job_service.list_jobs(
            caller,
            machine_id=machine_id,
            status=status_filter,
            department=department,
        )
    )
    return [_to_response(job_service, job) for job in jobs]


@router.post(
    "",
    summary="Create job",
    description="Create a job and place it on a machine's shift slots.",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **ERROR_RESPONSES,
        **INVALID,
        404: {"model": ErrorResponse, "description": "Unknown machine"},
        409: {
            "model": ErrorResponse,
            "description": "Slots already taken or job ID already exists",
        },
    },
)
def create_job(
    request: CreateJobRequest,
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
) -> JobResponse:
    """
    Create a new job.

    Requires the admin or manager role. Status defaults to pending, start
    slot to 0 and duration to one slot.
    """
    job = unwrap(job_service.create_job(caller, request))
    return _to_response(job_service, job)


@router.get(
    "/{job_id}",
    summary="Get job",
    response_model=JobResponse,
    responses={**ERROR_RESPONSES, **NOT_FOUND},
)
def get_job(
    job_id: UUID, caller: CurrentPrincipal, job_service: JobServiceDep
) -> JobResponse:
    return _to_response(job_service, unwrap(job_service.get_job(caller, job_id)))


@router.put(
    "/{job_id}",
    summary="Edit job",
    description="Change any subset of a job's fields, including its placement.",
    response_model=JobResponse,
    responses={
        **ERROR_RESPONSES,
        **NOT_FOUND,
        **INVALID,
        409: {
            "model": ErrorResponse,
            "description": "Slots taken, duplicate job ID or invalid status change",
        },
    },
)
def update_job(
    job_id: UUID,
    request: UpdateJobRequest,
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
) -> JobResponse:
    job = unwrap(job_service.update_job(caller, job_id, request))
    return _to_response(job_service, job)


@router.post(
    "/{job_id}/status",
    summary="Change job status",
    description=(
        "Move a job along pending -> in-progress -> completed, or cancel it. "
        "Cancelling frees its slots."
    ),
    response_model=JobResponse,
    responses={
        **ERROR_RESPONSES,
        **NOT_FOUND,
        **INVALID,
        409: {"model": ErrorResponse, "description": "Transition not allowed"},
    },
)
def change_job_status(
    job_id: UUID,
    request: StatusTransitionRequest,
    caller: CurrentPrincipal,
    job_service: JobServiceDep,
) -> JobResponse:
    job = unwrap(job_service.change_status(caller, job_id, request.status))
    return _to_response(job_service, job)


@router.delete(
    "/{job_id}",
    summary="Delete job",
    response_model=JobResponse,
    responses={**ERROR_RESPONSES, **NOT_FOUND},
)
def delete_job(
    job_id: UUID, caller: CurrentPrincipal, job_service: JobServiceDep
) -> JobResponse:
    """Delete a job and return it as it was stored."""
    return _to_response(job_service, unwrap(job_service.delete_job(caller, job_id)))
