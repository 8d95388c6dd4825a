"""
Job Lifecycle Manager

Owns the job status graph:

    pending -> in-progress -> completed
    pending | in-progress -> cancelled

Completed and cancelled are terminal. Cancelling a job releases its slots;
the record itself is kept.
"""

from shiftboard.core.rbac import AuthorizationGate, SchedulingPermission

from ...shared.exceptions import (
    DomainError,
    InvalidTransitionError,
    ValidationError,
)
from ...shared.result import Failure, Result, Success
from ..entities.job import Job, utcnow
from ..repositories.job_repository import JobRepository
from ..value_objects.enums import JobStatus, Role


def parse_status(value: JobStatus | str) -> Result[JobStatus, ValidationError]:
    if isinstance(value, JobStatus):
        return Success(value)
    try:
        return Success(JobStatus(value))
    except ValueError:
        allowed = ", ".join(status.value for status in JobStatus)
        return Failure(
            ValidationError(
                "status", value, f"must be one of: {allowed}", "INVALID_STATUS"
            )
        )


class JobLifecycleManager:
    """Validates and applies job status transitions."""

    def __init__(self, repository: JobRepository, gate: AuthorizationGate) -> None:
        self._repository = repository
        self._gate = gate

    @staticmethod
    def check_transition(
        current: JobStatus, target: JobStatus
    ) -> Result[JobStatus, InvalidTransitionError]:
        """
        Check a status change against the lifecycle graph.

        Staying in the same status is always allowed.
        """
        if current.can_transition_to(target):
            return Success(target)
        return Failure(InvalidTransitionError(current.value, target.value))

    def transition(
        self,
        job: Job,
        new_status: JobStatus | str,
        caller_role: Role | str | None,
    ) -> Result[Job, DomainError]:
        """
        Move a job to a new status on behalf of a caller.

        Authorization is checked before the transition itself. The stored job
        is re-read inside the machine's write scope so the check runs against
        the committed status, not the caller's copy.

        Returns:
            Success with the stored job (unchanged for an identity
            transition), or Failure with ForbiddenError, ValidationError,
            InvalidTransitionError, JobNotFoundError or
            RepositoryUnavailableError
        """
        authorized = self._gate.authorize(
            caller_role, SchedulingPermission.JOB_UPDATE_STATUS
        )
        if isinstance(authorized, Failure):
            return authorized

        parsed = parse_status(new_status)
        if isinstance(parsed, Failure):
            return parsed
        target = parsed.value

        checked = self.check_transition(job.status, target)
        if isinstance(checked, Failure):
            return checked
        if target == job.status:
            return Success(job)

        try:
            with self._repository.write_scope(job.machine_id) as store:
                current = store.get_by_id_required(job.id)
                checked = self.check_transition(current.status, target)
                if isinstance(checked, Failure):
                    return checked
                if current.status == target:
                    return Success(current)
                updated = store.update(
                    current, {"status": target, "updated_at": utcnow()}
                )
        except DomainError as e:
            return Failure(e)

        return Success(updated)
