"""
Job application service for coordinating job-related use cases.

Every use case runs the same pipeline: authorization gate, payload checks
against reference data, then placement and lifecycle validation inside the
repository's write scope for the affected machine, and finally a single
write in that same scope. Results are returned as Success or Failure; the
service never raises domain errors at its callers.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from shiftboard.core.observability import get_logger, record_scheduling_decision
from shiftboard.core.rbac import (
    AuthorizationGate,
    SchedulingPermission,
    authorization_gate,
)
from shiftboard.core.security import Principal
from shiftboard.domain.scheduling.entities import Job
from shiftboard.domain.scheduling.repositories import (
    JobFilter,
    JobRepository,
    JobStore,
)
from shiftboard.domain.scheduling.services import (
    JobLifecycleManager,
    ScheduleGrid,
    SchedulingEngine,
    build_grid,
    compute_occupancy,
    parse_status,
)
from shiftboard.domain.scheduling.value_objects import (
    JobStatus,
    Machine,
    SlotCalendar,
    SlotRange,
)
from shiftboard.domain.shared import (
    DomainError,
    Failure,
    MachineNotFoundError,
    RepositoryUnavailableError,
    Result,
    Success,
)

from ..dtos.job_dtos import CreateJobRequest, UpdateJobRequest

logger = get_logger(__name__)

MAX_EDIT_ATTEMPTS = 3


@dataclass(frozen=True)
class ScheduleView:
    """Grid plus the data needed to render it."""

    grid: ScheduleGrid
    machines: list[Machine]
    jobs: list[Job]
    free_runs: dict[str, list[SlotRange]]


class JobService:
    """
    Application service for job-related operations.

    Coordinates job creation, edits, status changes and deletion, and builds
    the schedule grid.
    """

    def __init__(
        self,
        repository: JobRepository,
        machines: Sequence[Machine],
        calendar: SlotCalendar,
        gate: AuthorizationGate = authorization_gate,
    ) -> None:
        """
        Initialize the job service.

        Args:
            repository: Job storage
            machines: Machine reference data
            calendar: Shift slot calendar
            gate: Authorization gate applied before every operation
        """
        self._repository = repository
        self._machines = list(machines)
        self._machines_by_id = {machine.id: machine for machine in self._machines}
        self._calendar = calendar
        self._gate = gate
        self._engine = SchedulingEngine(calendar)
        self._lifecycle = JobLifecycleManager(repository, gate)

    @property
    def machines(self) -> list[Machine]:
        return list(self._machines)

    @property
    def calendar(self) -> SlotCalendar:
        return self._calendar

    @property
    def engine(self) -> SchedulingEngine:
        return self._engine

    def department_of(self, machine_id: str) -> str | None:
        machine = self._machines_by_id.get(machine_id)
        return machine.department if machine else None

    def machines_in(self, department: str | None = None) -> list[Machine]:
        if department is None:
            return list(self._machines)
        return [m for m in self._machines if m.department == department]

    def _record(self, operation: str, result: Result) -> Result:
        if isinstance(result, Failure):
            record_scheduling_decision(operation, result.error.error_type.value)
            logger.info(
                "Scheduling operation rejected",
                operation=operation,
                error_type=result.error.error_type.value,
                reason=result.error.message,
            )
        else:
            record_scheduling_decision(operation, "accepted")
        return result

    # Reads

    def list_jobs(
        self,
        caller: Principal,
        machine_id: str | None = None,
        status: JobStatus | str | None = None,
        department: str | None = None,
    ) -> Result[list[Job], DomainError]:
        """
        List jobs in stable order, optionally filtered.

        Listing twice without writes in between returns the same sequence.
        """
        authorized = self._gate.authorize(caller.role, SchedulingPermission.JOB_READ)
        if isinstance(authorized, Failure):
            return authorized

        status_filter = None
        if status is not None:
            parsed = parse_status(status)
            if isinstance(parsed, Failure):
                return parsed
            status_filter = parsed.value

        machine_ids = None
        if department is not None:
            machine_ids = tuple(m.id for m in self.machines_in(department))

        try:
            jobs = self._repository.find(
                JobFilter(
                    machine_id=machine_id,
                    machine_ids=machine_ids,
                    status=status_filter,
                )
            )
        except DomainError as e:
            return Failure(e)
        return Success(jobs)

    def get_job(self, caller: Principal, job_id: UUID) -> Result[Job, DomainError]:
        authorized = self._gate.authorize(caller.role, SchedulingPermission.JOB_READ)
        if isinstance(authorized, Failure):
            return authorized
        try:
            return Success(self._repository.get_by_id_required(job_id))
        except DomainError as e:
            return Failure(e)

    def build_schedule(
        self, caller: Principal, department: str | None = None
    ) -> Result[ScheduleView, DomainError]:
        """Build the machine x slot grid for all machines or one department."""
        authorized = self._gate.authorize(
            caller.role, SchedulingPermission.SCHEDULE_READ
        )
        if isinstance(authorized, Failure):
            return authorized

        machines = self.machines_in(department)
        try:
            jobs = self._repository.find(
                JobFilter(machine_ids=tuple(m.id for m in machines))
            )
        except DomainError as e:
            return Failure(e)

        occupancy = compute_occupancy(jobs)
        return Success(
            ScheduleView(
                grid=build_grid(machines, jobs, self._calendar),
                machines=machines,
                jobs=jobs,
                free_runs={
                    m.id: self._engine.find_free_runs(m.id, occupancy)
                    for m in machines
                },
            )
        )

    def list_machines(
        self, caller: Principal, department: str | None = None
    ) -> Result[list[Machine], DomainError]:
        authorized = self._gate.authorize(
            caller.role, SchedulingPermission.MACHINE_READ
        )
        if isinstance(authorized, Failure):
            return authorized
        return Success(self.machines_in(department))

    def get_calendar(self, caller: Principal) -> Result[SlotCalendar, DomainError]:
        authorized = self._gate.authorize(
            caller.role, SchedulingPermission.SCHEDULE_READ
        )
        if isinstance(authorized, Failure):
            return authorized
        return Success(self._calendar)

    # Mutations

    def _check_machine(self, machine_id: str) -> Result[Machine, DomainError]:
        machine = self._machines_by_id.get(machine_id)
        if machine is None:
            return Failure(MachineNotFoundError(machine_id))
        return Success(machine)

    def _validate_range(
        self,
        store: JobStore,
        machine_id: str,
        start_slot: int,
        duration_slots: int,
        status: JobStatus,
        exclude_job_id: UUID | None = None,
    ) -> Result[SlotRange, DomainError]:
        """
        Validate a run against the occupancy committed for the machine.

        Cancelled jobs hold no slots, so only the calendar bounds apply to them.
        """
        if not status.is_active:
            return self._engine.validate_placement(
                machine_id, start_slot, duration_slots, {}
            )
        occupancy = compute_occupancy(
            store.find(JobFilter(machine_id=machine_id, active_only=True))
        )
        return self._engine.validate_placement(
            machine_id, start_slot, duration_slots, occupancy, exclude_job_id
        )

    def create_job(
        self, caller: Principal, request: CreateJobRequest
    ) -> Result[Job, DomainError]:
        """
        Create a job and place it on its machine.

        Missing status, start slot and duration default to pending, 0 and 1.

        Returns:
            Success with the stored job, or Failure with ForbiddenError,
            MachineNotFoundError, OutOfRangeError, ConflictError,
            DuplicateKeyError or RepositoryUnavailableError
        """
        authorized = self._gate.authorize(caller.role, SchedulingPermission.JOB_CREATE)
        if isinstance(authorized, Failure):
            return self._record("create", authorized)

        machine = self._check_machine(request.machine_id)
        if isinstance(machine, Failure):
            return self._record("create", machine)

        status = parse_status(request.status or JobStatus.PENDING)
        if isinstance(status, Failure):
            return self._record("create", status)

        start_slot = 0 if request.start_slot is None else request.start_slot
        duration_slots = 1 if request.duration_slots is None else request.duration_slots

        try:
            with self._repository.write_scope(request.machine_id) as store:
                placed = self._validate_range(
                    store,
                    request.machine_id,
                    start_slot,
                    duration_slots,
                    status.value,
                )
                if isinstance(placed, Failure):
                    return self._record("create", placed)

                created = store.create(
                    Job.create(
                        job_number=request.job_number,
                        name=request.name,
                        machine_id=request.machine_id,
                        description=request.description or "",
                        assigned_to=request.assigned_to,
                        assignee_name=request.assignee_name,
                        status=status.value,
                        start_slot=start_slot,
                        duration_slots=duration_slots,
                        created_by=caller.user_id,
                    )
                )
        except DomainError as e:
            return self._record("create", Failure(e))

        logger.info(
            "Job created",
            job_id=str(created.id),
            job_number=created.job_number,
            machine_id=created.machine_id,
            slots=str(created.slot_range),
            status=created.status.value,
        )
        return self._record("create", Success(created))

    def update_job(
        self, caller: Principal, job_id: UUID, request: UpdateJobRequest
    ) -> Result[Job, DomainError]:
        """
        Edit a job. Placement is re-validated when it changes, and a status
        change in the same payload must follow the lifecycle; both land in
        one write.

        A job moved to another machine is validated inside the target
        machine's write scope. If another edit moved the job after it was
        read, the edit is retried under the job's current machine.
        """
        authorized = self._gate.authorize(caller.role, SchedulingPermission.JOB_UPDATE)
        if isinstance(authorized, Failure):
            return self._record("edit", authorized)

        patch: dict[str, Any] = request.to_patch()

        try:
            existing = self._repository.get_by_id_required(job_id)
        except DomainError as e:
            return self._record("edit", Failure(e))

        target_machine = patch.get("machine_id", existing.machine_id)
        machine = self._check_machine(target_machine)
        if isinstance(machine, Failure):
            return self._record("edit", machine)

        if "status" in patch:
            parsed = parse_status(patch["status"])
            if isinstance(parsed, Failure):
                return self._record("edit", parsed)
            patch["status"] = parsed.value

        for _attempt in range(MAX_EDIT_ATTEMPTS):
            try:
                with self._repository.write_scope(target_machine) as store:
                    current = store.get_by_id_required(job_id)
                    if (
                        "machine_id" not in patch
                        and current.machine_id != target_machine
                    ):
                        # Moved by another edit since it was read; lock its
                        # current machine instead
                        target_machine = current.machine_id
                        continue

                    new_status = patch.get("status", current.status)
                    checked = self._lifecycle.check_transition(
                        current.status, new_status
                    )
                    if isinstance(checked, Failure):
                        return self._record("edit", checked)

                    start_slot = patch.get("start_slot", current.start_slot)
                    duration_slots = patch.get(
                        "duration_slots", current.duration_slots
                    )
                    moved = (
                        target_machine != current.machine_id
                        or start_slot != current.start_slot
                        or duration_slots != current.duration_slots
                    )
                    if moved:
                        placed = self._validate_range(
                            store,
                            target_machine,
                            start_slot,
                            duration_slots,
                            new_status,
                            exclude_job_id=current.id,
                        )
                        if isinstance(placed, Failure):
                            return self._record("edit", placed)

                    updated = store.update(current, patch)
            except DomainError as e:
                return self._record("edit", Failure(e))
            break
        else:
            return self._record(
                "edit",
                Failure(
                    RepositoryUnavailableError(
                        "edit", "job kept moving between machines"
                    )
                ),
            )

        logger.info(
            "Job updated",
            job_id=str(updated.id),
            machine_id=updated.machine_id,
            slots=str(updated.slot_range),
            status=updated.status.value,
            fields=sorted(patch),
        )
        return self._record("edit", Success(updated))

    def change_status(
        self, caller: Principal, job_id: UUID, status: JobStatus | str
    ) -> Result[Job, DomainError]:
        """Apply a lifecycle transition requested by the caller."""
        authorized = self._gate.authorize(
            caller.role, SchedulingPermission.JOB_UPDATE_STATUS
        )
        if isinstance(authorized, Failure):
            return self._record("status", authorized)

        try:
            job = self._repository.get_by_id_required(job_id)
        except DomainError as e:
            return self._record("status", Failure(e))

        result = self._lifecycle.transition(job, status, caller.role)
        if isinstance(result, Success) and result.value.status != job.status:
            logger.info(
                "Job status changed",
                job_id=str(job.id),
                machine_id=job.machine_id,
                from_status=job.status.value,
                to_status=result.value.status.value,
            )
        return self._record("status", result)

    def delete_job(self, caller: Principal, job_id: UUID) -> Result[Job, DomainError]:
        """Delete a job and return what was deleted."""
        authorized = self._gate.authorize(caller.role, SchedulingPermission.JOB_DELETE)
        if isinstance(authorized, Failure):
            return self._record("delete", authorized)

        try:
            job = self._repository.get_by_id_required(job_id)
            with self._repository.write_scope(job.machine_id) as store:
                current = store.get_by_id_required(job_id)
                store.delete(current)
        except DomainError as e:
            return self._record("delete", Failure(e))

        logger.info(
            "Job deleted",
            job_id=str(current.id),
            job_number=current.job_number,
            machine_id=current.machine_id,
        )
        return self._record("delete", Success(current))

