"""
Role-Based Access Control

Maps caller roles to the scheduling operations they may perform. The gate is
applied before any business rule runs: a denied caller never reaches the
scheduling engine or the lifecycle manager, and a denial is always reported
as a Forbidden failure.
"""

from enum import Enum

from shiftboard.domain.scheduling.value_objects import Role
from shiftboard.domain.shared import Failure, ForbiddenError, Result, Success

from .observability import get_logger

logger = get_logger(__name__)


class SchedulingPermission(str, Enum):
    """Scheduling operations subject to authorization."""

    JOB_READ = "job:read"
    JOB_CREATE = "job:create"
    JOB_UPDATE = "job:update"
    JOB_UPDATE_STATUS = "job:update_status"
    JOB_DELETE = "job:delete"
    SCHEDULE_READ = "schedule:read"
    MACHINE_READ = "machine:read"

    @property
    def operation(self) -> str:
        """Operation name reported in Forbidden errors."""
        return _OPERATION_NAMES[self]


_OPERATION_NAMES: dict[SchedulingPermission, str] = {
    SchedulingPermission.JOB_READ: "read_jobs",
    SchedulingPermission.JOB_CREATE: "create_job",
    SchedulingPermission.JOB_UPDATE: "edit_job",
    SchedulingPermission.JOB_UPDATE_STATUS: "change_job_status",
    SchedulingPermission.JOB_DELETE: "delete_job",
    SchedulingPermission.SCHEDULE_READ: "read_schedule",
    SchedulingPermission.MACHINE_READ: "read_machines",
}


_READ_PERMISSIONS: frozenset[SchedulingPermission] = frozenset(
    {
        SchedulingPermission.JOB_READ,
        SchedulingPermission.SCHEDULE_READ,
        SchedulingPermission.MACHINE_READ,
    }
)

# Role-Permission Matrix
ROLE_PERMISSIONS: dict[Role, frozenset[SchedulingPermission]] = {
    Role.USER: _READ_PERMISSIONS,
    Role.EMPLOYEE: _READ_PERMISSIONS,
    Role.MANAGER: frozenset(SchedulingPermission),
    Role.ADMIN: frozenset(SchedulingPermission),
}


class AuthorizationGate:
    """Checks a caller role against the role-permission matrix."""

    def __init__(
        self,
        role_permissions: dict[Role, frozenset[SchedulingPermission]] | None = None,
    ) -> None:
        self._role_permissions = role_permissions or ROLE_PERMISSIONS

    def has_permission(
        self, role: Role | str | None, permission: SchedulingPermission
    ) -> bool:
        return permission in self._role_permissions.get(Role.parse(role), frozenset())

    def authorize(
        self, role: Role | str | None, permission: SchedulingPermission
    ) -> Result[None, ForbiddenError]:
        """
        Authorize an operation for a role.

        Unknown role tokens are treated as viewers.

        Returns:
            Success(None) when allowed, Failure(ForbiddenError) otherwise
        """
        resolved = Role.parse(role)
        if self.has_permission(resolved, permission):
            return Success(None)

        logger.warning(
            "Permission denied",
            role=resolved.value,
            permission=permission.value,
        )
        return Failure(ForbiddenError(resolved.value, permission.operation))


authorization_gate = AuthorizationGate()
