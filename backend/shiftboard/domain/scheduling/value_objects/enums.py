"""Domain enums for scheduling."""

from enum import Enum


class JobStatus(str, Enum):
    """Job status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        """Active jobs occupy slots; cancelled ones free them."""
        return self != JobStatus.CANCELLED

    @property
    def is_terminal(self) -> bool:
        """Check if job status is terminal (cannot transition further)."""
        return self in {JobStatus.COMPLETED, JobStatus.CANCELLED}

    def can_transition_to(self, target_status: "JobStatus") -> bool:
        """Check if job can transition from current status to target status."""
        if target_status == self:
            return True
        return target_status in JOB_STATUS_TRANSITIONS.get(self, frozenset())


JOB_STATUS_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.IN_PROGRESS, JobStatus.CANCELLED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),  # Terminal state
    JobStatus.CANCELLED: frozenset(),  # Terminal state
}


class Role(str, Enum):
    """Caller roles as issued by the authentication collaborator."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    USER = "user"

    @classmethod
    def parse(cls, value: "str | Role | None") -> "Role":
        """Map an opaque role token to a Role; unknown tokens become viewers."""
        if isinstance(value, Role):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.USER

    @property
    def is_viewer(self) -> bool:
        return self in {Role.EMPLOYEE, Role.USER}
