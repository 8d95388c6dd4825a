"""
Domain Errors with Type Discrimination

Defines the error taxonomy of the scheduling core. Every error carries an
ErrorType discriminant so callers (the HTTP layer in particular) can handle
each kind explicitly instead of catching a generic exception.

Errors are usually returned inside a Failure result rather than raised; see
shiftboard.domain.shared.result.
"""

from enum import Enum
from uuid import UUID


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    OUT_OF_RANGE = "out_of_range"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    DUPLICATE_KEY = "duplicate_key"
    INVALID_TRANSITION = "invalid_transition"
    REPOSITORY_UNAVAILABLE = "repository_unavailable"
    UNAUTHENTICATED = "unauthenticated"


DetailValue = str | int | bool | list | dict | None


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, DetailValue]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when a payload field is missing or malformed."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            },
        )


class OutOfRangeError(DomainError):
    """Raised when a slot range does not fit inside the shift calendar."""

    def __init__(self, start_slot: int, duration_slots: int, slot_count: int) -> None:
        self.start_slot = start_slot
        self.duration_slots = duration_slots
        self.slot_count = slot_count

        if duration_slots < 1:
            reason = f"duration must be at least 1 slot, got {duration_slots}"
        else:
            reason = (
                f"slots {start_slot}..{start_slot + duration_slots - 1} "
                f"fall outside 0..{slot_count - 1}"
            )

        super().__init__(
            f"Placement out of range: {reason}",
            ErrorType.OUT_OF_RANGE,
            {
                "start_slot": start_slot,
                "duration_slots": duration_slots,
                "slot_count": slot_count,
            },
        )


class ConflictError(DomainError):
    """Raised when a placement overlaps active jobs on the same machine."""

    def __init__(
        self,
        machine_id: str,
        start_slot: int,
        duration_slots: int,
        conflicts: list[dict[str, str | int]],
    ) -> None:
        self.machine_id = machine_id
        self.conflicts = conflicts

        labels = ", ".join(
            f"{conflict['jobId']} ({conflict['name']})" for conflict in conflicts
        )
        super().__init__(
            f"Slots {start_slot}..{start_slot + duration_slots - 1} on machine "
            f"'{machine_id}' overlap: {labels}",
            ErrorType.CONFLICT,
            {"machine_id": machine_id, "conflicts": conflicts},
        )

    @property
    def conflicting_job_ids(self) -> list[str]:
        return [str(conflict["id"]) for conflict in self.conflicts]


class ForbiddenError(DomainError):
    """Raised when the caller's role does not allow an operation."""

    def __init__(self, role: str, operation: str) -> None:
        self.role = role
        self.operation = operation
        super().__init__(
            f"Role '{role}' is not allowed to {operation.replace('_', ' ')}",
            ErrorType.FORBIDDEN,
            {"role": role, "operation": operation},
        )


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: UUID | str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type.capitalize()} not found: {entity_id}",
            ErrorType.NOT_FOUND,
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class JobNotFoundError(NotFoundError):
    """Raised when a job is not found."""

    def __init__(self, job_id: UUID | str) -> None:
        super().__init__("job", job_id)
        self.job_id = job_id


class MachineNotFoundError(NotFoundError):
    """Raised when a machine id is not part of the configured reference data."""

    def __init__(self, machine_id: str) -> None:
        super().__init__("machine", machine_id)
        self.machine_id = machine_id


class DuplicateKeyError(DomainError):
    """Raised when a unique field collides at the repository boundary."""

    def __init__(self, field_name: str, value: str | None = None) -> None:
        self.field_name = field_name
        self.value = value
        if value:
            message = f"{field_name} '{value}' already exists"
        else:
            message = "Duplicate value already exists"
        super().__init__(
            message,
            ErrorType.DUPLICATE_KEY,
            {"field": field_name, "value": value},
        )


class InvalidTransitionError(DomainError):
    """Raised when a status change is not allowed by the lifecycle graph."""

    def __init__(self, current_status: str, target_status: str) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Cannot change status from '{current_status}' to '{target_status}'",
            ErrorType.INVALID_TRANSITION,
            {"from": current_status, "to": target_status},
        )


class RepositoryUnavailableError(DomainError):
    """Raised when the storage backend fails; the mutation was not applied."""

    def __init__(self, operation: str, reason: str | None = None) -> None:
        self.operation = operation
        super().__init__(
            f"Storage unavailable during {operation}",
            ErrorType.REPOSITORY_UNAVAILABLE,
            {"operation": operation, "reason": reason},
        )


class UnauthenticatedError(DomainError):
    """Raised when a request carries no valid credential."""

    def __init__(self, reason: str = "Could not validate credentials") -> None:
        super().__init__(reason, ErrorType.UNAUTHENTICATED)
