"""Job entity: a unit of production work placed on a machine's shift slots."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.base import ValueObject
from ..value_objects.enums import JobStatus
from ..value_objects.slot_range import SlotRange

UNASSIGNED = "Unassigned"

DEFAULT_STATUS = JobStatus.PENDING
DEFAULT_START_SLOT = 0
DEFAULT_DURATION_SLOTS = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssigneeRef(ValueObject):
    """Structured reference to the employee a job is assigned to."""

    id: str = Field(min_length=1)
    name: str | None = None
    employee_id: str | None = None

    @classmethod
    def parse(cls, value: Any) -> "AssigneeRef | None":
        """
        Read a stored or submitted assignee reference.

        Accepts an existing AssigneeRef, a mapping with an id (``_id`` and
        ``employeeId`` spellings tolerated) or a bare id string. A stored
        mapping without an id reads as unassigned.
        """
        if value is None or value == "":
            return None
        if isinstance(value, AssigneeRef):
            return value
        if isinstance(value, str):
            return cls(id=value)
        if isinstance(value, dict):
            ref_id = value.get("id") or value.get("_id")
            if not ref_id:
                return None
            return cls(
                id=str(ref_id),
                name=value.get("name"),
                employee_id=value.get("employee_id") or value.get("employeeId"),
            )
        raise ValueError(f"Unsupported assignee reference: {value!r}")


class Job(BaseModel):
    """
    Job entity.

    A job occupies the contiguous slot run [start_slot, start_slot +
    duration_slots - 1] on one machine while its status is not cancelled.
    Missing status, start slot and duration fall back to pending, 0 and 1 so
    partially written records stay well-formed on every read path.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    job_number: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    machine_id: str = Field(min_length=1, max_length=50)
    assigned_to: AssigneeRef | None = None
    assignee_name: str | None = Field(default=None, max_length=100)
    status: JobStatus = DEFAULT_STATUS
    start_slot: int = Field(default=DEFAULT_START_SLOT, ge=0)
    duration_slots: int = Field(default=DEFAULT_DURATION_SLOTS, ge=1)
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return DEFAULT_STATUS if v is None or v == "" else v

    @field_validator("start_slot", mode="before")
    @classmethod
    def default_start_slot(cls, v):
        return DEFAULT_START_SLOT if v is None else v

    @field_validator("duration_slots", mode="before")
    @classmethod
    def default_duration_slots(cls, v):
        return DEFAULT_DURATION_SLOTS if v is None else v

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v):
        return "" if v is None else v

    @field_validator("assigned_to", mode="before")
    @classmethod
    def parse_assigned_to(cls, v):
        return AssigneeRef.parse(v)

    @classmethod
    def create(
        cls,
        job_number: str,
        name: str,
        machine_id: str,
        description: str = "",
        assigned_to: Any = None,
        assignee_name: str | None = None,
        status: JobStatus | None = None,
        start_slot: int | None = None,
        duration_slots: int | None = None,
        created_by: str | None = None,
    ) -> "Job":
        """Create a new Job with a generated id and fresh timestamps."""
        now = utcnow()
        return cls(
            job_number=job_number,
            name=name,
            machine_id=machine_id,
            description=description,
            assigned_to=assigned_to,
            assignee_name=assignee_name,
            status=status,
            start_slot=start_slot,
            duration_slots=duration_slots,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    @property
    def slot_range(self) -> SlotRange:
        return SlotRange(start_slot=self.start_slot, duration_slots=self.duration_slots)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def assignee_display_name(self) -> str:
        """Structured assignee name, then free-text name, then "Unassigned"."""
        if self.assigned_to is not None and self.assigned_to.name:
            return self.assigned_to.name
        if self.assignee_name and self.assignee_name.strip():
            return self.assignee_name.strip()
        return UNASSIGNED

    def with_changes(self, **changes: Any) -> "Job":
        """Return a validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return Job.model_validate(data)
