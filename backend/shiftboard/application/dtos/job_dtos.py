"""
Job-related Data Transfer Objects.

This module contains DTOs for job creation, updates and responses. Field
names on the wire are camelCase (``jobId``, ``machineId``, ``startSlot``...);
the DTOs translate to the snake_case domain fields.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from shiftboard.domain.scheduling.entities import Job
from shiftboard.domain.scheduling.value_objects import JobStatus

STATUS_VALUES = [status.value for status in JobStatus]

REQUIRED_MESSAGES = {
    "job_number": "Job ID is required",
    "name": "Name is required",
    "machine_id": "Machine is required",
}

NUMBER_MESSAGES = {
    "start_slot": "Start slot must be a number",
    "duration_slots": "Duration must be a number",
}


def validate_status_value(v: Any) -> str | None:
    if v is None or v == "":
        return None
    if v not in STATUS_VALUES:
        raise ValueError(f"Status must be one of: {', '.join(STATUS_VALUES)}")
    return v


class JobPayload(BaseModel):
    """Fields shared by create and update payloads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    description: str | None = Field(None, max_length=2000)
    assignee_name: str | None = Field(None, alias="assigneeName", max_length=100)
    assigned_to: str | dict[str, Any] | None = Field(None, alias="assignedTo")
    status: str | None = Field(
        None, description="pending, in-progress, completed or cancelled"
    )
    start_slot: int | None = Field(None, alias="startSlot")
    duration_slots: int | None = Field(None, alias="durationSlots")

    @field_validator(
        "job_number", "name", "machine_id", mode="before", check_fields=False
    )
    @classmethod
    def validate_required_text(cls, v, info: ValidationInfo):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return v.strip() if isinstance(v, str) else v

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return validate_status_value(v)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def validate_assignee_reference(cls, v):
        if isinstance(v, dict) and not (v.get("id") or v.get("_id")):
            raise ValueError("Assignee reference must include an id")
        return v

    @field_validator("start_slot", "duration_slots", mode="before")
    @classmethod
    def validate_slot_number(cls, v, info: ValidationInfo):
        """Range checks happen at placement; here the value must be an integer."""
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError(NUMBER_MESSAGES[info.field_name])
        if isinstance(v, int):
            return v
        if isinstance(v, float) and v.is_integer():
            return int(v)
        if isinstance(v, str) and v.strip().lstrip("-").isdigit():
            return int(v.strip())
        raise ValueError(NUMBER_MESSAGES[info.field_name])


class CreateJobRequest(JobPayload):
    """DTO for creating a new job."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "jobId": "JOB-2024-001",
                "name": "Brochure run",
                "description": "Two-sided, 5,000 copies",
                "machineId": "PR-01",
                "assigneeName": "Dana Lee",
                "status": "pending",
                "startSlot": 2,
                "durationSlots": 3,
            }
        },
    )

    job_number: str = Field(..., alias="jobId", max_length=50)
    name: str = Field(..., max_length=200)
    machine_id: str = Field(..., alias="machineId", max_length=50)


class UpdateJobRequest(JobPayload):
    """
    DTO for editing an existing job.

    Only fields present in the payload are changed. Status and placement
    changes in one payload are validated and written together.
    """

    job_number: str | None = Field(None, alias="jobId", max_length=50)
    name: str | None = Field(None, max_length=200)
    machine_id: str | None = Field(None, alias="machineId", max_length=50)

    def to_patch(self) -> dict[str, Any]:
        """Domain field changes for the fields the caller sent."""
        patch = self.model_dump(exclude_unset=True)
        # A null status or placement means "unchanged", not "reset"
        for name in ("status", "start_slot", "duration_slots"):
            if name in patch and patch[name] is None:
                del patch[name]
        return patch


class StatusTransitionRequest(BaseModel):
    """DTO for a status change."""

    status: str = Field(..., description="Target status")

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if validate_status_value(v) is None:
            raise ValueError("Status is required")
        return v


class JobResponse(BaseModel):
    """DTO for job responses."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    job_number: str = Field(alias="jobId")
    name: str
    description: str
    machine_id: str = Field(alias="machineId")
    department: str | None = None
    assigned_to: dict[str, Any] | None = Field(None, alias="assignedTo")
    assignee_name: str | None = Field(None, alias="assigneeName")
    employee_name: str = Field(alias="employeeName")
    status: JobStatus
    start_slot: int = Field(alias="startSlot")
    duration_slots: int = Field(alias="durationSlots")
    end_slot: int = Field(alias="endSlot")
    created_by: str | None = Field(None, alias="createdBy")
    created_at: datetime = Field(alias="created")
    updated_at: datetime = Field(alias="updated")

    @classmethod
    def from_domain(cls, job: Job, department: str | None = None) -> "JobResponse":
        return cls(
            id=job.id,
            job_number=job.job_number,
            name=job.name,
            description=job.description,
            machine_id=job.machine_id,
            department=department,
            assigned_to=job.assigned_to.model_dump() if job.assigned_to else None,
            assignee_name=job.assignee_name,
            employee_name=job.assignee_display_name,
            status=job.status,
            start_slot=job.start_slot,
            duration_slots=job.duration_slots,
            end_slot=job.slot_range.end_slot,
            created_by=job.created_by,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
