"""SQLModel tables for job storage."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRecordBase(SQLModel):
    """Stored job fields."""

    job_number: str = Field(max_length=50, unique=True, index=True)
    name: str = Field(max_length=200)
    description: str | None = Field(default=None)
    machine_id: str = Field(max_length=50, index=True)
    assigned_to: dict | None = Field(default=None, sa_column=Column(JSON))
    assignee_name: str | None = Field(default=None, max_length=100)

    # Nullable for rows written before these columns existed
    status: str | None = Field(default=None, max_length=20, index=True)
    start_slot: int | None = Field(default=None)
    duration_slots: int | None = Field(default=None)

    created_by: str | None = Field(default=None, max_length=100)


class JobRecord(JobRecordBase, table=True):
    """
    Job table model.

    One row per job; placement is the (machine_id, start_slot,
    duration_slots) triple.
    """

    __tablename__ = "jobs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=_utcnow, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=_utcnow, sa_column=Column(DateTime(timezone=True))
    )


class MachineLock(SQLModel, table=True):
    """
    One row per configured machine.

    Writers lock the row of the machine whose occupancy they are about to
    change, so writes to one machine are serialized.
    """

    __tablename__ = "machine_locks"

    machine_id: str = Field(max_length=50, primary_key=True)
