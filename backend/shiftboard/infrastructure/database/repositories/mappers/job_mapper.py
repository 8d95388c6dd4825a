"""
Mapper for converting between Job domain entities and SQL records.

Rows written before status and placement columns existed carry NULLs there;
the domain entity fills in pending, slot 0 and one slot on the way out.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from shiftboard.domain.scheduling.entities.job import Job
from shiftboard.infrastructure.database.models import JobRecord


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class JobMapper:
    """Translates enums and value objects between Job and JobRecord."""

    @staticmethod
    def domain_to_sql(job: Job) -> JobRecord:
        """
        Convert domain Job entity to a new SQL record.

        Args:
            job: Domain job entity to convert

        Returns:
            SQL job record
        """
        record = JobRecord(
            id=job.id,
            job_number=job.job_number,
            name=job.name,
            machine_id=job.machine_id,
            created_at=job.created_at,
        )
        JobMapper.copy_to_record(job, record)
        return record

    @staticmethod
    def sql_to_domain(record: JobRecord) -> Job:
        """
        Convert SQL record to domain Job entity.

        Args:
            record: SQL job record to convert

        Returns:
            Domain job entity with defaults applied
        """
        return Job.model_validate(
            {
                "id": record.id,
                "job_number": record.job_number,
                "name": record.name,
                "description": record.description,
                "machine_id": record.machine_id,
                "assigned_to": record.assigned_to,
                "assignee_name": record.assignee_name,
                "status": record.status,
                "start_slot": record.start_slot,
                "duration_slots": record.duration_slots,
                "created_by": record.created_by,
                "created_at": _as_utc(record.created_at),
                "updated_at": _as_utc(record.updated_at),
            }
        )

    @staticmethod
    def copy_to_record(
        job: Job, record: JobRecord, fields: Iterable[str] | None = None
    ) -> None:
        """Write domain values onto an existing record, optionally limited to fields."""
        values = {
            "job_number": job.job_number,
            "name": job.name,
            "description": job.description,
            "machine_id": job.machine_id,
            "assigned_to": job.assigned_to.model_dump() if job.assigned_to else None,
            "assignee_name": job.assignee_name,
            "status": job.status.value,
            "start_slot": job.start_slot,
            "duration_slots": job.duration_slots,
            "created_by": job.created_by,
            "updated_at": job.updated_at,
        }
        selected = set(fields) if fields is not None else set(values)
        for name, value in values.items():
            if name in selected:
                setattr(record, name, value)
