"""
Job repository implementation on SQLModel.

Plain reads and writes use short-lived sessions. ``write_scope`` opens a
write transaction and locks the machine's row in ``machine_locks`` before
anything is read, so validate-then-write sequences for one machine are
serialized. On SQLite the transaction starts with BEGIN IMMEDIATE, which takes
the database write lock up front.
"""

from contextlib import AbstractContextManager, contextmanager
from typing import Any
from uuid import UUID

from sqlalchemy import Engine, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, or_, select

from shiftboard.core.db import IMMEDIATE
from shiftboard.core.observability import get_logger
from shiftboard.domain.scheduling.entities.job import Job, utcnow
from shiftboard.domain.scheduling.repositories import (
    JobFilter,
    JobRepository,
    JobStore,
)
from shiftboard.domain.scheduling.value_objects import JobStatus
from shiftboard.domain.shared import (
    DuplicateKeyError,
    JobNotFoundError,
    RepositoryUnavailableError,
)
from shiftboard.infrastructure.database.models import JobRecord, MachineLock

from .mappers import JobMapper

logger = get_logger(__name__)

JOB_NUMBER_FIELD = "jobId"


def _status_column_is(status: JobStatus):
    # NULL status reads as pending
    if status == JobStatus.PENDING:
        return or_(JobRecord.status == status.value, col(JobRecord.status).is_(None))
    return JobRecord.status == status.value


class SessionJobStore(JobStore):
    """
    Job store bound to one open session.

    Changes are flushed, never committed; the owner of the session decides
    whether the transaction commits.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(self, job: Job) -> Job:
        record = JobMapper.domain_to_sql(job)
        try:
            self.session.add(record)
            self.session.flush()
            self.session.refresh(record)
        except IntegrityError as e:
            raise DuplicateKeyError(JOB_NUMBER_FIELD, job.job_number) from e
        except SQLAlchemyError as e:
            raise RepositoryUnavailableError("create", str(e)) from e
        return JobMapper.sql_to_domain(record)

    def find_by_id(self, job_id: UUID) -> Job | None:
        try:
            record = self.session.get(JobRecord, job_id)
        except SQLAlchemyError as e:
            raise RepositoryUnavailableError("find_by_id", str(e)) from e
        return JobMapper.sql_to_domain(record) if record else None

    def find(self, job_filter: JobFilter | None = None) -> list[Job]:
        job_filter = job_filter or JobFilter()
        statement = select(JobRecord)

        if job_filter.machine_id is not None:
            statement = statement.where(JobRecord.machine_id == job_filter.machine_id)
        if job_filter.machine_ids is not None:
            statement = statement.where(
                col(JobRecord.machine_id).in_(job_filter.machine_ids)
            )
        if job_filter.status is not None:
            statement = statement.where(_status_column_is(job_filter.status))
        if job_filter.active_only:
            statement = statement.where(
                or_(
                    col(JobRecord.status).is_(None),
                    JobRecord.status != JobStatus.CANCELLED.value,
                )
            )

        statement = statement.order_by(
            JobRecord.machine_id,
            func.coalesce(JobRecord.start_slot, 0),
            JobRecord.created_at,
            JobRecord.id,
        )

        try:
            records = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            raise RepositoryUnavailableError("find", str(e)) from e
        return [JobMapper.sql_to_domain(record) for record in records]

    def update(self, job: Job, patch: dict[str, Any]) -> Job:
        patch = dict(patch)
        patch.setdefault("updated_at", utcnow())
        try:
            record = self.session.get(JobRecord, job.id)
            if record is None:
                raise JobNotFoundError(job.id)

            updated = JobMapper.sql_to_domain(record).with_changes(**patch)
            JobMapper.copy_to_record(updated, record, fields=patch.keys())
            self.session.add(record)
            self.session.flush()
            self.session.refresh(record)
        except IntegrityError as e:
            raise DuplicateKeyError(
                JOB_NUMBER_FIELD, patch.get("job_number", job.job_number)
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryUnavailableError("update", str(e)) from e
        return JobMapper.sql_to_domain(record)

    def delete(self, job: Job) -> None:
        try:
            record = self.session.get(JobRecord, job.id)
            if record is None:
                raise JobNotFoundError(job.id)
            self.session.delete(record)
            self.session.flush()
        except SQLAlchemyError as e:
            raise RepositoryUnavailableError("delete", str(e)) from e


class SqlJobRepository(JobRepository):
    """
    Repository implementation for Job entities.

    Each call outside a write scope runs in its own transaction.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def _transaction(self, operation: str, lock_machine_id: str | None = None):
        with Session(self.engine) as session:
            try:
                if lock_machine_id is not None:
                    self._lock_machine(session, lock_machine_id)
                yield SessionJobStore(session)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateKeyError(JOB_NUMBER_FIELD) from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(
                    "Database operation failed",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise RepositoryUnavailableError(operation, str(e)) from e
            except BaseException:
                session.rollback()
                raise

    @staticmethod
    def _lock_machine(session: Session, machine_id: str) -> None:
        """
        Lock the machine's row, inserting it for machines seeded after startup.

        Raises:
            RepositoryUnavailableError: If the lock row cannot be written
        """
        session.connection(execution_options={IMMEDIATE: True})
        try:
            lock = session.exec(
                select(MachineLock)
                .where(MachineLock.machine_id == machine_id)
                .with_for_update()
            ).first()
            if lock is None:
                session.add(MachineLock(machine_id=machine_id))
                session.flush()
        except IntegrityError as e:
            logger.warning(
                "Machine lock row collision", machine_id=machine_id, error=str(e)
            )
            raise RepositoryUnavailableError("lock_machine", str(e)) from e

    def write_scope(self, machine_id: str) -> AbstractContextManager[JobStore]:
        return self._transaction("write_scope", lock_machine_id=machine_id)

    def create(self, job: Job) -> Job:
        with self._transaction("create") as store:
            return store.create(job)

    def find_by_id(self, job_id: UUID) -> Job | None:
        with self._transaction("find_by_id") as store:
            return store.find_by_id(job_id)

    def find(self, job_filter: JobFilter | None = None) -> list[Job]:
        with self._transaction("find") as store:
            return store.find(job_filter)

    def update(self, job: Job, patch: dict[str, Any]) -> Job:
        with self._transaction("update") as store:
            return store.update(job, patch)

    def delete(self, job: Job) -> None:
        with self._transaction("delete") as store:
            store.delete(job)
