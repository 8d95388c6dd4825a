"""
Job repository interface.

Defines the persistence boundary the scheduling core consumes. Concrete
implementations live in the infrastructure layer (SQLModel and in-memory).

Besides plain CRUD, a repository provides ``write_scope(machine_id)``: the
serialization point for mutations. While a scope is open no other scope for
the same machine can commit, so occupancy read inside the scope is the
occupancy the write will be committed against. The scope commits on clean
exit and rolls back if the block raises.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any
from uuid import UUID

from ...shared.base import ValueObject
from ...shared.exceptions import JobNotFoundError
from ..entities.job import Job
from ..value_objects.enums import JobStatus


class JobFilter(ValueObject):
    """Criteria for ``find``; unset fields do not filter."""

    machine_id: str | None = None
    machine_ids: tuple[str, ...] | None = None
    status: JobStatus | None = None
    active_only: bool = False

    def matches(self, job: Job) -> bool:
        if self.machine_id is not None and job.machine_id != self.machine_id:
            return False
        if self.machine_ids is not None and job.machine_id not in self.machine_ids:
            return False
        if self.status is not None and job.status != self.status:
            return False
        if self.active_only and not job.is_active:
            return False
        return True


def sort_key(job: Job) -> tuple:
    """Stable listing order: machine, start slot, creation time, id."""
    return (job.machine_id, job.start_slot, job.created_at, str(job.id))


class JobStore(ABC):
    """Job persistence operations."""

    @abstractmethod
    def create(self, job: Job) -> Job:
        """
        Persist a new job.

        Raises:
            DuplicateKeyError: If the job number is already taken
            RepositoryUnavailableError: If storage fails
        """
        pass

    @abstractmethod
    def find_by_id(self, job_id: UUID) -> Job | None:
        """Find a job by its system id."""
        pass

    @abstractmethod
    def find(self, job_filter: JobFilter | None = None) -> list[Job]:
        """List jobs matching a filter in stable order."""
        pass

    @abstractmethod
    def update(self, job: Job, patch: dict[str, Any]) -> Job:
        """
        Apply a field patch to a stored job.

        Raises:
            JobNotFoundError: If the job no longer exists
            DuplicateKeyError: If the patch collides on the job number
            RepositoryUnavailableError: If storage fails
        """
        pass

    @abstractmethod
    def delete(self, job: Job) -> None:
        """
        Delete a stored job.

        Raises:
            JobNotFoundError: If the job no longer exists
            RepositoryUnavailableError: If storage fails
        """
        pass

    def get_by_id_required(self, job_id: UUID) -> Job:
        """
        Find a job by id, raising if it does not exist.

        Raises:
            JobNotFoundError: If job not found
        """
        job = self.find_by_id(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job


class JobRepository(JobStore):
    """Job store with a per-machine serialization point for writes."""

    @abstractmethod
    def write_scope(self, machine_id: str) -> AbstractContextManager[JobStore]:
        """
        Open the mutual exclusion scope for one machine.

        Every read and write made through the yielded store belongs to a single
        transaction that is committed when the block exits normally.
        """
        pass
