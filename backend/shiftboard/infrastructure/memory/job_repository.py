"""
In-memory implementation of JobRepository.

Used by the service tests and for running the API without a database. Write
scopes serialize on a per-machine lock and undo their changes if the scope
body raises.
"""

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any
from uuid import UUID

from shiftboard.domain.scheduling.entities.job import Job, utcnow
from shiftboard.domain.scheduling.repositories import (
    JobFilter,
    JobRepository,
    JobStore,
    sort_key,
)
from shiftboard.domain.shared import DuplicateKeyError, JobNotFoundError

JOB_NUMBER_FIELD = "jobId"


class _ScopedJobStore(JobStore):
    """Store handed out by a write scope; remembers how to undo its writes."""

    def __init__(self, repository: "InMemoryJobRepository") -> None:
        self._repository = repository
        self._undo: list[tuple[UUID, Job | None]] = []

    def create(self, job: Job) -> Job:
        created = self._repository.create(job)
        self._undo.append((created.id, None))
        return created

    def find_by_id(self, job_id: UUID) -> Job | None:
        return self._repository.find_by_id(job_id)

    def find(self, job_filter: JobFilter | None = None) -> list[Job]:
        return self._repository.find(job_filter)

    def update(self, job: Job, patch: dict[str, Any]) -> Job:
        previous = self._repository.get_by_id_required(job.id)
        updated = self._repository.update(job, patch)
        self._undo.append((job.id, previous))
        return updated

    def delete(self, job: Job) -> None:
        previous = self._repository.get_by_id_required(job.id)
        self._repository.delete(job)
        self._undo.append((job.id, previous))

    def rollback(self) -> None:
        for job_id, previous in reversed(self._undo):
            self._repository._restore(job_id, previous)
        self._undo.clear()


class InMemoryJobRepository(JobRepository):
    """In-memory implementation of JobRepository."""

    def __init__(self, jobs: list[Job] | None = None) -> None:
        self._jobs: dict[UUID, Job] = {}
        self._lock = threading.RLock()
        self._machine_locks: dict[str, threading.Lock] = {}
        for job in jobs or []:
            self.create(job)

    def _machine_lock(self, machine_id: str) -> threading.Lock:
        with self._lock:
            return self._machine_locks.setdefault(machine_id, threading.Lock())

    def _check_job_number(self, job_number: str, job_id: UUID) -> None:
        for other in self._jobs.values():
            if other.job_number == job_number and other.id != job_id:
                raise DuplicateKeyError(JOB_NUMBER_FIELD, job_number)

    def _restore(self, job_id: UUID, previous: Job | None) -> None:
        with self._lock:
            if previous is None:
                self._jobs.pop(job_id, None)
            else:
                self._jobs[job_id] = previous

    @contextmanager
    def _scope(self, machine_id: str) -> Iterator[JobStore]:
        with self._machine_lock(machine_id):
            store = _ScopedJobStore(self)
            try:
                yield store
            except BaseException:
                store.rollback()
                raise

    def write_scope(self, machine_id: str) -> AbstractContextManager[JobStore]:
        return self._scope(machine_id)

    def create(self, job: Job) -> Job:
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateKeyError("id", str(job.id))
            self._check_job_number(job.job_number, job.id)
            self._jobs[job.id] = job
            return job

    def find_by_id(self, job_id: UUID) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id)

    def find(self, job_filter: JobFilter | None = None) -> list[Job]:
        job_filter = job_filter or JobFilter()
        with self._lock:
            jobs = [job for job in self._jobs.values() if job_filter.matches(job)]
        return sorted(jobs, key=sort_key)

    def update(self, job: Job, patch: dict[str, Any]) -> Job:
        patch = dict(patch)
        patch.setdefault("updated_at", utcnow())
        with self._lock:
            current = self._jobs.get(job.id)
            if current is None:
                raise JobNotFoundError(job.id)
            updated = current.with_changes(**patch)
            self._check_job_number(updated.job_number, updated.id)
            self._jobs[job.id] = updated
            return updated

    def delete(self, job: Job) -> None:
        with self._lock:
            if job.id not in self._jobs:
                raise JobNotFoundError(job.id)
            del self._jobs[job.id]

    def count(self) -> int:
        with self._lock:
            return len(self._jobs)
