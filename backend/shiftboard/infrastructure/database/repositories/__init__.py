"""SQLModel-backed repository implementations."""

from .job_repository import SessionJobStore, SqlJobRepository

__all__ = ["SessionJobStore", "SqlJobRepository"]
