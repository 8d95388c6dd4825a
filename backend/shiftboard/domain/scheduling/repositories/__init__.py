"""Repository interfaces for the scheduling domain."""

from .job_repository import JobFilter, JobRepository, JobStore, sort_key

__all__ = ["JobFilter", "JobRepository", "JobStore", "sort_key"]
