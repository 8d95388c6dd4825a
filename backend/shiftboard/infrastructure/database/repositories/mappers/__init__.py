"""Mappers between domain entities and SQL records."""

from .job_mapper import JobMapper

__all__ = ["JobMapper"]
