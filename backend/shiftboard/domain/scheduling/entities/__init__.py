"""Scheduling entities."""

from .job import UNASSIGNED, AssigneeRef, Job

__all__ = ["AssigneeRef", "Job", "UNASSIGNED"]
