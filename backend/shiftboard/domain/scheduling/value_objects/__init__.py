"""Scheduling value objects."""

from .enums import JOB_STATUS_TRANSITIONS, JobStatus, Role
from .machine import Machine, departments_of
from .slot_calendar import SlotCalendar
from .slot_range import SlotRange

__all__ = [
    "JOB_STATUS_TRANSITIONS",
    "JobStatus",
    "Machine",
    "Role",
    "SlotCalendar",
    "SlotRange",
    "departments_of",
]
