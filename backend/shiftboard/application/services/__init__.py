"""Application services coordinating scheduling use cases."""

from .job_service import JobService, ScheduleView

__all__ = ["JobService", "ScheduleView"]
