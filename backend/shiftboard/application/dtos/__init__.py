"""
Data Transfer Objects

DTOs form the wire contract of the API, independent of the domain model.
"""

from .job_dtos import (
    CreateJobRequest,
    JobResponse,
    StatusTransitionRequest,
    UpdateJobRequest,
)
from .schedule_dtos import (
    ErrorResponse,
    GridCellResponse,
    GridRowResponse,
    MachineResponse,
    ScheduleGridResponse,
    SlotRangeResponse,
    SlotResponse,
    SlotsResponse,
)

__all__ = [
    "CreateJobRequest",
    "ErrorResponse",
    "GridCellResponse",
    "GridRowResponse",
    "JobResponse",
    "MachineResponse",
    "ScheduleGridResponse",
    "SlotRangeResponse",
    "SlotResponse",
    "SlotsResponse",
    "StatusTransitionRequest",
    "UpdateJobRequest",
]
