"""
Domain Services

Scheduling logic that spans several jobs: placement validation against
machine occupancy, the status lifecycle and the machine x slot projection.
"""

from .lifecycle_service import JobLifecycleManager, parse_status
from .placement_service import SchedulingEngine
from .schedule_grid import (
    Cell,
    EmptyCell,
    Occupancy,
    OccupiedCell,
    OccupiedRun,
    ScheduleGrid,
    build_grid,
    compute_occupancy,
)

__all__ = [
    "Cell",
    "EmptyCell",
    "JobLifecycleManager",
    "Occupancy",
    "OccupiedCell",
    "OccupiedRun",
    "ScheduleGrid",
    "SchedulingEngine",
    "build_grid",
    "compute_occupancy",
    "parse_status",
]
