"""
Unit tests for scheduling value objects: SlotCalendar, SlotRange, JobStatus,
Role and the Job entity defaults.
"""

import pytest
from pydantic import ValidationError

from shiftboard.domain.scheduling.entities import Job
from shiftboard.domain.scheduling.entities.job import UNASSIGNED, AssigneeRef
from shiftboard.domain.scheduling.value_objects import (
    JobStatus,
    Machine,
    Role,
    SlotCalendar,
    SlotRange,
    departments_of,
)


class TestSlotCalendar:
    """Test SlotCalendar value object."""

    def test_generated_labels(self):
        calendar = SlotCalendar.for_shift("08:00", 60, 8)
        assert calendar.size == 8
        assert list(calendar.labels) == [
            "08:00",
            "09:00",
            "10:00",
            "11:00",
            "12:00",
            "13:00",
            "14:00",
            "15:00",
        ]

    def test_half_hour_slots(self):
        calendar = SlotCalendar.for_shift("22:00", 30, 4)
        assert list(calendar.labels) == ["22:00", "22:30", "23:00", "23:30"]

    def test_explicit_labels(self):
        calendar = SlotCalendar(["early", "mid", "late"])
        assert len(calendar) == 3
        assert calendar.label_for(1) == "mid"

    def test_empty_calendar_fails(self):
        with pytest.raises(ValueError, match="at least one slot"):
            SlotCalendar([])

    def test_duplicate_labels_fail(self):
        with pytest.raises(ValueError, match="unique"):
            SlotCalendar(["08:00", "08:00"])

    def test_malformed_start_fails(self):
        with pytest.raises(ValueError):
            SlotCalendar.for_shift("8 o'clock", 60, 8)

    def test_label_for_out_of_range(self):
        calendar = SlotCalendar.for_shift()
        with pytest.raises(IndexError):
            calendar.label_for(8)
        with pytest.raises(IndexError):
            calendar.label_for(-1)

    @pytest.mark.parametrize(
        "start,duration,expected",
        [
            (0, 1, True),
            (0, 8, True),
            (7, 1, True),
            (6, 3, False),
            (-1, 2, False),
            (2, 0, False),
            (8, 1, False),
        ],
    )
    def test_contains(self, start, duration, expected):
        calendar = SlotCalendar.for_shift()
        assert calendar.contains(start, duration) is expected

    def test_equality(self):
        assert SlotCalendar.for_shift() == SlotCalendar(
            ["08:00", "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00"]
        )


class TestSlotRange:
    """Test SlotRange value object."""

    def test_end_slot_is_inclusive(self):
        slot_range = SlotRange(start_slot=2, duration_slots=3)
        assert slot_range.end_slot == 4
        assert list(slot_range.slots()) == [2, 3, 4]
        assert str(slot_range) == "[2..4]"

    def test_overlap(self):
        a = SlotRange(start_slot=2, duration_slots=3)
        b = SlotRange(start_slot=4, duration_slots=2)
        assert a.overlaps_with(b)
        assert b.overlaps_with(a)

    def test_adjacent_ranges_do_not_overlap(self):
        a = SlotRange(start_slot=0, duration_slots=4)
        b = SlotRange(start_slot=4, duration_slots=2)
        assert not a.overlaps_with(b)
        assert not b.overlaps_with(a)

    def test_contained_range_overlaps(self):
        outer = SlotRange(start_slot=0, duration_slots=8)
        inner = SlotRange(start_slot=3, duration_slots=1)
        assert outer.overlaps_with(inner)

    def test_zero_duration_fails(self):
        with pytest.raises(ValidationError):
            SlotRange(start_slot=0, duration_slots=0)

    def test_negative_start_fails(self):
        with pytest.raises(ValidationError):
            SlotRange(start_slot=-1, duration_slots=1)

    def test_immutability(self):
        slot_range = SlotRange(start_slot=1, duration_slots=1)
        with pytest.raises(ValidationError):
            slot_range.start_slot = 3


class TestJobStatus:
    """Test the status graph."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.PENDING, JobStatus.IN_PROGRESS),
            (JobStatus.PENDING, JobStatus.CANCELLED),
            (JobStatus.IN_PROGRESS, JobStatus.COMPLETED),
            (JobStatus.IN_PROGRESS, JobStatus.CANCELLED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.PENDING, JobStatus.COMPLETED),
            (JobStatus.COMPLETED, JobStatus.PENDING),
            (JobStatus.COMPLETED, JobStatus.CANCELLED),
            (JobStatus.CANCELLED, JobStatus.PENDING),
            (JobStatus.IN_PROGRESS, JobStatus.PENDING),
        ],
    )
    def test_rejected_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_same_status_is_allowed(self):
        for status in JobStatus:
            assert status.can_transition_to(status)

    def test_only_cancelled_is_inactive(self):
        assert [s for s in JobStatus if not s.is_active] == [JobStatus.CANCELLED]

    def test_terminal_statuses(self):
        assert {s for s in JobStatus if s.is_terminal} == {
            JobStatus.COMPLETED,
            JobStatus.CANCELLED,
        }

    def test_wire_values(self):
        assert JobStatus("in-progress") is JobStatus.IN_PROGRESS


class TestRole:
    def test_parse_known_roles(self):
        assert Role.parse("admin") is Role.ADMIN
        assert Role.parse(" Manager ") is Role.MANAGER

    def test_unknown_role_is_viewer(self):
        assert Role.parse("dispatcher") is Role.USER
        assert Role.parse(None) is Role.USER
        assert Role.parse("dispatcher").is_viewer


class TestMachine:
    def test_departments_in_first_seen_order(self, machines):
        assert departments_of(machines) == ["Printing", "Finishing"]

    def test_default_department(self):
        assert Machine(id="X-1", name="Spare").department == "Printing"


class TestJob:
    """Test Job entity defaults and derived values."""

    def test_missing_fields_take_defaults(self):
        job = Job(
            job_number="J-1",
            name="Legacy",
            machine_id="PR-01",
            status=None,
            start_slot=None,
            duration_slots=None,
            description=None,
        )
        assert job.status == JobStatus.PENDING
        assert job.start_slot == 0
        assert job.duration_slots == 1
        assert job.description == ""

    def test_create_sets_matching_timestamps(self):
        job = Job.create(job_number="J-1", name="Run", machine_id="PR-01")
        assert job.created_at == job.updated_at
        assert job.created_at.tzinfo is not None

    def test_slot_range(self):
        job = Job.create(
            job_number="J-1", name="Run", machine_id="PR-01", start_slot=3, duration_slots=2
        )
        assert job.slot_range == SlotRange(start_slot=3, duration_slots=2)

    def test_assignee_display_name_prefers_structured_reference(self):
        job = Job.create(
            job_number="J-1",
            name="Run",
            machine_id="PR-01",
            assigned_to={"_id": "emp-7", "name": "Sam Ortiz"},
            assignee_name="Someone Else",
        )
        assert job.assigned_to == AssigneeRef(id="emp-7", name="Sam Ortiz")
        assert job.assignee_display_name == "Sam Ortiz"

    def test_assignee_display_name_falls_back_to_free_text(self):
        job = Job.create(
            job_number="J-1", name="Run", machine_id="PR-01", assignee_name=" Dana "
        )
        assert job.assignee_display_name == "Dana"

    def test_unassigned(self):
        job = Job.create(job_number="J-1", name="Run", machine_id="PR-01")
        assert job.assignee_display_name == UNASSIGNED

    def test_bare_assignee_id(self):
        assert AssigneeRef.parse("emp-3") == AssigneeRef(id="emp-3")
        assert AssigneeRef.parse("") is None

    def test_with_changes_validates(self):
        job = Job.create(job_number="J-1", name="Run", machine_id="PR-01")
        moved = job.with_changes(start_slot=4)
        assert moved.start_slot == 4
        assert job.start_slot == 0
        with pytest.raises(ValidationError):
            job.with_changes(duration_slots=0)
