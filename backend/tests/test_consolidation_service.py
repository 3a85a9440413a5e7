"""
Unit tests for consolidation_service.py – priority resolution and merging.
"""
import uuid
from datetime import date, time
from types import SimpleNamespace

from workforce.services.consolidation_service import (
    ShiftBlock,
    consolidate_day,
    consolidate_schedule,
    priority_of,
)


def _row(start: str, end: str, type: str = "work", user_id=None, day=date(2024, 6, 3)):
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    return SimpleNamespace(
        start_time=time(h1, m1), end_time=time(h2, m2), type=type, user_id=user_id, date=day,
    )


def _spans(view):
    return [(b.start_time.strftime("%H:%M"), b.end_time.strftime("%H:%M")) for b in view.work_blocks]


def test_priority_order():
    assert priority_of("sick") > priority_of("leave") > priority_of("vacation") > priority_of("work")


def test_adjacent_half_hour_slots_merge():
    view = consolidate_day([_row("09:00", "09:30"), _row("09:30", "10:00"), _row("11:00", "11:30")])
    assert _spans(view) == [("09:00", "10:00"), ("11:00", "11:30")]
    assert view.absences == []
    assert view.work_hours == 1.5


def test_unsorted_input_is_sorted():
    view = consolidate_day([_row("11:00", "11:30"), _row("09:30", "10:00"), _row("09:00", "09:30")])
    assert _spans(view) == [("09:00", "10:00"), ("11:00", "11:30")]


def test_gap_prevents_merge():
    view = consolidate_day([_row("09:00", "10:00"), _row("10:30", "11:00")])
    assert _spans(view) == [("09:00", "10:00"), ("10:30", "11:00")]


def test_sick_beats_work_on_same_slot():
    view = consolidate_day([_row("09:00", "17:00"), _row("09:00", "17:00", "sick")])
    assert view.work_blocks == []
    assert view.absences == ["sick"]


def test_partial_absence_splits_work():
    view = consolidate_day([_row("09:00", "17:00"), _row("12:00", "13:00", "vacation")])
    assert _spans(view) == [("09:00", "12:00"), ("13:00", "17:00")]
    assert view.absences == ["vacation"]
    assert view.work_hours == 7


def test_mixed_absences_reported_by_priority():
    view = consolidate_day([
        _row("08:00", "18:00"),
        _row("10:00", "14:00", "leave"),
        _row("09:00", "12:00", "sick"),
    ])
    assert _spans(view) == [("08:00", "09:00"), ("14:00", "18:00")]
    assert view.absences == ["sick", "leave"]


def test_overlapping_work_rows_merge():
    view = consolidate_day([_row("09:00", "12:00"), _row("11:00", "14:00")])
    assert _spans(view) == [("09:00", "14:00")]
    assert view.work_hours == 5


def test_empty_and_zero_length_rows():
    assert consolidate_day([]).work_blocks == []
    assert consolidate_day([_row("09:00", "09:00")]).work_blocks == []


def test_consolidation_is_idempotent():
    rows = [
        _row("08:00", "08:30"), _row("08:30", "12:00"), _row("13:00", "17:00"),
        _row("15:00", "16:00", "vacation"),
    ]
    once = consolidate_day(rows)
    twice = consolidate_day(once.work_blocks)
    assert twice.work_blocks == once.work_blocks
    assert all(isinstance(b, ShiftBlock) for b in twice.work_blocks)


def test_consolidate_schedule_groups_by_user_and_day():
    a, b = uuid.uuid4(), uuid.uuid4()
    tue = date(2024, 6, 4)
    rows = [
        _row("09:00", "09:30", user_id=a),
        _row("09:30", "10:00", user_id=a),
        _row("09:00", "17:00", "sick", user_id=a, day=tue),
        _row("12:00", "16:00", user_id=b),
    ]
    views = consolidate_schedule(rows)

    assert len(views) == 3
    assert [v.date for v in views] == [date(2024, 6, 3), date(2024, 6, 3), tue]
    by_key = {(v.user_id, v.date): v for v in views}
    assert _spans(by_key[(a, date(2024, 6, 3))]) == [("09:00", "10:00")]
    assert by_key[(a, tue)].absences == ["sick"]
    assert by_key[(b, date(2024, 6, 3))].work_hours == 4
