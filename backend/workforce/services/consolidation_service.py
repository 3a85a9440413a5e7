"""
Display-time consolidation of shift rows into blocks.

Stored rows are half-hour slots or longer ranges, possibly several types on
the same hours (a manual work entry plus an absence written on approval).
Every stretch of the day belongs to the highest-priority type covering it;
work stretches that touch end-to-start are merged, absences are reported as
one flag per type.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable

TYPE_PRIORITY = {
    "sick": 4,
    "leave": 3,
    "vacation": 2,
    "work": 1,
}


@dataclass(frozen=True)
class ShiftBlock:
    start_time: time
    end_time: time
    type: str = "work"

    @property
    def hours(self) -> float:
        return (_minutes(self.end_time) - _minutes(self.start_time)) / 60


@dataclass
class DayView:
    user_id: uuid.UUID | None = None
    date: date | None = None
    work_blocks: list[ShiftBlock] = field(default_factory=list)
    absences: list[str] = field(default_factory=list)

    @property
    def work_hours(self) -> float:
        return sum(b.hours for b in self.work_blocks)


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def priority_of(shift_type: str) -> int:
    return TYPE_PRIORITY.get(shift_type, 0)


def resolve_segments(shifts: Iterable) -> list[tuple[int, int, str]]:
    """
    Split the day at every start/end boundary and give each covered piece the
    type of its highest-priority covering row. Returns (start, end, type) in
    minutes, sorted, without uncovered gaps.
    """
    ranges = [
        (_minutes(s.start_time), _minutes(s.end_time), s.type)
        for s in shifts
        if _minutes(s.end_time) > _minutes(s.start_time)
    ]
    boundaries = sorted({m for start, end, _ in ranges for m in (start, end)})

    segments: list[tuple[int, int, str]] = []
    for lo, hi in zip(boundaries, boundaries[1:]):
        covering = [t for start, end, t in ranges if start <= lo and end >= hi]
        if not covering:
            continue
        segments.append((lo, hi, max(covering, key=priority_of)))
    return segments


def merge_adjacent(segments: Iterable[tuple[int, int, str]]) -> list[ShiftBlock]:
    """Merge segments only where the next start equals the current end."""
    blocks: list[ShiftBlock] = []
    current: list | None = None
    for start, end, shift_type in sorted(segments):
        if current is not None and start == current[1]:
            current[1] = end
            continue
        if current is not None:
            blocks.append(ShiftBlock(_to_time(current[0]), _to_time(current[1]), current[2]))
        current = [start, end, shift_type]
    if current is not None:
        blocks.append(ShiftBlock(_to_time(current[0]), _to_time(current[1]), current[2]))
    return blocks


def consolidate_day(
    shifts: Iterable,
    user_id: uuid.UUID | None = None,
    day: date | None = None,
) -> DayView:
    """Consolidate one employee's rows for one day."""
    segments = resolve_segments(shifts)

    work = [seg for seg in segments if seg[2] == "work"]
    absence_types = {seg[2] for seg in segments if seg[2] != "work"}

    return DayView(
        user_id=user_id,
        date=day,
        work_blocks=merge_adjacent(work),
        absences=sorted(absence_types, key=priority_of, reverse=True),
    )


def consolidate_schedule(shifts: Iterable) -> list[DayView]:
    """Group rows by (user, date) and consolidate each group."""
    groups: dict[tuple[uuid.UUID, date], list] = {}
    for shift in shifts:
        groups.setdefault((shift.user_id, shift.date), []).append(shift)

    views = [consolidate_day(rows, user_id=uid, day=d) for (uid, d), rows in groups.items()]
    views.sort(key=lambda v: (v.date, str(v.user_id)))
    return views
