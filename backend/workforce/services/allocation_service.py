"""
Shift allocation engine: fills a date range with work blocks per employee.

Pure functions only – the caller loads the roster and the approved time-off
requests and decides whether the result is shown (preview) or persisted.

Per employee a target budget of hours is computed; every day each available
employee receives one contiguous block (8h, or 4h once less than 8h of
budget remain) taken from a per-day cursor that starts at the window start,
so two employees never share the same hours on the same day. Blocks that do
not fit the remaining window are skipped and reported, never raised.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:
    from workforce.schemas.generation import GenerationSettings

FULL_BLOCK_HOURS = 8
SHORT_BLOCK_HOURS = 4
HOURS_PER_AVAILABLE_DAY = 8

STATUS_ASSIGNED = "assigned"
STATUS_PARTIALLY_ASSIGNED = "partially_assigned"


@dataclass
class GeneratedShift:
    user_id: uuid.UUID
    date: date
    start_time: time
    end_time: time
    type: str = "work"

    @property
    def hours(self) -> float:
        return (_minutes(self.end_time) - _minutes(self.start_time)) / 60


@dataclass
class UnmetEmployee:
    user_id: uuid.UUID
    target_hours: float
    assigned_hours: float
    skipped_days: list[date] = field(default_factory=list)


@dataclass
class AllocationResult:
    shifts: list[GeneratedShift] = field(default_factory=list)
    unmet: list[UnmetEmployee] = field(default_factory=list)

    @property
    def status(self) -> str:
        return STATUS_PARTIALLY_ASSIGNED if self.unmet else STATUS_ASSIGNED

    def hours_by_user(self) -> dict[uuid.UUID, float]:
        totals: dict[uuid.UUID, float] = {}
        for shift in self.shifts:
            totals[shift.user_id] = totals.get(shift.user_id, 0) + shift.hours
        return totals


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Every calendar day in [start_date, end_date]."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def build_absence_days(
    user_ids: Iterable[uuid.UUID],
    approved_absences: Iterable,
    start_date: date,
    end_date: date,
) -> dict[uuid.UUID, set[date]]:
    """
    Days inside [start_date, end_date] blocked per employee by an approved absence.

    Half-day requests block the whole day as well. Absences of users outside
    the roster are ignored.
    """
    blocked: dict[uuid.UUID, set[date]] = {uid: set() for uid in user_ids}
    for absence in approved_absences:
        days = blocked.get(absence.user_id)
        if days is None:
            continue
        first = max(absence.start_date, start_date)
        last = min(absence.end_date, end_date)
        days.update(iter_days(first, last))
    return blocked


def target_hours(available_days: int, settings: "GenerationSettings") -> float:
    if settings.distribute_evenly:
        possible = available_days * HOURS_PER_AVAILABLE_DAY
        return max(
            settings.min_hours_per_employee,
            min(settings.max_hours_per_employee, possible),
        )
    return settings.max_hours_per_employee


def allocate(
    start_date: date,
    end_date: date,
    employees: Iterable,
    settings: "GenerationSettings",
    approved_absences: Iterable = (),
) -> AllocationResult:
    """
    Assign work blocks to `employees` (objects with an ``id``) for every day
    in the inclusive range. Employees are served in the given order.
    """
    roster = list(employees)
    days = list(iter_days(start_date, end_date))
    user_ids = list(dict.fromkeys(e.id for e in roster))

    if settings.respect_time_off_requests:
        blocked = build_absence_days(user_ids, approved_absences, start_date, end_date)
    else:
        blocked = {uid: set() for uid in user_ids}

    targets = {
        uid: target_hours(sum(1 for d in days if d not in blocked[uid]), settings)
        for uid in user_ids
    }
    remaining = dict(targets)
    assigned = {uid: 0.0 for uid in user_ids}
    skipped: dict[uuid.UUID, list[date]] = {uid: [] for uid in user_ids}

    window_start = _minutes(settings.start_hour)
    window_end = _minutes(settings.end_hour)

    result = AllocationResult()

    for day in days:
        cursor = window_start
        for uid in user_ids:
            if day in blocked[uid] or remaining[uid] <= 0:
                continue

            block_hours = FULL_BLOCK_HOURS if remaining[uid] >= FULL_BLOCK_HOURS else SHORT_BLOCK_HOURS
            if assigned[uid] + block_hours > settings.max_hours_per_employee:
                # Budget spent as far as the ceiling allows
                remaining[uid] = 0
                continue

            block_minutes = block_hours * 60
            if cursor + block_minutes > window_end:
                skipped[uid].append(day)
                continue

            result.shifts.append(
                GeneratedShift(
                    user_id=uid,
                    date=day,
                    start_time=_to_time(cursor),
                    end_time=_to_time(cursor + block_minutes),
                )
            )
            cursor += block_minutes
            remaining[uid] -= block_hours
            assigned[uid] += block_hours

    for uid in user_ids:
        if skipped[uid] or assigned[uid] < settings.min_hours_per_employee:
            result.unmet.append(
                UnmetEmployee(
                    user_id=uid,
                    target_hours=targets[uid],
                    assigned_hours=assigned[uid],
                    skipped_days=skipped[uid],
                )
            )

    return result
