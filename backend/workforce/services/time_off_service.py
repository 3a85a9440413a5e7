"""
Writes approved time-off into the schedules it overlaps.

Existing rows of the employee on an absence day are retyped in place (the old
type and notes go to the audit log); days without rows get a placeholder
shift so the absence shows up in the grid. The caller commits.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.models.audit import AuditLog
from workforce.models.schedule import Schedule
from workforce.models.shift import Shift
from workforce.models.time_off import TimeOffRequest
from workforce.services.allocation_service import iter_days

logger = logging.getLogger(__name__)

PLACEHOLDER_START = time(9, 0)
PLACEHOLDER_END = time(18, 0)
PLACEHOLDER_AREA = "Absence"


@dataclass
class ReconciliationResult:
    updated: int = 0
    created: int = 0
    schedules: int = 0


def absence_note(request_type: str) -> str:
    return f"Automatic absence: {request_type}"


async def find_overlapping_schedules(db: AsyncSession, start_date, end_date) -> list[Schedule]:
    result = await db.execute(
        select(Schedule)
        .where(Schedule.start_date <= end_date, Schedule.end_date >= start_date)
        .order_by(Schedule.start_date)
    )
    return list(result.scalars().all())


async def apply_approved_absence(
    request: TimeOffRequest,
    db: AsyncSession,
    reviewer_id: uuid.UUID | None = None,
) -> ReconciliationResult:
    shift_type = request.shift_type
    note = absence_note(request.type)
    outcome = ReconciliationResult()

    schedules = await find_overlapping_schedules(db, request.start_date, request.end_date)
    for schedule in schedules:
        first = max(request.start_date, schedule.start_date)
        last = min(request.end_date, schedule.end_date)

        result = await db.execute(
            select(Shift).where(
                Shift.schedule_id == schedule.id,
                Shift.user_id == request.user_id,
                Shift.date >= first,
                Shift.date <= last,
            )
        )
        by_day: dict = {}
        for shift in result.scalars().all():
            by_day.setdefault(shift.date, []).append(shift)

        for day in iter_days(first, last):
            existing = by_day.get(day)
            if not existing:
                db.add(Shift(
                    schedule_id=schedule.id,
                    user_id=request.user_id,
                    date=day,
                    start_time=PLACEHOLDER_START,
                    end_time=PLACEHOLDER_END,
                    type=shift_type,
                    notes=note,
                    area=PLACEHOLDER_AREA,
                ))
                outcome.created += 1
                continue

            for shift in existing:
                db.add(AuditLog(
                    user_id=reviewer_id,
                    entity_type="shift",
                    entity_id=shift.id,
                    action="absence_overwrite",
                    old_values={"type": shift.type, "notes": shift.notes},
                    new_values={
                        "type": shift_type,
                        "notes": note,
                        "time_off_request_id": str(request.id),
                    },
                ))
                shift.type = shift_type
                shift.notes = note
                outcome.updated += 1
        outcome.schedules += 1

    logger.info(
        "Time-off %s applied to %d schedule(s): %d shift(s) retyped, %d placeholder(s)",
        request.id, outcome.schedules, outcome.updated, outcome.created,
    )
    return outcome
