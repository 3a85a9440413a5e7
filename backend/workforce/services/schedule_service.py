"""
Schedule service – the database side of the allocation engine and the
schedule lifecycle (create clean, reset, publish).
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from workforce.models.schedule import Schedule
from workforce.models.shift import Shift
from workforce.models.time_off import TimeOffRequest
from workforce.models.user import User
from workforce.schemas.generation import GenerationSettings
from workforce.services.allocation_service import AllocationResult, allocate
from workforce.services.time_off_service import find_overlapping_schedules

logger = logging.getLogger(__name__)


async def load_roster(db: AsyncSession, employee_ids: list[uuid.UUID]) -> list[User]:
    """Active users for the given ids, in request order; unknown ids are dropped."""
    ids = list(dict.fromkeys(employee_ids))
    result = await db.execute(
        select(User).where(User.id.in_(ids), User.is_active == True)
    )
    found = {u.id: u for u in result.scalars().all()}
    return [found[i] for i in ids if i in found]


async def load_approved_absences(
    db: AsyncSession,
    user_ids: list[uuid.UUID],
    start_date: date,
    end_date: date,
) -> list[TimeOffRequest]:
    if not user_ids:
        return []
    result = await db.execute(
        select(TimeOffRequest).where(
            TimeOffRequest.user_id.in_(user_ids),
            TimeOffRequest.status == "approved",
            TimeOffRequest.start_date <= end_date,
            TimeOffRequest.end_date >= start_date,
        )
    )
    return list(result.scalars().all())


async def run_allocation(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    employee_ids: list[uuid.UUID],
    settings: GenerationSettings,
) -> AllocationResult:
    """Load the inputs and run the engine; nothing is written."""
    roster = await load_roster(db, employee_ids)
    absences = []
    if settings.respect_time_off_requests:
        absences = await load_approved_absences(db, [u.id for u in roster], start_date, end_date)
    return allocate(start_date, end_date, roster, settings, absences)


async def generate_and_save(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    employee_ids: list[uuid.UUID],
    settings: GenerationSettings,
    created_by: uuid.UUID,
) -> tuple[Schedule, list[Shift], AllocationResult]:
    """
    Create the schedule and every generated shift in one transaction.
    On any failure the whole batch is rolled back and the error re-raised.
    """
    allocation = await run_allocation(db, start_date, end_date, employee_ids, settings)

    try:
        schedule = Schedule(start_date=start_date, end_date=end_date, created_by=created_by)
        db.add(schedule)
        await db.flush()

        shifts = [
            Shift(
                schedule_id=schedule.id,
                user_id=g.user_id,
                date=g.date,
                start_time=g.start_time,
                end_time=g.end_time,
                type=g.type,
            )
            for g in allocation.shifts
        ]
        db.add_all(shifts)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Auto-generation for %s – %s rolled back", start_date, end_date)
        raise

    await db.refresh(schedule)
    logger.info(
        "Schedule %s generated: %d shifts, status %s",
        schedule.id, len(shifts), allocation.status,
    )
    return schedule, shifts, allocation


async def count_shifts(db: AsyncSession, schedule_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(Shift).where(Shift.schedule_id == schedule_id)
    )
    return result.scalar_one()


async def delete_schedule_shifts(db: AsyncSession, schedule_id: uuid.UUID) -> int:
    """Delete every shift of the schedule. Caller commits."""
    result = await db.execute(delete(Shift).where(Shift.schedule_id == schedule_id))
    return result.rowcount or 0


async def create_clean_schedule(
    db: AsyncSession,
    start_date: date,
    end_date: date,
    created_by: uuid.UUID,
) -> tuple[Schedule, list[uuid.UUID]]:
    """
    Remove unpublished schedules overlapping the range (with their shifts)
    and create an empty one. Published schedules are left alone.
    """
    removed: list[uuid.UUID] = []
    for existing in await find_overlapping_schedules(db, start_date, end_date):
        if existing.is_published:
            continue
        await delete_schedule_shifts(db, existing.id)
        await db.delete(existing)
        removed.append(existing.id)

    schedule = Schedule(start_date=start_date, end_date=end_date, created_by=created_by)
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)
    if removed:
        logger.info("Replaced %d unpublished schedule(s) with %s", len(removed), schedule.id)
    return schedule, removed


def mark_published(schedule: Schedule) -> None:
    schedule.is_published = True
    schedule.published_at = datetime.now(timezone.utc)
