"""
Schedules API – lifecycle, automatic generation and the consolidated grid.
"""
import uuid
from datetime import date, timedelta

from fastapi import APIRouter, HTTPException, status, Query
from sqlalchemy import select

from workforce.api.deps import DB, AdminUser, CurrentUser, ensure_self_or_admin
from workforce.models.schedule import Schedule
from workforce.models.shift import Shift
from workforce.schemas.generation import (
    GenerationRequest, GeneratedShiftOut, UnmetEmployeeOut, PreviewOut, GenerateOut,
)
from workforce.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleOut, ScheduleResetOut
from workforce.schemas.shift import ShiftOut, DayViewOut
from workforce.services import schedule_service
from workforce.services.consolidation_service import consolidate_schedule
from workforce.services.notification_service import notify_schedule_published
from workforce.services.time_off_service import find_overlapping_schedules

router = APIRouter(prefix="/schedules", tags=["schedules"])

DEFAULT_LOOKUP_DAYS = 7


async def _get_schedule(db, schedule_id: uuid.UUID) -> Schedule:
    schedule = await db.get(Schedule, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule


async def _shift_rows(db, schedule_id: uuid.UUID, user_id: uuid.UUID | None = None) -> list[Shift]:
    query = select(Shift).where(Shift.schedule_id == schedule_id)
    if user_id is not None:
        query = query.where(Shift.user_id == user_id)
    result = await db.execute(query.order_by(Shift.date, Shift.start_time))
    return list(result.scalars().all())


# ── Listing & lookup ─────────────────────────────────────────────────────────

@router.get("", response_model=list[ScheduleOut])
async def list_schedules(current_user: CurrentUser, db: DB):
    result = await db.execute(
        select(Schedule).order_by(Schedule.start_date.desc(), Schedule.created_at.desc())
    )
    return result.scalars().all()


@router.get("/lookup", response_model=ScheduleOut)
async def lookup_schedule(
    current_user: CurrentUser,
    db: DB,
    id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    """By id, or the first schedule overlapping the range (default: the coming week)."""
    if id is not None:
        return await _get_schedule(db, id)

    start = start_date or date.today()
    end = end_date or start + timedelta(days=DEFAULT_LOOKUP_DAYS)
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    schedules = await find_overlapping_schedules(db, start, end)
    if not schedules:
        raise HTTPException(status_code=404, detail="No schedule found for this period")
    return schedules[0]


@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(schedule_id: uuid.UUID, current_user: CurrentUser, db: DB):
    return await _get_schedule(db, schedule_id)


# ── Create / update ──────────────────────────────────────────────────────────

@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def create_schedule(payload: ScheduleCreate, current_user: AdminUser, db: DB):
    schedule = Schedule(**payload.model_dump(), created_by=current_user.id)
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)
    return schedule


@router.post("/new-empty", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def create_empty_schedule(payload: ScheduleCreate, current_user: AdminUser, db: DB):
    """Fresh schedule for the range; unpublished overlapping schedules are discarded."""
    schedule, _removed = await schedule_service.create_clean_schedule(
        db, payload.start_date, payload.end_date, current_user.id
    )
    return schedule


@router.put("/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(schedule_id: uuid.UUID, payload: ScheduleUpdate, current_user: AdminUser, db: DB):
    schedule = await _get_schedule(db, schedule_id)

    if await schedule_service.count_shifts(db, schedule.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Date range cannot change once the schedule has shifts",
        )

    start = payload.start_date or schedule.start_date
    end = payload.end_date or schedule.end_date
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    schedule.start_date = start
    schedule.end_date = end
    await db.commit()
    await db.refresh(schedule)
    return schedule


@router.post("/{schedule_id}/reset", response_model=ScheduleResetOut)
async def reset_schedule(schedule_id: uuid.UUID, current_user: AdminUser, db: DB):
    """Delete every shift of the schedule."""
    schedule = await _get_schedule(db, schedule_id)
    deleted = await schedule_service.delete_schedule_shifts(db, schedule.id)
    await db.commit()
    return ScheduleResetOut(schedule_id=schedule.id, deleted=deleted)


@router.post("/{schedule_id}/publish", response_model=ScheduleOut)
async def publish_schedule(schedule_id: uuid.UUID, current_user: AdminUser, db: DB):
    schedule = await _get_schedule(db, schedule_id)
    if schedule.is_published:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Schedule is already published")

    schedule_service.mark_published(schedule)
    await db.commit()
    await db.refresh(schedule)

    await notify_schedule_published(schedule, db)
    return schedule


# ── Automatic generation ─────────────────────────────────────────────────────

@router.post("/preview", response_model=PreviewOut)
async def preview_schedule(payload: GenerationRequest, current_user: AdminUser, db: DB):
    """Run the allocation engine without writing anything."""
    allocation = await schedule_service.run_allocation(
        db, payload.start_date, payload.end_date, payload.employee_ids, payload.settings
    )
    return PreviewOut(
        start_date=payload.start_date,
        end_date=payload.end_date,
        status=allocation.status,
        shifts=[GeneratedShiftOut.model_validate(s) for s in allocation.shifts],
        unmet=[UnmetEmployeeOut.model_validate(u) for u in allocation.unmet],
    )


@router.post("/auto-generate", response_model=GenerateOut, status_code=status.HTTP_201_CREATED)
async def auto_generate_schedule(payload: GenerationRequest, current_user: AdminUser, db: DB):
    """Run the allocation engine and persist schedule + shifts atomically."""
    schedule, shifts, allocation = await schedule_service.generate_and_save(
        db,
        payload.start_date,
        payload.end_date,
        payload.employee_ids,
        payload.settings,
        created_by=current_user.id,
    )
    return GenerateOut(
        schedule=ScheduleOut.model_validate(schedule),
        status=allocation.status,
        shifts=[ShiftOut.model_validate(s) for s in shifts],
        unmet=[UnmetEmployeeOut.model_validate(u) for u in allocation.unmet],
    )


# ── Shifts of a schedule ─────────────────────────────────────────────────────

@router.get("/{schedule_id}/shifts", response_model=list[ShiftOut])
async def list_schedule_shifts(schedule_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """Admins see every row, employees only their own."""
    await _get_schedule(db, schedule_id)
    user_id = None if current_user.role == "admin" else current_user.id
    return await _shift_rows(db, schedule_id, user_id)


@router.get("/{schedule_id}/shifts/user/{user_id}", response_model=list[ShiftOut])
async def list_user_shifts(schedule_id: uuid.UUID, user_id: uuid.UUID, current_user: CurrentUser, db: DB):
    ensure_self_or_admin(current_user, user_id)
    await _get_schedule(db, schedule_id)
    return await _shift_rows(db, schedule_id, user_id)


@router.get("/{schedule_id}/grid", response_model=list[DayViewOut])
async def schedule_grid(schedule_id: uuid.UUID, current_user: CurrentUser, db: DB):
    """One consolidated entry per employee and day."""
    await _get_schedule(db, schedule_id)
    user_id = None if current_user.role == "admin" else current_user.id
    rows = await _shift_rows(db, schedule_id, user_id)
    return [DayViewOut.model_validate(view) for view in consolidate_schedule(rows)]
