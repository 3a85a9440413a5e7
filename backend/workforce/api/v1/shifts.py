import uuid

from fastapi import APIRouter, HTTPException, status

from workforce.api.deps import DB, AdminUser, CurrentUser, ensure_self_or_admin
from workforce.models.audit import AuditLog
from workforce.models.schedule import Schedule
from workforce.models.shift import Shift
from workforce.models.user import User
from workforce.schemas.shift import ShiftCreate, ShiftUpdate, ShiftOut
from workforce.services.notification_service import notify_shift_updated

router = APIRouter(prefix="/shifts", tags=["shifts"])


async def _write_audit(db, *, user_id, entity_id, action: str,
                       old_values: dict | None = None, new_values: dict | None = None):
    db.add(AuditLog(
        user_id=user_id,
        entity_type="shift",
        entity_id=entity_id,
        action=action,
        old_values=old_values,
        new_values=new_values,
    ))


async def _get_shift(db, shift_id: uuid.UUID) -> Shift:
    shift = await db.get(Shift, shift_id)
    if not shift:
        raise HTTPException(status_code=404, detail="Shift not found")
    return shift


async def _check_placement(db, schedule_id: uuid.UUID, user_id: uuid.UUID, day) -> Schedule:
    schedule = await db.get(Schedule, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    if not await db.get(User, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    if not schedule.covers(day):
        raise HTTPException(status_code=400, detail="Shift date is outside the schedule period")
    return schedule


@router.get("/{shift_id}", response_model=ShiftOut)
async def get_shift(shift_id: uuid.UUID, current_user: CurrentUser, db: DB):
    shift = await _get_shift(db, shift_id)
    ensure_self_or_admin(current_user, shift.user_id)
    return shift


@router.post("", response_model=ShiftOut, status_code=status.HTTP_201_CREATED)
async def create_shift(payload: ShiftCreate, current_user: AdminUser, db: DB):
    schedule = await _check_placement(db, payload.schedule_id, payload.user_id, payload.date)

    shift = Shift(**payload.model_dump())
    db.add(shift)
    await db.commit()
    await db.refresh(shift)

    if schedule.is_published:
        await notify_shift_updated(shift, db)
    return shift


@router.put("/{shift_id}", response_model=ShiftOut)
async def update_shift(shift_id: uuid.UUID, payload: ShiftUpdate, current_user: AdminUser, db: DB):
    shift = await _get_shift(db, shift_id)
    changes = payload.model_dump(exclude_unset=True)

    start = changes.get("start_time", shift.start_time)
    end = changes.get("end_time", shift.end_time)
    if end <= start:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")
    schedule = await _check_placement(
        db, shift.schedule_id, changes.get("user_id", shift.user_id), changes.get("date", shift.date)
    )

    # Capture old values for audit log
    old_values = {f: str(getattr(shift, f)) for f in changes}
    for field, value in changes.items():
        setattr(shift, field, value)
    new_values = {f: str(getattr(shift, f)) for f in changes}
    await _write_audit(db, user_id=current_user.id, entity_id=shift.id, action="update",
                       old_values=old_values, new_values=new_values)

    await db.commit()
    await db.refresh(shift)

    if schedule.is_published:
        await notify_shift_updated(shift, db)
    return shift


@router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(shift_id: uuid.UUID, current_user: AdminUser, db: DB):
    shift = await _get_shift(db, shift_id)
    await _write_audit(db, user_id=current_user.id, entity_id=shift.id, action="delete",
                       old_values={"date": str(shift.date), "type": shift.type})
    await db.delete(shift)
    await db.commit()
