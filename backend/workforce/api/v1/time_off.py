import logging
import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from workforce.api.deps import DB, AdminUser, CurrentUser, ensure_self_or_admin
from workforce.models.time_off import TimeOffRequest
from workforce.schemas.time_off import TimeOffRequestCreate, TimeOffDecision, TimeOffRequestOut
from workforce.services.notification_service import notify_time_off_requested, notify_time_off_decision
from workforce.services.time_off_service import apply_approved_absence

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/time-off-requests", tags=["time-off"])


async def _get_pending(db, request_id: uuid.UUID) -> TimeOffRequest:
    request = await db.get(TimeOffRequest, request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Time-off request not found")
    if request.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Request has already been {request.status}",
        )
    return request


@router.get("", response_model=list[TimeOffRequestOut])
async def list_requests(current_user: CurrentUser, db: DB, status: str | None = None):
    query = select(TimeOffRequest)
    if current_user.role != "admin":
        query = query.where(TimeOffRequest.user_id == current_user.id)
    if status:
        query = query.where(TimeOffRequest.status == status)
    result = await db.execute(query.order_by(TimeOffRequest.created_at.desc()))
    return result.scalars().all()


@router.get("/pending", response_model=list[TimeOffRequestOut])
async def list_pending_requests(current_user: AdminUser, db: DB):
    result = await db.execute(
        select(TimeOffRequest)
        .where(TimeOffRequest.status == "pending")
        .order_by(TimeOffRequest.start_date)
    )
    return result.scalars().all()


@router.get("/{request_id}", response_model=TimeOffRequestOut)
async def get_request(request_id: uuid.UUID, current_user: CurrentUser, db: DB):
    request = await db.get(TimeOffRequest, request_id)
    if not request:
        raise HTTPException(status_code=404, detail="Time-off request not found")
    ensure_self_or_admin(current_user, request.user_id)
    return request


@router.post("", response_model=TimeOffRequestOut, status_code=status.HTTP_201_CREATED)
async def create_request(payload: TimeOffRequestCreate, current_user: CurrentUser, db: DB):
    """Employees file requests for themselves only."""
    request = TimeOffRequest(user_id=current_user.id, **payload.model_dump())
    db.add(request)
    await db.commit()
    await db.refresh(request)

    await notify_time_off_requested(request, current_user, db)
    return request


@router.post("/{request_id}/approve", response_model=TimeOffRequestOut)
async def approve_request(
    request_id: uuid.UUID,
    current_user: AdminUser,
    db: DB,
    payload: TimeOffDecision | None = None,
):
    """Approve and write the absence into every overlapping schedule in one commit."""
    request = await _get_pending(db, request_id)

    request.status = "approved"
    request.approved_by = current_user.id
    await apply_approved_absence(request, db, reviewer_id=current_user.id)

    await db.commit()
    await db.refresh(request)
    logger.info("Time-off %s approved by %s", request.id, current_user.username)

    await notify_time_off_decision(request, "approved", db, reason=payload.reason if payload else None)
    return request


@router.post("/{request_id}/reject", response_model=TimeOffRequestOut)
async def reject_request(
    request_id: uuid.UUID,
    current_user: AdminUser,
    db: DB,
    payload: TimeOffDecision | None = None,
):
    request = await _get_pending(db, request_id)

    request.status = "rejected"
    request.approved_by = current_user.id
    await db.commit()
    await db.refresh(request)
    logger.info("Time-off %s rejected by %s", request.id, current_user.username)

    await notify_time_off_decision(request, "rejected", db, reason=payload.reason if payload else None)
    return request
