"""
Notifications API – in-app notifications of the current user.
"""
import uuid

from fastapi import APIRouter, HTTPException
from sqlalchemy import select, update

from workforce.api.deps import DB, CurrentUser
from workforce.models.notification import Notification
from workforce.schemas.notification import NotificationOut

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def list_notifications(current_user: CurrentUser, db: DB, unread_only: bool = False):
    query = select(Notification).where(Notification.user_id == current_user.id)
    if unread_only:
        query = query.where(Notification.is_read == False)
    result = await db.execute(query.order_by(Notification.created_at.desc()))
    return result.scalars().all()


@router.post("/read-all")
async def mark_all_read(current_user: CurrentUser, db: DB):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == current_user.id, Notification.is_read == False)
        .values(is_read=True)
    )
    await db.commit()
    return {"updated": result.rowcount or 0}


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(notification_id: uuid.UUID, current_user: CurrentUser, db: DB):
    notification = await db.get(Notification, notification_id)
    if not notification or notification.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification
