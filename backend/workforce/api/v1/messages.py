"""
Messages API – internal messages between users.
"""
import uuid

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from workforce.api.deps import DB, CurrentUser
from workforce.models.message import Message
from workforce.models.shift import Shift
from workforce.models.user import User
from workforce.schemas.message import MessageCreate, MessageOut
from workforce.services.notification_service import notify_new_message

router = APIRouter(prefix="/messages", tags=["messages"])


async def _get_visible(db, message_id: uuid.UUID, current_user: User) -> Message:
    """Sender and recipient may see a message; anyone else gets a 404."""
    message = await db.get(Message, message_id)
    if not message or current_user.id not in (message.from_user_id, message.to_user_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return message


@router.get("/received", response_model=list[MessageOut])
async def list_received(current_user: CurrentUser, db: DB):
    result = await db.execute(
        select(Message).where(Message.to_user_id == current_user.id).order_by(Message.created_at.desc())
    )
    return result.scalars().all()


@router.get("/sent", response_model=list[MessageOut])
async def list_sent(current_user: CurrentUser, db: DB):
    result = await db.execute(
        select(Message).where(Message.from_user_id == current_user.id).order_by(Message.created_at.desc())
    )
    return result.scalars().all()


@router.get("/{message_id}", response_model=MessageOut)
async def get_message(message_id: uuid.UUID, current_user: CurrentUser, db: DB):
    message = await _get_visible(db, message_id, current_user)
    if message.to_user_id == current_user.id and not message.is_read:
        message.is_read = True
        await db.commit()
        await db.refresh(message)
    return message


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(payload: MessageCreate, current_user: CurrentUser, db: DB):
    if not await db.get(User, payload.to_user_id):
        raise HTTPException(status_code=404, detail="Recipient not found")
    if payload.related_to_shift_id and not await db.get(Shift, payload.related_to_shift_id):
        raise HTTPException(status_code=404, detail="Shift not found")

    message = Message(from_user_id=current_user.id, **payload.model_dump())
    db.add(message)
    await db.commit()
    await db.refresh(message)

    await notify_new_message(message, db)
    return message


@router.post("/{message_id}/read", response_model=MessageOut)
async def mark_read(message_id: uuid.UUID, current_user: CurrentUser, db: DB):
    message = await _get_visible(db, message_id, current_user)
    if message.to_user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Only the recipient can mark a message as read")
    message.is_read = True
    await db.commit()
    await db.refresh(message)
    return message


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: uuid.UUID, current_user: CurrentUser, db: DB):
    message = await _get_visible(db, message_id, current_user)
    await db.delete(message)
    await db.commit()
