"""
Notification service – in-app notifications, realtime push and SendGrid email.

Graceful degradation: without SENDGRID_API_KEY the email step is skipped.
Notification failures are logged and never fail the request that caused them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from workforce.core.config import settings
from workforce.models.notification import Notification
from workforce.models.shift import Shift
from workforce.models.user import User
from workforce.schemas.notification import NotificationOut
from workforce.services.realtime import hub

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from workforce.models.document import Document
    from workforce.models.message import Message
    from workforce.models.schedule import Schedule
    from workforce.models.time_off import TimeOffRequest

logger = logging.getLogger(__name__)

EVENT_SCHEDULE_UPDATE = "schedule_update"
EVENT_SHIFT_UPDATE = "shift_update"
EVENT_TIME_OFF_REQUEST = "time_off_request"
EVENT_REQUEST_APPROVED = "request_approved"
EVENT_REQUEST_REJECTED = "request_rejected"
EVENT_DOCUMENT_UPLOAD = "document_upload"
EVENT_NEW_MESSAGE = "new_message"

_SIGNATURE = "\n\nWorkforce Manager"
NAME_MARKER = "{name}"


async def send_email(to: str, subject: str, body: str) -> tuple[bool, str | None]:
    api_key = settings.SENDGRID_API_KEY
    from_email = settings.SENDGRID_FROM_EMAIL
    if not api_key:
        return False, "SENDGRID_API_KEY not configured"
    if not from_email:
        return False, "SENDGRID_FROM_EMAIL not configured"
    try:
        from sendgrid import SendGridAPIClient
        from sendgrid.helpers.mail import Mail
        mail = Mail(
            from_email=from_email,
            to_emails=to,
            subject=subject,
            plain_text_content=body,
        )
        await asyncio.to_thread(SendGridAPIClient(api_key).send, mail)
        return True, None
    except Exception as e:
        return False, str(e)[:200]


class NotificationService:

    def __init__(self, db: "AsyncSession"):
        self.db = db

    async def notify(
        self,
        users: list[User],
        event_type: str,
        message: str,
        data: dict | None = None,
        email_subject: str | None = None,
        email_body: str | None = None,
    ) -> list[Notification]:
        """
        Store one notification per user, push it to their open sockets and,
        when a subject is given, email it.

        ``email_body`` may contain the literal marker ``{name}``, replaced by
        the recipient's name. No other placeholders are interpreted.
        """
        notifications = [
            Notification(user_id=u.id, type=event_type, message=message, data=data)
            for u in users
        ]
        self.db.add_all(notifications)
        await self.db.commit()

        for user, notification in zip(users, notifications):
            await self.db.refresh(notification)
            await self._push(notification)
            if email_subject and user.email:
                body = (email_body or message).replace(NAME_MARKER, user.name)
                await self._email(user.email, email_subject, body)
        return notifications

    async def _push(self, notification: Notification) -> None:
        payload = {
            "type": notification.type,
            "message": notification.message,
            "data": NotificationOut.model_validate(notification).model_dump(),
        }
        try:
            await hub.publish(notification.user_id, payload)
        except Exception:
            logger.exception("Realtime push failed for user %s", notification.user_id)

    async def _email(self, to: str, subject: str, body: str) -> None:
        ok, err = await send_email(to, subject, body + _SIGNATURE)
        if ok:
            logger.info("Email '%s' sent to %s", subject, to)
        else:
            logger.warning("Email '%s' to %s not sent: %s", subject, to, err)


# ── Convenience functions for the API layer ─────────────────────────────────

def _fmt(d) -> str:
    return d.strftime("%d.%m.%Y")


def _shift_lines(shifts: list[Shift]) -> str:
    if not shifts:
        return "No shifts assigned in this period."
    lines = []
    for s in sorted(shifts, key=lambda s: (s.date, s.start_time)):
        line = f"{s.day_name[:3]}, {_fmt(s.date)}  {s.start_time.strftime('%H:%M')}–{s.end_time.strftime('%H:%M')}"
        if s.type != "work":
            line += f"  ({s.type})"
        lines.append(line)
    return "\n".join(lines)


async def _active_users(db: "AsyncSession", role: str) -> list[User]:
    result = await db.execute(
        select(User).where(User.role == role, User.is_active == True).order_by(User.name)
    )
    return list(result.scalars().all())


async def notify_schedule_published(schedule: "Schedule", db: "AsyncSession") -> None:
    """Every active employee gets an in-app notice and an email with their own shifts."""
    try:
        employees = await _active_users(db, "employee")
    except Exception:
        logger.exception("Publishing notifications failed for schedule %s", schedule.id)
        return

    data = {
        "schedule_id": str(schedule.id),
        "start_date": schedule.start_date.isoformat(),
        "end_date": schedule.end_date.isoformat(),
    }
    period = f"{_fmt(schedule.start_date)} – {_fmt(schedule.end_date)}"
    svc = NotificationService(db)
    for employee in employees:
        employee_id = employee.id
        try:
            result = await db.execute(
                select(Shift).where(Shift.schedule_id == schedule.id, Shift.user_id == employee_id)
            )
            shifts = list(result.scalars().all())
            body = (
                f"Hello {NAME_MARKER},\n\n"
                f"the schedule for {period} has been published. "
                f"Your shifts:\n\n{_shift_lines(shifts)}"
            )
            await svc.notify(
                [employee],
                EVENT_SCHEDULE_UPDATE,
                "New shift schedule published",
                data=data,
                email_subject=f"Schedule published: {period}",
                email_body=body,
            )
        except Exception:
            logger.exception(
                "Publish notification failed for employee %s on schedule %s", employee_id, schedule.id
            )


async def notify_shift_updated(shift: Shift, db: "AsyncSession") -> None:
    try:
        user = await db.get(User, shift.user_id)
        if not user:
            return
        await NotificationService(db).notify(
            [user],
            EVENT_SHIFT_UPDATE,
            "Your work schedule has been updated",
            data={
                "shift_id": str(shift.id),
                "schedule_id": str(shift.schedule_id),
                "date": shift.date.isoformat(),
            },
        )
    except Exception:
        logger.exception("Shift update notification failed for shift %s", shift.id)


async def notify_time_off_requested(
    request: "TimeOffRequest",
    requester: User,
    db: "AsyncSession",
) -> None:
    """All active admins are notified in-app; the admin mailbox gets an email."""
    try:
        admins = await _active_users(db, "admin")
        message = f"New time-off request from {requester.name}"
        await NotificationService(db).notify(
            admins,
            EVENT_TIME_OFF_REQUEST,
            message,
            data={
                "request_id": str(request.id),
                "user_id": str(request.user_id),
                "user_name": requester.name,
                "start_date": request.start_date.isoformat(),
                "end_date": request.end_date.isoformat(),
                "type": request.type,
            },
        )
        if settings.ADMIN_NOTIFICATION_EMAIL:
            body = (
                f"{requester.name} requested time off:\n"
                f"Type:    {request.type} ({request.duration})\n"
                f"Period:  {_fmt(request.start_date)} – {_fmt(request.end_date)}\n"
            )
            if request.reason:
                body += f"Reason:  {request.reason}\n"
            ok, err = await send_email(
                settings.ADMIN_NOTIFICATION_EMAIL, message, body + _SIGNATURE
            )
            if not ok:
                logger.warning("Admin email for request %s not sent: %s", request.id, err)
    except Exception:
        logger.exception("Time-off request notification failed for request %s", request.id)


async def notify_time_off_decision(
    request: "TimeOffRequest",
    decision: str,
    db: "AsyncSession",
    reason: str | None = None,
) -> None:
    try:
        user = await db.get(User, request.user_id)
        if not user:
            return
        approved = decision == "approved"
        label = "approved" if approved else "rejected"
        data = {
            "request_id": str(request.id),
            "start_date": request.start_date.isoformat(),
            "end_date": request.end_date.isoformat(),
            "type": request.type,
        }
        if reason:
            data["reason"] = reason
        body = (
            "Hello {name},\n\n"
            f"your time-off request has been {label}:\n"
            f"Period: {_fmt(request.start_date)} – {_fmt(request.end_date)}\n"
            f"Type:   {request.type}\n"
        )
        if reason:
            body += f"Note:   {reason}\n"
        await NotificationService(db).notify(
            [user],
            EVENT_REQUEST_APPROVED if approved else EVENT_REQUEST_REJECTED,
            f"Your time-off request has been {label}",
            data=data,
            email_subject=f"Time-off request {label}: {_fmt(request.start_date)}",
            email_body=body,
        )
    except Exception:
        logger.exception("Decision notification failed for request %s", request.id)


async def notify_document_uploaded(document: "Document", db: "AsyncSession") -> None:
    try:
        user = await db.get(User, document.user_id)
        if not user:
            return
        message = f"New {document.label} available"
        await NotificationService(db).notify(
            [user],
            EVENT_DOCUMENT_UPLOAD,
            message,
            data={
                "document_id": str(document.id),
                "type": document.type,
                "period": document.period,
            },
            email_subject=f"{message}: {document.period}",
            email_body="Hello {name},\n\n" + f"a new {document.label} for {document.period} is available.",
        )
    except Exception:
        logger.exception("Document notification failed for document %s", document.id)


async def notify_new_message(message: "Message", db: "AsyncSession") -> None:
    try:
        recipient = await db.get(User, message.to_user_id)
        if not recipient:
            return
        await NotificationService(db).notify(
            [recipient],
            EVENT_NEW_MESSAGE,
            f"You have received a new message: {message.subject}",
            data={"message_id": str(message.id)},
        )
    except Exception:
        logger.exception("Message notification failed for message %s", message.id)
