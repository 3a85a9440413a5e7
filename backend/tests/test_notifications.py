"""
Tests for /api/v1/notifications and the notification service.
"""
from datetime import datetime, timedelta, timezone

import pytest

from tests.conftest import auth_headers
from workforce.core.config import settings
from workforce.models.notification import Notification
from workforce.services.notification_service import NotificationService, send_email

BASE = "/api/v1/notifications"


async def _add(db, user, message, minutes_ago=0, is_read=False):
    n = Notification(
        user_id=user.id,
        type="schedule_update",
        message=message,
        is_read=is_read,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    db.add(n)
    await db.commit()
    await db.refresh(n)
    return n


@pytest.mark.asyncio
async def test_list_own_newest_first(client, db, employee_user, second_employee, employee_token):
    await _add(db, employee_user, "older", minutes_ago=10)
    await _add(db, employee_user, "newer")
    await _add(db, second_employee, "not mine")

    resp = await client.get(BASE, headers=auth_headers(employee_token))
    assert resp.status_code == 200
    assert [n["message"] for n in resp.json()] == ["newer", "older"]


@pytest.mark.asyncio
async def test_list_unread_only(client, db, employee_user, employee_token):
    await _add(db, employee_user, "seen", is_read=True)
    await _add(db, employee_user, "fresh")
    resp = await client.get(BASE, params={"unread_only": True}, headers=auth_headers(employee_token))
    assert [n["message"] for n in resp.json()] == ["fresh"]


@pytest.mark.asyncio
async def test_mark_read(client, db, employee_user, employee_token):
    n = await _add(db, employee_user, "hello")
    resp = await client.post(f"{BASE}/{n.id}/read", headers=auth_headers(employee_token))
    assert resp.status_code == 200
    assert resp.json()["is_read"] is True


@pytest.mark.asyncio
async def test_mark_read_of_other_user_not_found(client, db, second_employee, employee_token):
    n = await _add(db, second_employee, "private")
    resp = await client.post(f"{BASE}/{n.id}/read", headers=auth_headers(employee_token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client, db, employee_user, employee_token):
    await _add(db, employee_user, "a")
    await _add(db, employee_user, "b")
    resp = await client.post(f"{BASE}/read-all", headers=auth_headers(employee_token))
    assert resp.json() == {"updated": 2}

    resp = await client.get(BASE, params={"unread_only": True}, headers=auth_headers(employee_token))
    assert resp.json() == []


# ── Service ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_send_email_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "SENDGRID_API_KEY", "")
    ok, err = await send_email("someone@shop.de", "Subject", "Body")
    assert ok is False
    assert "SENDGRID_API_KEY" in err


@pytest.mark.asyncio
async def test_notify_stores_and_pushes(db, employee_user, monkeypatch):
    pushed = []

    async def fake_publish(user_id, payload):
        pushed.append((user_id, payload))

    monkeypatch.setattr("workforce.services.notification_service.hub.publish", fake_publish)

    created = await NotificationService(db).notify(
        [employee_user], "shift_update", "Your work schedule has been updated", data={"shift_id": "x"},
    )

    assert len(created) == 1
    assert created[0].user_id == employee_user.id
    user_id, payload = pushed[0]
    assert user_id == employee_user.id
    assert payload["type"] == "shift_update"
    assert payload["data"]["data"] == {"shift_id": "x"}


@pytest.mark.asyncio
async def test_notify_survives_push_failure(db, employee_user, monkeypatch):
    async def broken_publish(user_id, payload):
        raise ConnectionError("redis down")

    monkeypatch.setattr("workforce.services.notification_service.hub.publish", broken_publish)

    created = await NotificationService(db).notify([employee_user], "new_message", "Hi")
    assert len(created) == 1


@pytest.mark.asyncio
async def test_email_body_keeps_braces_from_user_text(db, employee_user, monkeypatch):
    sent = []

    async def fake_send_email(to, subject, body):
        sent.append((to, subject, body))
        return True, None

    async def fake_publish(user_id, payload):
        pass

    monkeypatch.setattr("workforce.services.notification_service.send_email", fake_send_email)
    monkeypatch.setattr("workforce.services.notification_service.hub.publish", fake_publish)
    employee_user.name = "Erik {Nights}"
    await db.commit()

    await NotificationService(db).notify(
        [employee_user], "request_rejected", "Your time-off request has been rejected",
        email_subject="Time-off request rejected",
        email_body="Hello {name},\n\nNote:   {inventory} week",
    )

    to, subject, body = sent[0]
    assert to == employee_user.email
    assert body.startswith("Hello Erik {Nights},\n\nNote:   {inventory} week")
