"""
Tests for /api/v1/time-off-requests – filing, decisions and schedule reconciliation.
"""
from datetime import date, time

import pytest
from sqlalchemy import select

from tests.conftest import auth_headers, make_schedule, make_shift
from workforce.models.audit import AuditLog
from workforce.models.notification import Notification
from workforce.models.shift import Shift
from workforce.models.time_off import TimeOffRequest

BASE = "/api/v1/time-off-requests"

VACATION = {"type": "vacation", "start_date": "2024-06-03", "end_date": "2024-06-05", "reason": "Family trip"}


async def _file(client, token, payload=VACATION) -> dict:
    resp = await client.post(BASE, json=payload, headers=auth_headers(token))
    assert resp.status_code == 201
    return resp.json()


async def _user_shifts(db, user):
    result = await db.execute(
        select(Shift)
        .where(Shift.user_id == user.id)
        .order_by(Shift.date)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()


# ── Filing ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_request_notifies_admins(client, db, admin_user, employee_user, employee_token):
    data = await _file(client, employee_token)
    assert data["status"] == "pending"
    assert data["duration"] == "full_day"
    assert data["user_id"] == str(employee_user.id)

    result = await db.execute(select(Notification).where(Notification.user_id == admin_user.id))
    note = result.scalar_one()
    assert note.type == "time_off_request"
    assert note.data["user_name"] == "Erik Employee"


@pytest.mark.asyncio
async def test_create_request_inverted_range(client, employee_token):
    resp = await client.post(
        BASE, json={**VACATION, "start_date": "2024-06-05", "end_date": "2024-06-03"},
        headers=auth_headers(employee_token),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_request_unknown_type(client, employee_token):
    resp = await client.post(BASE, json={**VACATION, "type": "sabbatical"}, headers=auth_headers(employee_token))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_employee_sees_only_own(client, admin_token, employee_token, second_employee_token):
    await _file(client, employee_token)
    await _file(client, second_employee_token)

    own = await client.get(BASE, headers=auth_headers(employee_token))
    assert len(own.json()) == 1

    everything = await client.get(BASE, headers=auth_headers(admin_token))
    assert len(everything.json()) == 2


@pytest.mark.asyncio
async def test_pending_list_admin_only(client, admin_token, employee_token):
    await _file(client, employee_token)
    resp = await client.get(f"{BASE}/pending", headers=auth_headers(admin_token))
    assert len(resp.json()) == 1

    resp = await client.get(f"{BASE}/pending", headers=auth_headers(employee_token))
    assert resp.status_code == 403


# ── Approval & reconciliation ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_approve_inserts_placeholder_absences(client, db, admin_user, employee_user,
                                                    admin_token, employee_token):
    await make_schedule(db, admin_user.id, date(2024, 6, 1), date(2024, 6, 7))
    request = await _file(client, employee_token)

    resp = await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["approved_by"] == str(admin_user.id)

    shifts = await _user_shifts(db, employee_user)
    assert [s.date for s in shifts] == [date(2024, 6, 3), date(2024, 6, 4), date(2024, 6, 5)]
    for s in shifts:
        assert s.type == "vacation"
        assert (s.start_time, s.end_time) == (time(9, 0), time(18, 0))
        assert s.area == "Absence"
        assert s.notes == "Automatic absence: vacation"

    result = await db.execute(select(Notification).where(Notification.user_id == employee_user.id))
    assert [n.type for n in result.scalars().all()] == ["request_approved"]


@pytest.mark.asyncio
async def test_approve_retypes_existing_shifts_with_audit(client, db, admin_user, employee_user,
                                                          admin_token, employee_token):
    schedule = await make_schedule(db, admin_user.id, date(2024, 6, 1), date(2024, 6, 7))
    existing = await make_shift(db, schedule, employee_user, date(2024, 6, 4), notes="Opening")
    untouched = await make_shift(db, schedule, employee_user, date(2024, 6, 6))
    request = await _file(client, employee_token, {**VACATION, "type": "personal"})

    resp = await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))
    assert resp.status_code == 200

    shifts = {s.id: s for s in await _user_shifts(db, employee_user)}
    assert len(shifts) == 4  # two placeholders + retyped + untouched
    assert shifts[existing.id].type == "leave"
    assert shifts[existing.id].start_time == time(9, 0)
    assert shifts[existing.id].end_time == time(17, 0)
    assert shifts[existing.id].notes == "Automatic absence: personal"
    assert shifts[untouched.id].type == "work"

    result = await db.execute(select(AuditLog).where(AuditLog.action == "absence_overwrite"))
    log = result.scalar_one()
    assert log.entity_id == existing.id
    assert log.user_id == admin_user.id
    assert log.old_values == {"type": "work", "notes": "Opening"}
    assert log.new_values["type"] == "leave"


@pytest.mark.asyncio
async def test_approve_clamps_to_each_overlapping_schedule(client, db, admin_user, employee_user,
                                                           admin_token, employee_token):
    first = await make_schedule(db, admin_user.id, date(2024, 5, 27), date(2024, 6, 2))
    second = await make_schedule(db, admin_user.id, date(2024, 6, 3), date(2024, 6, 9))
    request = await _file(client, employee_token, {"type": "sick", "start_date": "2024-06-01", "end_date": "2024-06-04"})

    await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))

    shifts = await _user_shifts(db, employee_user)
    assert [(s.schedule_id, s.date) for s in shifts] == [
        (first.id, date(2024, 6, 1)),
        (first.id, date(2024, 6, 2)),
        (second.id, date(2024, 6, 3)),
        (second.id, date(2024, 6, 4)),
    ]
    assert {s.type for s in shifts} == {"sick"}


@pytest.mark.asyncio
async def test_approve_without_schedule_only_changes_status(client, db, employee_user, admin_token, employee_token):
    request = await _file(client, employee_token)
    resp = await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))
    assert resp.status_code == 200
    assert await _user_shifts(db, employee_user) == []


@pytest.mark.asyncio
async def test_approve_twice_conflicts(client, admin_token, employee_token):
    request = await _file(client, employee_token)
    await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))
    resp = await client.post(f"{BASE}/{request['id']}/reject", headers=auth_headers(admin_token))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_approve_employee_forbidden(client, employee_token):
    request = await _file(client, employee_token)
    resp = await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(employee_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_approved_absence_blocks_generation(client, db, admin_user, employee_user,
                                                  admin_token, employee_token):
    request = await _file(client, employee_token)
    await client.post(f"{BASE}/{request['id']}/approve", headers=auth_headers(admin_token))

    resp = await client.post(
        "/api/v1/schedules/preview",
        json={"start_date": "2024-06-03", "end_date": "2024-06-07", "employee_ids": [str(employee_user.id)]},
        headers=auth_headers(admin_token),
    )
    assert {s["date"] for s in resp.json()["shifts"]} == {"2024-06-06", "2024-06-07"}


# ── Rejection ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_reject_with_reason(client, db, admin_user, employee_user, admin_token, employee_token):
    await make_schedule(db, admin_user.id, date(2024, 6, 1), date(2024, 6, 7))
    request = await _file(client, employee_token)

    resp = await client.post(f"{BASE}/{request['id']}/reject", json={"reason": "Inventory week"},
                             headers=auth_headers(admin_token))
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"

    assert await _user_shifts(db, employee_user) == []
    result = await db.execute(select(Notification).where(Notification.user_id == employee_user.id))
    note = result.scalar_one()
    assert note.type == "request_rejected"
    assert note.data["reason"] == "Inventory week"


@pytest.mark.asyncio
async def test_decide_unknown_request(client, admin_token):
    resp = await client.post(f"{BASE}/00000000-0000-0000-0000-000000000000/approve",
                             headers=auth_headers(admin_token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_request_of_other_employee_forbidden(client, employee_token, second_employee_token):
    request = await _file(client, second_employee_token)
    resp = await client.get(f"{BASE}/{request['id']}", headers=auth_headers(employee_token))
    assert resp.status_code == 403

    stored = await client.get(f"{BASE}/{request['id']}", headers=auth_headers(second_employee_token))
    assert stored.json()["reason"] == "Family trip"
