"""
Tests for /api/v1/documents – upload, visibility and owner notification.
"""
import base64
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from tests.conftest import auth_headers
from workforce.models.notification import Notification

BASE = "/api/v1/documents"

PDF = base64.b64encode(b"%PDF-1.4 payslip").decode()


def _payload(user, **overrides):
    return {
        "user_id": str(user.id),
        "type": "payslip",
        "period": "June 2024",
        "filename": "payslip-2024-06.pdf",
        "file_data": PDF,
        **overrides,
    }


@pytest.mark.asyncio
async def test_upload_notifies_owner(client, db, admin_user, employee_user, admin_token):
    resp = await client.post(BASE, json=_payload(employee_user), headers=auth_headers(admin_token))
    assert resp.status_code == 201
    data = resp.json()
    assert data["uploaded_by"] == str(admin_user.id)
    assert data["file_data"] == PDF

    result = await db.execute(select(Notification).where(Notification.user_id == employee_user.id))
    note = result.scalar_one()
    assert note.type == "document_upload"
    assert note.data["period"] == "June 2024"


@pytest.mark.asyncio
async def test_upload_accepts_data_url(client, employee_user, admin_token):
    resp = await client.post(
        BASE, json=_payload(employee_user, file_data=f"data:application/pdf;base64,{PDF}"),
        headers=auth_headers(admin_token),
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_upload_rejects_non_base64(client, employee_user, admin_token):
    resp = await client.post(BASE, json=_payload(employee_user, file_data="***"), headers=auth_headers(admin_token))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_upload_unknown_user(client, admin_token):
    payload = _payload(SimpleNamespace(id="00000000-0000-0000-0000-000000000000"))
    resp = await client.post(BASE, json=payload, headers=auth_headers(admin_token))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_upload_employee_forbidden(client, employee_user, employee_token):
    resp = await client.post(BASE, json=_payload(employee_user), headers=auth_headers(employee_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_filters_by_owner_and_type(client, employee_user, second_employee,
                                              admin_token, employee_token):
    await client.post(BASE, json=_payload(employee_user), headers=auth_headers(admin_token))
    await client.post(BASE, json=_payload(employee_user, type="tax_document", period="2023"),
                      headers=auth_headers(admin_token))
    await client.post(BASE, json=_payload(second_employee), headers=auth_headers(admin_token))

    own = await client.get(BASE, headers=auth_headers(employee_token))
    assert len(own.json()) == 2
    assert "file_data" not in own.json()[0]

    payslips = await client.get(BASE, params={"type": "payslip"}, headers=auth_headers(employee_token))
    assert [d["period"] for d in payslips.json()] == ["June 2024"]

    everything = await client.get(BASE, headers=auth_headers(admin_token))
    assert len(everything.json()) == 3


@pytest.mark.asyncio
async def test_get_document_of_other_employee_forbidden(client, second_employee, admin_token, employee_token):
    created = await client.post(BASE, json=_payload(second_employee), headers=auth_headers(admin_token))
    resp = await client.get(f"{BASE}/{created.json()['id']}", headers=auth_headers(employee_token))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_document(client, employee_user, admin_token, employee_token):
    created = await client.post(BASE, json=_payload(employee_user), headers=auth_headers(admin_token))
    doc_id = created.json()["id"]

    assert (await client.delete(f"{BASE}/{doc_id}", headers=auth_headers(employee_token))).status_code == 403
    assert (await client.delete(f"{BASE}/{doc_id}", headers=auth_headers(admin_token))).status_code == 204
    assert (await client.get(f"{BASE}/{doc_id}", headers=auth_headers(admin_token))).status_code == 404
