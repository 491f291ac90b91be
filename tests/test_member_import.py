"""
tests/test_member_import.py
Tests for spreadsheet preview and the approved member import.
"""

import io

import openpyxl
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.models.models import ApprovedMember, User
from tests.conftest import auth_headers


def _xlsx_bytes(rows: list[list]) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_preview_csv_drops_rows_without_phone(client: AsyncClient, admin_user: User):
    content = "Phone,Full Name,City,Gotra\n9999999999,Asha Goyal,Jabalpur,Goyal\n,No Phone,Katni,Garg\n"
    response = await client.post(
        "/import/preview",
        files={"file": ("members.csv", content.encode("utf-8-sig"), "text/csv")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_rows"] == 2
    assert data["members"] == [
        {"phone": "9999999999", "full_name": "Asha Goyal", "city": "Jabalpur", "gotra": "Goyal"}
    ]


@pytest.mark.asyncio
async def test_preview_xlsx_with_numeric_phone(client: AsyncClient, admin_user: User):
    content = _xlsx_bytes([
        ["phone", "name", "city"],
        [9876543210, " Mohan Lal ", "Satna"],
        [None, None, None],
    ])
    response = await client.post(
        "/import/preview",
        files={"file": ("members.xlsx", content, "application/octet-stream")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["total_rows"] == 1
    assert data["members"][0] == {
        "phone": "9876543210", "full_name": "Mohan Lal", "city": "Satna", "gotra": ""
    }


@pytest.mark.asyncio
async def test_preview_rejects_other_file_types(client: AsyncClient, admin_user: User):
    response = await client.post(
        "/import/preview",
        files={"file": ("members.pdf", b"%PDF", "application/pdf")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Unsupported file type. Use .csv or .xlsx"


@pytest.mark.asyncio
async def test_preview_corrupt_workbook(client: AsyncClient, admin_user: User):
    response = await client.post(
        "/import/preview",
        files={"file": ("members.xlsx", b"this is not a workbook", "application/octet-stream")},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Failed to parse file"


@pytest.mark.asyncio
async def test_import_verifies_matching_user(
    client: AsyncClient, admin_user: User, db: AsyncSession
):
    member = User(phone="9999999999", full_name="Asha Goyal")
    db.add(member)
    await db.commit()

    response = await client.post(
        "/import/members",
        json={"members": [{"phone": "9999999999", "full_name": "Asha Goyal", "city": "Jabalpur"}]},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    assert response.json() == {"success": 1, "failed": 0, "errors": []}

    await db.refresh(member)
    assert member.is_verified is True
    approved = await db.scalar(select(ApprovedMember).where(ApprovedMember.phone == "9999999999"))
    assert approved.city == "Jabalpur"
    assert approved.gotra is None


@pytest.mark.asyncio
async def test_import_treats_existing_phone_as_success(
    client: AsyncClient, admin_user: User, db: AsyncSession
):
    db.add(ApprovedMember(phone="9111111111", full_name="Already Listed"))
    await db.commit()

    response = await client.post(
        "/import/members",
        json={"members": [{"phone": "9111111111"}, {"phone": "9222222222"}]},
        headers=auth_headers(admin_user),
    )
    assert response.json() == {"success": 2, "failed": 0, "errors": []}
    assert await db.scalar(select(func.count(ApprovedMember.id))) == 2


@pytest.mark.asyncio
async def test_import_counts_blank_phone_as_failed(client: AsyncClient, admin_user: User):
    response = await client.post(
        "/import/members",
        json={"members": [{"phone": "9333333333"}, {"phone": "  "}]},
        headers=auth_headers(admin_user),
    )
    data = response.json()
    assert data["success"] == 1
    assert data["failed"] == 1
    assert len(data["errors"]) == 1


@pytest.mark.asyncio
async def test_import_requires_rows(client: AsyncClient, admin_user: User):
    response = await client.post(
        "/import/members", json={"members": []}, headers=auth_headers(admin_user)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "No data to import"
