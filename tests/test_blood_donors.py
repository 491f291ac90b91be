"""
tests/test_blood_donors.py
Tests for the blood donor registry.
"""

import uuid
from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.models.models import BloodDonor, BloodGroup, User
from tests.conftest import auth_headers


@pytest_asyncio.fixture
async def donors(db: AsyncSession, user: User) -> list[BloodDonor]:
    rows = [
        BloodDonor(user_id=user.id, blood_group=BloodGroup.O_POS, city="Jabalpur",
                   last_donation_date=date(2026, 3, 1)),
        BloodDonor(user_id=uuid.uuid4(), blood_group=BloodGroup.AB_NEG, city="Katni",
                   is_available=False),
        BloodDonor(user_id=user.id, blood_group=BloodGroup.O_POS, city="Jabalpur"),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.mark.asyncio
async def test_list_includes_distinct_cities(client: AsyncClient, admin_user: User, donors):
    response = await client.get("/blood-donors", headers=auth_headers(admin_user))
    data = response.json()
    assert data["total"] == 3
    assert data["cities"] == ["Jabalpur", "Katni"]


@pytest.mark.asyncio
async def test_cities_ignore_filters(client: AsyncClient, admin_user: User, donors):
    response = await client.get(
        "/blood-donors", params={"city": "Katni"}, headers=auth_headers(admin_user)
    )
    data = response.json()
    assert data["filtered"] == 1
    assert data["cities"] == ["Jabalpur", "Katni"]


@pytest.mark.asyncio
async def test_filter_by_group_and_availability(client: AsyncClient, admin_user: User, donors):
    response = await client.get(
        "/blood-donors",
        params={"blood_group": "O+", "availability": "available"},
        headers=auth_headers(admin_user),
    )
    assert response.json()["filtered"] == 2

    response = await client.get(
        "/blood-donors", params={"availability": "unavailable"}, headers=auth_headers(admin_user)
    )
    assert [d["id"] for d in response.json()["items"]] == [str(donors[1].id)]


@pytest.mark.asyncio
async def test_search_by_donor_phone(client: AsyncClient, admin_user: User, donors):
    response = await client.get(
        "/blood-donors", params={"q": "9826000001"}, headers=auth_headers(admin_user)
    )
    assert response.json()["filtered"] == 2


@pytest.mark.asyncio
async def test_toggle_availability(
    client: AsyncClient, admin_user: User, donors, db: AsyncSession
):
    response = await client.post(
        f"/blood-donors/{donors[1].id}/toggle-availability", headers=auth_headers(admin_user)
    )
    assert response.json()["message"] == "Donor marked as available"
    await db.refresh(donors[1])
    assert donors[1].is_available is True


@pytest.mark.asyncio
async def test_update_last_donation(
    client: AsyncClient, admin_user: User, donors, db: AsyncSession
):
    response = await client.patch(
        f"/blood-donors/{donors[2].id}/last-donation",
        json={"last_donation_date": "2026-09-30"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    await db.refresh(donors[2])
    assert donors[2].last_donation_date == date(2026, 9, 30)


@pytest.mark.asyncio
async def test_update_last_donation_rejects_bad_date(client: AsyncClient, admin_user: User, donors):
    response = await client.patch(
        f"/blood-donors/{donors[2].id}/last-donation",
        json={"last_donation_date": "yesterday"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_donor(client: AsyncClient, admin_user: User, donors, db: AsyncSession):
    response = await client.delete(f"/blood-donors/{donors[0].id}", headers=auth_headers(admin_user))
    assert response.status_code == 200
    assert await db.scalar(select(BloodDonor.id).where(BloodDonor.id == donors[0].id)) is None


@pytest.mark.asyncio
async def test_export_csv_fills_placeholders(client: AsyncClient, admin_user: User, donors):
    response = await client.get(
        "/blood-donors/export.csv", params={"city": "Katni"}, headers=auth_headers(admin_user)
    )
    assert response.status_code == 200
    assert "filename=blood-donors-" in response.headers["content-disposition"]
    lines = response.text.strip("\n").split("\n")
    assert lines[0] == '"Name","Phone","Email","Blood Group","City","Available","Last Donation"'
    assert lines[1] == '"N/A","N/A","N/A","AB-","Katni","No","Never"'


@pytest.mark.asyncio
async def test_export_row_count_matches_filter(client: AsyncClient, admin_user: User, donors):
    response = await client.get(
        "/blood-donors/export.csv", params={"city": "Jabalpur"}, headers=auth_headers(admin_user)
    )
    lines = response.text.strip("\n").split("\n")
    assert len(lines) == 3
    assert '"2026-03-01"' in response.text
