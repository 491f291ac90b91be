"""
tests/test_donations.py
Tests for the donation ledger: stats, monthly chart, verification, export.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from services.donation.router import donation_stats, monthly_totals
from shared.models.models import Donation, User
from tests.conftest import auth_headers


@pytest_asyncio.fixture
async def donations(db: AsyncSession) -> list[Donation]:
    rows = [
        Donation(donor_name="Mahesh Agrawal", amount=Decimal("100.00"), transaction_id="TXN100",
                 donated_at=datetime(2026, 1, 10, 9, 30, tzinfo=timezone.utc)),
        Donation(donor_name="Kiran Bansal", amount=Decimal("250.00"), upi_ref="UPI250",
                 donated_at=datetime(2026, 2, 20, 18, 0, tzinfo=timezone.utc)),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.mark.asyncio
async def test_stats_cover_filtered_list(client: AsyncClient, admin_user: User, donations):
    response = await client.get("/donations", headers=auth_headers(admin_user))
    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["total"] == 350
    assert stats["count"] == 2
    assert stats["average"] == 175


@pytest.mark.asyncio
async def test_search_narrows_stats(client: AsyncClient, admin_user: User, donations):
    response = await client.get(
        "/donations", params={"q": "upi250"}, headers=auth_headers(admin_user)
    )
    data = response.json()
    assert data["filtered"] == 1
    assert data["stats"]["total"] == 250
    # chart is drawn from every donation
    assert [m["month"] for m in data["monthly"]] == ["Jan 2026", "Feb 2026"]


@pytest.mark.asyncio
async def test_date_range_is_inclusive(client: AsyncClient, admin_user: User, donations):
    response = await client.get(
        "/donations",
        params={"date_from": "2026-01-10", "date_to": "2026-01-10"},
        headers=auth_headers(admin_user),
    )
    items = response.json()["items"]
    assert [d["donor_name"] for d in items] == ["Mahesh Agrawal"]


@pytest.mark.asyncio
async def test_empty_range_gives_zero_average(client: AsyncClient, admin_user: User, donations):
    response = await client.get(
        "/donations", params={"date_from": "2030-01-01"}, headers=auth_headers(admin_user)
    )
    stats = response.json()["stats"]
    assert stats == {"total": 0, "count": 0, "average": 0, "this_month": 0}


@pytest.mark.asyncio
async def test_verify_and_unverify(
    client: AsyncClient, admin_user: User, donations, db: AsyncSession
):
    donation = donations[0]
    response = await client.patch(
        f"/donations/{donation.id}/verification",
        json={"is_verified": True, "admin_notes": "Matched bank statement"},
        headers=auth_headers(admin_user),
    )
    assert response.status_code == 200
    await db.refresh(donation)
    assert donation.is_verified is True
    assert donation.verified_by == admin_user.id
    assert donation.verified_at is not None
    assert donation.admin_notes == "Matched bank statement"

    response = await client.patch(
        f"/donations/{donation.id}/verification",
        json={"is_verified": False},
        headers=auth_headers(admin_user),
    )
    assert response.json()["message"] == "Donation marked as unverified"
    await db.refresh(donation)
    assert donation.is_verified is False
    assert donation.verified_by is None
    assert donation.verified_at is None


@pytest.mark.asyncio
async def test_delete_verified_donation(
    client: AsyncClient, admin_user: User, donations, db: AsyncSession
):
    donations[1].is_verified = True
    await db.commit()
    response = await client.delete(f"/donations/{donations[1].id}", headers=auth_headers(admin_user))
    assert response.status_code == 200

    response = await client.get("/donations", headers=auth_headers(admin_user))
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_export_donations(client: AsyncClient, admin_user: User, donations):
    response = await client.get("/donations/export.csv", headers=auth_headers(admin_user))
    lines = response.text.strip("\n").split("\n")
    assert lines[0] == '"Donor Name","Amount","Transaction ID","UPI Ref","Date"'
    assert len(lines) == 3
    assert '"Mahesh Agrawal","100.0","TXN100","N/A","2026-01-10"' in lines


def _row(amount, donated_at):
    return {"amount": amount, "donated_at": donated_at}


def test_this_month_counts_from_first_of_month():
    rows = [
        _row(40, "2026-10-01T00:00:00+00:00"),
        _row(60, "2026-10-18T12:00:00+00:00"),
        _row(500, "2026-09-30T23:59:00+00:00"),
    ]
    stats = donation_stats(rows, today=date(2026, 10, 19))
    assert stats["this_month"] == 100
    assert stats["total"] == 600


def test_monthly_keeps_latest_months_in_order():
    rows = [_row(10 * m, f"2025-{m:02d}-15T10:00:00") for m in range(1, 8)]
    rows.append(_row(5, "2025-07-01T10:00:00"))
    chart = monthly_totals(rows, 6)
    assert len(chart) == 6
    assert chart[0] == {"month": "Feb 2025", "amount": 20}
    assert chart[-1] == {"month": "Jul 2025", "amount": 75}
