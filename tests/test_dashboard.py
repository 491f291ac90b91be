"""
tests/test_dashboard.py
Tests for the dashboard aggregate and the audit log listing.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shared.models.models import (
    ApprovalStatus, Donation, Event, Job, MatrimonialProfile, User,
)
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_dashboard_empty(client: AsyncClient, admin_user: User):
    response = await client.get("/dashboard", headers=auth_headers(admin_user))
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["total_users"] == 1
    assert data["stats"]["pending_approvals"] == 0
    assert data["stats"]["total_donations"] == 0
    assert data["charts"]["users"] == [
        {"name": "Verified", "value": 1},
        {"name": "Unverified", "value": 0},
    ]


@pytest.mark.asyncio
async def test_dashboard_counts(
    client: AsyncClient, admin_user: User, user: User, db: AsyncSession
):
    db.add_all([
        User(phone="9826000010", full_name="New Member"),
        MatrimonialProfile(user_id=user.id, gender="Female"),
        MatrimonialProfile(user_id=user.id, gender="Male", status=ApprovalStatus.APPROVED),
        Event(title="Holi Milan"),
        Job(title="Clerk"),
        Job(title="Peon"),
        Job(title="Guard", status=ApprovalStatus.REJECTED),
        Donation(donor_name="A", amount=Decimal("501.00")),
        Donation(donor_name="B", amount=Decimal("1100.50")),
    ])
    await db.commit()

    response = await client.get("/dashboard", headers=auth_headers(admin_user))
    data = response.json()
    stats = data["stats"]
    assert stats["total_users"] == 3
    assert stats["verified_users"] == 2
    assert stats["total_matrimonial"] == 2
    assert stats["pending_matrimonial"] == 1
    assert stats["pending_events"] == 1
    assert stats["total_jobs"] == 3
    assert stats["pending_jobs"] == 2
    assert stats["pending_approvals"] == 4
    assert stats["total_donations"] == 1601.5

    assert data["charts"]["approvals"] == [
        {"name": "Matrimonial", "value": 1},
        {"name": "Events", "value": 1},
        {"name": "Jobs", "value": 2},
    ]


@pytest.mark.asyncio
async def test_recent_activity_is_capped(client: AsyncClient, admin_user: User, db: AsyncSession):
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    db.add_all([
        Donation(donor_name=f"Donor {i}", amount=Decimal("10"), donated_at=start + timedelta(days=i))
        for i in range(8)
    ])
    await db.commit()

    response = await client.get("/dashboard", headers=auth_headers(admin_user))
    recent = response.json()["recent_activity"]["donations"]
    assert len(recent) == 5
    assert recent[0]["donor_name"] == "Donor 7"


@pytest.mark.asyncio
async def test_audit_log_lists_actions(
    client: AsyncClient, admin_user: User, user: User
):
    await client.post(f"/users/{user.id}/toggle-verification", headers=auth_headers(admin_user))
    await client.post(f"/users/{user.id}/toggle-admin", headers=auth_headers(admin_user))

    response = await client.get("/audit-logs", headers=auth_headers(admin_user))
    data = response.json()
    assert data["total"] == 2
    assert {entry["action"] for entry in data["items"]} == {
        "TOGGLE_USER_VERIFICATION", "TOGGLE_USER_ADMIN",
    }
    assert data["items"][0]["admin_name"] == "Sabha Admin"

    response = await client.get(
        "/audit-logs", params={"action": "toggle_user_admin"}, headers=auth_headers(admin_user)
    )
    assert response.json()["total"] == 1
