"""
services/admin/router.py
Console landing page and the admin audit log.

The dashboard runs count-only queries one after another on the request
session; donations are fetched as bare amounts and summed here.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import settings
from shared.middleware.auth import require_admin
from shared.models.models import (
    AdminLog,
    ApprovalStatus,
    Donation,
    Event,
    Job,
    MatrimonialProfile,
    User,
)
from shared.utils.errors import db_operation
from shared.utils.rows import row_to_dict

router = APIRouter(tags=["Admin"])


async def _count(db: AsyncSession, model, *criteria) -> int:
    return await db.scalar(select(func.count(model.id)).where(*criteria)) or 0


async def _recent(db: AsyncSession, model, order_column, limit: int) -> list[dict]:
    result = await db.execute(select(model).order_by(order_column.desc()).limit(limit))
    return [row_to_dict(r) for r in result.scalars()]


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    limit = settings.RECENT_ACTIVITY_LIMIT
    async with db_operation(db, "Failed to load dashboard"):
        total_users = await _count(db, User)
        verified_users = await _count(db, User, User.is_verified.is_(True))
        total_matrimonial = await _count(db, MatrimonialProfile)
        pending_matrimonial = await _count(
            db, MatrimonialProfile, MatrimonialProfile.status == ApprovalStatus.PENDING
        )
        total_events = await _count(db, Event)
        pending_events = await _count(db, Event, Event.status == ApprovalStatus.PENDING)
        total_jobs = await _count(db, Job)
        pending_jobs = await _count(db, Job, Job.status == ApprovalStatus.PENDING)

        amounts = (await db.execute(select(Donation.amount))).scalars().all()
        total_donations = round(sum(float(a or 0) for a in amounts), 2)

        recent_activity = {
            "users": await _recent(db, User, User.created_at, limit),
            "events": await _recent(db, Event, Event.created_at, limit),
            "donations": await _recent(db, Donation, Donation.donated_at, limit),
        }

    return {
        "stats": {
            "total_users": total_users,
            "verified_users": verified_users,
            "total_matrimonial": total_matrimonial,
            "pending_matrimonial": pending_matrimonial,
            "total_events": total_events,
            "pending_events": pending_events,
            "total_jobs": total_jobs,
            "pending_jobs": pending_jobs,
            "pending_approvals": pending_matrimonial + pending_events + pending_jobs,
            "total_donations": total_donations,
        },
        "charts": {
            "approvals": [
                {"name": "Matrimonial", "value": pending_matrimonial},
                {"name": "Events", "value": pending_events},
                {"name": "Jobs", "value": pending_jobs},
            ],
            "users": [
                {"name": "Verified", "value": verified_users},
                {"name": "Unverified", "value": total_users - verified_users},
            ],
        },
        "recent_activity": recent_activity,
    }


# ── Audit Log ─────────────────────────────────────────────────────────────────

@router.get("/audit-logs")
async def get_audit_logs(
    action: Optional[str] = Query(None, description="Filter by action e.g. APPROVE_JOB"),
    target_type: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Append-only; newest first."""
    criteria = []
    if action:
        criteria.append(AdminLog.action == action.upper())
    if target_type:
        criteria.append(AdminLog.target_type == target_type)

    async with db_operation(db, "Failed to fetch audit logs"):
        total = await db.scalar(select(func.count(AdminLog.id)).where(*criteria)) or 0
        result = await db.execute(
            select(AdminLog, User)
            .outerjoin(User, User.id == AdminLog.admin_id)
            .where(*criteria)
            .order_by(AdminLog.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = result.all()

    return {
        "items": [
            {
                **row_to_dict(log),
                "admin_name": admin.full_name if admin else None,
                "admin_phone": admin.phone if admin else None,
            }
            for log, admin in rows
        ],
        "total": total,
        "page": page,
        "page_size": page_size,
    }
