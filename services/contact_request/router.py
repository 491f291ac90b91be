"""
services/contact_request/router.py
Read-only view of matrimonial contact requests between members.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import ContactRequest, ContactRequestStatus, User
from shared.utils.errors import db_operation
from shared.utils.filters import count_by_status, filter_by_status
from shared.utils.rows import row_to_dict, user_summary

router = APIRouter(prefix="/contact-requests", tags=["Contact Requests"])

STATUSES = [s.value for s in ContactRequestStatus]


def _base_query():
    return select(ContactRequest, User).outerjoin(User, User.id == ContactRequest.requester_id)


@router.get("")
async def list_contact_requests(
    status: str = Query("all", pattern="^(all|pending|accepted|rejected)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch contact requests"):
        result = await db.execute(_base_query().order_by(ContactRequest.created_at.desc()))
        requests = [
            {**row_to_dict(req), "requester": user_summary(requester)}
            for req, requester in result.all()
        ]

    filtered = filter_by_status(requests, status)
    return {
        "items": filtered,
        "total": len(requests),
        "filtered": len(filtered),
        "stats": count_by_status(requests, STATUSES),
    }


@router.get("/{request_id}")
async def get_contact_request(
    request_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    row = (await db.execute(_base_query().where(ContactRequest.id == request_id))).first()
    if not row:
        raise HTTPException(status_code=404, detail="Contact request not found")
    req, requester = row
    return {**row_to_dict(req), "requester": user_summary(requester)}
