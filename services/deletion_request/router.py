"""
services/deletion_request/router.py
Account deletion requests.

Members file a request through the public form; an admin approves or
rejects it. Approval purges the member's data table by table. The purge is
best-effort: each table is deleted in its own transaction and a failure in
one table is reported without stopping the others. Nothing is rolled back
across tables.
"""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import (
    BloodDonor,
    ContactRequest,
    DeletionRequest,
    DeletionRequestStatus,
    Event,
    Job,
    MatrimonialProfile,
    User,
)
from shared.schemas.schemas import (
    CascadeReport,
    DeletionProcessResponse,
    DeletionRequestCreate,
    DeletionRequestProcess,
    MessageResponse,
)
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.filters import count_by_status, filter_by_status
from shared.utils.rows import row_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deletion-requests", tags=["Deletion Requests"])
public_router = APIRouter(tags=["Account Deletion"])

STATUSES = ["pending", "approved", "rejected"]

# Dependents first, the user row last.
PURGE_ORDER = (
    ("matrimonial_profiles", MatrimonialProfile, MatrimonialProfile.user_id),
    ("events", Event, Event.posted_by),
    ("jobs", Job, Job.posted_by),
    ("blood_donors", BloodDonor, BloodDonor.user_id),
    ("contact_requests", ContactRequest, ContactRequest.requester_id),
    ("users", User, User.id),
)


async def purge_user_data(db: AsyncSession, phone: str) -> CascadeReport:
    """Delete everything owned by the user with this phone."""
    user_id = await db.scalar(select(User.id).where(User.phone == phone))
    if user_id is None:
        return CascadeReport(user_found=False, errors=["User not found"])

    report = CascadeReport(user_found=True)
    for table, model, column in PURGE_ORDER:
        try:
            result = await db.execute(delete(model).where(column == user_id))
            await db.commit()
            report.deleted[table] = result.rowcount or 0
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Purge of {table} for user {user_id} failed: {e}", exc_info=True)
            report.deleted[table] = 0
            report.errors.append(f"{table}: {e}")
    return report


@public_router.post(
    "/account-deletion",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request account deletion",
)
async def request_account_deletion(
    data: DeletionRequestCreate,
    db: AsyncSession = Depends(get_db),
):
    """Public form; no sign-in needed. Only records the request."""
    async with db_operation(db, "Failed to submit deletion request"):
        db.add(DeletionRequest(phone=data.phone, email=data.email, reason=data.reason))
        await db.commit()
    logger.info(f"Account deletion requested for phone ending {data.phone[-4:]}")
    return MessageResponse(message="Your deletion request has been submitted")


@router.get("")
async def list_deletion_requests(
    status: str = Query("pending", pattern="^(all|pending|approved|rejected|completed)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch deletion requests"):
        result = await db.execute(select(DeletionRequest).order_by(DeletionRequest.requested_at.desc()))
        requests = [row_to_dict(r) for r in result.scalars()]

    filtered = filter_by_status(requests, status)
    return {
        "items": filtered,
        "total": len(requests),
        "filtered": len(filtered),
        "stats": count_by_status(requests, STATUSES),
    }


@router.get("/{request_id}")
async def get_deletion_request(
    request_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    req = await db.scalar(select(DeletionRequest).where(DeletionRequest.id == request_id))
    if not req:
        raise HTTPException(status_code=404, detail="Deletion request not found")
    return row_to_dict(req)


@router.post("/{request_id}/process", response_model=DeletionProcessResponse)
async def process_deletion_request(
    request_id: UUID,
    data: DeletionRequestProcess,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Record the decision, then purge on approval.
    The decision is committed before the purge starts, so it stands even
    when some tables fail to purge.
    """
    admin_id: uuid.UUID = current_user.id
    async with db_operation(db, "Failed to process request"):
        req = await db.scalar(select(DeletionRequest).where(DeletionRequest.id == request_id))
        if not req:
            raise HTTPException(status_code=404, detail="Deletion request not found")
        req.status = DeletionRequestStatus(data.status)
        req.processed_at = datetime.now(timezone.utc)
        req.processed_by = admin_id
        req.admin_notes = data.admin_notes
        phone = req.phone
        record_admin_action(db, admin_id, f"{data.status.upper()}_DELETION_REQUEST",
                            "deletion_request", request_id)
        await db.commit()

    cascade = None
    if data.status == DeletionRequestStatus.APPROVED.value:
        cascade = await purge_user_data(db, phone)
        if cascade.errors:
            logger.warning(f"Deletion request {request_id} purged with errors: {cascade.errors}")
        else:
            logger.info(f"Deletion request {request_id} purged: {cascade.deleted}")
        async with db_operation(db, "Failed to process request"):
            record_admin_action(db, admin_id, "PURGE_USER_DATA", "deletion_request", request_id,
                                cascade.model_dump())
            await db.commit()

    return DeletionProcessResponse(
        message=f"Request {data.status} successfully",
        status=data.status,
        cascade=cascade,
    )
