"""
services/job/router.py
Job posting moderation: list, approve, reject with reason, delete.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import Job, User
from shared.schemas.schemas import ApprovalDecisionRequest, MessageResponse
from shared.utils.approval import apply_approval, apply_rejection, check_rejection_notes
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.filters import filter_jobs
from shared.utils.rows import row_to_dict, user_summary

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _base_query():
    return select(Job, User).outerjoin(User, User.id == Job.posted_by)


async def _get_job_or_404(db: AsyncSession, job_id: UUID) -> Job:
    job = await db.scalar(select(Job).where(Job.id == job_id))
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("")
async def list_jobs(
    q: Optional[str] = Query(None, description="Matches title or location"),
    status: str = Query("pending", pattern="^(all|pending|approved|rejected)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch jobs"):
        result = await db.execute(_base_query().order_by(Job.created_at.desc()))
        jobs = [{**row_to_dict(job), "user": user_summary(poster)} for job, poster in result.all()]

    filtered = filter_jobs(jobs, q=q, status=status)
    return {"items": filtered, "total": len(jobs), "filtered": len(filtered)}


@router.get("/{job_id}")
async def get_job(
    job_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    row = (await db.execute(_base_query().where(Job.id == job_id))).first()
    if not row:
        raise HTTPException(status_code=404, detail="Job not found")
    job, poster = row
    return {**row_to_dict(job), "user": user_summary(poster)}


@router.post("/{job_id}/approve", response_model=MessageResponse)
async def approve_job(
    job_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to approve job"):
        job = await _get_job_or_404(db, job_id)
        apply_approval(job, admin_id, data.notes)
        record_admin_action(db, admin_id, "APPROVE_JOB", "job", job_id)
        await db.commit()
    return MessageResponse(message="Job approved successfully")


@router.post("/{job_id}/reject", response_model=MessageResponse)
async def reject_job(
    job_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    check_rejection_notes(data.notes, required=True)
    admin_id = current_user.id
    async with db_operation(db, "Failed to reject job"):
        job = await _get_job_or_404(db, job_id)
        apply_rejection(job, admin_id, data.notes)
        record_admin_action(db, admin_id, "REJECT_JOB", "job", job_id, {"reason": data.notes})
        await db.commit()
    return MessageResponse(message="Job rejected")


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete job"):
        await _get_job_or_404(db, job_id)
        await db.execute(delete(Job).where(Job.id == job_id))
        record_admin_action(db, admin_id, "DELETE_JOB", "job", job_id)
        await db.commit()
    return MessageResponse(message="Job deleted successfully")
