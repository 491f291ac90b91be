"""
services/matrimonial/router.py
Matrimonial profile review queue.
Profiles arrive pending from the member app; admins approve, reject
(with a reason) or delete them.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import MatrimonialProfile, User
from shared.schemas.schemas import ApprovalDecisionRequest, MessageResponse
from shared.utils.approval import apply_approval, apply_rejection, check_rejection_notes
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.filters import filter_matrimonial
from shared.utils.rows import row_to_dict, user_summary

router = APIRouter(prefix="/matrimonial", tags=["Matrimonial"])


def _base_query():
    return (
        select(MatrimonialProfile, User)
        .outerjoin(User, User.id == MatrimonialProfile.user_id)
    )


def _serialize(profile: MatrimonialProfile, owner: Optional[User]) -> dict:
    return {**row_to_dict(profile), "user": user_summary(owner)}


async def _get_profile_or_404(db: AsyncSession, profile_id: UUID) -> MatrimonialProfile:
    profile = await db.scalar(select(MatrimonialProfile).where(MatrimonialProfile.id == profile_id))
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("")
async def list_profiles(
    q: Optional[str] = Query(None, description="Matches owner name or city"),
    status: str = Query("pending", pattern="^(all|pending|approved|rejected)$"),
    gender: str = Query("all"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch profiles"):
        result = await db.execute(_base_query().order_by(MatrimonialProfile.created_at.desc()))
        profiles = [_serialize(row[0], row[1]) for row in result.all()]

    filtered = filter_matrimonial(profiles, q=q, status=status, gender=gender)
    return {"items": filtered, "total": len(profiles), "filtered": len(filtered)}


@router.get("/{profile_id}")
async def get_profile(
    profile_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(_base_query().where(MatrimonialProfile.id == profile_id))
    row = result.first()
    if not row:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _serialize(row[0], row[1])


@router.post("/{profile_id}/approve", response_model=MessageResponse)
async def approve_profile(
    profile_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to approve profile"):
        profile = await _get_profile_or_404(db, profile_id)
        apply_approval(profile, admin_id, data.notes)
        record_admin_action(db, admin_id, "APPROVE_MATRIMONIAL", "matrimonial_profile", profile_id,
                            {"notes": data.notes})
        await db.commit()
    return MessageResponse(message="Profile approved successfully")


@router.post("/{profile_id}/reject", response_model=MessageResponse)
async def reject_profile(
    profile_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reject with a mandatory reason, stored as approval_notes."""
    check_rejection_notes(data.notes, required=True)
    admin_id = current_user.id
    async with db_operation(db, "Failed to reject profile"):
        profile = await _get_profile_or_404(db, profile_id)
        apply_rejection(profile, admin_id, data.notes)
        record_admin_action(db, admin_id, "REJECT_MATRIMONIAL", "matrimonial_profile", profile_id,
                            {"reason": data.notes})
        await db.commit()
    return MessageResponse(message="Profile rejected")


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(
    profile_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete profile"):
        await _get_profile_or_404(db, profile_id)
        await db.execute(delete(MatrimonialProfile).where(MatrimonialProfile.id == profile_id))
        record_admin_action(db, admin_id, "DELETE_MATRIMONIAL", "matrimonial_profile", profile_id)
        await db.commit()
    return MessageResponse(message="Profile deleted successfully")
