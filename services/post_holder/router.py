"""
services/post_holder/router.py
Office bearers shown on the organisation page. A post holder may be
linked to a verified member or stand alone.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import PostHolder, User
from shared.schemas.schemas import MessageResponse, PostHolderRequest
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.rows import row_to_dict, user_summary

router = APIRouter(prefix="/post-holders", tags=["Post Holders"])

HOLDER_USER_FIELDS = ("full_name", "phone", "photo_url")


async def _get_holder_or_404(db: AsyncSession, holder_id: UUID) -> PostHolder:
    holder = await db.scalar(select(PostHolder).where(PostHolder.id == holder_id))
    if not holder:
        raise HTTPException(status_code=404, detail="Post holder not found")
    return holder


async def _check_linked_user(db: AsyncSession, user_id: Optional[UUID]) -> None:
    if user_id is None:
        return
    if not await db.scalar(select(User.id).where(User.id == user_id)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Linked user does not exist")


@router.get("")
async def list_post_holders(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch post holders"):
        result = await db.execute(
            select(PostHolder, User)
            .outerjoin(User, User.id == PostHolder.user_id)
            .order_by(PostHolder.display_order.asc(), PostHolder.created_at.asc())
        )
        holders = [
            {**row_to_dict(h), "user": user_summary(u, HOLDER_USER_FIELDS)}
            for h, u in result.all()
        ]
    return {"items": holders, "total": len(holders), "filtered": len(holders)}


@router.get("/eligible-users")
async def eligible_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Verified members that can be linked to a post."""
    async with db_operation(db, "Failed to fetch users"):
        result = await db.execute(
            select(User.id, User.full_name, User.phone)
            .where(User.is_verified.is_(True))
            .order_by(User.full_name)
        )
        return {
            "items": [
                {"id": str(row.id), "full_name": row.full_name, "phone": row.phone}
                for row in result.all()
            ]
        }


@router.get("/{holder_id}")
async def get_post_holder(
    holder_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return row_to_dict(await _get_holder_or_404(db, holder_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post_holder(
    data: PostHolderRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to save post holder"):
        await _check_linked_user(db, data.user_id)
        holder = PostHolder(**data.model_dump())
        db.add(holder)
        await db.flush()
        record_admin_action(db, admin_id, "CREATE_POST_HOLDER", "post_holder", holder.id,
                            {"designation": data.designation})
        await db.commit()
        return row_to_dict(holder)


@router.put("/{holder_id}")
async def update_post_holder(
    holder_id: UUID,
    data: PostHolderRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to save post holder"):
        holder = await _get_holder_or_404(db, holder_id)
        await _check_linked_user(db, data.user_id)
        for field, value in data.model_dump().items():
            setattr(holder, field, value)
        record_admin_action(db, admin_id, "UPDATE_POST_HOLDER", "post_holder", holder_id)
        await db.commit()
        return row_to_dict(holder)


@router.delete("/{holder_id}", response_model=MessageResponse)
async def delete_post_holder(
    holder_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete post holder"):
        await _get_holder_or_404(db, holder_id)
        await db.execute(delete(PostHolder).where(PostHolder.id == holder_id))
        record_admin_action(db, admin_id, "DELETE_POST_HOLDER", "post_holder", holder_id)
        await db.commit()
    return MessageResponse(message="Post holder deleted successfully")
