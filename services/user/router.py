"""
services/user/router.py
Member accounts: list/search, verification and admin role toggles,
permanent delete, CSV export.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import User
from shared.schemas.schemas import MessageResponse
from shared.utils.audit import record_admin_action
from shared.utils.csv_export import csv_response
from shared.utils.errors import db_operation
from shared.utils.filters import filter_users
from shared.utils.rows import row_to_dict

router = APIRouter(prefix="/users", tags=["Users"])

EXPORT_HEADERS = ["Name", "Phone", "Email", "City", "Occupation", "Verified", "Admin", "Joined"]


async def _load_users(db: AsyncSession) -> list[dict]:
    async with db_operation(db, "Failed to fetch users"):
        result = await db.execute(select(User).order_by(User.created_at.desc()))
        return [row_to_dict(u) for u in result.scalars()]


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("")
async def list_users(
    q: Optional[str] = Query(None, description="Matches name, phone or email"),
    verification: str = Query("all", pattern="^(all|verified|unverified)$"),
    role: str = Query("all", pattern="^(all|admin|user)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await _load_users(db)
    filtered = filter_users(users, q=q, verification=verification, role=role)
    return {"items": filtered, "total": len(users), "filtered": len(filtered)}


@router.get("/export.csv")
async def export_users(
    q: Optional[str] = Query(None),
    verification: str = Query("all", pattern="^(all|verified|unverified)$"),
    role: str = Query("all", pattern="^(all|admin|user)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Download the currently filtered users as CSV."""
    filtered = filter_users(await _load_users(db), q=q, verification=verification, role=role)
    rows = [
        [
            u["full_name"] or "N/A",
            u["phone"],
            u["email"] or "N/A",
            u["city"] or "N/A",
            u["occupation"] or "N/A",
            "Yes" if u["is_verified"] else "No",
            "Yes" if u["is_admin"] else "No",
            (u["created_at"] or "")[:10],
        ]
        for u in filtered
    ]
    return csv_response("users", EXPORT_HEADERS, rows)


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return row_to_dict(await _get_user_or_404(db, user_id))


@router.post("/{user_id}/toggle-verification", response_model=MessageResponse)
async def toggle_verification(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update verification status"):
        user = await _get_user_or_404(db, user_id)
        user.is_verified = not user.is_verified
        verified = user.is_verified
        record_admin_action(db, admin_id, "TOGGLE_USER_VERIFICATION", "user", user_id,
                            {"is_verified": verified})
        await db.commit()
    return MessageResponse(message=f"User {'verified' if verified else 'unverified'} successfully")


@router.post("/{user_id}/toggle-admin", response_model=MessageResponse)
async def toggle_admin(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update admin status"):
        user = await _get_user_or_404(db, user_id)
        user.is_admin = not user.is_admin
        granted = user.is_admin
        record_admin_action(db, admin_id, "TOGGLE_USER_ADMIN", "user", user_id,
                            {"is_admin": granted})
        await db.commit()
    return MessageResponse(message=f"Admin status {'granted' if granted else 'revoked'} successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete a user row. There is no undo."""
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete user"):
        await _get_user_or_404(db, user_id)
        await db.execute(delete(User).where(User.id == user_id))
        record_admin_action(db, admin_id, "DELETE_USER", "user", user_id)
        await db.commit()
    return MessageResponse(message="User deleted successfully")
