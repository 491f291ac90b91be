"""
services/blood_donor/router.py
Blood donor registry: availability toggle, last donation date, CSV export.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import BloodDonor, User
from shared.schemas.schemas import LastDonationUpdateRequest, MessageResponse
from shared.utils.audit import record_admin_action
from shared.utils.csv_export import csv_response
from shared.utils.errors import db_operation
from shared.utils.filters import filter_blood_donors
from shared.utils.rows import row_to_dict, user_summary

router = APIRouter(prefix="/blood-donors", tags=["Blood Donors"])

EXPORT_HEADERS = ["Name", "Phone", "Email", "Blood Group", "City", "Available", "Last Donation"]
DONOR_USER_FIELDS = ("full_name", "phone", "email")


async def _load_donors(db: AsyncSession) -> list[dict]:
    async with db_operation(db, "Failed to fetch blood donors"):
        result = await db.execute(
            select(BloodDonor, User)
            .outerjoin(User, User.id == BloodDonor.user_id)
            .order_by(BloodDonor.created_at.desc())
        )
        return [
            {**row_to_dict(donor), "user": user_summary(user, DONOR_USER_FIELDS)}
            for donor, user in result.all()
        ]


def _distinct_cities(donors: list[dict]) -> list[str]:
    return sorted({d["city"] for d in donors if d.get("city")})


async def _get_donor_or_404(db: AsyncSession, donor_id: UUID) -> BloodDonor:
    donor = await db.scalar(select(BloodDonor).where(BloodDonor.id == donor_id))
    if not donor:
        raise HTTPException(status_code=404, detail="Donor not found")
    return donor


@router.get("")
async def list_donors(
    q: Optional[str] = Query(None, description="Matches donor name, phone or city"),
    blood_group: str = Query("all"),
    city: str = Query("all"),
    availability: str = Query("all", pattern="^(all|available|unavailable)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """The city dropdown is built from every donor, not just the filtered ones."""
    donors = await _load_donors(db)
    filtered = filter_blood_donors(
        donors, q=q, blood_group=blood_group, city=city, availability=availability
    )
    return {
        "items": filtered,
        "total": len(donors),
        "filtered": len(filtered),
        "cities": _distinct_cities(donors),
    }


@router.get("/export.csv")
async def export_donors(
    q: Optional[str] = Query(None),
    blood_group: str = Query("all"),
    city: str = Query("all"),
    availability: str = Query("all", pattern="^(all|available|unavailable)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    filtered = filter_blood_donors(
        await _load_donors(db), q=q, blood_group=blood_group, city=city, availability=availability
    )
    rows = []
    for d in filtered:
        user = d["user"] or {}
        rows.append([
            user.get("full_name") or "N/A",
            user.get("phone") or "N/A",
            user.get("email") or "N/A",
            d["blood_group"],
            d["city"],
            "Yes" if d["is_available"] else "No",
            d["last_donation_date"] or "Never",
        ])
    return csv_response("blood-donors", EXPORT_HEADERS, rows)


@router.get("/{donor_id}")
async def get_donor(
    donor_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    row = (await db.execute(
        select(BloodDonor, User).outerjoin(User, User.id == BloodDonor.user_id).where(BloodDonor.id == donor_id)
    )).first()
    if not row:
        raise HTTPException(status_code=404, detail="Donor not found")
    donor, user = row
    return {**row_to_dict(donor), "user": user_summary(user, DONOR_USER_FIELDS)}


@router.post("/{donor_id}/toggle-availability", response_model=MessageResponse)
async def toggle_availability(
    donor_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update availability"):
        donor = await _get_donor_or_404(db, donor_id)
        donor.is_available = not donor.is_available
        available = donor.is_available
        record_admin_action(db, admin_id, "TOGGLE_DONOR_AVAILABILITY", "blood_donor", donor_id,
                            {"is_available": available})
        await db.commit()
    return MessageResponse(message=f"Donor marked as {'available' if available else 'unavailable'}")


@router.patch("/{donor_id}/last-donation", response_model=MessageResponse)
async def update_last_donation(
    donor_id: UUID,
    data: LastDonationUpdateRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update last donation date"):
        donor = await _get_donor_or_404(db, donor_id)
        donor.last_donation_date = data.last_donation_date
        record_admin_action(db, admin_id, "UPDATE_LAST_DONATION", "blood_donor", donor_id,
                            {"last_donation_date": data.last_donation_date.isoformat()})
        await db.commit()
    return MessageResponse(message="Last donation date updated")


@router.delete("/{donor_id}", response_model=MessageResponse)
async def delete_donor(
    donor_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete donor"):
        await _get_donor_or_404(db, donor_id)
        await db.execute(delete(BloodDonor).where(BloodDonor.id == donor_id))
        record_admin_action(db, admin_id, "DELETE_BLOOD_DONOR", "blood_donor", donor_id)
        await db.commit()
    return MessageResponse(message="Donor removed successfully")
