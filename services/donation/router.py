"""
services/donation/router.py
Donation ledger.
List with summary stats and the monthly chart, manual verification,
delete and CSV export. Donations come in from the member app; nothing
here creates one.
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import settings
from shared.middleware.auth import require_admin
from shared.models.models import Donation, User
from shared.schemas.schemas import DonationVerificationRequest, MessageResponse
from shared.utils.audit import record_admin_action
from shared.utils.csv_export import csv_response
from shared.utils.errors import db_operation
from shared.utils.filters import filter_donations
from shared.utils.rows import parse_timestamp, row_to_dict

router = APIRouter(prefix="/donations", tags=["Donations"])

EXPORT_HEADERS = ["Donor Name", "Amount", "Transaction ID", "UPI Ref", "Date"]


async def _load_donations(db: AsyncSession) -> list[dict]:
    async with db_operation(db, "Failed to fetch donations"):
        result = await db.execute(select(Donation).order_by(Donation.donated_at.desc()))
        return [row_to_dict(d) for d in result.scalars()]


def donation_stats(donations: list[dict], today: Optional[date] = None) -> dict:
    today = today or datetime.now(timezone.utc).date()
    month_start = today.replace(day=1)
    total = sum(float(d["amount"] or 0) for d in donations)
    this_month = 0.0
    for d in donations:
        donated_at = parse_timestamp(d["donated_at"])
        if donated_at and donated_at.date() >= month_start:
            this_month += float(d["amount"] or 0)
    count = len(donations)
    return {
        "total": round(total, 2),
        "count": count,
        "average": round(total / count, 2) if count else 0,
        "this_month": round(this_month, 2),
    }


def monthly_totals(donations: list[dict], months: int) -> list[dict]:
    """Sum per calendar month, the most recent `months` months that have data, oldest first."""
    totals: dict[str, float] = defaultdict(float)
    for d in donations:
        donated_at = parse_timestamp(d["donated_at"])
        if donated_at:
            totals[donated_at.strftime("%Y-%m")] += float(d["amount"] or 0)

    keys = sorted(totals)[-months:] if months > 0 else []
    return [
        {
            "month": datetime.strptime(key, "%Y-%m").strftime("%b %Y"),
            "amount": round(totals[key], 2),
        }
        for key in keys
    ]


async def _get_donation_or_404(db: AsyncSession, donation_id: UUID) -> Donation:
    donation = await db.scalar(select(Donation).where(Donation.id == donation_id))
    if not donation:
        raise HTTPException(status_code=404, detail="Donation not found")
    return donation


@router.get("")
async def list_donations(
    q: Optional[str] = Query(None, description="Matches donor name, transaction id or UPI ref"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    donations = await _load_donations(db)
    filtered = filter_donations(donations, q=q, date_from=date_from, date_to=date_to)
    return {
        "items": filtered,
        "total": len(donations),
        "filtered": len(filtered),
        "stats": donation_stats(filtered),
        "monthly": monthly_totals(donations, settings.DONATION_CHART_MONTHS),
    }


@router.get("/export.csv")
async def export_donations(
    q: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    filtered = filter_donations(await _load_donations(db), q=q, date_from=date_from, date_to=date_to)
    rows = [
        [
            d["donor_name"],
            d["amount"],
            d["transaction_id"] or "N/A",
            d["upi_ref"] or "N/A",
            (d["donated_at"] or "")[:10],
        ]
        for d in filtered
    ]
    return csv_response("donations", EXPORT_HEADERS, rows)


@router.get("/{donation_id}")
async def get_donation(
    donation_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return row_to_dict(await _get_donation_or_404(db, donation_id))


@router.patch("/{donation_id}/verification", response_model=MessageResponse)
async def set_verification(
    donation_id: UUID,
    data: DonationVerificationRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update donation"):
        donation = await _get_donation_or_404(db, donation_id)
        donation.is_verified = data.is_verified
        donation.verified_by = admin_id if data.is_verified else None
        donation.verified_at = datetime.now(timezone.utc) if data.is_verified else None
        donation.admin_notes = data.admin_notes
        record_admin_action(db, admin_id, "VERIFY_DONATION" if data.is_verified else "UNVERIFY_DONATION",
                            "donation", donation_id)
        await db.commit()
    return MessageResponse(
        message=f"Donation marked as {'verified' if data.is_verified else 'unverified'}"
    )


@router.delete("/{donation_id}", response_model=MessageResponse)
async def delete_donation(
    donation_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete donation"):
        await _get_donation_or_404(db, donation_id)
        await db.execute(delete(Donation).where(Donation.id == donation_id))
        record_admin_action(db, admin_id, "DELETE_DONATION", "donation", donation_id)
        await db.commit()
    return MessageResponse(message="Donation deleted successfully")
