"""
services/settings/router.py
Admin profile, payment QR code upload and the JSON database backup.
"""

import json
import logging

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import settings
from shared.middleware.auth import require_admin
from shared.models.models import (
    ApprovedMember,
    BloodDonor,
    Donation,
    Event,
    Job,
    MatrimonialProfile,
    PostHolder,
    User,
)
from shared.schemas.schemas import UploadResponse
from shared.utils.audit import record_admin_action
from shared.utils.csv_export import dated_filename
from shared.utils.errors import db_operation
from shared.utils.rows import row_to_dict
from shared.utils.uploads import upload_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])

EXPORT_TABLES = (
    ("users", User),
    ("matrimonial_profiles", MatrimonialProfile),
    ("events", Event),
    ("jobs", Job),
    ("blood_donors", BloodDonor),
    ("donations", Donation),
    ("post_holders", PostHolder),
    ("approved_members", ApprovedMember),
)


@router.get("/profile")
async def get_profile(current_user: User = Depends(require_admin)):
    return {
        "user": row_to_dict(current_user),
        "app": {
            "name": settings.ORG_NAME,
            "support_email": settings.SUPPORT_EMAIL,
            "support_phone": settings.SUPPORT_PHONE,
            "upi_id": settings.UPI_ID,
        },
    }


@router.post("/qr-code", response_model=UploadResponse)
async def upload_qr_code(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Upload the donation QR image; the returned URL is configured in the member app."""
    admin_id = current_user.id
    url = await upload_image(file, folder=settings.CLOUDINARY_QR_FOLDER)
    async with db_operation(db, "Failed to record QR code upload"):
        record_admin_action(db, admin_id, "UPLOAD_QR_CODE", "settings", details={"url": url})
        await db.commit()
    return UploadResponse(url=url)


async def collect_tables(db: AsyncSession) -> dict:
    """One table at a time. A table that fails to load is logged and left out."""
    backup = {}
    for name, model in EXPORT_TABLES:
        try:
            result = await db.execute(select(model))
            backup[name] = [row_to_dict(r) for r in result.scalars()]
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Export of {name} failed: {e}", exc_info=True)
    return backup


@router.get("/export")
async def export_database(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    backup = await collect_tables(db)
    async with db_operation(db, "Failed to record database export"):
        record_admin_action(db, admin_id, "EXPORT_DATABASE", "settings", details={"tables": list(backup)})
        await db.commit()
    return Response(
        content=json.dumps(backup, indent=2),
        media_type="application/json",
        headers={
            "Content-Disposition": f"attachment; filename={dated_filename('database-backup', 'json')}"
        },
    )
