"""
services/member_import/router.py
Bulk import of the approved member list from a spreadsheet.

Preview parses the upload and returns the rows that carry a phone number.
Import then writes those rows to approved_members one by one and verifies
any existing account with the same phone. Rows succeed or fail
independently; there is no rollback across rows.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import settings
from shared.middleware.auth import require_admin
from shared.models.models import ApprovedMember, User
from shared.schemas.schemas import (
    ImportMembersRequest,
    ImportPreviewResponse,
    ImportReport,
    MemberRow,
)
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.spreadsheet import UnsupportedFileType, parse_members, read_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import", tags=["Member Import"])


@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
):
    content = await file.read()
    try:
        raw_rows = read_rows(file.filename, content)
    except UnsupportedFileType as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Could not parse {file.filename}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Failed to parse file")

    total_rows, members = parse_members(raw_rows)
    logger.info(f"Parsed {file.filename}: {total_rows} rows, {len(members)} with a phone")
    return ImportPreviewResponse(total_rows=total_rows, members=members)


async def _add_approved_member(db: AsyncSession, member: MemberRow) -> None:
    """Insert and commit. A phone that is already listed counts as added."""
    db.add(ApprovedMember(
        phone=member.phone,
        full_name=member.full_name or None,
        city=member.city or None,
        gotra=member.gotra or None,
    ))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await db.scalar(select(ApprovedMember.id).where(ApprovedMember.phone == member.phone))
        if existing is None:
            raise


async def _verify_matching_user(db: AsyncSession, phone: str) -> None:
    user = await db.scalar(select(User).where(User.phone == phone))
    if user:
        user.is_verified = True
        await db.commit()


@router.post("/members", response_model=ImportReport)
async def import_members(
    data: ImportMembersRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not data.members:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No data to import")

    admin_id = current_user.id
    success, failed, errors = 0, 0, []
    for member in data.members:
        phone = member.phone.strip()
        if not phone:
            failed += 1
            errors.append("(blank): Phone number is required")
            continue
        try:
            await _add_approved_member(db, member.model_copy(update={"phone": phone}))
            await _verify_matching_user(db, phone)
            success += 1
        except Exception as e:
            await db.rollback()
            logger.error(f"Import of {phone} failed: {e}", exc_info=True)
            failed += 1
            errors.append(f"{phone}: {e}")

    logger.info(f"Member import finished: {success} imported, {failed} failed")
    async with db_operation(db, "Failed to record import"):
        record_admin_action(db, admin_id, "IMPORT_MEMBERS", "approved_member",
                            details={"success": success, "failed": failed})
        await db.commit()

    return ImportReport(
        success=success,
        failed=failed,
        errors=errors[: settings.IMPORT_ERROR_PREVIEW_LIMIT],
    )
