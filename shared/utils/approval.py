"""
shared/utils/approval.py
The pending → approved | rejected transition shared by matrimonial
profiles, jobs and events.

Only the status columns are touched here; the caller loads the record,
writes the audit entry and commits.
"""

import uuid
from typing import Optional

from fastapi import HTTPException, status

from shared.models.models import ApprovalStatus

REJECTION_REASON_REQUIRED = "Please provide a reason for rejection"


def apply_approval(record, admin_id: uuid.UUID, notes: Optional[str] = None, **side_flags) -> None:
    """Approve record. side_flags are extra columns set alongside, e.g. is_visible=True."""
    record.status = ApprovalStatus.APPROVED
    record.approved_by = admin_id
    if notes and notes.strip():
        record.approval_notes = notes.strip()
    for column, value in side_flags.items():
        setattr(record, column, value)


def check_rejection_notes(notes: Optional[str], required: bool) -> None:
    """Runs before any query so a missing reason never reaches the database."""
    if required and not (notes and notes.strip()):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=REJECTION_REASON_REQUIRED)


def apply_rejection(record, admin_id: uuid.UUID, notes: Optional[str] = None) -> None:
    record.status = ApprovalStatus.REJECTED
    record.approved_by = admin_id
    if notes and notes.strip():
        record.approval_notes = notes.strip()
