"""
shared/schemas/schemas.py
All Pydantic v2 request/response schemas for the console.
"""

import uuid
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from shared.models.models import Designation, EventType


# ── Base ──────────────────────────────────────────────────────

class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ── Approval Workflow ─────────────────────────────────────────

class ApprovalDecisionRequest(BaseSchema):
    """Body for approve/reject. Whether notes are mandatory depends on the entity."""
    notes: Optional[str] = Field(None, max_length=2000)


# ── Events ────────────────────────────────────────────────────

class EventCreateRequest(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: Optional[date] = None
    poster_url: Optional[str] = None
    event_type: EventType = EventType.EVENT
    is_announcement: bool = False
    announcement_text: Optional[str] = None

    _blanks = field_validator("event_date", "poster_url", mode="before")(_blank_to_none)


class EventUpdateRequest(EventCreateRequest):
    pass


# ── Blood Donors ──────────────────────────────────────────────

class LastDonationUpdateRequest(BaseSchema):
    last_donation_date: date


# ── Donations ─────────────────────────────────────────────────

class DonationVerificationRequest(BaseSchema):
    is_verified: bool
    admin_notes: Optional[str] = Field(None, max_length=2000)


# ── Post Holders ──────────────────────────────────────────────

class PostHolderRequest(BaseSchema):
    user_id: Optional[uuid.UUID] = None
    designation: Designation
    term_start: Optional[date] = None
    term_end: Optional[date] = None
    bio: Optional[str] = None
    display_order: int = 0

    _blanks = field_validator("user_id", "term_start", "term_end", "bio", mode="before")(
        _blank_to_none
    )


# ── Deletion Requests ─────────────────────────────────────────

class DeletionRequestCreate(BaseSchema):
    phone: str = Field(..., min_length=6, max_length=20)
    email: Optional[EmailStr] = None
    reason: Optional[str] = Field(None, max_length=2000)

    _blanks = field_validator("email", "reason", mode="before")(_blank_to_none)

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, v: str) -> str:
        return v.strip()


class DeletionRequestProcess(BaseSchema):
    status: Literal["approved", "rejected"]
    admin_notes: Optional[str] = Field(None, max_length=2000)


class CascadeReport(BaseSchema):
    user_found: bool
    deleted: Dict[str, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)


class DeletionProcessResponse(BaseSchema):
    message: str
    status: str
    cascade: Optional[CascadeReport] = None


# ── Member Import ─────────────────────────────────────────────

class MemberRow(BaseSchema):
    phone: str
    full_name: str = ""
    city: str = ""
    gotra: str = ""


class ImportPreviewResponse(BaseSchema):
    total_rows: int
    members: List[MemberRow]


class ImportMembersRequest(BaseSchema):
    members: List[MemberRow]


class ImportReport(BaseSchema):
    success: int
    failed: int
    errors: List[str]


# ── Uploads ───────────────────────────────────────────────────

class UploadResponse(BaseSchema):
    url: str


# ── Generic ───────────────────────────────────────────────────

class MessageResponse(BaseSchema):
    message: str
    success: bool = True
