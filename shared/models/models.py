"""
shared/models/models.py
All SQLAlchemy ORM models for the community platform.
The console reads and writes these tables; end users create most rows
through the consumer app.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum as PyEnum
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from config.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(enum_cls: type[PyEnum]) -> Enum:
    """Store enum values (lowercase strings) rather than member names."""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=32,
    )


# ── Enumerations ──────────────────────────────────────────────

class ApprovalStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContactRequestStatus(str, PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class DeletionRequestStatus(str, PyEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class EventType(str, PyEnum):
    EVENT = "event"
    FESTIVAL = "festival"
    MEETING = "meeting"


class BloodGroup(str, PyEnum):
    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"


class Designation(str, PyEnum):
    PRESIDENT = "President"
    SENIOR_VICE_PRESIDENT = "Senior Vice President"
    VICE_PRESIDENT = "Vice President"
    WOMEN_VICE_PRESIDENT = "Women Vice President"
    SECRETARY = "Secretary"
    TREASURER = "Treasurer"
    JOINT_SECRETARY = "Joint Secretary"
    PUBLICITY_SECRETARY = "Secretary (Publicity)"
    DEPUTY_SECRETARY = "Deputy Secretary"


# ── Mixins ────────────────────────────────────────────────────

class UUIDPrimaryKeyMixin:
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Adds created_at and updated_at to any model."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )


class ApprovalMixin:
    """Columns shared by every record that goes through admin review."""
    status: Mapped[ApprovalStatus] = mapped_column(
        _enum(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False
    )
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    approval_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# ── Models ────────────────────────────────────────────────────

class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Member account. Phone is the login key; is_admin gates the console."""
    __tablename__ = "users"

    google_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    privacy_settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    __table_args__ = (Index("ix_users_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<User {self.phone} admin={self.is_admin}>"


class MatrimonialProfile(UUIDPrimaryKeyMixin, ApprovalMixin, TimestampMixin, Base):
    __tablename__ = "matrimonial_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    education: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    occupation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gotra: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    family_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    photos: Mapped[List[str]] = mapped_column(JSON, default=list)
    horoscope_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_matrimonial_user_id", "user_id"),)


class Event(UUIDPrimaryKeyMixin, ApprovalMixin, TimestampMixin, Base):
    """Community event or announcement. Admin-created events skip review."""
    __tablename__ = "events"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    poster_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    posted_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    event_type: Mapped[EventType] = mapped_column(
        _enum(EventType), default=EventType.EVENT, nullable=False
    )
    is_announcement: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    announcement_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (Index("ix_events_posted_by", "posted_by"),)


class Job(UUIDPrimaryKeyMixin, ApprovalMixin, TimestampMixin, Base):
    __tablename__ = "jobs"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_info: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    posted_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (Index("ix_jobs_posted_by", "posted_by"),)


class BloodDonor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "blood_donors"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    blood_group: Mapped[BloodGroup] = mapped_column(_enum(BloodGroup), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_donation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class Donation(UUIDPrimaryKeyMixin, Base):
    """A recorded payment. Amounts are in rupees."""
    __tablename__ = "donations"

    donor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    upi_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    receipt_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    donated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_donations_donated_at", "donated_at"),)


class PostHolder(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Office-bearer listing, optionally linked to a member account."""
    __tablename__ = "post_holders"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    designation: Mapped[Designation] = mapped_column(_enum(Designation), nullable=False)
    term_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    term_end: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    display_order: Mapped[Optional[int]] = mapped_column(Integer, default=0, nullable=True)


class ContactRequest(UUIDPrimaryKeyMixin, Base):
    """A member asking to see a matrimonial profile's contact details."""
    __tablename__ = "contact_requests"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("matrimonial_profiles.id", ondelete="CASCADE"), nullable=False
    )
    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[ContactRequestStatus] = mapped_column(
        _enum(ContactRequestStatus), default=ContactRequestStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class DeletionRequest(UUIDPrimaryKeyMixin, Base):
    """User-initiated account erasure, actioned by an admin."""
    __tablename__ = "deletion_requests"

    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[DeletionRequestStatus] = mapped_column(
        _enum(DeletionRequestStatus), default=DeletionRequestStatus.PENDING, nullable=False
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ApprovedMember(UUIDPrimaryKeyMixin, Base):
    """Pre-vetted member list; matching sign-ups are auto-verified."""
    __tablename__ = "approved_members"

    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gotra: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class AdminLog(UUIDPrimaryKeyMixin, Base):
    """Append-only log of admin actions."""
    __tablename__ = "admin_logs"

    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    target_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    target_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_admin_logs_admin_id", "admin_id"),
        Index("ix_admin_logs_created_at", "created_at"),
    )
