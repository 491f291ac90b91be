"""
services/event/router.py
Events and announcements.

Member submissions arrive pending and hidden; approving one also makes it
visible. Events created here by an admin skip the queue entirely: they are
approved and visible from the start.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from shared.middleware.auth import require_admin
from shared.models.models import ApprovalStatus, Event, User
from shared.schemas.schemas import (
    ApprovalDecisionRequest,
    EventCreateRequest,
    EventUpdateRequest,
    MessageResponse,
    UploadResponse,
)
from shared.utils.approval import apply_approval, apply_rejection, check_rejection_notes
from shared.utils.audit import record_admin_action
from shared.utils.errors import db_operation
from shared.utils.filters import filter_events
from shared.utils.rows import row_to_dict, user_summary
from shared.utils.uploads import upload_image

router = APIRouter(prefix="/events", tags=["Events"])


def _base_query():
    return select(Event, User).outerjoin(User, User.id == Event.posted_by)


async def _get_event_or_404(db: AsyncSession, event_id: UUID) -> Event:
    event = await db.scalar(select(Event).where(Event.id == event_id))
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("")
async def list_events(
    q: Optional[str] = Query(None, description="Matches title or poster name"),
    status: str = Query("pending", pattern="^(all|pending|approved|rejected)$"),
    event_type: str = Query("all", alias="type", pattern="^(all|event|festival|meeting|announcement)$"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    async with db_operation(db, "Failed to fetch events"):
        result = await db.execute(_base_query().order_by(Event.created_at.desc()))
        events = [{**row_to_dict(e), "user": user_summary(poster)} for e, poster in result.all()]

    filtered = filter_events(events, q=q, status=status, event_type=event_type)
    return {"items": filtered, "total": len(events), "filtered": len(filtered)}


# Declared before /{event_id} so "poster" is not parsed as an id.
@router.post("/poster", response_model=UploadResponse)
async def upload_poster(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
):
    url = await upload_image(file)
    return UploadResponse(url=url)


@router.get("/{event_id}")
async def get_event(
    event_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    row = (await db.execute(_base_query().where(Event.id == event_id))).first()
    if not row:
        raise HTTPException(status_code=404, detail="Event not found")
    event, poster = row
    return {**row_to_dict(event), "user": user_summary(poster)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreateRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to save event"):
        event = Event(
            **data.model_dump(),
            posted_by=admin_id,
            status=ApprovalStatus.APPROVED,
            approved_by=admin_id,
            is_visible=True,
        )
        db.add(event)
        await db.flush()
        record_admin_action(db, admin_id, "CREATE_EVENT", "event", event.id, {"title": data.title})
        await db.commit()
        return row_to_dict(event)


@router.put("/{event_id}")
async def update_event(
    event_id: UUID,
    data: EventUpdateRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Overwrite the editable fields. Status and visibility stay as they are."""
    admin_id = current_user.id
    async with db_operation(db, "Failed to save event"):
        event = await _get_event_or_404(db, event_id)
        for field, value in data.model_dump().items():
            setattr(event, field, value)
        record_admin_action(db, admin_id, "UPDATE_EVENT", "event", event_id)
        await db.commit()
        return row_to_dict(event)


@router.post("/{event_id}/approve", response_model=MessageResponse)
async def approve_event(
    event_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to approve event"):
        event = await _get_event_or_404(db, event_id)
        apply_approval(event, admin_id, data.notes, is_visible=True)
        record_admin_action(db, admin_id, "APPROVE_EVENT", "event", event_id)
        await db.commit()
    return MessageResponse(message="Event approved successfully")


@router.post("/{event_id}/reject", response_model=MessageResponse)
async def reject_event(
    event_id: UUID,
    data: ApprovalDecisionRequest = ApprovalDecisionRequest(),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reason is optional for events."""
    check_rejection_notes(data.notes, required=False)
    admin_id = current_user.id
    async with db_operation(db, "Failed to reject event"):
        event = await _get_event_or_404(db, event_id)
        apply_rejection(event, admin_id, data.notes)
        record_admin_action(db, admin_id, "REJECT_EVENT", "event", event_id, {"reason": data.notes})
        await db.commit()
    return MessageResponse(message="Event rejected")


@router.post("/{event_id}/toggle-featured", response_model=MessageResponse)
async def toggle_featured(
    event_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update event"):
        event = await _get_event_or_404(db, event_id)
        event.is_featured = not event.is_featured
        featured = event.is_featured
        record_admin_action(db, admin_id, "TOGGLE_EVENT_FEATURED", "event", event_id,
                            {"is_featured": featured})
        await db.commit()
    return MessageResponse(message=f"Event {'featured' if featured else 'unfeatured'} successfully")


@router.post("/{event_id}/toggle-visibility", response_model=MessageResponse)
async def toggle_visibility(
    event_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to update event"):
        event = await _get_event_or_404(db, event_id)
        event.is_visible = not event.is_visible
        visible = event.is_visible
        record_admin_action(db, admin_id, "TOGGLE_EVENT_VISIBILITY", "event", event_id,
                            {"is_visible": visible})
        await db.commit()
    return MessageResponse(message=f"Event is now {'visible' if visible else 'hidden'}")


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    admin_id = current_user.id
    async with db_operation(db, "Failed to delete event"):
        await _get_event_or_404(db, event_id)
        await db.execute(delete(Event).where(Event.id == event_id))
        record_admin_action(db, admin_id, "DELETE_EVENT", "event", event_id)
        await db.commit()
    return MessageResponse(message="Event deleted successfully")
