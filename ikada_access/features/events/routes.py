"""
Event routes, scoped to the actor's branch like articles.
"""
from datetime import datetime, timezone
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.core.errors import ValidationError
from ikada_access.features.events.models import Event, EventStatus
from ikada_access.features.events.schemas import EventCreate, EventUpdate, EventResponse, as_utc
from ikada_access.features.permissions.dependencies import AccessContext, require_permission
from ikada_access.features.tenancy.service import policy_for_write, policy_for_update
from ikada_access.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["events"])

Db = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=list[EventResponse])
async def list_events(
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("events", "view"))],
    event_status: Optional[EventStatus] = Query(None, alias="status"),
    upcoming: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200)
):
    """List the events visible to the current actor, soonest first."""
    stmt = select(Event).where(Event.visible_to(access.actor))
    if event_status is not None:
        stmt = stmt.where(Event.status == event_status)
    if upcoming:
        stmt = stmt.where(Event.start_at >= datetime.now(timezone.utc))
    stmt = stmt.order_by(Event.start_at, Event.id).offset(skip).limit(limit)

    result = await db.execute(stmt)
    return access.visible(result.scalars().all())


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("events", "view"))]
):
    """Get an event visible to the current actor."""
    return access.ensure_visible(await db.get(Event, event_id), "Event")


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("events", "create"))]
):
    """Create an event."""
    policy = await policy_for_write(db, access.actor, event_data.visibility, event_data.target_branch_ids)
    event = Event(
        **event_data.model_dump(exclude={"visibility", "target_branch_ids"}),
        author_id=access.actor.id
    )
    event.apply_visibility(policy)
    db.add(event)
    await db.commit()
    await db.refresh(event)
    log.info("Actor %s created event %s (%s)", access.actor.id, event.id, policy.mode.value)
    return event


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_update: EventUpdate,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("events", "edit"))]
):
    """Update an event visible to the current actor."""
    event = access.ensure_visible(await db.get(Event, event_id), "Event")
    changes = event_update.model_dump(exclude_unset=True, exclude={"visibility", "target_branch_ids"})

    start_at = as_utc(changes.get("start_at") or event.start_at)
    end_at = as_utc(changes["end_at"] if "end_at" in changes else event.end_at)
    if end_at is not None and end_at < start_at:
        raise ValidationError("end_at must not be before start_at")

    policy = await policy_for_update(
        db,
        access.actor,
        event.visibility_policy,
        event_update.visibility,
        event_update.target_branch_ids
    )
    if policy is not None:
        event.apply_visibility(policy)

    for key, value in changes.items():
        # end_at may be cleared, everything else keeps its value when null
        if value is not None or key == "end_at":
            setattr(event, key, value)

    await db.commit()
    await db.refresh(event)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: str,
    db: Db,
    access: Annotated[AccessContext, Depends(require_permission("events", "delete"))]
):
    """Delete an event visible to the current actor."""
    event = access.ensure_visible(await db.get(Event, event_id), "Event")
    await db.delete(event)
    await db.commit()
    log.info("Actor %s deleted event %s", access.actor.id, event_id)
    return None
