from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from orbis_moderation.api.deps import get_actor
from orbis_moderation.api.views import notification_view
from orbis_moderation.core.config import settings
from orbis_moderation.core.db import get_db
from orbis_moderation.core.security import Actor
from orbis_moderation.domain.errors import NotFound
from orbis_moderation.notifications import service
from orbis_moderation.notifications.preferences import get_preferences, update_preferences
from orbis_moderation.schemas.notifications import NotificationPreferencesIn

router = APIRouter()


@router.get("")
def list_notifications(
    type: str | None = None,
    read: bool | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    limit = min(limit, settings.NOTIFICATIONS_PAGE_LIMIT_MAX)
    out = service.list_notifications(db, user_id=actor.id, type=type, read=read, page=page, limit=limit)
    return {
        "notifications": [notification_view(n) for n in out["notifications"]],
        "pagination": out["pagination"],
    }


@router.get("/unread-count")
def unread_count(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    return {"count": service.unread_count(db, user_id=actor.id)}


@router.patch("/read-all")
def mark_all_read(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    return {"updated": service.mark_all_read(db, user_id=actor.id)}


@router.get("/preferences")
def read_preferences(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    prefs = get_preferences(db, user_id=actor.id)
    if prefs is None:
        raise NotFound("User not found")
    return prefs


@router.patch("/preferences")
def write_preferences(
    payload: NotificationPreferencesIn, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)
) -> dict:
    # Only the owning user: the target is always the caller's own id.
    return update_preferences(db, user_id=actor.id, changes=payload.model_dump(exclude_none=True))


@router.patch("/{notification_id}/read")
def mark_read(notification_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    return notification_view(service.mark_read(db, notification_id=notification_id, user_id=actor.id))


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    service.delete_notification(db, notification_id=notification_id, user_id=actor.id)
    return {"ok": True}
