from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from orbis_moderation.core.celery_app import celery
from orbis_moderation.core.db import SessionLocal
from orbis_moderation.models.tables import Resource, ResourceVersion, User
from orbis_moderation.moderation.ownership import resolve_accountable_user
from orbis_moderation.notifications.categories import NotificationType
from orbis_moderation.notifications.service import notify, notify_followers

log = logging.getLogger("notification_tasks")


def _display_name(db: Session, user_id: str) -> str:
    user = db.get(User, user_id)
    if user is None:
        return "A creator you follow"
    return user.display_name or user.username


def _notify_one(db: Session, **kwargs) -> bool:
    try:
        return notify(db, **kwargs) is not None
    except Exception:
        db.rollback()
        log.exception("Notification failed: recipient=%s", kwargs.get("recipient_id"))
        return False


def _load(db: Session, version_id: str) -> tuple[ResourceVersion | None, Resource | None]:
    version = db.get(ResourceVersion, version_id)
    if version is None:
        return None, None
    return version, db.get(Resource, version.resource_id)


@celery.task(name="orbis_moderation.tasks.notification_tasks.deliver_version_approved")
def deliver_version_approved(*, version_id: str) -> dict:
    """Owner gets VERSION_APPROVED, then the owner's followers get NEW_CREATOR_UPLOAD.

    Orphaned resources (no resolvable owner) are skipped, not failed.
    """

    with SessionLocal() as db:
        version, resource = _load(db, version_id)
        if version is None or resource is None:
            return {"ok": False, "reason": "not_found"}

        owner_id = resolve_accountable_user(db, resource)
        if not owner_id:
            log.info("No accountable owner for resource %s; skipping approval fan-out", resource.id)
            return {"ok": True, "skipped": "no_recipient"}

        payload = {
            "resource_id": resource.id,
            "resource_slug": resource.slug,
            "version_id": version.id,
            "version_number": version.version_number,
        }

        owner_notified = _notify_one(
            db,
            recipient_id=owner_id,
            category=NotificationType.VERSION_APPROVED,
            title="Version approved",
            message=f'Version {version.version_number} of "{resource.name}" has been approved.',
            payload=payload,
        )

        report = notify_followers(
            db,
            accountable_user_id=owner_id,
            category=NotificationType.NEW_CREATOR_UPLOAD,
            title="New upload",
            message=f'{_display_name(db, owner_id)} published version {version.version_number} of "{resource.name}".',
            payload={**payload, "creator_id": owner_id},
        )

        return {"ok": True, "owner_notified": owner_notified, "followers": report.as_dict()}


@celery.task(name="orbis_moderation.tasks.notification_tasks.deliver_version_rejected")
def deliver_version_rejected(*, version_id: str, reason: str) -> dict:
    with SessionLocal() as db:
        version, resource = _load(db, version_id)
        if version is None or resource is None:
            return {"ok": False, "reason": "not_found"}

        owner_id = resolve_accountable_user(db, resource)
        if not owner_id:
            log.info("No accountable owner for resource %s; skipping rejection notice", resource.id)
            return {"ok": True, "skipped": "no_recipient"}

        owner_notified = _notify_one(
            db,
            recipient_id=owner_id,
            category=NotificationType.VERSION_REJECTED,
            title="Version rejected",
            message=f'Version {version.version_number} of "{resource.name}" was rejected: {reason}',
            payload={
                "resource_id": resource.id,
                "resource_slug": resource.slug,
                "version_id": version.id,
                "version_number": version.version_number,
                "reason": reason,
            },
        )
        return {"ok": True, "owner_notified": owner_notified}


@celery.task(name="orbis_moderation.tasks.notification_tasks.deliver_new_follower")
def deliver_new_follower(*, follower_id: str, following_id: str) -> dict:
    with SessionLocal() as db:
        notified = _notify_one(
            db,
            recipient_id=following_id,
            category=NotificationType.NEW_FOLLOWER,
            title="New Follower",
            message=f"{_display_name(db, follower_id)} started following you",
            payload={"follower_id": follower_id},
        )
        return {"ok": True, "notified": notified}
