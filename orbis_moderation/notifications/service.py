from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.orm import Session

from orbis_moderation.domain.errors import NotFound
from orbis_moderation.models.tables import Follow, Notification, User
from orbis_moderation.notifications.categories import NotificationType, preference_switch_for
from orbis_moderation.util.ids import new_uuid
from orbis_moderation.util.time import now_utc

log = logging.getLogger("notifications")


@dataclass
class FanoutReport:
    delivered: int = 0
    suppressed: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return {"delivered": self.delivered, "suppressed": self.suppressed, "failed": self.failed}


def _category_value(category: NotificationType | str) -> str:
    return category.value if isinstance(category, NotificationType) else str(category)


def is_category_enabled(user: User, category: NotificationType | str) -> bool:
    switch = preference_switch_for(category)
    if switch is None:
        return True
    return bool(getattr(user, switch.value))


def notify(
    db: Session,
    *,
    recipient_id: str,
    category: NotificationType | str,
    title: str,
    message: str,
    payload: dict | None = None,
) -> str | None:
    """Persist one notification unless the recipient opted out of its category.

    Returns the notification id, or None when nothing was created (unknown
    recipient or disabled switch).
    """

    kind = _category_value(category)

    user = db.get(User, recipient_id)
    if user is None:
        log.debug("notify skipped: unknown recipient %s (%s)", recipient_id, kind)
        return None

    if not is_category_enabled(user, kind):
        log.debug("notify suppressed by preference: user=%s type=%s", recipient_id, kind)
        return None

    n = Notification(
        id=new_uuid(),
        user_id=recipient_id,
        type=kind,
        title=title,
        message=message,
        data=dict(payload or {}),
        read=False,
        created_at=now_utc(),
    )
    db.add(n)
    db.commit()
    return n.id


def follower_ids(db: Session, *, user_id: str) -> list[str]:
    rows = (
        db.query(Follow.follower_id)
        .filter(Follow.following_id == user_id)
        .order_by(Follow.created_at.asc())
        .all()
    )
    return list(dict.fromkeys(r[0] for r in rows))


def notify_followers(
    db: Session,
    *,
    accountable_user_id: str,
    category: NotificationType | str,
    title: str,
    message: str,
    payload: dict | None = None,
) -> FanoutReport:
    """Notify every follower of accountable_user_id, one recipient at a time.

    A failing recipient is rolled back and logged; the rest of the batch continues.
    """

    report = FanoutReport()
    for follower_id in follower_ids(db, user_id=accountable_user_id):
        try:
            created = notify(
                db,
                recipient_id=follower_id,
                category=category,
                title=title,
                message=message,
                payload=payload,
            )
        except Exception:
            db.rollback()
            log.exception("Follower notification failed: follower=%s type=%s", follower_id, _category_value(category))
            report.failed += 1
            continue

        if created:
            report.delivered += 1
        else:
            report.suppressed += 1

    log.info(
        "Follower fan-out for %s (%s): delivered=%s suppressed=%s failed=%s",
        accountable_user_id,
        _category_value(category),
        report.delivered,
        report.suppressed,
        report.failed,
    )
    return report


def list_notifications(
    db: Session,
    *,
    user_id: str,
    type: str | None = None,
    read: bool | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    page = max(1, page)
    limit = max(1, limit)

    q = db.query(Notification).filter(Notification.user_id == user_id)
    if type is not None:
        q = q.filter(Notification.type == type)
    if read is not None:
        q = q.filter(Notification.read == read)

    total = q.count()
    items = (
        q.order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "notifications": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if total else 0,
        },
    }


def unread_count(db: Session, *, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def _owned_notification(db: Session, *, notification_id: str, user_id: str) -> Notification:
    n = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .one_or_none()
    )
    if n is None:
        raise NotFound("Notification not found")
    return n


def mark_read(db: Session, *, notification_id: str, user_id: str) -> Notification:
    n = _owned_notification(db, notification_id=notification_id, user_id=user_id)
    n.read = True
    db.commit()
    return n


def mark_all_read(db: Session, *, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({"read": True}, synchronize_session=False)
    )
    db.commit()
    return int(updated or 0)


def delete_notification(db: Session, *, notification_id: str, user_id: str) -> None:
    n = _owned_notification(db, notification_id=notification_id, user_id=user_id)
    db.delete(n)
    db.commit()
