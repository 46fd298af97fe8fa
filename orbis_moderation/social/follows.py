from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orbis_moderation.domain.errors import Conflict, InvalidRequest, NotFound
from orbis_moderation.models.tables import Follow, User
from orbis_moderation.moderation.audit import audit
from orbis_moderation.moderation.transaction import unit_of_work
from orbis_moderation.notifications.dispatch import enqueue
from orbis_moderation.tasks.notification_tasks import deliver_new_follower
from orbis_moderation.util.ids import new_uuid
from orbis_moderation.util.time import now_utc

log = logging.getLogger("social")


def follow_user(db: Session, *, follower_id: str, following_id: str) -> Follow:
    if follower_id == following_id:
        raise InvalidRequest("You cannot follow yourself")
    if db.get(User, following_id) is None:
        raise NotFound("User not found")

    existing = (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .one_or_none()
    )
    if existing:
        raise Conflict("You are already following this user")

    follow = Follow(id=new_uuid(), follower_id=follower_id, following_id=following_id, created_at=now_utc())
    try:
        with unit_of_work(db):
            db.add(follow)
            audit(
                db,
                user_id=follower_id,
                event_type="follow.created",
                severity="INFO",
                message="User followed",
                context={"following_id": following_id},
            )
    except IntegrityError:
        raise Conflict("You are already following this user")

    enqueue(deliver_new_follower, follower_id=follower_id, following_id=following_id)
    return follow


def unfollow_user(db: Session, *, follower_id: str, following_id: str) -> None:
    follow = (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .one_or_none()
    )
    if follow is None:
        raise NotFound("You are not following this user")

    with unit_of_work(db):
        db.delete(follow)
