from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from orbis_moderation.core.security import Actor, ensure_role
from orbis_moderation.domain.errors import Conflict, Forbidden, InvalidRequest, NotFound
from orbis_moderation.domain.status import (
    REASON_REQUIRED_STATUSES,
    ResourceStatus,
    status_action_message,
    validate_transition,
)
from orbis_moderation.models.tables import Resource, Team, User
from orbis_moderation.moderation.audit import record_status_change
from orbis_moderation.moderation.ownership import can_manage_resource
from orbis_moderation.moderation.transaction import locked, unit_of_work
from orbis_moderation.util.ids import new_uuid
from orbis_moderation.util.slug import unique_resource_slug
from orbis_moderation.util.time import now_utc

log = logging.getLogger("moderation")


@dataclass(frozen=True)
class ModerationResult:
    resource: Resource
    message: str


def _get_resource(db: Session, resource_id: str) -> Resource:
    resource = db.get(Resource, resource_id)
    if resource is None:
        raise NotFound("Resource not found")
    return resource


def _lock_resource(db: Session, resource_id: str) -> Resource:
    resource = locked(db, db.query(Resource).filter(Resource.id == resource_id)).one_or_none()
    if resource is None:
        raise NotFound("Resource not found")
    return resource


def moderate_resource(
    db: Session,
    *,
    actor: Actor,
    resource_id: str,
    new_status: ResourceStatus | str,
    reason: str | None = None,
    notes: str | None = None,
) -> ModerationResult:
    """Move a resource through the status table and record the transition.

    The role is checked by the transport guard; the transition is always
    re-validated here, and again under the row lock.
    """

    ensure_role(actor)

    try:
        target = ResourceStatus(new_status)
    except ValueError:
        raise InvalidRequest(f"Unknown resource status: {new_status}")
    reason = (reason or "").strip() or None

    resource = _get_resource(db, resource_id)
    validate_transition(resource.status, target, reason)

    with unit_of_work(db):
        resource = _lock_resource(db, resource_id)
        from_status = resource.status
        validate_transition(from_status, target, reason)

        now = now_utc()
        resource.status = target.value
        resource.moderated_by_id = actor.id
        resource.moderated_at = now
        resource.rejection_reason = reason if target in REASON_REQUIRED_STATUSES else None
        if notes:
            resource.moderation_notes = notes
        if target == ResourceStatus.APPROVED and resource.published_at is None:
            resource.published_at = now
        resource.updated_at = now

        record_status_change(
            db,
            resource_id=resource.id,
            from_status=from_status,
            to_status=target.value,
            reason=reason,
            actor_id=actor.id,
        )

    log.info("Resource %s moved %s -> %s by %s", resource_id, from_status, target.value, actor.id)

    return ModerationResult(
        resource=resource,
        message=f"Resource {status_action_message(target)} successfully",
    )


def create_resource(db: Session, *, actor_id: str, name: str, team_id: str | None = None) -> Resource:
    """Create a DRAFT resource owned by the actor or by one of the actor's teams.

    Seeds the audit trail with a DRAFT -> DRAFT record.
    """

    name = (name or "").strip()
    if not name:
        raise InvalidRequest("Name is required")

    if db.get(User, actor_id) is None:
        raise NotFound("User not found")

    if team_id:
        team = db.get(Team, team_id)
        if team is None or team.owner_id != actor_id:
            raise Forbidden("You must be the team owner to create resources for this team")

    now = now_utc()
    resource = Resource(
        id=new_uuid(),
        name=name,
        slug=unique_resource_slug(db, name),
        status=ResourceStatus.DRAFT.value,
        owner_user_id=None if team_id else actor_id,
        owner_team_id=team_id or None,
        moderated_by_id=None,
        moderated_at=None,
        rejection_reason=None,
        moderation_notes=None,
        published_at=None,
        latest_version_id=None,
        created_at=now,
        updated_at=now,
    )

    try:
        with unit_of_work(db):
            db.add(resource)
            db.flush()
            record_status_change(
                db,
                resource_id=resource.id,
                from_status=ResourceStatus.DRAFT.value,
                to_status=ResourceStatus.DRAFT.value,
                reason="created",
                actor_id=actor_id,
            )
    except IntegrityError:
        raise Conflict("Slug is already taken")

    return resource


def submit_for_review(db: Session, *, actor_id: str, resource_id: str) -> Resource:
    """Owner-side move into the moderation queue (DRAFT/REJECTED -> PENDING)."""

    resource = _get_resource(db, resource_id)
    if not can_manage_resource(db, user_id=actor_id, resource=resource):
        raise Forbidden("You do not have permission to submit this resource")
    validate_transition(resource.status, ResourceStatus.PENDING)

    with unit_of_work(db):
        resource = _lock_resource(db, resource_id)
        from_status = resource.status
        validate_transition(from_status, ResourceStatus.PENDING)

        resource.status = ResourceStatus.PENDING.value
        resource.rejection_reason = None
        resource.updated_at = now_utc()
        record_status_change(
            db,
            resource_id=resource.id,
            from_status=from_status,
            to_status=ResourceStatus.PENDING.value,
            reason="Submitted for review",
            actor_id=actor_id,
        )

    return resource


def _paginate(q: Query, *, page: int, limit: int) -> dict:
    page = max(1, page)
    limit = max(1, limit)
    total = q.count()
    items = q.offset((page - 1) * limit).limit(limit).all()
    return {
        "items": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if total else 0,
        },
    }


def list_pending_resources(db: Session, *, page: int = 1, limit: int = 20) -> dict:
    # Oldest first: the queue is worked in submission order.
    q = (
        db.query(Resource)
        .filter(Resource.status == ResourceStatus.PENDING.value)
        .order_by(Resource.created_at.asc())
    )
    return _paginate(q, page=page, limit=limit)


def list_resources_by_status(db: Session, *, status: ResourceStatus | str, page: int = 1, limit: int = 20) -> dict:
    try:
        wanted = ResourceStatus(status)
    except ValueError:
        raise InvalidRequest(f"Unknown resource status: {status}")

    q = (
        db.query(Resource)
        .filter(Resource.status == wanted.value)
        .order_by(Resource.moderated_at.desc(), Resource.created_at.desc())
    )
    return _paginate(q, page=page, limit=limit)
