from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orbis_moderation.core.security import Actor, ensure_role
from orbis_moderation.domain.errors import Conflict, Forbidden, InvalidRequest, NotFound, NotPending, ReasonRequired
from orbis_moderation.domain.status import ResourceStatus, VersionStatus
from orbis_moderation.models.tables import Resource, ResourceVersion
from orbis_moderation.moderation.audit import audit, record_status_change
from orbis_moderation.moderation.ownership import can_manage_resource
from orbis_moderation.moderation.transaction import locked, unit_of_work
from orbis_moderation.notifications.dispatch import enqueue
from orbis_moderation.tasks.notification_tasks import deliver_version_approved, deliver_version_rejected
from orbis_moderation.util.ids import new_uuid
from orbis_moderation.util.time import as_utc, now_utc

log = logging.getLogger("moderation")

APPROVE = "APPROVE"
REJECT = "REJECT"


@dataclass(frozen=True)
class VersionModerationResult:
    success: bool
    message: str
    is_first_version: bool = False
    resource_published: bool = False


@dataclass(frozen=True)
class PendingVersion:
    version: ResourceVersion
    is_first_version: bool


def _get_version(db: Session, version_id: str) -> ResourceVersion:
    version = db.get(ResourceVersion, version_id)
    if version is None:
        raise NotFound("Version not found")
    return version


def _lock_pending(db: Session, version_id: str) -> ResourceVersion:
    version = locked(db, db.query(ResourceVersion).filter(ResourceVersion.id == version_id)).one_or_none()
    if version is None:
        raise NotFound("Version not found")
    # Re-checked under the row lock: a concurrent moderator may have decided first.
    if version.status != VersionStatus.PENDING.value:
        raise NotPending()
    return version


def count_approved_versions(db: Session, *, resource_id: str) -> int:
    return (
        db.query(func.count(ResourceVersion.id))
        .filter(
            ResourceVersion.resource_id == resource_id,
            ResourceVersion.status == VersionStatus.APPROVED.value,
        )
        .scalar()
        or 0
    )


def _advance_latest_version(db: Session, resource: Resource, version: ResourceVersion) -> bool:
    """latest_version_id only moves to a strictly later approval."""

    if resource.latest_version_id and resource.latest_version_id != version.id:
        current = db.get(ResourceVersion, resource.latest_version_id)
        current_at = as_utc(current.published_at) if current is not None else None
        new_at = as_utc(version.published_at)
        if current_at is not None and (new_at is None or new_at <= current_at):
            return False
    resource.latest_version_id = version.id
    return True


def approve_version(db: Session, *, actor: Actor, version_id: str) -> VersionModerationResult:
    """Approve a PENDING version and publish its resource when it is the first one.

    The sibling count and the conditional resource update run in the same
    transaction, under row locks on the resource and the version.
    """

    ensure_role(actor)

    version = _get_version(db, version_id)
    if version.status != VersionStatus.PENDING.value:
        raise NotPending()
    resource_id = version.resource_id

    with unit_of_work(db):
        # Resource first: serializes approvals of different versions of one resource.
        resource = locked(db, db.query(Resource).filter(Resource.id == resource_id)).one_or_none()
        if resource is None:
            raise NotFound("Resource not found")
        version = _lock_pending(db, version_id)

        is_first_version = count_approved_versions(db, resource_id=resource_id) == 0

        now = now_utc()
        version.status = VersionStatus.APPROVED.value
        version.published_at = now
        version.rejection_reason = None
        version.moderated_by_id = actor.id
        version.moderated_at = now

        resource_published = False
        if is_first_version and resource.status == ResourceStatus.PENDING.value:
            record_status_change(
                db,
                resource_id=resource.id,
                from_status=resource.status,
                to_status=ResourceStatus.APPROVED.value,
                reason=f"First version {version.version_number} approved",
                actor_id=actor.id,
            )
            resource.status = ResourceStatus.APPROVED.value
            resource.rejection_reason = None
            resource.moderated_by_id = actor.id
            resource.moderated_at = now
            if resource.published_at is None:
                resource.published_at = now
            resource_published = True

        _advance_latest_version(db, resource, version)
        resource.updated_at = now

        audit(
            db,
            user_id=actor.id,
            event_type="version.approved",
            severity="INFO",
            message="Version approved",
            context={
                "version_id": version_id,
                "resource_id": resource_id,
                "from_status": VersionStatus.PENDING.value,
                "to_status": VersionStatus.APPROVED.value,
                "is_first_version": is_first_version,
                "resource_published": resource_published,
            },
        )

    log.info(
        "Version %s approved by %s (first=%s, resource_published=%s)",
        version_id,
        actor.id,
        is_first_version,
        resource_published,
    )

    enqueue(deliver_version_approved, version_id=version_id)

    return VersionModerationResult(
        success=True,
        message="Version approved and resource published" if is_first_version else "Version approved",
        is_first_version=is_first_version,
        resource_published=resource_published,
    )


def reject_version(db: Session, *, actor: Actor, version_id: str, reason: str | None) -> VersionModerationResult:
    """Reject a PENDING version. The parent resource keeps its status.

    A resource whose only version is rejected stays PENDING until a new version
    is submitted.
    """

    ensure_role(actor)

    version = _get_version(db, version_id)
    if version.status != VersionStatus.PENDING.value:
        raise NotPending()

    reason = (reason or "").strip()
    if not reason:
        raise ReasonRequired("Rejection reason is required")

    with unit_of_work(db):
        version = _lock_pending(db, version_id)

        now = now_utc()
        version.status = VersionStatus.REJECTED.value
        version.rejection_reason = reason
        version.moderated_by_id = actor.id
        version.moderated_at = now

        audit(
            db,
            user_id=actor.id,
            event_type="version.rejected",
            severity="INFO",
            message="Version rejected",
            context={
                "version_id": version_id,
                "resource_id": version.resource_id,
                "from_status": VersionStatus.PENDING.value,
                "to_status": VersionStatus.REJECTED.value,
                "reason": reason,
            },
        )

    log.info("Version %s rejected by %s", version_id, actor.id)

    enqueue(deliver_version_rejected, version_id=version_id, reason=reason)

    return VersionModerationResult(success=True, message="Version rejected")


def moderate_version(
    db: Session, *, actor: Actor, version_id: str, action: str, reason: str | None = None
) -> VersionModerationResult:
    kind = (action or "").strip().upper()
    if kind == APPROVE:
        return approve_version(db, actor=actor, version_id=version_id)
    if kind == REJECT:
        return reject_version(db, actor=actor, version_id=version_id, reason=reason)
    raise InvalidRequest("Invalid action")


def list_pending_versions(db: Session) -> list[PendingVersion]:
    versions = (
        db.query(ResourceVersion)
        .filter(ResourceVersion.status == VersionStatus.PENDING.value)
        .order_by(ResourceVersion.created_at.desc())
        .all()
    )

    approved_counts: dict[str, int] = {}
    out: list[PendingVersion] = []
    for v in versions:
        if v.resource_id not in approved_counts:
            approved_counts[v.resource_id] = count_approved_versions(db, resource_id=v.resource_id)
        out.append(PendingVersion(version=v, is_first_version=approved_counts[v.resource_id] == 0))
    return out


def submit_version(
    db: Session,
    *,
    actor_id: str,
    resource_id: str,
    version_number: str,
    name: str | None = None,
    changelog: str | None = None,
) -> ResourceVersion:
    """Owner-side upload of a new version; it enters the queue as PENDING."""

    version_number = (version_number or "").strip()
    if not version_number:
        raise InvalidRequest("Version number is required")

    resource = db.get(Resource, resource_id)
    if resource is None:
        raise NotFound("Resource not found")
    if not can_manage_resource(db, user_id=actor_id, resource=resource):
        raise Forbidden("You do not have permission to create versions for this resource")
    if resource.status == ResourceStatus.DELETED.value:
        raise Conflict("Resource is deleted")

    existing = (
        db.query(ResourceVersion.id)
        .filter(ResourceVersion.resource_id == resource_id, ResourceVersion.version_number == version_number)
        .first()
    )
    if existing is not None:
        raise Conflict(f"Version {version_number} already exists for this resource")

    now = now_utc()
    version = ResourceVersion(
        id=new_uuid(),
        resource_id=resource_id,
        version_number=version_number,
        name=name,
        changelog=changelog,
        status=VersionStatus.PENDING.value,
        rejection_reason=None,
        published_at=None,
        moderated_by_id=None,
        moderated_at=None,
        created_at=now,
    )
    try:
        with unit_of_work(db):
            db.add(version)
            resource.updated_at = now
    except IntegrityError:
        # Concurrent upload of the same number.
        raise Conflict(f"Version {version_number} already exists for this resource")

    return version
