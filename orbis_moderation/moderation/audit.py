from __future__ import annotations

from sqlalchemy.orm import Session

from orbis_moderation.domain.errors import NotFound
from orbis_moderation.models.tables import AuditLog, Resource, ResourceStatusHistory
from orbis_moderation.util.ids import new_uuid
from orbis_moderation.util.time import now_utc


def record_status_change(
    db: Session,
    *,
    resource_id: str,
    from_status: str,
    to_status: str,
    reason: str | None,
    actor_id: str | None,
) -> ResourceStatusHistory:
    """Append one history row. Caller owns the transaction; rows are never updated."""

    row = ResourceStatusHistory(
        id=new_uuid(),
        resource_id=resource_id,
        from_status=from_status,
        to_status=to_status,
        reason=reason,
        changed_by_id=actor_id,
        changed_at=now_utc(),
    )
    db.add(row)
    return row


def audit(
    db: Session,
    *,
    user_id: str | None,
    event_type: str,
    severity: str,
    message: str,
    context: dict,
) -> None:
    db.add(
        AuditLog(
            id=new_uuid(),
            user_id=user_id,
            event_type=event_type,
            severity=severity,
            message=message,
            context=context or {},
            created_at=now_utc(),
        )
    )


def get_moderation_history(db: Session, *, resource_id: str) -> list[ResourceStatusHistory]:
    """Newest first."""

    if db.get(Resource, resource_id) is None:
        raise NotFound("Resource not found")

    return (
        db.query(ResourceStatusHistory)
        .filter(ResourceStatusHistory.resource_id == resource_id)
        # id breaks timestamp ties so repeated reads agree.
        .order_by(ResourceStatusHistory.changed_at.desc(), ResourceStatusHistory.id.desc())
        .all()
    )
