from __future__ import annotations

from orbis_moderation.models.tables import Notification, Resource, ResourceStatusHistory, ResourceVersion


def resource_view(r: Resource, *, include_moderation_notes: bool = False) -> dict:
    out = {
        "id": r.id,
        "name": r.name,
        "slug": r.slug,
        "status": r.status,
        "owner_user_id": r.owner_user_id,
        "owner_team_id": r.owner_team_id,
        "moderated_by_id": r.moderated_by_id,
        "moderated_at": r.moderated_at,
        "rejection_reason": r.rejection_reason,
        "published_at": r.published_at,
        "latest_version_id": r.latest_version_id,
        "created_at": r.created_at,
        "updated_at": r.updated_at,
    }
    if include_moderation_notes:
        out["moderation_notes"] = r.moderation_notes
    return out


def version_view(v: ResourceVersion) -> dict:
    return {
        "id": v.id,
        "resource_id": v.resource_id,
        "version_number": v.version_number,
        "name": v.name,
        "changelog": v.changelog,
        "status": v.status,
        "rejection_reason": v.rejection_reason,
        "published_at": v.published_at,
        "created_at": v.created_at,
    }


def history_view(h: ResourceStatusHistory) -> dict:
    return {
        "id": h.id,
        "resource_id": h.resource_id,
        "from_status": h.from_status,
        "to_status": h.to_status,
        "reason": h.reason,
        "changed_by_id": h.changed_by_id,
        "changed_at": h.changed_at,
    }


def notification_view(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "data": n.data,
        "read": n.read,
        "created_at": n.created_at,
    }
