from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from orbis_moderation.api.guards import require_moderator
from orbis_moderation.api.views import history_view, resource_view, version_view
from orbis_moderation.core.db import get_db
from orbis_moderation.core.security import Actor
from orbis_moderation.moderation.audit import get_moderation_history
from orbis_moderation.moderation.resources import list_pending_resources, list_resources_by_status, moderate_resource
from orbis_moderation.moderation.versions import (
    approve_version,
    list_pending_versions,
    moderate_version,
    reject_version,
)
from orbis_moderation.schemas.moderation import ModerateResourceIn, ModerateVersionIn, RejectVersionIn

router = APIRouter()


@router.get("/versions/pending")
def pending_versions(actor: Actor = Depends(require_moderator), db: Session = Depends(get_db)) -> dict:
    return {
        "items": [
            {**version_view(p.version), "is_first_version": p.is_first_version}
            for p in list_pending_versions(db)
        ]
    }


@router.post("/versions/{version_id}/approve")
def approve_version_endpoint(
    version_id: str, actor: Actor = Depends(require_moderator), db: Session = Depends(get_db)
) -> dict:
    res = approve_version(db, actor=actor, version_id=version_id)
    return {"success": res.success, "message": res.message}


@router.post("/versions/{version_id}/reject")
def reject_version_endpoint(
    version_id: str,
    payload: RejectVersionIn,
    actor: Actor = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> dict:
    res = reject_version(db, actor=actor, version_id=version_id, reason=payload.reason)
    return {"success": res.success, "message": res.message}


@router.patch("/versions/{version_id}")
def moderate_version_endpoint(
    version_id: str,
    payload: ModerateVersionIn,
    actor: Actor = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> dict:
    res = moderate_version(db, actor=actor, version_id=version_id, action=payload.action, reason=payload.reason)
    return {"success": res.success, "message": res.message}


@router.get("/resources/pending")
def pending_resources(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> dict:
    out = list_pending_resources(db, page=page, limit=limit)
    return {"items": [resource_view(r, include_moderation_notes=True) for r in out["items"]], "pagination": out["pagination"]}


@router.get("/resources/status/{status}")
def resources_by_status(
    status: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    actor: Actor = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> dict:
    out = list_resources_by_status(db, status=status.upper(), page=page, limit=limit)
    return {"items": [resource_view(r, include_moderation_notes=True) for r in out["items"]], "pagination": out["pagination"]}


@router.patch("/resources/{resource_id}")
def moderate_resource_endpoint(
    resource_id: str,
    payload: ModerateResourceIn,
    actor: Actor = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> dict:
    res = moderate_resource(
        db,
        actor=actor,
        resource_id=resource_id,
        new_status=payload.status,
        reason=payload.reason,
        notes=payload.moderation_notes,
    )
    return {"message": res.message, "resource": resource_view(res.resource, include_moderation_notes=True)}


@router.get("/resources/{resource_id}/history")
def resource_history(
    resource_id: str, actor: Actor = Depends(require_moderator), db: Session = Depends(get_db)
) -> dict:
    return {"items": [history_view(h) for h in get_moderation_history(db, resource_id=resource_id)]}
