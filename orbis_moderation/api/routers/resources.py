from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from orbis_moderation.api.deps import get_actor
from orbis_moderation.api.views import resource_view, version_view
from orbis_moderation.core.db import get_db
from orbis_moderation.core.security import Actor
from orbis_moderation.moderation.resources import create_resource, submit_for_review
from orbis_moderation.moderation.versions import submit_version
from orbis_moderation.schemas.moderation import CreateResourceIn, SubmitVersionIn

router = APIRouter()


@router.post("")
def create_resource_endpoint(
    payload: CreateResourceIn, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)
) -> dict:
    r = create_resource(db, actor_id=actor.id, name=payload.name, team_id=payload.team_id)
    return {"message": "Resource created successfully", "resource": resource_view(r)}


@router.post("/{resource_id}/submit")
def submit_resource_endpoint(resource_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    r = submit_for_review(db, actor_id=actor.id, resource_id=resource_id)
    return {"message": "Resource submitted for review", "resource": resource_view(r)}


@router.post("/{resource_id}/versions")
def submit_version_endpoint(
    resource_id: str,
    payload: SubmitVersionIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
) -> dict:
    v = submit_version(
        db,
        actor_id=actor.id,
        resource_id=resource_id,
        version_number=payload.version_number,
        name=payload.name,
        changelog=payload.changelog,
    )
    return {"message": "Version created successfully", "version": version_view(v)}
