from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from orbis_moderation.api.deps import get_actor
from orbis_moderation.core.db import get_db
from orbis_moderation.core.security import Actor
from orbis_moderation.social.follows import follow_user, unfollow_user

router = APIRouter()


@router.post("/{user_id}/follow")
def follow(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    f = follow_user(db, follower_id=actor.id, following_id=user_id)
    return {"id": f.id, "follower_id": f.follower_id, "following_id": f.following_id}


@router.delete("/{user_id}/follow")
def unfollow(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)) -> dict:
    unfollow_user(db, follower_id=actor.id, following_id=user_id)
    return {"ok": True}
