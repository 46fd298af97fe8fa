from __future__ import annotations

from fastapi import Header, HTTPException

from orbis_moderation.core.security import Actor, Role


def get_actor(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
) -> Actor:
    # Identity and role are attached upstream by the session layer; we only read them.
    if not x_user_id:
        raise HTTPException(status_code=400, detail="Missing X-User-Id")
    try:
        role = Role((x_user_role or Role.USER.value).strip().upper())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-User-Role")
    return Actor(id=x_user_id, role=role)
