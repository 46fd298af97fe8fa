from __future__ import annotations

from sqlalchemy.orm import Session

from orbis_moderation.models.tables import Resource, Team, User


def _active_user_id(db: Session, user_id: str | None) -> str | None:
    if not user_id:
        return None
    user = db.get(User, user_id)
    if user is None or user.status == "BANNED":
        return None
    return user.id


def resolve_accountable_user(db: Session, resource: Resource) -> str | None:
    """Single user accountable for a resource.

    Team-owned resources resolve to the team's owner, never to arbitrary members.
    None means nobody can be notified; callers skip delivery without failing.
    """

    if resource.owner_team_id:
        team = db.get(Team, resource.owner_team_id)
        if team is None:
            return None
        return _active_user_id(db, team.owner_id)

    return _active_user_id(db, resource.owner_user_id)


def can_manage_resource(db: Session, *, user_id: str, resource: Resource) -> bool:
    if resource.owner_user_id and resource.owner_user_id == user_id:
        return True
    if resource.owner_team_id:
        team = db.get(Team, resource.owner_team_id)
        return bool(team and team.owner_id == user_id)
    return False
