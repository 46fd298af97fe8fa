from __future__ import annotations

from sqlalchemy.orm import Session

from orbis_moderation.domain.errors import InvalidRequest, NotFound
from orbis_moderation.models.tables import User
from orbis_moderation.notifications.categories import PreferenceSwitch


def preferences_of(user: User) -> dict[str, bool]:
    return {switch.value: bool(getattr(user, switch.value)) for switch in PreferenceSwitch}


def get_preferences(db: Session, *, user_id: str) -> dict[str, bool] | None:
    user = db.get(User, user_id)
    if user is None:
        return None
    return preferences_of(user)


def update_preferences(db: Session, *, user_id: str, changes: dict[str, bool | None]) -> dict[str, bool]:
    """Partial update; keys that are absent or None keep their current value."""

    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    changes = changes or {}
    known = {switch.value for switch in PreferenceSwitch}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise InvalidRequest(f"Unknown preference switch: {', '.join(unknown)}")

    for key, value in changes.items():
        if value is not None:
            setattr(user, key, bool(value))

    db.commit()
    return preferences_of(user)
