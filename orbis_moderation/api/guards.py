from __future__ import annotations

from fastapi import Depends

from orbis_moderation.api.deps import get_actor
from orbis_moderation.core.security import Actor, Role, ensure_role


def require_role(minimum: Role = Role.MODERATOR):
    """Route dependency: the one place role membership is checked."""

    def _guard(actor: Actor = Depends(get_actor)) -> Actor:
        return ensure_role(actor, minimum)

    return _guard


require_moderator = require_role(Role.MODERATOR)
