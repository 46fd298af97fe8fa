from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from orbis_moderation.domain.errors import Forbidden


class Role(str, Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank


_RANKS = {Role.USER: 0, Role.MODERATOR: 1, Role.ADMIN: 2, Role.SUPER_ADMIN: 3}


@dataclass(frozen=True)
class Actor:
    """Identity attached by the session layer; the role is trusted as given."""

    id: str
    role: Role = Role.USER


def ensure_role(actor: Actor | None, minimum: Role = Role.MODERATOR) -> Actor:
    if actor is None or not actor.role.at_least(minimum):
        raise Forbidden(f"{minimum.value} role or higher required")
    return actor
