from __future__ import annotations

import re
import unicodedata

from sqlalchemy.orm import Session

from orbis_moderation.models.tables import Resource

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    text = unicodedata.normalize("NFKD", name or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    return _NON_ALNUM.sub("-", text).strip("-")


def unique_resource_slug(db: Session, name: str) -> str:
    """Slug derived from name; collisions get -1, -2, ... appended."""

    base = slugify(name) or "resource"
    slug = base
    counter = 1
    while db.query(Resource.id).filter(Resource.slug == slug).first() is not None:
        slug = f"{base}-{counter}"
        counter += 1
    return slug
