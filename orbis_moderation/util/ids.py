from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from orbis_moderation.core.db import SessionLocal
from orbis_moderation.models.tables import AuditLog, User
from orbis_moderation.util.time import now_utc


def new_uuid() -> str:
    return str(uuid.uuid4())


def seed() -> None:
    """Create a moderator account for local runs (idempotent)."""

    db: Session = SessionLocal()
    try:
        user = db.query(User).filter(User.username == "seed-moderator").one_or_none()
        if not user:
            user = User(
                id=new_uuid(),
                username="seed-moderator",
                display_name="Seed Moderator",
                email=None,
                role="MODERATOR",
                status="ACTIVE",
                created_at=now_utc(),
            )
            db.add(user)
            db.commit()

        db.add(
            AuditLog(
                id=new_uuid(),
                user_id=user.id,
                event_type="SEED_DONE",
                severity="INFO",
                message="Seed completed",
                context={},
                created_at=now_utc(),
            )
        )
        db.commit()
        print(user.id)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
