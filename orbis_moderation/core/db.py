from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orbis_moderation.core.config import settings

_db_url = settings.DATABASE_URL

if _db_url.startswith("sqlite"):
    # For in-memory SQLite (tests) we need a single shared connection across threads.
    # StaticPool makes the same connection reused for the whole process.
    engine = create_engine(
        _db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        pool_pre_ping=True,
    )
else:
    engine = create_engine(_db_url, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
