from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Query, Session


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """All-or-nothing: commit when the block finishes, roll back on any exception."""

    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def locked(db: Session, query: Query) -> Query:
    """Re-read rows inside the transaction, row-locked where the dialect supports it.

    populate_existing() matters: objects already in the identity map would otherwise
    keep the state read before the lock was taken.
    """

    query = query.populate_existing()
    # On Postgres, take row locks so two moderators cannot both observe the same PENDING row.
    if db.bind is not None and db.bind.dialect.name == "postgresql":
        query = query.with_for_update()
    return query
