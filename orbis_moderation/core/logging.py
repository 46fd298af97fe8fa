from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""

    root = logging.getLogger()
    root.setLevel((level or "INFO").upper())

    if any(getattr(h, "_orbis_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._orbis_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # Celery and uvicorn bring their own handlers; keep SQL echo quiet unless asked for.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
