from __future__ import annotations

import logging

log = logging.getLogger("notifications")


def enqueue(task, **kwargs) -> bool:
    """Hand a fan-out task to Celery after the moderation transaction committed.

    Never raises: a broker outage or a failing eager task must not turn an
    already-committed decision into an error for the caller.
    """

    try:
        task.delay(**kwargs)
        return True
    except Exception:
        log.exception("Notification dispatch failed: task=%s kwargs=%s", getattr(task, "name", task), kwargs)
        return False
