from __future__ import annotations

from celery import Celery

from orbis_moderation.core.config import settings

celery = Celery(
    "orbis_moderation",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["orbis_moderation.tasks.notification_tasks"],
)

celery.conf.update(
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,
    task_default_queue="notifications",
    # Fan-out is at-most-once: never redeliver a half-sent batch.
    task_acks_late=False,
)
