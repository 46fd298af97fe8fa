from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "orbis-moderation"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # In unit tests / CI we avoid long startup retries against external deps.
    ENSURE_EXTERNAL_DEPS_ON_STARTUP: bool = True

    DATABASE_URL: str

    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # Upper bound for ?limit= on notification listings.
    NOTIFICATIONS_PAGE_LIMIT_MAX: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
