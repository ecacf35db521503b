from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    TRAINING_PLANS_DATABASE_URL: str = "sqlite+aiosqlite:///./training_plans.db"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    CORS_ORIGINS: str = "*"

    SERVICE_NAME: str = "training-plans-service"
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0

    CELERY_BROKER_URL: str = "redis://redis:6379/5"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/6"
    CELERY_PLANS_QUEUE: str = "plans.tasks"
    CELERY_TASK_TIME_LIMIT: int = 900

    # Scoped duplicate repair right after a weekday upsert
    RECONCILE_ON_UPSERT: bool = True
    RECONCILE_INTERVAL_MINUTES: int = 60
    RECONCILE_SCHEDULED_DRY_RUN: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
