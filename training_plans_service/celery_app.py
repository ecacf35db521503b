from __future__ import annotations

from celery import Celery

from .config import get_settings

settings = get_settings()

PLANS_TASK_QUEUE = settings.CELERY_PLANS_QUEUE

celery_app = Celery(
    "training_plans_service",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_default_queue=PLANS_TASK_QUEUE,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    result_expires=3600,
    beat_schedule={
        "cleanup-duplicate-plan-days": {
            "task": "plans.cleanup_duplicate_plan_days",
            "schedule": settings.RECONCILE_INTERVAL_MINUTES * 60,
            "kwargs": {"dry_run": settings.RECONCILE_SCHEDULED_DRY_RUN},
            "options": {"queue": PLANS_TASK_QUEUE},
        },
    },
)

celery_app.autodiscover_tasks(["training_plans_service.tasks"])
