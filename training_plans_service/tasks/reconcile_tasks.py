from __future__ import annotations

import asyncio
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from ..celery_app import PLANS_TASK_QUEUE
from ..database import AsyncSessionLocal
from ..logging_config import bind_plan_context, reset_plan_context
from ..services.duplicate_day_reconciler import DuplicateDayReconciler

logger = get_task_logger(__name__)


def _run_async(coro):
    return asyncio.run(coro)


async def _cleanup_duplicate_plan_days_async(dry_run: bool) -> dict[str, Any]:
    async with AsyncSessionLocal() as session:
        report = await DuplicateDayReconciler(session).cleanup_duplicate_plan_days(dry_run=dry_run)
        return report.model_dump(mode="json")


@shared_task(
    bind=True,
    name="plans.cleanup_duplicate_plan_days",
    queue=PLANS_TASK_QUEUE,
    max_retries=2,
)
def cleanup_duplicate_plan_days_task(
    self, *, dry_run: bool = True, correlation_id: str | None = None
) -> dict[str, Any]:
    reset_plan_context()
    bind_plan_context(correlation_id=correlation_id, task_id=self.request.id)
    try:
        return _run_async(_cleanup_duplicate_plan_days_async(dry_run))
    except Exception as exc:
        logger.exception("cleanup_duplicate_plan_days_task_failed", exc_info=exc)
        raise self.retry(exc=exc, countdown=60)
