from __future__ import annotations

from typing import Any

import structlog
from asgi_correlation_id.context import correlation_id
from celery.result import AsyncResult

from .celery_app import PLANS_TASK_QUEUE, celery_app
from .schemas.maintenance import TaskStatusResponse, TaskSubmissionResponse

logger = structlog.get_logger(__name__)


def enqueue_plans_task(task_fn, *, requested_by: str | None = None, **task_kwargs: Any) -> TaskSubmissionResponse:
    """Submit a plans task on the plans queue, carrying the request's correlation id into the worker."""
    cid = correlation_id.get(None)
    if cid is not None:
        task_kwargs["correlation_id"] = cid
    async_result = task_fn.apply_async(kwargs=task_kwargs, queue=PLANS_TASK_QUEUE)

    logger.info(
        "plans_task_enqueued",
        task_id=async_result.id,
        task_name=getattr(task_fn, "name", None),
        requested_by=requested_by,
        **{k: v for k, v in task_kwargs.items() if k != "correlation_id"},
    )
    return TaskSubmissionResponse(task_id=async_result.id, status=async_result.status)


def get_plans_task_status(task_id: str) -> TaskStatusResponse:
    result = AsyncResult(task_id, app=celery_app)
    response = TaskStatusResponse(task_id=task_id, status=result.status)

    if result.failed():
        response.error = str(result.result)
    elif result.successful():
        response.result = result.result
    if isinstance(result.info, dict):
        response.meta = result.info
    return response
