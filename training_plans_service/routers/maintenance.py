from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..celery_utils import enqueue_plans_task, get_plans_task_status
from ..dependencies import get_current_user_id, get_db
from ..schemas.maintenance import CleanupReport, TaskStatusResponse, TaskSubmissionResponse
from ..services.duplicate_day_reconciler import DuplicateDayReconciler
from ..tasks.reconcile_tasks import cleanup_duplicate_plan_days_task

router = APIRouter(prefix="/maintenance")

logger = structlog.get_logger(__name__)


@router.post("/duplicate-days/cleanup", response_model=CleanupReport)
async def cleanup_duplicate_plan_days(
    dry_run: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    logger.info("duplicate_plan_days_cleanup_requested", dry_run=dry_run)
    return await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=dry_run)


@router.post("/duplicate-days/cleanup-async", response_model=TaskSubmissionResponse)
async def cleanup_duplicate_plan_days_async(
    dry_run: bool = Query(True),
    user_id: str = Depends(get_current_user_id),
):
    return enqueue_plans_task(cleanup_duplicate_plan_days_task, requested_by=user_id, dry_run=dry_run)


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(task_id: str, user_id: str = Depends(get_current_user_id)):
    return get_plans_task_status(task_id)
