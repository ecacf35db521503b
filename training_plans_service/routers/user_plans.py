from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user_id, get_db
from ..schemas.user_plans import (
    ActivePlanResponse,
    AdherenceResponse,
    AssignTemplateRequest,
    AssignTemplateResponse,
    DefaultPlanRequest,
    DefaultPlanResponse,
    MarkDayCompletedRequest,
    MarkDaySkippedRequest,
    PlanForEditingResponse,
    ProgressEntryResponse,
    TodayPlanSummaryResponse,
)
from ..services.plan_assignment_service import PlanAssignmentService
from ..services.plan_progress_service import PlanProgressService
from ..services.weekly_schedule_service import WeeklyScheduleService

router = APIRouter(prefix="/user-plans")

logger = structlog.get_logger(__name__)


@router.post("/assign", response_model=AssignTemplateResponse)
async def assign_template(
    body: AssignTemplateRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = PlanAssignmentService(db, user_id)
    instance_id = await svc.assign_template(
        body.plan_template_id,
        gym_profile_id=body.gym_profile_id,
        start_date=body.start_date,
        exclusions=body.exclusions,
    )
    return AssignTemplateResponse(instance_id=instance_id)


@router.post("/default", response_model=DefaultPlanResponse)
async def create_default_plan(
    body: DefaultPlanRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = PlanAssignmentService(db, user_id)
    return await svc.create_default_plan_for_user(
        body.goal,
        body.experience_level,
        body.days_per_week,
        gym_profile_id=body.gym_profile_id,
    )


@router.get("/active", response_model=ActivePlanResponse | None)
async def get_active_plan(db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    svc = PlanProgressService(db, user_id)
    plan = await svc.get_active_plan()
    logger.info("fetched_active_plan", user_id=user_id, instance_id=plan.id if plan else None)
    return plan


@router.get("/today", response_model=TodayPlanSummaryResponse | None)
async def get_today_plan_summary(
    date: datetime | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = PlanProgressService(db, user_id)
    return await svc.get_today_plan_summary(date)


@router.get("/adherence", response_model=AdherenceResponse)
async def get_adherence(db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    svc = PlanProgressService(db, user_id)
    return await svc.get_adherence()


@router.get("/editing", response_model=PlanForEditingResponse | None)
async def get_plan_for_editing(db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    svc = WeeklyScheduleService(db, user_id)
    return await svc.get_plan_for_editing()


@router.post("/progress/{progress_id}/complete", response_model=ProgressEntryResponse)
async def mark_day_completed(
    progress_id: int,
    body: MarkDayCompletedRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = PlanProgressService(db, user_id)
    return await svc.mark_day_completed(
        progress_id,
        workout_id=body.workout_id,
        progression_decision=body.progression_decision,
        decision_reason=body.decision_reason,
    )


@router.post("/progress/{progress_id}/skip", response_model=ProgressEntryResponse)
async def mark_day_skipped(
    progress_id: int,
    body: MarkDaySkippedRequest | None = Body(None),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = PlanProgressService(db, user_id)
    return await svc.mark_day_skipped(progress_id, reason=body.reason if body else None)
