from __future__ import annotations

import structlog
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user_id, get_db
from ..models.enums import ExperienceLevel, PlanGoal
from ..schemas.templates import (
    CustomPlanCreate,
    CustomPlanCreatedResponse,
    PlanTemplateResponse,
    PlanTemplateStructureResponse,
)
from ..services.template_catalog_service import TemplateCatalogService

router = APIRouter(prefix="/templates")

logger = structlog.get_logger(__name__)


@router.get("", response_model=list[PlanTemplateResponse])
async def list_templates(
    goal: PlanGoal | None = Query(None),
    experience_level: ExperienceLevel | None = Query(None),
    days_per_week: int | None = Query(None, ge=1, le=7),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = TemplateCatalogService(db, user_id)
    return await svc.list_templates(goal=goal, experience_level=experience_level, days_per_week=days_per_week)


@router.post("/custom", response_model=CustomPlanCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_custom_plan(
    body: CustomPlanCreate = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = TemplateCatalogService(db, user_id)
    template_id = await svc.create_custom_plan(body)
    return CustomPlanCreatedResponse(plan_template_id=template_id)


@router.get("/{template_id}", response_model=PlanTemplateStructureResponse)
async def get_template_with_structure(
    template_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = TemplateCatalogService(db, user_id)
    return await svc.get_template_with_structure(template_id)
