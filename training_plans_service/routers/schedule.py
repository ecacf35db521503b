from __future__ import annotations

import structlog
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..dependencies import get_current_user_id, get_db
from ..schemas.schedule import (
    AddExerciseRequest,
    AddExerciseResponse,
    QuickAddRequest,
    QuickAddResponse,
    RemovePrescriptionResponse,
    ReorderPrescriptionsRequest,
    UpsertWeekDayRequest,
    UpsertWeekDayResponse,
    WeekScheduleResponse,
)
from ..services.weekly_schedule_service import WeeklyScheduleService

router = APIRouter(prefix="/schedule")

logger = structlog.get_logger(__name__)


@router.get("/current-week", response_model=WeekScheduleResponse | None)
async def get_current_week_schedule(db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    svc = WeeklyScheduleService(db, user_id)
    return await svc.get_current_week_schedule()


@router.put("/weeks/{week_id}/days", response_model=UpsertWeekDayResponse)
async def upsert_week_day(
    week_id: int,
    body: UpsertWeekDayRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = WeeklyScheduleService(db, user_id)
    return await svc.upsert_week_day(
        week_id,
        body.plan_template_id,
        body.day_of_week,
        body.focus,
        name=body.name,
        estimated_minutes=body.estimated_minutes,
        existing_plan_day_id=body.existing_plan_day_id,
    )


@router.post(
    "/days/{plan_day_id}/prescriptions",
    response_model=AddExerciseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_exercise_to_plan_day(
    plan_day_id: int,
    body: AddExerciseRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = WeeklyScheduleService(db, user_id)
    prescription = await svc.add_exercise_to_plan_day(plan_day_id, **body.model_dump())
    return AddExerciseResponse(prescription_id=prescription.id, order=prescription.order)


@router.put("/days/{plan_day_id}/prescriptions/order", response_model=list[int])
async def reorder_plan_prescriptions(
    plan_day_id: int,
    body: ReorderPrescriptionsRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = WeeklyScheduleService(db, user_id)
    return await svc.reorder_plan_prescriptions(plan_day_id, body.prescription_orders)


@router.post("/days/{plan_day_id}/quick-add", response_model=QuickAddResponse)
async def quick_add_standard_exercises(
    plan_day_id: int,
    body: QuickAddRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = WeeklyScheduleService(db, user_id)
    added = await svc.quick_add_standard_exercises(plan_day_id, body.day_type)
    return QuickAddResponse(added=added)


@router.delete("/prescriptions/{prescription_id}", response_model=RemovePrescriptionResponse)
async def remove_plan_prescription(
    prescription_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    svc = WeeklyScheduleService(db, user_id)
    return await svc.remove_plan_prescription(prescription_id)
