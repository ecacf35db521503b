from datetime import datetime

from pydantic import BaseModel, Field

from ..models.enums import ExperienceLevel, PlanGoal, PlanStatus, ProgressionDecision, ProgressStatus
from .templates import PlanDayResponse, PlanPrescriptionResponse, PlanTemplateResponse, PlanTemplateStructureResponse


class AssignTemplateRequest(BaseModel):
    plan_template_id: int
    gym_profile_id: int | None = None
    start_date: datetime | None = None
    exclusions: list[str] | None = None


class AssignTemplateResponse(BaseModel):
    instance_id: int


class DefaultPlanRequest(BaseModel):
    goal: PlanGoal
    experience_level: ExperienceLevel
    days_per_week: int = Field(..., ge=1, le=7)
    gym_profile_id: int | None = None


class DefaultPlanResponse(BaseModel):
    instance_id: int
    plan_template_id: int


class UserPlanInstanceResponse(BaseModel):
    id: int
    user_id: str
    plan_template_id: int
    gym_profile_id: int | None = None
    start_date: datetime
    status: PlanStatus
    goal: PlanGoal
    days_per_week: int
    session_minutes: int
    exclusions: list[str] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ProgressEntryResponse(BaseModel):
    id: int
    plan_instance_id: int
    user_id: str
    plan_day_id: int
    scheduled_date: datetime | None = None
    status: ProgressStatus
    workout_id: int | None = None
    progression_decision: ProgressionDecision | None = None
    decision_reason: str | None = None
    updated_at: datetime | None = None
    day: PlanDayResponse | None = None

    class Config:
        from_attributes = True


class ActivePlanResponse(UserPlanInstanceResponse):
    template: PlanTemplateResponse | None = None
    progress: list[ProgressEntryResponse] = Field(default_factory=list)


class TodayPlanSummaryResponse(BaseModel):
    active_plan_id: int
    has_session: bool
    progress_id: int | None = None
    plan_day_id: int | None = None
    day_name: str | None = None
    focus: str | None = None
    estimated_minutes: int | None = None
    status: ProgressStatus | None = None
    prescriptions: list[PlanPrescriptionResponse] = Field(default_factory=list)


class MarkDayCompletedRequest(BaseModel):
    workout_id: int
    progression_decision: ProgressionDecision
    decision_reason: str = Field(..., max_length=512)


class MarkDaySkippedRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=512)


class AdherenceResponse(BaseModel):
    planned_count: int
    completed_count: int
    skipped_count: int
    adherence_rate: int = Field(..., ge=0, le=100)


class PlanForEditingResponse(BaseModel):
    instance: UserPlanInstanceResponse
    current_week: int
    template: PlanTemplateStructureResponse
