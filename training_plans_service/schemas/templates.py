from datetime import datetime

from pydantic import BaseModel, Field

from ..models.enums import ExperienceLevel, PlanGoal


class PlanTemplateResponse(BaseModel):
    id: int
    name: str
    slug: str
    goal: PlanGoal
    experience_level: ExperienceLevel
    days_per_week: int
    session_minutes: int
    description: str | None = None
    is_built_in: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class PlanPrescriptionResponse(BaseModel):
    id: int
    plan_day_id: int
    order: int
    exercise_variant_id: int | None = None
    exercise_library_id: int | None = None
    exercise_name: str = "Exercise"
    target_sets: int
    target_reps: str
    target_rir: int | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    substitution_tags: list[str] | None = None

    class Config:
        from_attributes = True


class PlanDayResponse(BaseModel):
    id: int
    plan_template_id: int
    week_id: int
    day_number: int
    day_of_week: int | None = None
    name: str
    focus: str
    estimated_minutes: int
    prescriptions: list[PlanPrescriptionResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PlanWeekResponse(BaseModel):
    id: int
    plan_template_id: int
    block_id: int | None = None
    week_number: int
    days: list[PlanDayResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class PlanTemplateStructureResponse(PlanTemplateResponse):
    weeks: list[PlanWeekResponse] = Field(default_factory=list)


class CustomPlanExercise(BaseModel):
    exercise_library_id: int
    exercise_name: str | None = None
    target_sets: int = Field(..., ge=1, le=20)
    target_reps: str = Field(..., max_length=32)


class CustomPlanDay(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    exercises: list[CustomPlanExercise] = Field(default_factory=list)


class CustomPlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    days: list[CustomPlanDay] = Field(..., min_length=1, max_length=7)


class CustomPlanCreatedResponse(BaseModel):
    plan_template_id: int
