from pydantic import BaseModel, Field, model_validator

from ..models.enums import ProgressStatus
from ..services.day_types import DayKind
from .templates import PlanPrescriptionResponse


class ScheduleDayResponse(BaseModel):
    id: int | None = None
    day_of_week: int = Field(..., ge=0, le=6)
    weekday_name: str
    name: str
    focus: str
    day_type: DayKind
    is_rest: bool
    estimated_minutes: int
    status: ProgressStatus = ProgressStatus.planned
    progress_id: int | None = None
    prescriptions: list[PlanPrescriptionResponse] = Field(default_factory=list)
    exists: bool


class WeekScheduleResponse(BaseModel):
    plan_instance_id: int
    plan_template_id: int
    plan_name: str
    current_week: int
    total_weeks: int
    current_week_id: int
    days: list[ScheduleDayResponse]


class UpsertWeekDayRequest(BaseModel):
    plan_template_id: int
    day_of_week: int = Field(..., ge=0, le=6)
    focus: str = Field(..., min_length=1, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    estimated_minutes: int | None = Field(default=None, ge=0, le=600)
    existing_plan_day_id: int | None = None


class UpsertWeekDayResponse(BaseModel):
    plan_day_id: int
    created: bool
    resolved_existing: bool


class AddExerciseRequest(BaseModel):
    exercise_library_id: int | None = None
    exercise_variant_id: int | None = None
    target_sets: int = Field(default=3, ge=1, le=20)
    target_reps: str = Field(default="8-12", max_length=32)
    target_rir: int | None = Field(default=None, ge=0, le=10)
    rest_seconds: int | None = Field(default=None, ge=0, le=900)
    notes: str | None = Field(default=None, max_length=512)

    @model_validator(mode="after")
    def require_exercise_reference(self):
        if self.exercise_library_id is None and self.exercise_variant_id is None:
            raise ValueError("exercise_library_id or exercise_variant_id is required")
        return self


class AddExerciseResponse(BaseModel):
    prescription_id: int
    order: int


class PrescriptionOrderItem(BaseModel):
    prescription_id: int
    new_order: int = Field(..., ge=0)


class ReorderPrescriptionsRequest(BaseModel):
    prescription_orders: list[PrescriptionOrderItem]


class RemovePrescriptionResponse(BaseModel):
    success: bool
    already_deleted: bool


class QuickAddRequest(BaseModel):
    day_type: str = Field(..., min_length=1, max_length=255)


class QuickAddResponse(BaseModel):
    added: int
