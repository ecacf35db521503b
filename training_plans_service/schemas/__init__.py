from .maintenance import CleanupReport, DuplicateGroupReport, TaskStatusResponse, TaskSubmissionResponse
from .schedule import (
    AddExerciseRequest,
    AddExerciseResponse,
    PrescriptionOrderItem,
    QuickAddRequest,
    QuickAddResponse,
    RemovePrescriptionResponse,
    ReorderPrescriptionsRequest,
    ScheduleDayResponse,
    UpsertWeekDayRequest,
    UpsertWeekDayResponse,
    WeekScheduleResponse,
)
from .templates import (
    CustomPlanCreate,
    CustomPlanCreatedResponse,
    CustomPlanDay,
    CustomPlanExercise,
    PlanDayResponse,
    PlanPrescriptionResponse,
    PlanTemplateResponse,
    PlanTemplateStructureResponse,
    PlanWeekResponse,
)
from .user_plans import (
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
    UserPlanInstanceResponse,
)

__all__ = [
    "ActivePlanResponse",
    "AddExerciseRequest",
    "AddExerciseResponse",
    "AdherenceResponse",
    "AssignTemplateRequest",
    "AssignTemplateResponse",
    "CleanupReport",
    "CustomPlanCreate",
    "CustomPlanCreatedResponse",
    "CustomPlanDay",
    "CustomPlanExercise",
    "DefaultPlanRequest",
    "DefaultPlanResponse",
    "DuplicateGroupReport",
    "MarkDayCompletedRequest",
    "MarkDaySkippedRequest",
    "PlanDayResponse",
    "PlanForEditingResponse",
    "PlanPrescriptionResponse",
    "PlanTemplateResponse",
    "PlanTemplateStructureResponse",
    "PlanWeekResponse",
    "PrescriptionOrderItem",
    "ProgressEntryResponse",
    "QuickAddRequest",
    "QuickAddResponse",
    "RemovePrescriptionResponse",
    "ReorderPrescriptionsRequest",
    "ScheduleDayResponse",
    "TaskStatusResponse",
    "TaskSubmissionResponse",
    "TodayPlanSummaryResponse",
    "UpsertWeekDayRequest",
    "UpsertWeekDayResponse",
    "UserPlanInstanceResponse",
    "WeekScheduleResponse",
]
