from .enums import (  # noqa: F401
    ExperienceLevel,
    PlanGoal,
    PlanStatus,
    ProgressionDecision,
    ProgressStatus,
)
from .exercises import ExerciseLibraryItem, ExerciseVariant  # noqa: F401
from .templates import Base, PlanBlock, PlanDay, PlanPrescription, PlanTemplate, PlanWeek  # noqa: F401
from .user_plans import UserPlanDayProgress, UserPlanInstance  # noqa: F401

__all__ = [
    "Base",
    "ExerciseLibraryItem",
    "ExerciseVariant",
    "ExperienceLevel",
    "PlanBlock",
    "PlanDay",
    "PlanGoal",
    "PlanPrescription",
    "PlanStatus",
    "PlanTemplate",
    "PlanWeek",
    "ProgressStatus",
    "ProgressionDecision",
    "UserPlanDayProgress",
    "UserPlanInstance",
]
