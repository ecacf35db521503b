from enum import Enum


class PlanGoal(str, Enum):
    strength = "strength"
    hypertrophy = "hypertrophy"
    general_fitness = "general_fitness"


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class PlanStatus(str, Enum):
    active = "active"
    paused = "paused"
    completed = "completed"
    cancelled = "cancelled"


class ProgressStatus(str, Enum):
    planned = "planned"
    completed = "completed"
    skipped = "skipped"


class ProgressionDecision(str, Enum):
    increase = "increase"
    hold = "hold"
    reduce = "reduce"
