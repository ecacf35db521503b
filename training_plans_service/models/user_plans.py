from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String

from .enums import PlanStatus, ProgressStatus
from .templates import Base


class UserPlanInstance(Base):
    __tablename__ = "user_plan_instances"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    plan_template_id = Column(Integer, ForeignKey("plan_templates.id", ondelete="CASCADE"), nullable=False)
    gym_profile_id = Column(Integer, nullable=True)
    start_date = Column(DateTime, nullable=False)
    status = Column(String(32), nullable=False, default=PlanStatus.active.value, index=True)
    goal = Column(String(32), nullable=False)
    days_per_week = Column(Integer, nullable=False)
    session_minutes = Column(Integer, nullable=False)
    exclusions = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (
            "<UserPlanInstance("
            f"id={self.id}, user_id='{self.user_id}', "
            f"plan_template_id={self.plan_template_id}, status='{self.status}')>"
        )


class UserPlanDayProgress(Base):
    __tablename__ = "user_plan_day_progress"

    id = Column(Integer, primary_key=True, index=True)
    plan_instance_id = Column(
        Integer, ForeignKey("user_plan_instances.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(255), nullable=False, index=True)
    plan_day_id = Column(Integer, ForeignKey("plan_days.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_date = Column(DateTime, nullable=True)
    status = Column(String(16), nullable=False, default=ProgressStatus.planned.value)
    workout_id = Column(Integer, nullable=True)  # From workouts-service Workout.id
    progression_decision = Column(String(16), nullable=True)
    decision_reason = Column(String(512), nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (
            "<UserPlanDayProgress("
            f"id={self.id}, plan_instance_id={self.plan_instance_id}, "
            f"plan_day_id={self.plan_day_id}, status='{self.status}')>"
        )
