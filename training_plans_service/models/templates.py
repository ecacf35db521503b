from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PlanTemplate(Base):
    __tablename__ = "plan_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    goal = Column(String(32), nullable=False, index=True)
    experience_level = Column(String(32), nullable=False, index=True)
    days_per_week = Column(Integer, nullable=False)
    session_minutes = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    is_built_in = Column(Boolean, nullable=False, default=True)
    # Owner of a custom plan; built-in templates have none
    user_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PlanTemplate(id={self.id}, name='{self.name}')>"


class PlanBlock(Base):
    __tablename__ = "plan_blocks"

    id = Column(Integer, primary_key=True, index=True)
    plan_template_id = Column(Integer, ForeignKey("plan_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    block_order = Column(Integer, nullable=False, default=1)
    name = Column(String(255), nullable=False)
    weeks = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PlanBlock(id={self.id}, plan_template_id={self.plan_template_id}, order={self.block_order})>"


class PlanWeek(Base):
    __tablename__ = "plan_weeks"

    id = Column(Integer, primary_key=True, index=True)
    plan_template_id = Column(Integer, ForeignKey("plan_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    block_id = Column(Integer, ForeignKey("plan_blocks.id", ondelete="SET NULL"), nullable=True)
    week_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PlanWeek(id={self.id}, plan_template_id={self.plan_template_id}, week={self.week_number})>"


class PlanDay(Base):
    __tablename__ = "plan_days"

    id = Column(Integer, primary_key=True, index=True)
    plan_template_id = Column(Integer, ForeignKey("plan_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    week_id = Column(Integer, ForeignKey("plan_weeks.id", ondelete="CASCADE"), nullable=False, index=True)
    day_number = Column(Integer, nullable=False)
    # 0=Sunday..6=Saturday; NULL on rows that predate weekday scheduling.
    # Intentionally not unique per week, see DuplicateDayReconciler.
    day_of_week = Column(Integer, nullable=True)
    name = Column(String(255), nullable=False)
    focus = Column(String(255), nullable=False)
    estimated_minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (
            "<PlanDay("
            f"id={self.id}, week_id={self.week_id}, "
            f"day_number={self.day_number}, day_of_week={self.day_of_week}, focus='{self.focus}')>"
        )


class PlanPrescription(Base):
    __tablename__ = "plan_prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    plan_day_id = Column(Integer, ForeignKey("plan_days.id", ondelete="CASCADE"), nullable=False, index=True)
    order = Column(Integer, nullable=False, default=1)
    exercise_variant_id = Column(Integer, ForeignKey("exercise_variants.id", ondelete="SET NULL"), nullable=True)
    exercise_library_id = Column(Integer, ForeignKey("exercise_library.id", ondelete="SET NULL"), nullable=True)
    target_sets = Column(Integer, nullable=False, default=3)
    target_reps = Column(String(32), nullable=False, default="8-12")
    target_rir = Column(Integer, nullable=True)
    rest_seconds = Column(Integer, nullable=True)
    notes = Column(String(512), nullable=True)
    substitution_tags = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<PlanPrescription(id={self.id}, plan_day_id={self.plan_day_id}, order={self.order})>"
