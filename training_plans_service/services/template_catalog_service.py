import re
from datetime import datetime

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import PlanTemplateNotFoundException
from ..models.enums import ExperienceLevel, PlanGoal
from ..models.templates import PlanDay, PlanPrescription, PlanTemplate, PlanWeek
from ..schemas.templates import (
    CustomPlanCreate,
    PlanTemplateResponse,
    PlanTemplateStructureResponse,
    PlanWeekResponse,
)
from .plan_queries import build_day_response, load_enriched_prescriptions, load_template_weeks, load_week_days

logger = structlog.get_logger(__name__)

CUSTOM_PLAN_SESSION_MINUTES = 60


def to_slug(value: str) -> str:
    return re.sub(r"(^-|-$)", "", re.sub(r"[^a-z0-9]+", "-", value.lower()))


class TemplateCatalogService:
    def __init__(self, db: AsyncSession, user_id: str | None = None):
        self.db = db
        self.user_id = user_id

    def _require_user_id(self) -> str:
        if not self.user_id:
            raise ValueError("User context required")
        return self.user_id

    def _visible_clause(self):
        if self.user_id:
            return or_(PlanTemplate.user_id.is_(None), PlanTemplate.user_id == self.user_id)
        return PlanTemplate.user_id.is_(None)

    async def get_template(self, template_id: int) -> PlanTemplate:
        stmt = select(PlanTemplate).where(PlanTemplate.id == template_id, self._visible_clause())
        res = await self.db.execute(stmt)
        template = res.scalars().first()
        if not template:
            raise PlanTemplateNotFoundException(template_id)
        return template

    async def list_templates(
        self,
        goal: PlanGoal | None = None,
        experience_level: ExperienceLevel | None = None,
        days_per_week: int | None = None,
    ) -> list[PlanTemplateResponse]:
        stmt = select(PlanTemplate).where(self._visible_clause())
        if goal:
            stmt = stmt.where(PlanTemplate.goal == PlanGoal(goal).value)
        if experience_level:
            stmt = stmt.where(PlanTemplate.experience_level == ExperienceLevel(experience_level).value)
        if days_per_week:
            stmt = stmt.where(PlanTemplate.days_per_week == days_per_week)
        res = await self.db.execute(stmt.order_by(PlanTemplate.name.asc(), PlanTemplate.id.asc()))
        return [PlanTemplateResponse.model_validate(t) for t in res.scalars().all()]

    async def get_template_with_structure(self, template_id: int) -> PlanTemplateStructureResponse:
        template = await self.get_template(template_id)
        weeks = await self.build_weeks_structure(template.id)
        return PlanTemplateStructureResponse(
            **PlanTemplateResponse.model_validate(template).model_dump(),
            weeks=weeks,
        )

    async def build_weeks_structure(self, template_id: int) -> list[PlanWeekResponse]:
        weeks = await load_template_weeks(self.db, template_id)
        days_by_week = await load_week_days(self.db, [w.id for w in weeks])
        day_ids = [d.id for days in days_by_week.values() for d in days]
        prescriptions_by_day = await load_enriched_prescriptions(self.db, day_ids)

        return [
            PlanWeekResponse(
                id=week.id,
                plan_template_id=week.plan_template_id,
                block_id=week.block_id,
                week_number=week.week_number,
                days=[build_day_response(d, prescriptions_by_day.get(d.id)) for d in days_by_week.get(week.id, [])],
            )
            for week in weeks
        ]

    async def create_custom_plan(self, payload: CustomPlanCreate) -> int:
        user_id = self._require_user_id()
        now = datetime.utcnow()

        template = PlanTemplate(
            user_id=user_id,
            name=payload.name,
            slug=f"custom-{to_slug(user_id)}-{int(now.timestamp() * 1000)}",
            goal=PlanGoal.general_fitness.value,
            experience_level=ExperienceLevel.intermediate.value,
            days_per_week=len(payload.days),
            session_minutes=CUSTOM_PLAN_SESSION_MINUTES,
            is_built_in=False,
            created_at=now,
        )
        self.db.add(template)
        await self.db.flush()

        week = PlanWeek(plan_template_id=template.id, week_number=1, created_at=now)
        self.db.add(week)
        await self.db.flush()

        for day_number, day_data in enumerate(payload.days, start=1):
            day = PlanDay(
                plan_template_id=template.id,
                week_id=week.id,
                day_number=day_number,
                name=day_data.name,
                focus=day_data.name,
                estimated_minutes=CUSTOM_PLAN_SESSION_MINUTES,
                created_at=now,
            )
            self.db.add(day)
            await self.db.flush()

            for order, exercise in enumerate(day_data.exercises, start=1):
                self.db.add(
                    PlanPrescription(
                        plan_day_id=day.id,
                        order=order,
                        exercise_library_id=exercise.exercise_library_id,
                        target_sets=exercise.target_sets,
                        target_reps=exercise.target_reps,
                        created_at=now,
                    )
                )

        await self.db.commit()
        logger.info("custom_plan_created", user_id=user_id, plan_template_id=template.id, days=len(payload.days))
        return template.id
