from datetime import datetime, timedelta

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import NoMatchingTemplateException, PlanTemplateNotFoundException
from ..logging_config import bind_plan_context
from ..metrics import PLAN_INSTANCES_PAUSED_TOTAL, PLAN_TEMPLATES_ASSIGNED_TOTAL
from ..models.enums import ExperienceLevel, PlanGoal, PlanStatus, ProgressStatus
from ..models.templates import PlanDay, PlanTemplate, PlanWeek
from ..models.user_plans import UserPlanDayProgress, UserPlanInstance
from ..schemas.user_plans import DefaultPlanResponse
from .plan_queries import normalize_date_start

logger = structlog.get_logger(__name__)


class PlanAssignmentService:
    def __init__(self, db: AsyncSession, user_id: str):
        self.db = db
        self.user_id = user_id

    def _require_user_id(self) -> str:
        if not self.user_id:
            raise ValueError("User context required")
        return self.user_id

    async def assign_template(
        self,
        plan_template_id: int,
        *,
        gym_profile_id: int | None = None,
        start_date: datetime | None = None,
        exclusions: list[str] | None = None,
    ) -> int:
        """
        Bind a template to the user as the single active plan instance.

        Prior active instances are paused, and week 1 of the template is
        materialized into ``planned`` progress rows. Everything is written
        in one commit; on failure the session is rolled back so callers can
        retry the whole assignment.
        """
        user_id = self._require_user_id()
        try:
            template = await self.db.get(PlanTemplate, plan_template_id)
            if not template or (template.user_id is not None and template.user_id != user_id):
                raise PlanTemplateNotFoundException(plan_template_id)

            now = datetime.utcnow()
            paused = await self.db.execute(
                update(UserPlanInstance)
                .where(
                    UserPlanInstance.user_id == user_id,
                    UserPlanInstance.status == PlanStatus.active.value,
                )
                .values(status=PlanStatus.paused.value, updated_at=now)
                .execution_options(synchronize_session="fetch")
            )

            start = normalize_date_start(start_date)
            instance = UserPlanInstance(
                user_id=user_id,
                plan_template_id=template.id,
                gym_profile_id=gym_profile_id,
                start_date=start,
                status=PlanStatus.active.value,
                goal=template.goal,
                days_per_week=template.days_per_week,
                session_minutes=template.session_minutes,
                exclusions=exclusions,
                created_at=now,
                updated_at=now,
            )
            self.db.add(instance)
            await self.db.flush()

            week_one = (
                await self.db.execute(
                    select(PlanWeek)
                    .where(PlanWeek.plan_template_id == template.id, PlanWeek.week_number == 1)
                    .order_by(PlanWeek.id.asc())
                )
            ).scalars().first()

            progress_rows = 0
            if week_one:
                days = (
                    await self.db.execute(
                        select(PlanDay)
                        .where(PlanDay.week_id == week_one.id)
                        .order_by(PlanDay.day_number.asc(), PlanDay.id.asc())
                    )
                ).scalars().all()
                for day in days:
                    self.db.add(
                        UserPlanDayProgress(
                            plan_instance_id=instance.id,
                            user_id=user_id,
                            plan_day_id=day.id,
                            status=ProgressStatus.planned.value,
                            scheduled_date=start + timedelta(days=day.day_number - 1),
                            updated_at=now,
                        )
                    )
                    progress_rows += 1

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        bind_plan_context(plan_instance_id=instance.id)
        paused_count = paused.rowcount or 0
        if paused_count > 0:
            PLAN_INSTANCES_PAUSED_TOTAL.inc(paused_count)
        PLAN_TEMPLATES_ASSIGNED_TOTAL.inc()
        logger.info(
            "plan_template_assigned",
            user_id=user_id,
            plan_template_id=template.id,
            instance_id=instance.id,
            paused_instances=paused_count,
            progress_rows=progress_rows,
            has_week_one=week_one is not None,
        )
        return instance.id

    async def create_default_plan_for_user(
        self,
        goal: PlanGoal,
        experience_level: ExperienceLevel,
        days_per_week: int,
        *,
        gym_profile_id: int | None = None,
    ) -> DefaultPlanResponse:
        stmt = (
            select(PlanTemplate)
            .where(
                PlanTemplate.goal == PlanGoal(goal).value,
                PlanTemplate.experience_level == ExperienceLevel(experience_level).value,
                PlanTemplate.days_per_week == days_per_week,
                PlanTemplate.user_id.is_(None),
            )
            .order_by(PlanTemplate.id.asc())
        )
        match = (await self.db.execute(stmt)).scalars().first()
        if not match:
            logger.info(
                "default_plan_no_matching_template",
                user_id=self.user_id,
                goal=PlanGoal(goal).value,
                experience_level=ExperienceLevel(experience_level).value,
                days_per_week=days_per_week,
            )
            raise NoMatchingTemplateException()

        instance_id = await self.assign_template(match.id, gym_profile_id=gym_profile_id)
        return DefaultPlanResponse(instance_id=instance_id, plan_template_id=match.id)
