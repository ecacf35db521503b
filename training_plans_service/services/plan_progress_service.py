import math
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ProgressEntryNotFoundException
from ..metrics import PLAN_DAYS_COMPLETED_TOTAL, PLAN_DAYS_SKIPPED_TOTAL
from ..models.enums import ProgressionDecision, ProgressStatus
from ..models.templates import PlanDay, PlanTemplate
from ..models.user_plans import UserPlanDayProgress
from ..schemas.templates import PlanTemplateResponse
from ..schemas.user_plans import (
    ActivePlanResponse,
    AdherenceResponse,
    ProgressEntryResponse,
    TodayPlanSummaryResponse,
    UserPlanInstanceResponse,
)
from .plan_queries import build_day_response, get_active_instance, load_enriched_prescriptions, normalize_date_start

logger = structlog.get_logger(__name__)


def _scheduled_key(row: UserPlanDayProgress) -> tuple:
    # Rows without a date sort first
    return (row.scheduled_date is not None, row.scheduled_date or datetime.min, row.id)


def adherence_rate(planned: int, completed: int) -> int:
    if planned == 0:
        return 0
    return int(math.floor(completed * 100 / planned + 0.5))


class PlanProgressService:
    def __init__(self, db: AsyncSession, user_id: str):
        self.db = db
        self.user_id = user_id

    async def _get_owned_entry(self, progress_id: int) -> UserPlanDayProgress:
        entry = await self.db.get(UserPlanDayProgress, progress_id)
        if not entry or entry.user_id != self.user_id:
            raise ProgressEntryNotFoundException(progress_id)
        return entry

    async def _instance_progress(self, instance_id: int) -> list[UserPlanDayProgress]:
        stmt = select(UserPlanDayProgress).where(UserPlanDayProgress.plan_instance_id == instance_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def mark_day_completed(
        self,
        progress_id: int,
        workout_id: int,
        progression_decision: ProgressionDecision,
        decision_reason: str,
    ) -> UserPlanDayProgress:
        entry = await self._get_owned_entry(progress_id)
        entry.status = ProgressStatus.completed.value
        entry.workout_id = workout_id
        entry.progression_decision = ProgressionDecision(progression_decision).value
        entry.decision_reason = decision_reason
        entry.updated_at = datetime.utcnow()
        await self.db.commit()

        PLAN_DAYS_COMPLETED_TOTAL.inc()
        logger.info(
            "plan_day_completed",
            user_id=self.user_id,
            progress_id=progress_id,
            workout_id=workout_id,
            progression_decision=entry.progression_decision,
        )
        return entry

    async def mark_day_skipped(self, progress_id: int, reason: str | None = None) -> UserPlanDayProgress:
        entry = await self._get_owned_entry(progress_id)
        entry.status = ProgressStatus.skipped.value
        if reason is not None:
            entry.decision_reason = reason
        entry.updated_at = datetime.utcnow()
        await self.db.commit()

        PLAN_DAYS_SKIPPED_TOTAL.inc()
        logger.info("plan_day_skipped", user_id=self.user_id, progress_id=progress_id)
        return entry

    async def get_adherence(self) -> AdherenceResponse:
        instance = await get_active_instance(self.db, self.user_id)
        if not instance:
            return AdherenceResponse(planned_count=0, completed_count=0, skipped_count=0, adherence_rate=0)

        rows = await self._instance_progress(instance.id)
        planned = len(rows)
        completed = sum(1 for r in rows if r.status == ProgressStatus.completed.value)
        skipped = sum(1 for r in rows if r.status == ProgressStatus.skipped.value)
        return AdherenceResponse(
            planned_count=planned,
            completed_count=completed,
            skipped_count=skipped,
            adherence_rate=adherence_rate(planned, completed),
        )

    async def get_active_plan(self) -> ActivePlanResponse | None:
        instance = await get_active_instance(self.db, self.user_id)
        if not instance:
            return None

        template = await self.db.get(PlanTemplate, instance.plan_template_id)
        rows = sorted(await self._instance_progress(instance.id), key=_scheduled_key)

        day_ids = {r.plan_day_id for r in rows}
        days = {}
        if day_ids:
            res = await self.db.execute(select(PlanDay).where(PlanDay.id.in_(day_ids)))
            days = {d.id: d for d in res.scalars().all()}

        progress = []
        for row in rows:
            entry = ProgressEntryResponse.model_validate(row)
            day = days.get(row.plan_day_id)
            entry.day = build_day_response(day) if day else None
            progress.append(entry)

        return ActivePlanResponse(
            **UserPlanInstanceResponse.model_validate(instance).model_dump(),
            template=PlanTemplateResponse.model_validate(template) if template else None,
            progress=progress,
        )

    async def get_today_plan_summary(self, date: datetime | None = None) -> TodayPlanSummaryResponse | None:
        """
        Pick the session to show for ``date`` (defaults to today).

        A progress row scheduled on that calendar day wins; otherwise the
        earliest row still ``planned`` is offered as the next session.
        """
        instance = await get_active_instance(self.db, self.user_id)
        if not instance:
            return None

        target_day = normalize_date_start(date)
        rows = sorted(await self._instance_progress(instance.id), key=lambda r: r.id)
        today = next(
            (r for r in rows if r.scheduled_date and normalize_date_start(r.scheduled_date) == target_day),
            None,
        )
        next_planned = next(
            iter(sorted((r for r in rows if r.status == ProgressStatus.planned.value), key=_scheduled_key)),
            None,
        )

        target = today or next_planned
        day = await self.db.get(PlanDay, target.plan_day_id) if target else None
        if not target or not day:
            return TodayPlanSummaryResponse(active_plan_id=instance.id, has_session=False)

        prescriptions = await load_enriched_prescriptions(self.db, [day.id])
        return TodayPlanSummaryResponse(
            active_plan_id=instance.id,
            has_session=True,
            progress_id=target.id,
            plan_day_id=day.id,
            day_name=day.name,
            focus=day.focus,
            estimated_minutes=day.estimated_minutes,
            status=target.status,
            prescriptions=prescriptions.get(day.id, []),
        )
