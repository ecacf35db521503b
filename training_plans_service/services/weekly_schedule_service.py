from datetime import datetime, timedelta

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..exceptions import (
    InvalidStateException,
    PlanDayNotFoundException,
    PlanWeekNotFoundException,
    PrescriptionNotFoundException,
)
from ..metrics import PLAN_DAY_UPSERTS_TOTAL
from ..models.enums import ProgressStatus
from ..models.exercises import ExerciseLibraryItem
from ..models.templates import PlanDay, PlanPrescription, PlanTemplate, PlanWeek
from ..models.user_plans import UserPlanDayProgress, UserPlanInstance
from ..schemas.schedule import (
    PrescriptionOrderItem,
    RemovePrescriptionResponse,
    ScheduleDayResponse,
    UpsertWeekDayResponse,
    WeekScheduleResponse,
)
from ..schemas.user_plans import PlanForEditingResponse, UserPlanInstanceResponse
from .day_types import DayType, sunday_based_weekday, weekday_name
from .duplicate_day_reconciler import DuplicateDayReconciler
from .plan_queries import (
    count_template_days,
    day_sort_key,
    effective_weekdays,
    get_active_instance,
    load_enriched_prescriptions,
    load_template_weeks,
    prescription_sort_key,
)
from .template_catalog_service import TemplateCatalogService
from .week_resolver import resolve_current_week

logger = structlog.get_logger(__name__)

DAYS_IN_WEEK = 7
DEFAULT_TARGET_SETS = 3
DEFAULT_TARGET_REPS = "8-12"

STANDARD_EXERCISES: dict[str, list[str]] = {
    "push": ["Bench Press", "Overhead Press", "Incline Dumbbell Press", "Lateral Raise", "Triceps Pushdown"],
    "pull": ["Deadlift", "Pull-Up", "Barbell Row", "Face Pull", "Biceps Curl"],
    "legs": ["Back Squat", "Romanian Deadlift", "Leg Press", "Leg Curl", "Calf Raise"],
    "upper": ["Bench Press", "Barbell Row", "Overhead Press", "Pull-Up", "Biceps Curl", "Triceps Pushdown"],
    "lower": ["Back Squat", "Romanian Deadlift", "Walking Lunge", "Leg Curl", "Calf Raise"],
    "full body": ["Back Squat", "Bench Press", "Barbell Row", "Overhead Press", "Romanian Deadlift"],
}


class WeeklyScheduleService:
    """Projects the current template week onto a Sunday..Saturday view and owns its edit paths."""

    def __init__(self, db: AsyncSession, user_id: str | None = None):
        self.db = db
        self.user_id = user_id

    async def _load_instance_progress(self, instance_id: int) -> list[UserPlanDayProgress]:
        stmt = select(UserPlanDayProgress).where(UserPlanDayProgress.plan_instance_id == instance_id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def _require_day(self, plan_day_id: int) -> PlanDay:
        day = await self.db.get(PlanDay, plan_day_id)
        if not day:
            raise PlanDayNotFoundException(plan_day_id)
        return day

    async def get_current_week_schedule(self) -> WeekScheduleResponse | None:
        if not self.user_id:
            return None
        instance = await get_active_instance(self.db, self.user_id)
        if not instance:
            return None

        template = await self.db.get(PlanTemplate, instance.plan_template_id)
        weeks = await load_template_weeks(self.db, instance.plan_template_id)
        if not template or not weeks:
            return None

        progress_rows = await self._load_instance_progress(instance.id)
        template_days = await count_template_days(self.db, [w.id for w in weeks])
        current_week = resolve_current_week(progress_rows, len(weeks), template_days)
        week = next((w for w in weeks if w.week_number == current_week), weeks[current_week - 1])

        days = sorted(
            (await self.db.execute(select(PlanDay).where(PlanDay.week_id == week.id))).scalars().all(),
            key=day_sort_key,
        )
        by_weekday: dict[int, PlanDay] = {}
        for day_of_week, day in effective_weekdays(days):
            by_weekday.setdefault(day_of_week, day)

        progress_by_day = {}
        for row in sorted(progress_rows, key=lambda r: r.id):
            progress_by_day.setdefault(row.plan_day_id, row)

        prescriptions_by_day = await load_enriched_prescriptions(self.db, [d.id for d in by_weekday.values()])

        slots: list[ScheduleDayResponse] = []
        for day_of_week in range(DAYS_IN_WEEK):
            day = by_weekday.get(day_of_week)
            if day is None:
                rest = DayType.rest()
                slots.append(
                    ScheduleDayResponse(
                        id=None,
                        day_of_week=day_of_week,
                        weekday_name=weekday_name(day_of_week),
                        name=rest.focus,
                        focus=rest.focus,
                        day_type=rest.kind,
                        is_rest=True,
                        estimated_minutes=0,
                        status=ProgressStatus.planned,
                        prescriptions=[],
                        exists=False,
                    )
                )
                continue

            day_type = DayType.from_focus(day.focus)
            progress = progress_by_day.get(day.id)
            slots.append(
                ScheduleDayResponse(
                    id=day.id,
                    day_of_week=day_of_week,
                    weekday_name=weekday_name(day_of_week),
                    name=day.name,
                    focus=day.focus,
                    day_type=day_type.kind,
                    is_rest=day_type.is_rest,
                    estimated_minutes=day.estimated_minutes or 0,
                    status=progress.status if progress else ProgressStatus.planned,
                    progress_id=progress.id if progress else None,
                    prescriptions=prescriptions_by_day.get(day.id, []),
                    exists=True,
                )
            )

        return WeekScheduleResponse(
            plan_instance_id=instance.id,
            plan_template_id=instance.plan_template_id,
            plan_name=template.name,
            current_week=current_week,
            total_weeks=len(weeks),
            current_week_id=week.id,
            days=slots,
        )

    async def upsert_week_day(
        self,
        week_id: int,
        plan_template_id: int,
        day_of_week: int,
        focus: str,
        *,
        name: str | None = None,
        estimated_minutes: int | None = None,
        existing_plan_day_id: int | None = None,
    ) -> UpsertWeekDayResponse:
        """
        Create or update the plan day for one weekday of a week.

        The day already mapped to ``day_of_week`` wins over a caller-held
        ``existing_plan_day_id`` that points elsewhere. Two overlapping calls
        may still both insert; those duplicates are collapsed by the
        reconciler, which also runs here for the touched weekday when
        ``RECONCILE_ON_UPSERT`` is enabled.
        """
        if not 0 <= day_of_week < DAYS_IN_WEEK:
            raise InvalidStateException(f"day_of_week must be between 0 and 6, got {day_of_week}")

        week = await self.db.get(PlanWeek, week_id)
        if not week or week.plan_template_id != plan_template_id:
            raise PlanWeekNotFoundException(week_id)

        day_type = DayType.from_focus(focus)
        week_days = sorted(
            (await self.db.execute(select(PlanDay).where(PlanDay.week_id == week_id))).scalars().all(),
            key=day_sort_key,
        )
        canonical = next((d for slot, d in effective_weekdays(week_days) if slot == day_of_week), None)

        target: PlanDay | None = None
        resolved_existing = False
        if existing_plan_day_id is not None:
            passed = next((d for d in week_days if d.id == existing_plan_day_id), None)
            if canonical is not None and canonical.id != existing_plan_day_id:
                target = canonical
                resolved_existing = True
            elif passed is not None:
                target = passed
            else:
                logger.warning(
                    "upsert_week_day_stale_reference",
                    week_id=week_id,
                    day_of_week=day_of_week,
                    existing_plan_day_id=existing_plan_day_id,
                )
                target = canonical
        else:
            target = canonical

        created = False
        try:
            if target is not None:
                target.focus = day_type.focus
                target.day_of_week = day_of_week
                if name is not None:
                    target.name = name
                if estimated_minutes is not None:
                    target.estimated_minutes = estimated_minutes
                elif day_type.is_rest:
                    target.estimated_minutes = 0
                plan_day = target
            else:
                next_day_number = max((d.day_number or 0 for d in week_days), default=0) + 1
                if estimated_minutes is None:
                    template = await self.db.get(PlanTemplate, plan_template_id)
                    estimated_minutes = 0 if day_type.is_rest or not template else template.session_minutes
                plan_day = PlanDay(
                    plan_template_id=plan_template_id,
                    week_id=week_id,
                    day_number=next_day_number,
                    day_of_week=day_of_week,
                    name=name or day_type.focus,
                    focus=day_type.focus,
                    estimated_minutes=estimated_minutes,
                    created_at=datetime.utcnow(),
                )
                self.db.add(plan_day)
                await self.db.flush()
                created = True
                await self._ensure_progress_for_new_day(plan_day, week)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        plan_day_id = plan_day.id
        written = {"focus": day_type.focus}
        if name is not None:
            written["name"] = name
        if estimated_minutes is not None:
            written["estimated_minutes"] = estimated_minutes
        if get_settings().RECONCILE_ON_UPSERT:
            report = await DuplicateDayReconciler(self.db).reconcile_week_day(week_id, day_of_week)
            if report.groups and report.groups[0].canonical_day_id != plan_day_id:
                # The row just written lost the ranking; carry its edit over to the survivor
                plan_day_id = report.groups[0].canonical_day_id
                created = False
                resolved_existing = True
                survivor = await self._require_day(plan_day_id)
                for field, value in written.items():
                    setattr(survivor, field, value)
                await self.db.commit()

        PLAN_DAY_UPSERTS_TOTAL.labels(outcome="created" if created else "updated").inc()
        logger.info(
            "plan_week_day_upserted",
            week_id=week_id,
            day_of_week=day_of_week,
            plan_day_id=plan_day_id,
            created=created,
            resolved_existing=resolved_existing,
        )
        return UpsertWeekDayResponse(plan_day_id=plan_day_id, created=created, resolved_existing=resolved_existing)

    async def _ensure_progress_for_new_day(self, plan_day: PlanDay, week: PlanWeek) -> None:
        if not self.user_id:
            return
        instance = await get_active_instance(self.db, self.user_id)
        if not instance or instance.plan_template_id != plan_day.plan_template_id:
            return

        week_start = instance.start_date + timedelta(weeks=max(week.week_number - 1, 0))
        offset = (plan_day.day_of_week - sunday_based_weekday(week_start)) % DAYS_IN_WEEK
        self.db.add(
            UserPlanDayProgress(
                plan_instance_id=instance.id,
                user_id=self.user_id,
                plan_day_id=plan_day.id,
                status=ProgressStatus.planned.value,
                scheduled_date=week_start + timedelta(days=offset),
                updated_at=datetime.utcnow(),
            )
        )

    async def add_exercise_to_plan_day(
        self,
        plan_day_id: int,
        *,
        exercise_library_id: int | None = None,
        exercise_variant_id: int | None = None,
        target_sets: int = DEFAULT_TARGET_SETS,
        target_reps: str = DEFAULT_TARGET_REPS,
        target_rir: int | None = None,
        rest_seconds: int | None = None,
        notes: str | None = None,
    ) -> PlanPrescription:
        if exercise_library_id is None and exercise_variant_id is None:
            raise InvalidStateException("exercise_library_id or exercise_variant_id is required")
        await self._require_day(plan_day_id)

        max_order = (
            await self.db.execute(
                select(func.max(PlanPrescription.order)).where(PlanPrescription.plan_day_id == plan_day_id)
            )
        ).scalar()
        prescription = PlanPrescription(
            plan_day_id=plan_day_id,
            order=(max_order or 0) + 1,
            exercise_library_id=exercise_library_id,
            exercise_variant_id=exercise_variant_id,
            target_sets=target_sets,
            target_reps=target_reps,
            target_rir=target_rir,
            rest_seconds=rest_seconds,
            notes=notes,
            created_at=datetime.utcnow(),
        )
        self.db.add(prescription)
        await self.db.commit()
        logger.info(
            "plan_prescription_added",
            plan_day_id=plan_day_id,
            prescription_id=prescription.id,
            order=prescription.order,
        )
        return prescription

    async def remove_plan_prescription(self, prescription_id: int) -> RemovePrescriptionResponse:
        prescription = await self.db.get(PlanPrescription, prescription_id)
        if not prescription:
            return RemovePrescriptionResponse(success=True, already_deleted=True)
        await self.db.delete(prescription)
        await self.db.commit()
        logger.info("plan_prescription_removed", prescription_id=prescription_id)
        return RemovePrescriptionResponse(success=True, already_deleted=False)

    async def reorder_plan_prescriptions(
        self, plan_day_id: int, prescription_orders: list[PrescriptionOrderItem]
    ) -> list[int]:
        """Apply caller orders, then renumber the day 1..n so orders stay unique."""
        await self._require_day(plan_day_id)
        prescriptions = {
            p.id: p
            for p in (
                await self.db.execute(select(PlanPrescription).where(PlanPrescription.plan_day_id == plan_day_id))
            )
            .scalars()
            .all()
        }
        for item in prescription_orders:
            if item.prescription_id not in prescriptions:
                raise PrescriptionNotFoundException(item.prescription_id)

        for item in prescription_orders:
            prescriptions[item.prescription_id].order = item.new_order

        ordered = sorted(prescriptions.values(), key=prescription_sort_key)
        for position, prescription in enumerate(ordered, start=1):
            prescription.order = position
        await self.db.commit()
        return [p.id for p in ordered]

    async def quick_add_standard_exercises(self, plan_day_id: int, day_type: str) -> int:
        await self._require_day(plan_day_id)
        parsed = DayType.from_focus(day_type)
        if parsed.is_rest:
            return 0
        names = STANDARD_EXERCISES.get(parsed.focus.strip().lower(), [])
        if not names:
            return 0

        library = (
            await self.db.execute(
                select(ExerciseLibraryItem).where(func.lower(ExerciseLibraryItem.name).in_([n.lower() for n in names]))
            )
        ).scalars().all()
        by_name: dict[str, ExerciseLibraryItem] = {}
        for item in sorted(library, key=lambda i: i.id):
            by_name.setdefault(item.name.lower(), item)

        existing = (
            await self.db.execute(select(PlanPrescription).where(PlanPrescription.plan_day_id == plan_day_id))
        ).scalars().all()
        present = {p.exercise_library_id for p in existing if p.exercise_library_id is not None}
        next_order = max((p.order or 0 for p in existing), default=0)

        added = 0
        now = datetime.utcnow()
        for exercise_name in names:
            item = by_name.get(exercise_name.lower())
            if item is None or item.id in present:
                continue
            next_order += 1
            self.db.add(
                PlanPrescription(
                    plan_day_id=plan_day_id,
                    order=next_order,
                    exercise_library_id=item.id,
                    target_sets=DEFAULT_TARGET_SETS,
                    target_reps=DEFAULT_TARGET_REPS,
                    created_at=now,
                )
            )
            present.add(item.id)
            added += 1

        await self.db.commit()
        logger.info("standard_exercises_quick_added", plan_day_id=plan_day_id, day_type=parsed.focus, added=added)
        return added

    async def get_plan_for_editing(self) -> PlanForEditingResponse | None:
        if not self.user_id:
            return None
        instance: UserPlanInstance | None = await get_active_instance(self.db, self.user_id)
        if not instance:
            return None

        catalog = TemplateCatalogService(self.db, self.user_id)
        template = await catalog.get_template_with_structure(instance.plan_template_id)
        progress_rows = await self._load_instance_progress(instance.id)
        return PlanForEditingResponse(
            instance=UserPlanInstanceResponse.model_validate(instance),
            current_week=resolve_current_week(
                progress_rows, len(template.weeks), sum(len(w.days) for w in template.weeks)
            ),
            template=template,
        )

