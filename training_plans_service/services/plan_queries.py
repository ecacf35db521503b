"""Read helpers shared by the plan services."""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..logging_config import bind_plan_context
from ..models.enums import PlanStatus
from ..models.exercises import ExerciseLibraryItem, ExerciseVariant
from ..models.templates import PlanDay, PlanPrescription, PlanWeek
from ..models.user_plans import UserPlanInstance
from ..schemas.templates import PlanDayResponse, PlanPrescriptionResponse

DEFAULT_EXERCISE_NAME = "Exercise"


def normalize_date_start(value: datetime | None = None) -> datetime:
    moment = value or datetime.now()
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def prescription_sort_key(prescription: PlanPrescription) -> tuple:
    return (
        prescription.order if prescription.order is not None else 0,
        prescription.created_at or datetime.min,
        prescription.id or 0,
    )


def day_sort_key(day: PlanDay) -> tuple:
    return (day.day_number or 0, day.created_at or datetime.min, day.id or 0)


async def get_active_instance(db: AsyncSession, user_id: str) -> UserPlanInstance | None:
    stmt = (
        select(UserPlanInstance)
        .where(
            UserPlanInstance.user_id == user_id,
            UserPlanInstance.status == PlanStatus.active.value,
        )
        .order_by(UserPlanInstance.created_at.desc(), UserPlanInstance.id.desc())
    )
    instance = (await db.execute(stmt)).scalars().first()
    if instance is not None:
        bind_plan_context(plan_instance_id=instance.id)
    return instance


async def load_template_weeks(db: AsyncSession, plan_template_id: int) -> list[PlanWeek]:
    stmt = (
        select(PlanWeek)
        .where(PlanWeek.plan_template_id == plan_template_id)
        .order_by(PlanWeek.week_number.asc(), PlanWeek.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_template_days(db: AsyncSession, week_ids: Sequence[int]) -> int:
    if not week_ids:
        return 0
    stmt = select(func.count(PlanDay.id)).where(PlanDay.week_id.in_(list(week_ids)))
    return int((await db.execute(stmt)).scalar_one())


async def load_week_days(db: AsyncSession, week_ids: Sequence[int]) -> dict[int, list[PlanDay]]:
    if not week_ids:
        return {}
    stmt = select(PlanDay).where(PlanDay.week_id.in_(list(week_ids)))
    result = await db.execute(stmt)
    by_week: dict[int, list[PlanDay]] = defaultdict(list)
    for day in result.scalars().all():
        by_week[day.week_id].append(day)
    return {week_id: sorted(days, key=day_sort_key) for week_id, days in by_week.items()}


async def resolve_exercise_names(
    db: AsyncSession, prescriptions: Iterable[PlanPrescription]
) -> dict[int, str]:
    """Map prescription id -> display name via variant, then library, then a generic label."""
    items = list(prescriptions)
    variant_ids = {p.exercise_variant_id for p in items if p.exercise_variant_id is not None}
    library_ids = {p.exercise_library_id for p in items if p.exercise_library_id is not None}

    variant_names: dict[int, str] = {}
    if variant_ids:
        res = await db.execute(select(ExerciseVariant.id, ExerciseVariant.name).where(ExerciseVariant.id.in_(variant_ids)))
        variant_names = {row.id: row.name for row in res.all()}

    library_names: dict[int, str] = {}
    if library_ids:
        res = await db.execute(
            select(ExerciseLibraryItem.id, ExerciseLibraryItem.name).where(ExerciseLibraryItem.id.in_(library_ids))
        )
        library_names = {row.id: row.name for row in res.all()}

    names: dict[int, str] = {}
    for p in items:
        names[p.id] = (
            variant_names.get(p.exercise_variant_id)
            or library_names.get(p.exercise_library_id)
            or DEFAULT_EXERCISE_NAME
        )
    return names


async def load_enriched_prescriptions(
    db: AsyncSession, plan_day_ids: Sequence[int]
) -> dict[int, list[PlanPrescriptionResponse]]:
    if not plan_day_ids:
        return {}
    stmt = select(PlanPrescription).where(PlanPrescription.plan_day_id.in_(list(plan_day_ids)))
    result = await db.execute(stmt)
    prescriptions = sorted(result.scalars().all(), key=prescription_sort_key)
    names = await resolve_exercise_names(db, prescriptions)

    by_day: dict[int, list[PlanPrescriptionResponse]] = defaultdict(list)
    for p in prescriptions:
        response = PlanPrescriptionResponse.model_validate(p)
        response.exercise_name = names.get(p.id, DEFAULT_EXERCISE_NAME)
        by_day[p.plan_day_id].append(response)
    return dict(by_day)


def build_day_response(day: PlanDay, prescriptions: list[PlanPrescriptionResponse] | None = None) -> PlanDayResponse:
    return PlanDayResponse(
        id=day.id,
        plan_template_id=day.plan_template_id,
        week_id=day.week_id,
        day_number=day.day_number,
        day_of_week=day.day_of_week,
        name=day.name,
        focus=day.focus,
        estimated_minutes=day.estimated_minutes or 0,
        prescriptions=prescriptions or [],
    )


def effective_weekdays(days: Sequence[PlanDay]) -> list[tuple[int, PlanDay]]:
    """Pair each day (already in ``day_sort_key`` order) with the weekday slot it occupies."""
    # Rows created before weekday scheduling fall back to their position
    return [
        (day.day_of_week if day.day_of_week is not None else index % 7, day)
        for index, day in enumerate(days)
    ]
