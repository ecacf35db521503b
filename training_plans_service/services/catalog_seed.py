"""Built-in plan catalog seeding."""

from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.enums import ExperienceLevel, PlanGoal
from ..models.exercises import ExerciseLibraryItem, ExerciseVariant
from ..models.templates import PlanBlock, PlanDay, PlanPrescription, PlanTemplate, PlanWeek
from .template_catalog_service import to_slug

logger = structlog.get_logger(__name__)

TEMPLATE_CAP = 45
BLOCK_WEEKS = 4
PRESCRIPTIONS_PER_DAY = 6
BLOCK_NAME = "Base Accumulation"
PRIMARY_MOVEMENT_NOTE = "Primary movement: keep reps crisp and log top set."

SPLITS = (
    ("full_body", "Full Body", (3, 4)),
    ("upper_lower", "Upper/Lower", (4,)),
    ("ppl", "Push Pull Legs", (3, 5, 6)),
    ("powerbuilding", "Powerbuilding", (4, 5)),
    ("time_capped", "Time Capped", (3, 4, 5)),
)

FOCUS_BY_SPLIT = {
    "full_body": ["Full Body A", "Full Body B", "Full Body C", "Full Body D"],
    "upper_lower": ["Upper A", "Lower A", "Upper B", "Lower B"],
    "ppl": ["Push", "Pull", "Legs", "Push 2", "Pull 2", "Legs 2"],
    "powerbuilding": ["Upper Power", "Lower Power", "Upper Volume", "Lower Volume", "Weak Point"],
    "time_capped": ["Push Focus", "Pull Focus", "Lower Focus", "Full Body Density", "Conditioning + Core"],
}

DEFAULT_VARIANTS = (
    ("Back Squat", ["knee", "lower_back"]),
    ("Bench Press", ["shoulder"]),
    ("Deadlift", ["lower_back"]),
    ("Overhead Press", ["shoulder"]),
    ("Barbell Row", ["lower_back"]),
    ("Pull-Up", ["elbow"]),
    ("Romanian Deadlift", ["lower_back", "hamstring"]),
    ("Incline Dumbbell Press", ["shoulder"]),
    ("Leg Press", ["knee"]),
    ("Lateral Raise", []),
    ("Face Pull", []),
    ("Calf Raise", []),
)

DEFAULT_LIBRARY = (
    ("Bench Press", "chest"),
    ("Overhead Press", "shoulders"),
    ("Incline Dumbbell Press", "chest"),
    ("Lateral Raise", "shoulders"),
    ("Triceps Pushdown", "arms"),
    ("Deadlift", "back"),
    ("Pull-Up", "back"),
    ("Barbell Row", "back"),
    ("Face Pull", "shoulders"),
    ("Biceps Curl", "arms"),
    ("Back Squat", "legs"),
    ("Romanian Deadlift", "legs"),
    ("Leg Press", "legs"),
    ("Leg Curl", "legs"),
    ("Calf Raise", "legs"),
    ("Walking Lunge", "legs"),
)


def default_session_minutes(goal: str, split_key: str) -> int:
    if split_key == "time_capped":
        return 45
    if goal == PlanGoal.strength.value:
        return 70
    if goal == PlanGoal.hypertrophy.value:
        return 65
    return 55


def default_prescription_reps(goal: str, focus: str) -> str:
    if goal == PlanGoal.strength.value and "power" in focus.lower():
        return "3-5"
    if goal == PlanGoal.strength.value:
        return "4-6"
    if goal == PlanGoal.hypertrophy.value:
        return "8-12"
    return "6-10"


def iter_template_definitions():
    """Yield (goal, level, split_key, split_label, days) combinations, capped at TEMPLATE_CAP."""
    produced = 0
    for goal in PlanGoal:
        for level in ExperienceLevel:
            for split_key, split_label, day_options in SPLITS:
                for days in day_options:
                    if produced >= TEMPLATE_CAP:
                        return
                    produced += 1
                    yield goal.value, level.value, split_key, split_label, days


async def _ensure_exercise_pool(db: AsyncSession, now: datetime) -> list[ExerciseVariant]:
    variants = list((await db.execute(select(ExerciseVariant).order_by(ExerciseVariant.id.asc()))).scalars().all())
    if not variants:
        variants = [ExerciseVariant(name=name, contraindication_tags=tags, created_at=now) for name, tags in DEFAULT_VARIANTS]
        db.add_all(variants)

    library_count = (await db.execute(select(func.count(ExerciseLibraryItem.id)))).scalar() or 0
    if library_count == 0:
        db.add_all(ExerciseLibraryItem(name=name, category=category, created_at=now) for name, category in DEFAULT_LIBRARY)

    await db.flush()
    return variants


async def seed_plan_templates(db: AsyncSession) -> dict:
    existing = (await db.execute(select(func.count(PlanTemplate.id)))).scalar() or 0
    if existing:
        logger.info("plan_templates_seed_skipped", count=existing)
        return {"created": False, "count": existing}

    now = datetime.utcnow()
    created = 0
    try:
        variants = await _ensure_exercise_pool(db, now)
        variant_cursor = 0

        for goal, level, split_key, split_label, days in iter_template_definitions():
            name = f"{split_label} {goal.replace('_', ' ')} {level} ({days}d)"
            minutes = default_session_minutes(goal, split_key)
            template = PlanTemplate(
                name=name,
                slug=to_slug(name),
                goal=goal,
                experience_level=level,
                days_per_week=days,
                session_minutes=minutes,
                description=f"Built-in {split_label} plan targeting {goal} outcomes for {level} lifters.",
                is_built_in=True,
                created_at=now,
            )
            db.add(template)
            await db.flush()

            block = PlanBlock(
                plan_template_id=template.id, block_order=1, name=BLOCK_NAME, weeks=BLOCK_WEEKS, created_at=now
            )
            db.add(block)
            await db.flush()

            focus_options = FOCUS_BY_SPLIT[split_key]
            for week_number in range(1, BLOCK_WEEKS + 1):
                week = PlanWeek(plan_template_id=template.id, block_id=block.id, week_number=week_number, created_at=now)
                db.add(week)
                await db.flush()

                for day_number in range(1, days + 1):
                    focus = focus_options[(day_number - 1) % len(focus_options)]
                    day = PlanDay(
                        plan_template_id=template.id,
                        week_id=week.id,
                        day_number=day_number,
                        name=f"{focus} - Week {week_number}",
                        focus=focus,
                        estimated_minutes=minutes,
                        created_at=now,
                    )
                    db.add(day)
                    await db.flush()

                    for order in range(1, PRESCRIPTIONS_PER_DAY + 1):
                        variant = variants[variant_cursor % len(variants)]
                        variant_cursor += 1
                        db.add(
                            PlanPrescription(
                                plan_day_id=day.id,
                                order=order,
                                exercise_variant_id=variant.id,
                                target_sets=4 if order <= 2 else 3,
                                target_reps=default_prescription_reps(goal, focus),
                                target_rir=2 if goal == PlanGoal.strength.value else 1,
                                rest_seconds=150 if order <= 2 else 90,
                                notes=PRIMARY_MOVEMENT_NOTE if order == 1 else None,
                                substitution_tags=variant.contraindication_tags,
                                created_at=now,
                            )
                        )
            created += 1

        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("plan_templates_seed_failed", created=created)
        raise

    logger.info("plan_templates_seeded", count=created)
    return {"created": True, "count": created}
