from datetime import datetime

from sqlalchemy import func, select

from factories import add_day, add_instance, add_prescriptions, add_progress, create_template
from training_plans_service.models import PlanDay, PlanPrescription, UserPlanDayProgress
from training_plans_service.services.duplicate_day_reconciler import (
    DayCandidate,
    DuplicateDayReconciler,
    merge_progress_fields,
    rank_richest_then_oldest,
)

OLD = datetime(2026, 1, 1)
NEW = datetime(2026, 1, 5)

COUNTERS = ("duplicate_groups", "prescriptions_moved", "progress_entries_repointed", "progress_entries_merged", "deleted_days")


def _counters(report):
    return {name: getattr(report, name) for name in COUNTERS}


async def _week_prescription_count(db, week_id):
    stmt = (
        select(func.count(PlanPrescription.id))
        .join(PlanDay, PlanDay.id == PlanPrescription.plan_day_id)
        .where(PlanDay.week_id == week_id)
    )
    return (await db.execute(stmt)).scalar()


async def _scenario_c(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    instance = await add_instance(db, template)
    week = weeks[0]
    older = await add_day(db, week, day_of_week=2, day_number=1, created_at=OLD)
    newer = await add_day(db, week, day_of_week=2, day_number=2, created_at=NEW)
    await add_prescriptions(db, older, 3)
    await add_prescriptions(db, newer, 1)
    await add_progress(db, older, instance.id)
    await db.commit()
    return template, week, older, newer, instance


async def test_richer_older_day_absorbs_duplicate(db):
    _, week, older, newer, _ = await _scenario_c(db)

    report = await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=False)

    assert report.duplicate_groups == 1
    assert report.prescriptions_moved == 1
    assert report.deleted_days == 1
    assert report.groups[0].canonical_day_id == older.id
    assert report.groups[0].duplicate_day_ids == [newer.id]

    days = (await db.execute(select(PlanDay).where(PlanDay.week_id == week.id))).scalars().all()
    assert [d.id for d in days] == [older.id]
    orders = (
        await db.execute(select(PlanPrescription.order).where(PlanPrescription.plan_day_id == older.id))
    ).scalars().all()
    assert sorted(orders) == [1, 2, 3, 4]


async def test_dry_run_reports_same_counters_and_writes_nothing(db):
    _, week, older, newer, _ = await _scenario_c(db)
    reconciler = DuplicateDayReconciler(db)

    preview = await reconciler.cleanup_duplicate_plan_days(dry_run=True)

    assert preview.dry_run is True
    remaining = (await db.execute(select(PlanDay.id).where(PlanDay.week_id == week.id))).scalars().all()
    assert sorted(remaining) == [older.id, newer.id]
    assert (
        await db.execute(select(PlanPrescription.plan_day_id).where(PlanPrescription.plan_day_id == newer.id))
    ).scalars().all() == [newer.id]

    applied = await reconciler.cleanup_duplicate_plan_days(dry_run=False)

    assert _counters(preview) == _counters(applied)
    assert preview.groups == applied.groups


async def test_second_run_finds_nothing(db):
    await _scenario_c(db)
    reconciler = DuplicateDayReconciler(db)

    await reconciler.cleanup_duplicate_plan_days(dry_run=False)
    again = await reconciler.cleanup_duplicate_plan_days(dry_run=False)

    assert again.duplicate_groups == 0
    assert again.deleted_days == 0
    assert again.groups == []


async def test_progress_is_repointed_or_merged_per_instance(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    week = weeks[0]
    first = await add_instance(db, template, user_id="user-1", status="paused")
    second = await add_instance(db, template, user_id="user-1")
    third = await add_instance(db, template, user_id="user-3")

    canonical = await add_day(db, week, day_of_week=4, day_number=1, created_at=OLD)
    duplicate = await add_day(db, week, day_of_week=4, day_number=2, created_at=NEW)
    await add_prescriptions(db, canonical, 2)
    kept = await add_progress(db, canonical, first.id, status="planned", updated_at=datetime(2026, 1, 2))
    await add_progress(db, canonical, second.id, status="completed", workout_id=10)
    absorbed = await add_progress(
        db,
        duplicate,
        first.id,
        status="completed",
        workout_id=55,
        progression_decision="increase",
        decision_reason="top set moved well",
        updated_at=datetime(2026, 1, 9),
    )
    await add_progress(db, duplicate, second.id, status="skipped", workout_id=99)
    moved = await add_progress(db, duplicate, third.id, user_id="user-3", status="planned")
    await db.commit()

    report = await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=False)

    assert report.progress_entries_merged == 2
    assert report.progress_entries_repointed == 1

    rows = (
        await db.execute(select(UserPlanDayProgress).where(UserPlanDayProgress.plan_day_id == canonical.id))
    ).scalars().all()
    by_instance = {r.plan_instance_id: r for r in rows}
    assert set(by_instance) == {first.id, second.id, third.id}

    merged_first = by_instance[first.id]
    assert merged_first.id == kept.id
    assert merged_first.status == "completed"
    assert merged_first.workout_id == 55
    assert merged_first.progression_decision == "increase"
    assert merged_first.updated_at == datetime(2026, 1, 9)

    merged_second = by_instance[second.id]
    assert merged_second.status == "completed"
    assert merged_second.workout_id == 10

    assert by_instance[third.id].id == moved.id
    assert await db.get(UserPlanDayProgress, absorbed.id) is None


async def test_moved_prescriptions_keep_relative_order_after_canonical(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    week = weeks[0]
    canonical = await add_day(db, week, day_of_week=1, day_number=1, created_at=OLD)
    duplicate = await add_day(db, week, day_of_week=1, day_number=2, created_at=NEW)
    await add_prescriptions(db, canonical, 3, start_order=1)
    dup_rows = await add_prescriptions(db, duplicate, 2, start_order=5)
    await db.commit()
    before = await _week_prescription_count(db, week.id)

    await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=False)

    assert await _week_prescription_count(db, week.id) == before
    moved = {p.id: p.order for p in (await db.execute(select(PlanPrescription))).scalars().all()}
    assert [moved[p.id] for p in dup_rows] == [4, 5]


async def test_days_without_weekday_are_ignored(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=3)

    report = await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=False)

    assert report.duplicate_groups == 0
    assert len((await db.execute(select(PlanDay).where(PlanDay.week_id == weeks[0].id))).scalars().all()) == 3


async def test_tie_goes_to_oldest_then_lowest_id(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    week = weeks[0]
    late = await add_day(db, week, day_of_week=3, day_number=1, created_at=NEW)
    early = await add_day(db, week, day_of_week=3, day_number=2, created_at=OLD)
    twin = await add_day(db, week, day_of_week=3, day_number=3, created_at=OLD)
    await db.commit()

    report = await DuplicateDayReconciler(db).cleanup_duplicate_plan_days(dry_run=False)

    assert report.groups[0].canonical_day_id == early.id
    assert report.groups[0].duplicate_day_ids == [twin.id, late.id]
    assert report.deleted_days == 2


async def test_ranking_policy_is_swappable(db):
    _, _, older, newer, _ = await _scenario_c(db)

    def prefer_newest(candidates):
        return sorted(candidates, key=lambda c: c.day.created_at, reverse=True)

    report = await DuplicateDayReconciler(db, rank_policy=prefer_newest).cleanup_duplicate_plan_days(dry_run=False)

    assert report.groups[0].canonical_day_id == newer.id
    assert report.prescriptions_moved == 3
    assert report.progress_entries_repointed == 1
    assert await db.get(PlanDay, older.id) is None


async def test_reconcile_week_day_only_touches_that_weekday(db):
    template, weeks, _ = await create_template(db, weeks=2, days_per_week=0)
    for week in weeks:
        for day_number, day_of_week in enumerate((1, 1, 5, 5), start=1):
            await add_day(db, week, day_of_week=day_of_week, day_number=day_number)
    await db.commit()
    reconciler = DuplicateDayReconciler(db)

    scoped = await reconciler.reconcile_week_day(weeks[0].id, 1)

    assert scoped.duplicate_groups == 1
    remaining = await reconciler.cleanup_duplicate_plan_days(dry_run=True)
    assert {(g.week_id, g.day_of_week) for g in remaining.groups} == {
        (weeks[0].id, 5),
        (weeks[1].id, 1),
        (weeks[1].id, 5),
    }


def test_default_ranking_counts_prescriptions_and_progress():
    rich = DayCandidate(day=PlanDay(id=2, created_at=NEW), prescription_count=1, progress_count=2)
    poor = DayCandidate(day=PlanDay(id=1, created_at=OLD), prescription_count=2, progress_count=0)
    assert rank_richest_then_oldest([poor, rich])[0] is rich


def test_merge_fills_gaps_from_duplicate_only():
    canonical = UserPlanDayProgress(status="skipped", workout_id=None, decision_reason="kept", updated_at=NEW)
    duplicate = UserPlanDayProgress(status="planned", workout_id=8, decision_reason="dropped", updated_at=OLD)

    patch = merge_progress_fields(canonical, duplicate)

    assert patch["status"] == "skipped"
    assert patch["workout_id"] == 8
    assert patch["decision_reason"] == "kept"
    assert patch["updated_at"] == NEW


async def _three_way_duplicates(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    week = weeks[0]
    instances = [await add_instance(db, template, user_id=f"user-{n}", status="paused") for n in range(3)]
    richest = await add_day(db, week, day_of_week=1, day_number=1, created_at=OLD)
    middle = await add_day(db, week, day_of_week=1, day_number=2, created_at=datetime(2026, 1, 3))
    newest = await add_day(db, week, day_of_week=1, day_number=3, created_at=NEW)
    await add_prescriptions(db, richest, 2)
    await add_prescriptions(db, middle, 1)
    await add_progress(db, richest, instances[0].id, user_id="user-0")
    await add_progress(db, middle, instances[0].id, user_id="user-0", status="completed")
    await add_progress(db, middle, instances[1].id, user_id="user-1")
    await add_progress(db, newest, instances[1].id, user_id="user-1", status="skipped")
    await add_progress(db, newest, instances[2].id, user_id="user-2")
    await db.commit()
    return week, richest, instances


async def test_dry_run_matches_apply_when_progress_moves_across_three_days(db):
    week, richest, instances = await _three_way_duplicates(db)
    reconciler = DuplicateDayReconciler(db)

    preview = await reconciler.cleanup_duplicate_plan_days(dry_run=True)
    applied = await reconciler.cleanup_duplicate_plan_days(dry_run=False)

    assert _counters(preview) == _counters(applied)
    assert _counters(applied) == {
        "duplicate_groups": 1,
        "prescriptions_moved": 1,
        "progress_entries_repointed": 2,
        "progress_entries_merged": 2,
        "deleted_days": 2,
    }
    rows = (
        await db.execute(select(UserPlanDayProgress).where(UserPlanDayProgress.plan_day_id == richest.id))
    ).scalars().all()
    assert sorted(r.plan_instance_id for r in rows) == sorted(i.id for i in instances)
    assert {r.plan_instance_id: r.status for r in rows}[instances[1].id] == "skipped"
    assert await _week_prescription_count(db, week.id) == 3


async def test_repeated_progress_on_canonical_day_is_collapsed(db):
    template, weeks, _ = await create_template(db, weeks=1, days_per_week=0)
    week = weeks[0]
    instance = await add_instance(db, template)
    canonical = await add_day(db, week, day_of_week=5, day_number=1, created_at=OLD)
    duplicate = await add_day(db, week, day_of_week=5, day_number=2, created_at=NEW)
    await add_prescriptions(db, canonical, 2)
    first = await add_progress(db, canonical, instance.id, status="planned")
    await add_progress(db, canonical, instance.id, status="completed", workout_id=7)
    await add_progress(db, duplicate, instance.id, status="planned")
    await db.commit()
    reconciler = DuplicateDayReconciler(db)

    preview = await reconciler.cleanup_duplicate_plan_days(dry_run=True)
    applied = await reconciler.cleanup_duplicate_plan_days(dry_run=False)

    assert preview.progress_entries_merged == applied.progress_entries_merged == 2
    rows = (
        await db.execute(select(UserPlanDayProgress).where(UserPlanDayProgress.plan_day_id == canonical.id))
    ).scalars().all()
    assert [(r.id, r.status, r.workout_id) for r in rows] == [(first.id, "completed", 7)]
