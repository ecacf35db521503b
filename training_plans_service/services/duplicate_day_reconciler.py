"""
Repairs weeks that hold more than one plan day for the same weekday.

Concurrent weekday upserts can each observe "no day yet" and insert their
own row. This module collapses every such group into one canonical day,
moving prescriptions and progress history onto it before deleting the
duplicates. A dry run walks the same decisions against an in-memory view of
the canonical day and reports identical counters without writing anything.
"""

from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..metrics import DUPLICATE_PLAN_DAY_GROUPS_TOTAL, DUPLICATE_PLAN_DAYS_DELETED_TOTAL
from ..models.enums import ProgressStatus
from ..models.templates import PlanDay, PlanPrescription
from ..models.user_plans import UserPlanDayProgress
from ..schemas.maintenance import CleanupReport, DuplicateGroupReport
from .plan_queries import prescription_sort_key

logger = structlog.get_logger(__name__)

STATUS_PRIORITY = {
    ProgressStatus.completed.value: 3,
    ProgressStatus.skipped.value: 2,
    ProgressStatus.planned.value: 1,
}

MERGE_FILL_FIELDS = ("workout_id", "progression_decision", "decision_reason", "scheduled_date")


@dataclass
class DayCandidate:
    day: PlanDay
    prescription_count: int
    progress_count: int

    @property
    def linked_count(self) -> int:
        return self.prescription_count + self.progress_count


# Returns the candidates best-first; the head of the list survives as canonical.
CanonicalDayPolicy = Callable[[Sequence[DayCandidate]], list[DayCandidate]]


def rank_richest_then_oldest(candidates: Sequence[DayCandidate]) -> list[DayCandidate]:
    return sorted(
        candidates,
        key=lambda c: (-c.linked_count, c.day.created_at or datetime.min, c.day.id),
    )


def status_priority(status: str | None) -> int:
    return STATUS_PRIORITY.get(status or "", 0)


def merge_progress_fields(canonical: UserPlanDayProgress, duplicate: UserPlanDayProgress) -> dict[str, Any]:
    """Field patch for the canonical row when it absorbs a duplicate row of the same instance."""
    status = canonical.status
    if status_priority(duplicate.status) > status_priority(canonical.status):
        status = duplicate.status

    patch: dict[str, Any] = {"status": status}
    for field in MERGE_FILL_FIELDS:
        value = getattr(canonical, field)
        patch[field] = value if value is not None else getattr(duplicate, field)

    stamps = [s for s in (canonical.updated_at, duplicate.updated_at) if s is not None]
    patch["updated_at"] = max(stamps) if stamps else datetime.utcnow()
    return patch


class DuplicateDayReconciler:
    def __init__(self, db: AsyncSession, rank_policy: CanonicalDayPolicy = rank_richest_then_oldest):
        self.db = db
        self.rank_policy = rank_policy

    async def cleanup_duplicate_plan_days(self, dry_run: bool = True) -> CleanupReport:
        report = CleanupReport(dry_run=dry_run)

        groups_stmt = (
            select(PlanDay.week_id, PlanDay.day_of_week)
            .where(PlanDay.day_of_week.is_not(None))
            .group_by(PlanDay.week_id, PlanDay.day_of_week)
            .having(func.count(PlanDay.id) > 1)
            .order_by(PlanDay.week_id.asc(), PlanDay.day_of_week.asc())
        )
        pairs = (await self.db.execute(groups_stmt)).all()

        weekdays_by_week: dict[int, list[int]] = defaultdict(list)
        for week_id, day_of_week in pairs:
            weekdays_by_week[week_id].append(day_of_week)

        logger.info(
            "duplicate_plan_days_cleanup_started",
            dry_run=dry_run,
            affected_weeks=len(weekdays_by_week),
            duplicate_groups=len(pairs),
        )

        for week_id, weekdays in weekdays_by_week.items():
            try:
                for day_of_week in weekdays:
                    days = await self._load_group(week_id, day_of_week)
                    await self._reconcile_group(week_id, day_of_week, days, dry_run, report)
                if not dry_run:
                    await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.exception("duplicate_plan_days_cleanup_week_failed", week_id=week_id, dry_run=dry_run)
                raise

        self._record_metrics(report)
        logger.info("duplicate_plan_days_cleanup_finished", **report.model_dump(exclude={"groups"}))
        return report

    async def reconcile_week_day(self, week_id: int, day_of_week: int, dry_run: bool = False) -> CleanupReport:
        report = CleanupReport(dry_run=dry_run)
        try:
            days = await self._load_group(week_id, day_of_week)
            if len(days) > 1:
                await self._reconcile_group(week_id, day_of_week, days, dry_run, report)
                if not dry_run:
                    await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception("duplicate_plan_day_reconcile_failed", week_id=week_id, day_of_week=day_of_week)
            raise
        self._record_metrics(report)
        return report

    async def _load_group(self, week_id: int, day_of_week: int) -> list[PlanDay]:
        stmt = (
            select(PlanDay)
            .where(PlanDay.week_id == week_id, PlanDay.day_of_week == day_of_week)
            .order_by(PlanDay.id.asc())
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def _reconcile_group(
        self,
        week_id: int,
        day_of_week: int,
        days: list[PlanDay],
        dry_run: bool,
        report: CleanupReport,
    ) -> None:
        day_ids = [d.id for d in days]

        prescriptions_by_day: dict[int, list[PlanPrescription]] = defaultdict(list)
        res = await self.db.execute(select(PlanPrescription).where(PlanPrescription.plan_day_id.in_(day_ids)))
        for p in res.scalars().all():
            prescriptions_by_day[p.plan_day_id].append(p)

        progress_by_day: dict[int, list[UserPlanDayProgress]] = defaultdict(list)
        res = await self.db.execute(
            select(UserPlanDayProgress)
            .where(UserPlanDayProgress.plan_day_id.in_(day_ids))
            .order_by(UserPlanDayProgress.id.asc())
        )
        for row in res.scalars().all():
            progress_by_day[row.plan_day_id].append(row)

        candidates = [
            DayCandidate(
                day=d,
                prescription_count=len(prescriptions_by_day[d.id]),
                progress_count=len(progress_by_day[d.id]),
            )
            for d in days
        ]
        ranked = self.rank_policy(candidates)
        canonical = ranked[0].day
        duplicates = [c.day for c in ranked[1:]]

        next_order = max((p.order or 0 for p in prescriptions_by_day[canonical.id]), default=0)
        canonical_progress: dict[int, UserPlanDayProgress] = {}
        moved = repointed = merged = 0

        for row in progress_by_day[canonical.id]:
            existing = canonical_progress.setdefault(row.plan_instance_id, row)
            if existing is row:
                continue
            merged += 1
            if not dry_run:
                for field, value in merge_progress_fields(existing, row).items():
                    setattr(existing, field, value)
                await self.db.delete(row)

        for duplicate in duplicates:
            for prescription in sorted(prescriptions_by_day[duplicate.id], key=prescription_sort_key):
                next_order += 1
                moved += 1
                if not dry_run:
                    prescription.plan_day_id = canonical.id
                    prescription.order = next_order

            for row in progress_by_day[duplicate.id]:
                existing = canonical_progress.get(row.plan_instance_id)
                if existing is None:
                    canonical_progress[row.plan_instance_id] = row
                    repointed += 1
                    if not dry_run:
                        row.plan_day_id = canonical.id
                    continue

                merged += 1
                if not dry_run:
                    for field, value in merge_progress_fields(existing, row).items():
                        setattr(existing, field, value)
                    await self.db.delete(row)

            if not dry_run:
                await self.db.flush()
                await self.db.delete(duplicate)
                await self.db.flush()

        report.duplicate_groups += 1
        report.prescriptions_moved += moved
        report.progress_entries_repointed += repointed
        report.progress_entries_merged += merged
        report.deleted_days += len(duplicates)
        report.groups.append(
            DuplicateGroupReport(
                week_id=week_id,
                day_of_week=day_of_week,
                canonical_day_id=canonical.id,
                duplicate_day_ids=[d.id for d in duplicates],
            )
        )
        logger.info(
            "duplicate_plan_day_group_reconciled",
            week_id=week_id,
            day_of_week=day_of_week,
            canonical_day_id=canonical.id,
            duplicate_day_ids=[d.id for d in duplicates],
            prescriptions_moved=moved,
            progress_entries_repointed=repointed,
            progress_entries_merged=merged,
            dry_run=dry_run,
        )

    def _record_metrics(self, report: CleanupReport) -> None:
        if report.duplicate_groups:
            DUPLICATE_PLAN_DAY_GROUPS_TOTAL.labels(mode="dry_run" if report.dry_run else "apply").inc(
                report.duplicate_groups
            )
        if not report.dry_run and report.deleted_days:
            DUPLICATE_PLAN_DAYS_DELETED_TOTAL.inc(report.deleted_days)
