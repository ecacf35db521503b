"""
Infers which template week a user is on from completion volume.

The week is derived from the ratio of completed progress rows to the
average number of days per week, not from elapsed calendar time.
Assignment only materialises progress for week 1, so the denominator is
the larger of the progress row count and the template's authored day
count.
"""

import math
from collections.abc import Iterable

from ..models.enums import ProgressStatus


def resolve_current_week(progress_rows: Iterable, week_count: int, template_day_count: int = 0) -> int:
    rows = list(progress_rows)
    upper = max(int(week_count or 0), 1)

    total_days = max(len(rows), int(template_day_count or 0))
    if total_days == 0 or week_count <= 0:
        return 1

    completed_days = sum(1 for row in rows if row.status == ProgressStatus.completed.value)
    days_per_week = total_days / week_count
    if days_per_week <= 0:
        return 1

    week_number = math.floor(completed_days / days_per_week) + 1
    return min(max(week_number, 1), upper)
