from typing import Any

from pydantic import BaseModel, Field


class DuplicateGroupReport(BaseModel):
    week_id: int
    day_of_week: int
    canonical_day_id: int
    duplicate_day_ids: list[int]


class CleanupReport(BaseModel):
    dry_run: bool
    duplicate_groups: int = 0
    prescriptions_moved: int = 0
    progress_entries_repointed: int = 0
    progress_entries_merged: int = 0
    deleted_days: int = 0
    groups: list[DuplicateGroupReport] = Field(default_factory=list)


class TaskSubmissionResponse(BaseModel):
    task_id: str
    status: str = "PENDING"


class TaskStatusResponse(BaseModel):
    task_id: str
    status: str
    result: Any | None = None
    error: str | None = None
    meta: dict[str, Any] | None = None
