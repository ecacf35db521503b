from prometheus_client import Counter

PLAN_TEMPLATES_ASSIGNED_TOTAL = Counter(
    "plan_templates_assigned_total",
    "Number of plan templates assigned to users",
)

PLAN_INSTANCES_PAUSED_TOTAL = Counter(
    "plan_instances_paused_total",
    "Number of active plan instances paused by a new assignment",
)

PLAN_DAYS_COMPLETED_TOTAL = Counter(
    "plan_days_completed_total",
    "Number of plan days marked completed",
)

PLAN_DAYS_SKIPPED_TOTAL = Counter(
    "plan_days_skipped_total",
    "Number of plan days marked skipped",
)

PLAN_DAY_UPSERTS_TOTAL = Counter(
    "plan_day_upserts_total",
    "Number of weekday upserts",
    ["outcome"],
)

DUPLICATE_PLAN_DAY_GROUPS_TOTAL = Counter(
    "duplicate_plan_day_groups_total",
    "Number of duplicate weekday groups found by the reconciler",
    ["mode"],
)

DUPLICATE_PLAN_DAYS_DELETED_TOTAL = Counter(
    "duplicate_plan_days_deleted_total",
    "Number of duplicate plan days removed by the reconciler",
)
