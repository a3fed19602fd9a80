"""Schema migration package for the local planning store."""

from plansync.migrations.account_preferences import AccountPreferencesStep, detect_state
from plansync.migrations.goals import (
    MalformedPlanError,
    SavingGoalsStep,
    backfill_initial_goals,
    derive_initial_goal,
    inclusive_month_count,
    monthly_amount,
    parse_year_month,
)
from plansync.migrations.introspect import (
    column_exists,
    column_names,
    row_count,
    table_exists,
)
from plansync.migrations.registry import (
    MigrationOrderError,
    default_steps,
    resolve_order,
)
from plansync.migrations.steps import (
    AddColumnStep,
    CreateTableStep,
    MigrationStep,
    StepPreconditionError,
)

__all__ = [
    # Introspection
    "column_exists",
    "column_names",
    "row_count",
    "table_exists",
    # Steps
    "AccountPreferencesStep",
    "AddColumnStep",
    "CreateTableStep",
    "MigrationStep",
    "SavingGoalsStep",
    "StepPreconditionError",
    "detect_state",
    # Goal derivation
    "MalformedPlanError",
    "backfill_initial_goals",
    "derive_initial_goal",
    "inclusive_month_count",
    "monthly_amount",
    "parse_year_month",
    # Ordering
    "MigrationOrderError",
    "default_steps",
    "resolve_order",
]
