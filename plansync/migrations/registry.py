"""
Migration Step Registry

The steps are declared here, each with the tables it requires and creates.
The run order is derived from those declarations rather than from where a
step happens to be written: a step that references projects always runs
after the step that creates projects.
"""

from typing import Optional, Sequence

from plansync.audit import AuditLogger
from plansync.migrations.account_preferences import AccountPreferencesStep
from plansync.migrations.goals import SavingGoalsStep
from plansync.migrations.schema import (
    MONTHLY_MANUAL_SAVINGS_TABLE,
    PROJECT_ALLOCATIONS_TABLE,
    PROJECTS_TABLE,
    SAVINGS_AMOUNTS_TABLE,
    SETTINGS_TABLE,
    TRANSACTIONS_TABLE,
)
from plansync.migrations.steps import AddColumnStep, CreateTableStep, MigrationStep


class MigrationOrderError(Exception):
    """Step declarations cannot be put in a valid order."""
    pass


def default_steps(audit_logger: Optional[AuditLogger] = None) -> list[MigrationStep]:
    """All steps the orchestrator runs on every launch, in declaration order."""
    return [
        CreateTableStep("projects_table", "projects", PROJECTS_TABLE),
        AddColumnStep("projects_archived_column", "projects", "archived", "INTEGER DEFAULT 0"),
        CreateTableStep(
            "savings_amounts",
            "savings_amounts",
            SAVINGS_AMOUNTS_TABLE,
            requires=("projects",),
        ),
        CreateTableStep(
            "monthly_manual_savings",
            "monthly_manual_savings",
            MONTHLY_MANUAL_SAVINGS_TABLE,
        ),
        CreateTableStep("transactions", "transactions", TRANSACTIONS_TABLE),
        CreateTableStep(
            "project_allocations",
            "project_allocations",
            PROJECT_ALLOCATIONS_TABLE,
            requires=("projects",),
        ),
        SavingGoalsStep(audit_logger),
        AccountPreferencesStep(),
        CreateTableStep("settings_table", "settings", SETTINGS_TABLE),
    ]


def resolve_order(steps: Sequence[MigrationStep]) -> list[MigrationStep]:
    """
    Order steps so every step runs after the steps creating what it requires.

    Ties keep declaration order. A required table that no step creates is
    assumed to exist already.

    Raises:
        MigrationOrderError: On duplicate step names or cyclic requirements
    """
    names = [step.name for step in steps]
    if len(set(names)) != len(names):
        raise MigrationOrderError(f"Duplicate step names in {names}")

    creators: dict[str, list[int]] = {}
    for index, step in enumerate(steps):
        for table in step.creates:
            creators.setdefault(table, []).append(index)

    depends_on: list[set[int]] = []
    for index, step in enumerate(steps):
        deps = set()
        for table in step.requires:
            deps.update(i for i in creators.get(table, []) if i != index)
        depends_on.append(deps)

    ordered: list[int] = []
    placed: set[int] = set()
    while len(ordered) < len(steps):
        ready = next(
            (
                i for i in range(len(steps))
                if i not in placed and depends_on[i] <= placed
            ),
            None,
        )
        if ready is None:
            stuck = [steps[i].name for i in range(len(steps)) if i not in placed]
            raise MigrationOrderError(f"Cyclic step requirements among {stuck}")
        ordered.append(ready)
        placed.add(ready)

    return [steps[i] for i in ordered]
