"""
Saving Goal Derivation

When the saving goals table is first created, every project that already
has a planned budget and a date range gets one initial goal: the budget
spread evenly over the months of the range.

DESIGN DECISION: The monthly amount is rounded UP to a whole unit.
Rounding to nearest could leave the sum of all months a little short of the
planned total; rounding up never does.

This is a one-time backfill. Goals added later by planning operations are
never recomputed here.
"""

import re
from datetime import date
from decimal import ROUND_CEILING, Decimal
from typing import Optional

from pydantic import ValidationError

from plansync.audit import AuditLogger
from plansync.migrations.schema import PROJECT_SAVING_GOALS_TABLE
from plansync.migrations.steps import CreateTableStep
from plansync.models.planning import INITIAL_GOAL_REASON, Project, SavingGoal
from plansync.services.storage import LocalStore

_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{2})(?:$|-)")

QUALIFYING_PROJECTS_QUERY = """
    SELECT id, name, startDate, endDate, plannedBudget
    FROM projects
    WHERE plannedBudget IS NOT NULL AND plannedBudget > 0
      AND startDate IS NOT NULL AND endDate IS NOT NULL
    ORDER BY id
"""


class MalformedPlanError(ValueError):
    """A project's planned range cannot be turned into a goal."""
    pass


def parse_year_month(value: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Truncate a stored date to (year, month).

    Accepts "YYYY-MM" and "YYYY-MM-DD" (anything after the month is
    ignored). Returns None when the value has no usable year and month.
    """
    if not value:
        return None
    match = _YEAR_MONTH.match(str(value).strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        return None
    return year, month


def inclusive_month_count(start: tuple[int, int], end: tuple[int, int]) -> int:
    """Months from start to end, both included. 2024-01..2024-03 is 3."""
    return (end[0] - start[0]) * 12 + (end[1] - start[1]) + 1


def monthly_amount(total: Decimal, months: int) -> Decimal:
    """Per-month amount, rounded up so months * amount >= total."""
    if months <= 0:
        raise MalformedPlanError(f"Cannot spread a budget over {months} months")
    return (Decimal(total) / months).to_integral_value(rounding=ROUND_CEILING)


def derive_initial_goal(project: Project) -> Optional[SavingGoal]:
    """
    Build the initial goal for a project, if it qualifies.

    Returns:
        The goal, or None when the project lacks a budget or dates

    Raises:
        MalformedPlanError: If dates are present but unusable, or the end
            month precedes the start month
    """
    if project.id is None:
        return None
    if project.planned_budget is None or project.planned_budget <= 0:
        return None
    if not project.start_date or not project.end_date:
        return None

    start = parse_year_month(project.start_date)
    end = parse_year_month(project.end_date)
    if start is None or end is None:
        raise MalformedPlanError(
            f"Unparseable date range {project.start_date!r}..{project.end_date!r}"
        )

    months = inclusive_month_count(start, end)
    if months <= 0:
        raise MalformedPlanError(
            f"End month {project.end_date} is before start month {project.start_date}"
        )

    return SavingGoal(
        project_id=project.id,
        amount=monthly_amount(project.planned_budget, months),
        start_date=date(start[0], start[1], 1),
        end_date=None,
        reason=INITIAL_GOAL_REASON,
    )


class SavingGoalsStep(CreateTableStep):
    """
    Create project_saving_goals and backfill one goal per planned project.

    The backfill runs in after_create, so it happens exactly once: the
    next launch finds the table and does nothing.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        super().__init__(
            "project_saving_goals",
            "project_saving_goals",
            PROJECT_SAVING_GOALS_TABLE,
            requires=("projects",),
        )
        self._audit_logger = audit_logger

    async def after_create(self, store: LocalStore) -> None:
        await backfill_initial_goals(store, self._audit_logger)


async def backfill_initial_goals(
    store: LocalStore,
    audit_logger: Optional[AuditLogger] = None,
) -> int:
    """
    Insert the initial goal of every qualifying project.

    Malformed projects are skipped (and logged); the rest still get goals.

    Returns:
        Number of goals inserted
    """
    rows = await store.fetchall(QUALIFYING_PROJECTS_QUERY)
    inserted = 0
    for row in rows:
        try:
            project = Project.from_row(row)
            goal = derive_initial_goal(project)
        except (MalformedPlanError, ValidationError) as e:
            if audit_logger:
                await audit_logger.log_goal_skipped(row["id"], str(e))
            continue
        if goal is None:
            continue

        await store.execute(
            "INSERT INTO project_saving_goals "
            "(project_id, amount, start_date, end_date, reason) "
            "VALUES (?, ?, ?, NULL, ?)",
            (
                goal.project_id,
                int(goal.amount),
                goal.start_date.isoformat(),
                goal.reason,
            ),
        )
        inserted += 1
        if audit_logger:
            await audit_logger.log_goal_derived(
                goal.project_id, str(goal.amount), goal.start_date.isoformat()
            )
    return inserted
