"""
Planning Query API

Typed reads (and the one operator write, project creation) over an open
local store. This is what the presentation layer consumes; it never sees
SQL or raw rows.

GUARANTEES:
- Values are always bound parameters
- Creating a project whose name exists returns the existing one untouched
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from plansync.migrations.introspect import column_exists
from plansync.models.planning import (
    AccountPreference,
    MonthlyManualSaving,
    Project,
    ProjectAllocation,
    SavingGoal,
    Setting,
    Transaction,
)
from plansync.services.storage import LocalStore

GOAL_COLUMNS = "id, project_id, amount, start_date, end_date, created_at, reason"


class PlanningQueries:
    """
    Read access to projects, saving goals, account preferences and the
    auxiliary planning tables.
    """

    def __init__(self, store: LocalStore):
        self._store = store

    async def _project_columns(self) -> str:
        # Stores predating archiving have no archived column until migrated
        if await column_exists(self._store, "projects", "archived"):
            return "id, name, startDate, endDate, plannedBudget, archived"
        return "id, name, startDate, endDate, plannedBudget"

    async def list_projects(self, include_archived: bool = False) -> list[Project]:
        columns = await self._project_columns()
        rows = await self._store.fetchall(f"SELECT {columns} FROM projects ORDER BY name")
        projects = [Project.from_row(row) for row in rows]
        if include_archived:
            return projects
        return [p for p in projects if not p.archived]

    async def get_project(self, name: str) -> Optional[Project]:
        columns = await self._project_columns()
        row = await self._store.fetchone(
            f"SELECT {columns} FROM projects WHERE name = ?",
            (name.strip(),),
        )
        return Project.from_row(row) if row else None

    async def create_project(
        self,
        name: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        planned_budget: Optional[Decimal] = None,
    ) -> Project:
        """
        Create a project unless one with the same name exists.

        Returns:
            The new project, or the existing one unchanged
        """
        project = Project(
            name=name,
            start_date=start_date,
            end_date=end_date,
            planned_budget=planned_budget,
        )
        await self._store.execute(
            "INSERT INTO projects (name, startDate, endDate, plannedBudget, archived) "
            "SELECT ?, ?, ?, ?, 0 "
            "WHERE NOT EXISTS (SELECT 1 FROM projects WHERE name = ?)",
            (
                project.name,
                project.start_date,
                project.end_date,
                float(project.planned_budget) if project.planned_budget is not None else None,
                project.name,
            ),
        )
        created = await self.get_project(project.name)
        if created is None:
            raise LookupError(f"Project {project.name!r} missing after insert")
        return created

    async def list_saving_goals(self, project_id: int) -> list[SavingGoal]:
        """Goals of a project, most recent start first."""
        rows = await self._store.fetchall(
            f"SELECT {GOAL_COLUMNS} FROM project_saving_goals "
            "WHERE project_id = ? ORDER BY start_date DESC, id DESC",
            (project_id,),
        )
        return [SavingGoal.from_row(row) for row in rows]

    async def current_goal(
        self,
        project_id: int,
        month: Optional[date] = None,
    ) -> Optional[SavingGoal]:
        """
        The goal in force for a month (default: this month).

        A goal is in force when it started on or before the month and has
        no end or ends on or after it; the latest start wins.
        """
        target = (month or date.today()).replace(day=1).isoformat()
        row = await self._store.fetchone(
            f"SELECT {GOAL_COLUMNS} FROM project_saving_goals "
            "WHERE project_id = ? AND start_date <= ? "
            "AND (end_date IS NULL OR end_date >= ?) "
            "ORDER BY start_date DESC, id DESC LIMIT 1",
            (project_id, target, target),
        )
        return SavingGoal.from_row(row) if row else None

    async def list_account_preferences(self) -> list[AccountPreference]:
        rows = await self._store.fetchall(
            "SELECT accountId, accountName, includeSavings, includeChecking "
            "FROM account_preferences ORDER BY accountName"
        )
        return [AccountPreference.from_row(row) for row in rows]

    async def list_monthly_manual_savings(self) -> list[MonthlyManualSaving]:
        rows = await self._store.fetchall(
            "SELECT id, month, amount, createdAt, updatedAt "
            "FROM monthly_manual_savings ORDER BY month"
        )
        return [MonthlyManualSaving.from_row(row) for row in rows]

    async def list_transactions(self, project_id: Optional[str] = None) -> list[Transaction]:
        """Planner-entered transactions, oldest first, optionally for one project."""
        sql = (
            "SELECT id, projectId, date, description, amount, type, category, comment "
            "FROM transactions"
        )
        params: tuple = ()
        if project_id is not None:
            sql += " WHERE projectId = ?"
            params = (project_id,)
        rows = await self._store.fetchall(sql + " ORDER BY date, id", params)
        return [Transaction.from_row(row) for row in rows]

    async def list_project_allocations(self, month: str) -> list[ProjectAllocation]:
        rows = await self._store.fetchall(
            "SELECT id, month, projectId, allocatedAmount FROM project_allocations "
            "WHERE month = ? ORDER BY projectId",
            (month,),
        )
        return [ProjectAllocation.from_row(row) for row in rows]

    async def get_setting(self, key: str) -> Optional[Setting]:
        row = await self._store.fetchone(
            "SELECT key, value FROM settings WHERE key = ?",
            (key,),
        )
        return Setting.from_row(row) if row else None
