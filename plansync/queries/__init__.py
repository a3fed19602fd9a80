"""Planning query package."""

from plansync.queries.executor import PlanningQueries

__all__ = ["PlanningQueries"]
