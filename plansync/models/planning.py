"""
Planning Data Models for plansync

These models describe the rows of the local planning store.
They are designed to:
1. Give the query API typed results instead of raw tuples
2. Enforce the invariants the store itself cannot express
3. Keep the store's historical column names at the boundary only

DESIGN DECISION: Column names in the store file stay as they were first
written (camelCase for most tables, snake_case for saving goals) so that
existing files keep working. The models use Python names and map from rows
through the from_row constructors.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a manually entered transaction."""
    INCOME = "income"
    EXPENSE = "expense"


INITIAL_GOAL_REASON = "initial"


def _as_bool(value: Any) -> bool:
    # SQLite stores booleans as 0/1, sometimes as NULL on legacy rows
    return bool(value) if value is not None else False


def _as_decimal(value: Any) -> Decimal:
    # REAL columns come back as float; go through str to keep 0.1 as 0.1
    return Decimal(str(value)) if value is not None else Decimal("0")


def _as_datetime(value: Any) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


# =============================================================================
# PROJECTS
# =============================================================================

class Project(BaseModel):
    """
    A named planning bucket (entity).

    Projects are created by the ledger import or by an operator,
    and are archived rather than deleted.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = Field(
        default=None,
        description="Store-assigned identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Unique display name"
    )
    start_date: Optional[str] = Field(
        default=None,
        description="Planned start, YYYY-MM or YYYY-MM-DD as stored"
    )
    end_date: Optional[str] = Field(
        default=None,
        description="Planned end, YYYY-MM or YYYY-MM-DD as stored"
    )
    planned_budget: Optional[Decimal] = Field(
        default=None,
        description="Planned total budget"
    )
    archived: bool = Field(default=False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Project":
        budget = row["plannedBudget"]
        return cls(
            id=row["id"],
            name=row["name"],
            start_date=row["startDate"],
            end_date=row["endDate"],
            planned_budget=Decimal(str(budget)) if budget is not None else None,
            archived=_as_bool(row["archived"]) if "archived" in row.keys() else False,
        )


# =============================================================================
# ACCOUNT PREFERENCES
# =============================================================================

class AccountPreference(BaseModel):
    """
    Per-account inclusion flags.

    The two flags are independent: an account can count towards
    savings and not towards spending, or the reverse.
    """

    account_id: str = Field(..., min_length=1)
    account_name: str = Field(default="")
    include_savings: bool = Field(default=True)
    include_checking: bool = Field(default=True)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AccountPreference":
        return cls(
            account_id=str(row["accountId"]),
            account_name=row["accountName"] or "",
            include_savings=_as_bool(row["includeSavings"]),
            include_checking=_as_bool(row["includeChecking"]),
        )


# =============================================================================
# SAVING GOALS
# =============================================================================

class SavingGoal(BaseModel):
    """
    Target monthly saving amount for one project over a period.

    A project may have several goals; the one whose validity range
    covers a month is the goal for that month.
    """

    id: Optional[int] = None
    project_id: int
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Monthly saving target"
    )
    start_date: date = Field(
        ...,
        description="First month the goal applies to (day is always 1)"
    )
    end_date: Optional[date] = Field(
        default=None,
        description="Last month the goal applies to; None means open-ended"
    )
    created_at: Optional[datetime] = None
    reason: Optional[str] = Field(default=None, max_length=500)

    @field_validator("start_date", "end_date")
    @classmethod
    def first_of_month(cls, v: Optional[date]) -> Optional[date]:
        if v is None:
            return v
        return v.replace(day=1)

    @model_validator(mode="after")
    def validate_period(self) -> "SavingGoal":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("Goal end month cannot be before start month")
        return self

    @property
    def is_initial(self) -> bool:
        return self.reason == INITIAL_GOAL_REASON

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SavingGoal":
        created = row["created_at"]
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            amount=Decimal(str(row["amount"])),
            start_date=date.fromisoformat(row["start_date"][:10]),
            end_date=date.fromisoformat(row["end_date"][:10]) if row["end_date"] else None,
            created_at=datetime.fromisoformat(created) if created else None,
            reason=row["reason"],
        )


# =============================================================================
# AUXILIARY RECORDS
# =============================================================================

class MonthlyManualSaving(BaseModel):
    """Manually entered saving total for one month (one per month)."""

    id: str
    month: str = Field(..., min_length=1, description="Month as stored, normally YYYY-MM")
    amount: Decimal = Field(default=Decimal("0"))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MonthlyManualSaving":
        return cls(
            id=str(row["id"]),
            month=row["month"],
            amount=_as_decimal(row["amount"]),
            created_at=_as_datetime(row["createdAt"]),
            updated_at=_as_datetime(row["updatedAt"]),
        )


class Transaction(BaseModel):
    """A transaction entered in the planner rather than in the ledger."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    project_id: str = Field(default="")
    date: str
    description: str = Field(default="")
    amount: Decimal
    type: TransactionType
    category: str = Field(default="")
    comment: str = Field(default="")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=str(row["id"]),
            project_id=row["projectId"] or "",
            date=row["date"],
            description=row["description"] or "",
            amount=_as_decimal(row["amount"]),
            type=row["type"],
            category=row["category"] or "",
            comment=row["comment"] or "",
        )


class ProjectAllocation(BaseModel):
    """Amount allocated to a project for a month (one per month and project)."""

    id: str
    month: str = Field(..., min_length=1, description="Month as stored, normally YYYY-MM")
    project_id: str
    allocated_amount: Decimal = Field(default=Decimal("0"))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProjectAllocation":
        return cls(
            id=str(row["id"]),
            month=row["month"],
            project_id=str(row["projectId"]),
            allocated_amount=_as_decimal(row["allocatedAmount"]),
        )


class Setting(BaseModel):
    """Generic key/value configuration row."""

    key: str = Field(..., min_length=1)
    value: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Setting":
        return cls(key=row["key"], value=row["value"])
