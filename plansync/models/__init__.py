"""
Data Models Package

This package contains all Pydantic models used by plansync.
"""

from plansync.models.planning import (
    INITIAL_GOAL_REASON,
    AccountPreference,
    MonthlyManualSaving,
    Project,
    ProjectAllocation,
    SavingGoal,
    Setting,
    Transaction,
    TransactionType,
)
from plansync.models.migration import (
    MigrationReport,
    PreferenceSchemaState,
    StepResult,
    StepStatus,
    StoreState,
)
from plansync.models.audit import (
    AuditSeverity,
    MigrationEvent,
    MigrationEventBuilder,
    MigrationEventType,
)

__all__ = [
    # Planning models
    "INITIAL_GOAL_REASON",
    "AccountPreference",
    "MonthlyManualSaving",
    "Project",
    "ProjectAllocation",
    "SavingGoal",
    "Setting",
    "Transaction",
    "TransactionType",
    # Migration models
    "MigrationReport",
    "PreferenceSchemaState",
    "StepResult",
    "StepStatus",
    "StoreState",
    # Audit models
    "AuditSeverity",
    "MigrationEvent",
    "MigrationEventBuilder",
    "MigrationEventType",
]
