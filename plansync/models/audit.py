"""
Audit Models for plansync

Every migration step, import and store write is described by an event.
This provides:
1. A per-step record of whether the step acted
2. Debugging information when a step fails
3. A way for tests to observe what a run did without parsing log lines

DESIGN DECISION: Events are plain values. The AuditLogger decides where they
go (structlog, and the in-memory list for the current run).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class MigrationEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Store lifecycle
    STORE_CREATED = "store_created"
    STORE_POPULATED = "store_populated"
    STORE_ALREADY_POPULATED = "store_already_populated"
    STORE_PERSISTED = "store_persisted"
    STORE_MISSING = "store_missing"

    # Migration steps
    STEP_APPLIED = "step_applied"
    STEP_UNCHANGED = "step_unchanged"
    STEP_FAILED = "step_failed"

    # Project import
    LEDGER_MISSING = "ledger_missing"
    LEDGER_QUERY_FAILED = "ledger_query_failed"
    PROJECTS_IMPORTED = "projects_imported"

    # Goal backfill
    GOAL_DERIVED = "goal_derived"
    GOAL_SKIPPED = "goal_skipped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MigrationEvent(BaseModel):
    """
    A single audit event.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: MigrationEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # What the event is about: a step name, a table, a file
    subject: Optional[str] = Field(default=None)

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "subject": self.subject,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class MigrationEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = MigrationEventBuilder.step_applied("transactions")
        event = MigrationEventBuilder.projects_imported(3, path)
    """

    @staticmethod
    def step_applied(step: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STEP_APPLIED,
            subject=step,
            description=f"Migration step applied: {step}",
        )

    @staticmethod
    def step_unchanged(step: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STEP_UNCHANGED,
            severity=AuditSeverity.DEBUG,
            subject=step,
            description=f"Migration step already satisfied: {step}",
        )

    @staticmethod
    def step_failed(step: str, error_message: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STEP_FAILED,
            severity=AuditSeverity.ERROR,
            subject=step,
            description=f"Migration step failed: {step}",
            error_message=error_message,
        )

    @staticmethod
    def store_created(path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STORE_CREATED,
            subject=path,
            description="Local store created with minimal schema",
        )

    @staticmethod
    def store_populated(path: str, project_count: int) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STORE_POPULATED,
            subject=path,
            description=f"Local store populated from ledger ({project_count} projects)",
            details={"project_count": project_count},
        )

    @staticmethod
    def store_already_populated(path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STORE_ALREADY_POPULATED,
            severity=AuditSeverity.DEBUG,
            subject=path,
            description="Local store already has projects",
        )

    @staticmethod
    def store_missing(path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STORE_MISSING,
            severity=AuditSeverity.WARNING,
            subject=path,
            description="Local store does not exist, nothing to migrate",
        )

    @staticmethod
    def store_persisted(path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.STORE_PERSISTED,
            subject=path,
            description="Local store written to disk",
        )

    @staticmethod
    def ledger_missing(path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.LEDGER_MISSING,
            severity=AuditSeverity.WARNING,
            subject=path,
            description="External ledger not found, project import skipped",
        )

    @staticmethod
    def ledger_query_failed(path: str, error_message: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.LEDGER_QUERY_FAILED,
            severity=AuditSeverity.ERROR,
            subject=path,
            description="Could not read projects from external ledger",
            error_message=error_message,
        )

    @staticmethod
    def projects_imported(count: int, path: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.PROJECTS_IMPORTED,
            subject=path,
            description=f"Synchronized projects from ledger: {count} found",
            details={"count": count},
        )

    @staticmethod
    def goal_derived(project_id: int, amount: str, start_date: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.GOAL_DERIVED,
            subject="project_saving_goals",
            description=f"Initial saving goal for project {project_id}: {amount}/month",
            details={
                "project_id": project_id,
                "amount": amount,
                "start_date": start_date,
            },
        )

    @staticmethod
    def goal_skipped(project_id: int, reason: str) -> MigrationEvent:
        return MigrationEvent(
            event_type=MigrationEventType.GOAL_SKIPPED,
            severity=AuditSeverity.WARNING,
            subject="project_saving_goals",
            description=f"No initial goal for project {project_id}: {reason[:300]}",
            details={"project_id": project_id, "reason": reason},
        )
