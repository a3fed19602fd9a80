"""
Audit Logger

DESIGN DECISION: Every step of a migration run is logged, including the ones
that had nothing to do. This provides:
1. A record of which steps acted on a given launch
2. The error of a failed step, while the run carries on
3. An in-memory trail the caller can inspect after the run

Callers of the orchestrator only get an aggregate result; the detail lives
here.
"""

import logging
import sys
from typing import Optional

import structlog

from plansync.config.settings import LoggingSettings
from plansync.models.audit import (
    AuditSeverity,
    MigrationEvent,
    MigrationEventBuilder,
    MigrationEventType,
)


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure stdlib logging and structlog for the process.

    Called once by the entry point. Library code only asks structlog for
    loggers and never configures anything itself.
    """
    settings = settings or LoggingSettings()
    level = getattr(logging, settings.level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events to structlog and keeps the events of the current run.
    """

    def __init__(self):
        self._logger = structlog.get_logger("plansync.audit")
        self._events: list[MigrationEvent] = []

    @property
    def events(self) -> list[MigrationEvent]:
        return list(self._events)

    def events_of_type(self, event_type: MigrationEventType) -> list[MigrationEvent]:
        return [e for e in self._events if e.event_type == event_type]

    async def log(self, event: MigrationEvent) -> None:
        """
        Log an audit event.
        """
        self._events.append(event)
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("migration_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("migration_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("migration_event", **log_dict)
        else:
            self._logger.info("migration_event", **log_dict)

    async def log_step_applied(self, step: str) -> None:
        await self.log(MigrationEventBuilder.step_applied(step))

    async def log_step_unchanged(self, step: str) -> None:
        await self.log(MigrationEventBuilder.step_unchanged(step))

    async def log_step_failed(self, step: str, error_message: str) -> None:
        """Log a step that raised and was rolled back."""
        await self.log(MigrationEventBuilder.step_failed(step, error_message))

    async def log_store_created(self, path: str) -> None:
        await self.log(MigrationEventBuilder.store_created(path))

    async def log_store_populated(self, path: str, project_count: int) -> None:
        await self.log(MigrationEventBuilder.store_populated(path, project_count))

    async def log_store_already_populated(self, path: str) -> None:
        await self.log(MigrationEventBuilder.store_already_populated(path))

    async def log_store_missing(self, path: str) -> None:
        await self.log(MigrationEventBuilder.store_missing(path))

    async def log_store_persisted(self, path: str) -> None:
        await self.log(MigrationEventBuilder.store_persisted(path))

    async def log_ledger_missing(self, path: str) -> None:
        await self.log(MigrationEventBuilder.ledger_missing(path))

    async def log_ledger_query_failed(self, path: str, error_message: str) -> None:
        """Log a ledger that exists but could not be queried."""
        await self.log(MigrationEventBuilder.ledger_query_failed(path, error_message))

    async def log_projects_imported(self, count: int, path: str) -> None:
        await self.log(MigrationEventBuilder.projects_imported(count, path))

    async def log_goal_derived(self, project_id: int, amount: str, start_date: str) -> None:
        await self.log(MigrationEventBuilder.goal_derived(project_id, amount, start_date))

    async def log_goal_skipped(self, project_id: int, reason: str) -> None:
        await self.log(MigrationEventBuilder.goal_skipped(project_id, reason))
