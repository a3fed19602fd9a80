"""
Migration Orchestrator for plansync

This module ties together all the components and defines the startup flow:
1. Bootstrap (create or fill the store on first run)
2. Migrate (run every schema step, in dependency order)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Each step runs in its own savepoint, so a failing step leaves no trace
- A failing step is logged and skipped; the remaining steps still run
- The file is written once, at the end, and only if a step changed something

Only an unreadable store file stops a run; it is raised to the caller.
"""

from typing import Optional, Sequence

from plansync.audit import AuditLogger
from plansync.bootstrap import StoreBootstrapper
from plansync.config import Settings
from plansync.migrations.registry import default_steps, resolve_order
from plansync.migrations.steps import MigrationStep
from plansync.models.migration import MigrationReport, StepResult, StepStatus
from plansync.services.storage import LocalStore, open_local_store


class MigrationOrchestrator:
    """
    Runs the ordered migration steps against the local store.

    Steps execute one after another; none runs until the previous one has
    completed, which is what lets a step rely on tables created before it.
    """

    def __init__(
        self,
        settings: Settings,
        steps: Optional[Sequence[MigrationStep]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store_path = settings.store.store_path
        self._audit_logger = audit_logger
        self._steps = resolve_order(
            steps if steps is not None else default_steps(audit_logger)
        )

    @property
    def steps(self) -> list[MigrationStep]:
        return list(self._steps)

    async def run(self) -> MigrationReport:
        """
        Apply every step and persist the store if anything changed.

        Returns:
            Per-step outcomes; an empty report when the store is missing

        Raises:
            StoreCorruptError: If the store file exists but is unreadable
        """
        report = MigrationReport()
        path = str(self._store_path)

        if not self._store_path.exists():
            if self._audit_logger:
                await self._audit_logger.log_store_missing(path)
            return report

        async with open_local_store(self._store_path) as store:
            for step in self._steps:
                report.results.append(await self._run_step(store, step))

        report.persisted = store.persisted
        if store.persisted and self._audit_logger:
            await self._audit_logger.log_store_persisted(path)
        return report

    async def _run_step(self, store: LocalStore, step: MigrationStep) -> StepResult:
        try:
            async with store.savepoint(f"step_{step.name}"):
                changed = await step.apply(store)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_step_failed(step.name, str(e))
            return StepResult(name=step.name, status=StepStatus.FAILED, error=str(e))

        if changed:
            if self._audit_logger:
                await self._audit_logger.log_step_applied(step.name)
            return StepResult(name=step.name, status=StepStatus.APPLIED)

        if self._audit_logger:
            await self._audit_logger.log_step_unchanged(step.name)
        return StepResult(name=step.name, status=StepStatus.UNCHANGED)


def create_app_components(
    settings: Settings,
    audit_logger: Optional[AuditLogger] = None,
) -> tuple[StoreBootstrapper, MigrationOrchestrator, AuditLogger]:
    """
    Factory function to create the startup components.

    Returns:
        (bootstrapper, orchestrator, audit_logger)
    """
    audit_logger = audit_logger or AuditLogger()
    bootstrapper = StoreBootstrapper(settings, audit_logger=audit_logger)
    orchestrator = MigrationOrchestrator(settings, audit_logger=audit_logger)
    return bootstrapper, orchestrator, audit_logger


async def startup(
    settings: Settings,
    audit_logger: Optional[AuditLogger] = None,
) -> MigrationReport:
    """
    Bootstrap then migrate the local store.

    Must not be called concurrently for the same store file.
    """
    bootstrapper, orchestrator, _ = create_app_components(settings, audit_logger)
    await bootstrapper.ensure_store()
    return await orchestrator.run()
