"""
Migration Bookkeeping Models

Outcome types shared by the bootstrapper, the steps and the orchestrator.
Nothing here is persisted: detection is always done by inspecting the store
itself, these models only describe what a run did.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StoreState(str, Enum):
    """What the bootstrapper found when it looked at the store file."""
    MISSING = "missing"      # No file on disk
    EMPTY = "empty"          # File exists, no project rows
    POPULATED = "populated"  # At least one project row


class PreferenceSchemaState(str, Enum):
    """
    Shape of the account_preferences table.

    The legacy single "excluded" flag is replaced by two independent
    inclusion flags; every state below converges to CLEAN.
    """
    ABSENT = "absent"              # Table does not exist yet
    LEGACY_ONLY = "legacy_only"    # excluded, no include flags
    PARTIAL = "partial"            # One include flag missing
    TRANSITIONAL = "transitional"  # excluded plus both include flags
    CLEAN = "clean"                # Both include flags, no excluded


class StepStatus(str, Enum):
    """Outcome of a single migration step."""
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class StepResult(BaseModel):
    """Result of running one named step."""

    name: str
    status: StepStatus
    error: Optional[str] = Field(
        default=None,
        description="Error message when the step failed"
    )

    @property
    def changed(self) -> bool:
        return self.status == StepStatus.APPLIED


class MigrationReport(BaseModel):
    """
    Aggregate result of one orchestrator run.

    Callers normally only look at `succeeded`; per-step detail is
    here for logging and tests.
    """

    results: list[StepResult] = Field(default_factory=list)
    persisted: bool = Field(
        default=False,
        description="Whether the store file was rewritten"
    )

    @property
    def changed(self) -> bool:
        return any(r.changed for r in self.results)

    @property
    def failed_steps(self) -> list[str]:
        return [r.name for r in self.results if r.status == StepStatus.FAILED]

    @property
    def applied_steps(self) -> list[str]:
        return [r.name for r in self.results if r.status == StepStatus.APPLIED]

    @property
    def succeeded(self) -> bool:
        return not self.failed_steps

    def status_of(self, name: str) -> Optional[StepStatus]:
        for result in self.results:
            if result.name == name:
                return result.status
        return None
