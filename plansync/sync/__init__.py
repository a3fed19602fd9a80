"""Project synchronization package."""

from plansync.sync.projects import (
    ProjectImporter,
    create_ledger,
    normalize_project_labels,
    sync_projects_from_ledger,
)

__all__ = [
    "ProjectImporter",
    "create_ledger",
    "normalize_project_labels",
    "sync_projects_from_ledger",
]
