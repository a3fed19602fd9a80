"""Audit logging package."""

from plansync.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
