"""
plansync - Source Package

Keeps the local financial-planning store in step with the desktop
ledger it is derived from, and evolves that store's schema in place.

DESIGN PRINCIPLES:
1. The external ledger is read-only
2. Every migration step decides for itself whether work remains
3. A broken step never blocks the others
4. The store file on disk is only ever replaced whole
"""

__version__ = "1.0.0"
__author__ = "plansync maintainers"
