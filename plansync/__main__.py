"""
Command line entry point.

    python -m plansync [migrate]          bootstrap then migrate the store
    python -m plansync sync-projects      import ledger projects on demand

Exit codes: 0 on success, 1 when a migration step failed, 2 when the store
file cannot be read at all.
"""

import argparse
import asyncio
import sys
from typing import Optional, Sequence

import structlog

from plansync import __version__
from plansync.audit import AuditLogger, configure_logging
from plansync.config import Settings, load_settings
from plansync.orchestrator import startup
from plansync.services.storage import StoreCorruptError
from plansync.sync import sync_projects_from_ledger

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_STORE_UNREADABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plansync",
        description="Keep the local planning store in step with the ledger",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-dir", help="Directory holding both database files")
    parser.add_argument("--store", help="Local store file (overrides --data-dir)")
    parser.add_argument("--ledger", help="Ledger file (overrides --data-dir)")
    parser.add_argument(
        "command",
        nargs="?",
        default="migrate",
        choices=("migrate", "sync-projects"),
        help="What to run (default: migrate)",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    if args.store:
        overrides["store_path"] = args.store
    if args.ledger:
        overrides["ledger_path"] = args.ledger
    return load_settings(**overrides)


async def run_command(command: str, settings: Settings) -> int:
    audit_logger = AuditLogger()
    try:
        if command == "sync-projects":
            count = await sync_projects_from_ledger(settings, audit_logger)
            logger.info("sync_finished", projects=count)
            return EXIT_OK

        report = await startup(settings, audit_logger)
    except StoreCorruptError as e:
        logger.error("store_unreadable", error=str(e))
        return EXIT_STORE_UNREADABLE

    logger.info(
        "migration_finished",
        applied=report.applied_steps,
        failed=report.failed_steps,
        persisted=report.persisted,
    )
    return EXIT_OK if report.succeeded else EXIT_STEP_FAILED


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings.logging)
    return asyncio.run(run_command(args.command, settings))


if __name__ == "__main__":
    sys.exit(main())
