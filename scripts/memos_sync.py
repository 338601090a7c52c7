#!/usr/bin/env -S uv run --quiet python
"""
Memos Sync - Main entry point

Import memos into daily notes, or create a periodic note for a date.
Designed to be run via cron, e.g. every 15 minutes for `sync`.

Usage:
    memos_sync.py [--settings PATH] [--json] sync
    memos_sync.py [--settings PATH] periodic --period weekly [--date 2024-08-15]
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from memos_periodic.config import PERIOD_TYPES, SettingsManager
from memos_periodic.daily_record import DailyRecordImporter
from memos_periodic.periodic_notes import create_periodic_file
from memos_periodic.utils import MemosPeriodicError
from memos_periodic.vault import CreateResult, Vault

LOG_DIR = Path(__file__).parent.parent / "logs"


def setup_logging():
    """Configure logging with file and console handlers"""
    LOG_DIR.mkdir(exist_ok=True)

    log_file = LOG_DIR / "memos_sync.log"

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # File handler (detailed logs)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    # Console handler (concise logs)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def write_sync_status(results):
    """Write sync status to file for monitoring"""
    status = {
        "last_run": results["timestamp"],
        "fetched": results["fetched"],
        "processed": results["processed"],
        "failed": results["failed"],
        "status": "success" if results["failed"] == 0 and not results["errors"] else "partial_failure",
        "errors": results.get("errors", []),
    }

    with open(LOG_DIR / "status.json", "w") as f:
        json.dump(status, f, indent=2)


def run_sync(settings_manager: SettingsManager, as_json: bool) -> int:
    logger = logging.getLogger()
    logger.info("=" * 60)
    logger.info("Memos Sync Started")
    logger.info("=" * 60)

    try:
        importer = DailyRecordImporter.from_settings(settings_manager)
        results = importer.sync()
        write_sync_status(results)
    except Exception as e:
        logger.error(f"Fatal error during sync: {e}")
        logger.exception("Detailed error:")
        write_sync_status(
            {
                "timestamp": datetime.now().isoformat(),
                "fetched": 0,
                "processed": 0,
                "failed": 1,
                "errors": [str(e)],
            }
        )
        return 2

    if as_json:
        print(json.dumps(results, indent=2))

    logger.info(
        f"Sync complete: {results['processed']} records written, {results['failed']} failed"
    )
    for day in results["notes_updated"]:
        logger.info(f"  ✓ {day}")
    for error in results["errors"]:
        logger.error(f"  ✗ {error}")

    return 1 if results["failed"] > 0 or results["errors"] else 0


def run_periodic(settings_manager: SettingsManager, period: str, day: date, as_json: bool) -> int:
    logger = logging.getLogger()

    vault_path = settings_manager.get_vault_path()
    vault = Vault(vault_path) if vault_path else None

    result = create_periodic_file(day, period, settings_manager.settings, vault)

    if as_json:
        print(json.dumps({"period": period, "date": day.isoformat(), "result": result.value}))
    else:
        logger.info(f"{period} note for {day.isoformat()}: {result.value}")

    return 0 if result in (CreateResult.CREATED, CreateResult.OPENED_EXISTING) else 1


def main():
    """Main entry point for CLI"""
    setup_logging()

    parser = argparse.ArgumentParser(description="Memos daily records and periodic notes")
    parser.add_argument("--settings", type=str, metavar="PATH", help="Path to settings.json")
    parser.add_argument("--json", action="store_true", help="Output results as JSON")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("sync", help="Import memos into daily notes (default)")

    periodic_parser = subparsers.add_parser("periodic", help="Create a periodic note")
    periodic_parser.add_argument("--period", choices=PERIOD_TYPES, default="daily")
    periodic_parser.add_argument(
        "--date", type=date.fromisoformat, default=None, help="Date inside the period (YYYY-MM-DD)"
    )

    args = parser.parse_args()

    settings_manager = SettingsManager(args.settings)

    try:
        if args.command == "periodic":
            exit_code = run_periodic(
                settings_manager, args.period, args.date or date.today(), args.json
            )
        else:
            exit_code = run_sync(settings_manager, args.json)
    except MemosPeriodicError as e:
        logging.getLogger().error(f"✗ {e}")
        exit_code = 2

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
