#!/usr/bin/env python3
"""Refresh the cache of every configured scraper and validate the results.

Each enabled scraper in the configuration is force-run, its result set is
written to the cache and scored by the validation rules.

Usage:
    python scripts/refresh_caches.py [--config PATH] [--identity ID] [--limit N]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, List

from src.openrfps.cli import build_runner
from src.openrfps.config import OpenRFPsConfig
from src.openrfps.logging_config import setup_logging
from src.openrfps.models import RunOptions
from src.openrfps.validation import validate


async def refresh(runner, identities: List[str], options: RunOptions, skip_validation: bool) -> Dict[str, Dict]:
    logger = logging.getLogger("openrfps.refresh")
    summary: Dict[str, Dict] = {}

    for identity in identities:
        try:
            result = await runner.run(identity, options)
        except Exception as exc:
            logger.exception(f"Scraper {identity} failed: {exc}")
            summary[identity] = {"status": "error", "error": str(exc)}
            continue

        entry: Dict = {"status": "ok", "records": result.record_count, "cached": result.cache_written}
        if result.cache_error:
            entry["cache_error"] = result.cache_error
        if not skip_validation:
            report = validate(result.records)
            entry["failed_rules"] = report.failed_rules
            if not report.passed:
                entry["status"] = "invalid"
        summary[identity] = entry

    return summary


def main() -> int:
    """Refresh entrypoint."""
    parser = argparse.ArgumentParser(description="Refresh scraper caches and validate results")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/openrfps.yaml"),
        help="Path to configuration file",
    )
    parser.add_argument(
        "--identity",
        type=str,
        help="Only refresh one scraper",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Only keep the first N records per scraper",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Do not run validation rules",
    )
    args = parser.parse_args()

    logger = setup_logging(level=logging.INFO)

    if not args.config.exists():
        logger.error(f"Configuration file not found: {args.config}")
        return 1

    config = OpenRFPsConfig(args.config)
    log_dir = config.get_setting("log_dir")
    if log_dir:
        logger = setup_logging(log_dir=Path(log_dir), level=logging.INFO)
    runner = build_runner(config)

    identities = runner.registry.identities()
    if args.identity:
        if args.identity not in identities:
            logger.error(f"No scraper configured with identity: {args.identity}")
            return 1
        identities = [args.identity]

    if not identities:
        logger.warning("No enabled scrapers configured")
        return 0

    options = RunOptions(limit=args.limit, force=True)
    summary = asyncio.run(refresh(runner, identities, options, args.skip_validation))

    for identity, entry in summary.items():
        line = f"{identity}: {entry['status']}"
        if "records" in entry:
            line += f" ({entry['records']} records)"
        if entry.get("failed_rules"):
            line += f" failed: {', '.join(entry['failed_rules'])}"
        if entry.get("error"):
            line += f" error: {entry['error']}"
        print(line)

    statuses = {entry["status"] for entry in summary.values()}
    if "error" in statuses:
        return 1
    if "invalid" in statuses:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
