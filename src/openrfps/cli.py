"""Command line interface: ``openrfps run`` and ``openrfps test``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import OpenRFPsConfig
from .exceptions import CorruptCacheError, ModuleLoadError
from .logging_config import get_logger, setup_logging
from .models import RunOptions
from .runner import ScraperRunner
from .scrapers.http_client import DEFAULT_USER_AGENT, HttpxClient
from .scrapers.registry import build_registry_from_config
from .validation import validate

logger = get_logger("cli")


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openrfps",
        description="Run RFP scrapers, cache their output and validate the results",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML (default: config/openrfps.yaml)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    def add_run_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("file", nargs="?", help="Scraper source file or registered scraper identity")
        sub.add_argument(
            "--limit",
            type=non_negative_int,
            default=0,
            help="Only keep the first N records (default: 0, unlimited)",
        )
        sub.add_argument(
            "--force",
            action="store_true",
            help="Ignore cached results and run the scraper",
        )
        sub.add_argument(
            "--skipsave",
            action="store_true",
            help="Do not write the results to the cache",
        )

    run_parser = subparsers.add_parser("run", help="Run a scraper and print its records as JSON")
    add_run_arguments(run_parser)

    test_parser = subparsers.add_parser("test", help="Validate a scraper's records")
    add_run_arguments(test_parser)
    test_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the validation report as JSON",
    )

    return parser


def build_runner(config: OpenRFPsConfig) -> ScraperRunner:
    http_client = HttpxClient(
        timeout=float(config.get_setting("default_timeout_seconds", 30.0)),
        user_agent=config.get_setting("user_agent", DEFAULT_USER_AGENT),
    )
    registry = build_registry_from_config(config, http_client)
    return ScraperRunner(registry=registry, cache=config.build_cache_store())


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = OpenRFPsConfig(args.config)
    log_dir = config.get_setting("log_dir")
    setup_logging(
        log_file=args.log_file,
        log_dir=Path(log_dir) if log_dir else None,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    runner = build_runner(config)
    options = RunOptions(limit=args.limit, force=args.force, skipsave=args.skipsave)

    try:
        result = asyncio.run(runner.run(args.file, options))
    except (ModuleLoadError, CorruptCacheError) as exc:
        logger.error(str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result is None:
        return 1

    if result.cache_error:
        print(f"Warning: {result.cache_error}", file=sys.stderr)

    if args.command == "run":
        print(json.dumps(result.records, indent=2, ensure_ascii=False))
        return 0

    report = validate(result.records)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        for line in report.status_lines():
            print(line)
        passed = len(report.results) - len(report.failed_rules)
        print(f"{passed}/{len(report.results)} checks passed for {report.record_count} records")

    return 0 if report.passed else 1


if __name__ == "__main__":
    sys.exit(main())
