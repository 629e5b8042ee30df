"""CLI entrypoint for the PlanWatcher agent."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from planwatcher.config import WatcherConfig
from planwatcher.diff import describe_changes
from planwatcher.handler import build_runner, configure_logging, report_outcome
from planwatcher.retry import retry_sync

logger = logging.getLogger(__name__)


def build_parser(config: WatcherConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PlanWatcher monitoring agent")
    parser.add_argument(
        "--run",
        action="store_true",
        help="execute one monitoring cycle, retrying with exponential backoff",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="execute a single attempt without retries",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="skip snapshot updates and notifications while still scraping and diffing",
    )
    parser.add_argument(
        "--target-url",
        default=config.target_url,
        help="URL to monitor (overrides TARGET_URL env var)",
    )
    parser.add_argument(
        "--store",
        default=config.store_location,
        help="snapshot location, a file path or s3://bucket/key (overrides SNAPSHOT_STORE)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=config.max_retries,
        help="retries after the first failed attempt (overrides MAX_RETRIES)",
    )
    parser.add_argument(
        "--initial-delay",
        type=float,
        default=config.initial_delay,
        help="seconds before the first retry (overrides INITIAL_DELAY_SECONDS)",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    config = WatcherConfig.from_env()
    parser = build_parser(config)
    args = parser.parse_args(argv)
    configure_logging(args.verbose or config.debug)

    if not (args.run or args.once):
        parser.print_help()
        return 1

    config = dataclasses.replace(
        config,
        target_url=args.target_url,
        store_location=args.store,
        max_retries=args.max_retries,
        initial_delay=args.initial_delay,
    )
    runner = build_runner(config)

    def attempt() -> bool:
        return runner.run_once(dry_run=args.dry_run)

    if args.once:
        success = attempt()
        report_outcome(success)
    else:
        success = retry_sync(
            attempt,
            max_attempts=config.max_retries,
            initial_delay=config.initial_delay,
            on_done=report_outcome,
        )

    summary = runner.last_summary
    if success and summary is not None and summary.changed:
        logger.info("Availability changed (%d difference(s)):", len(summary.diff))
        for line in describe_changes(summary.diff):
            logger.info("  %s", line)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
