"""Scheduled-invocation entry point and shared wiring."""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Optional

import requests

from .config import WatcherConfig
from .notifications import build_notifier
from .retry import run_with_backoff
from .runner import PlanWatcherRunner
from .scraper import scrape_floor_plans
from .store import resolve_store

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def build_runner(
    config: WatcherConfig,
    s3_client: Any = None,
    sns_client: Any = None,
) -> PlanWatcherRunner:
    """Wire a runner from configuration, creating AWS clients on demand."""
    if config.uses_s3 and s3_client is None:
        s3_client = config.boto3_session().client("s3")
    store = resolve_store(config.store_location, s3_client=s3_client)
    notifier = build_notifier(config, sns_client=sns_client)
    if notifier is None:
        logger.warning("No notification channel configured; changes will only be logged")
    return PlanWatcherRunner(
        target_url=config.target_url,
        store=store,
        notifier=notifier,
        scraper=functools.partial(
            scrape_floor_plans,
            timeout=config.request_timeout,
            session=requests.Session(),
        ),
    )


def report_outcome(success: bool) -> None:
    if success:
        logger.info("Successfully scraped site")
    else:
        logger.error("Failure scraping site after exhausting retries")


def handler(event: Any = None, context: Any = None, config: Optional[WatcherConfig] = None) -> dict:
    """Run one monitoring cycle with retries; suitable as a Lambda handler."""
    config = config or WatcherConfig.from_env()
    configure_logging(config.debug)
    logger.debug("Starting scraper with %r", config)

    runner = build_runner(config)
    success = asyncio.run(
        run_with_backoff(
            runner.run_once,
            max_attempts=config.max_retries,
            initial_delay=config.initial_delay,
            on_done=report_outcome,
        )
    )
    summary = runner.last_summary
    return {
        "success": success,
        "changed": summary.changed if success and summary else None,
    }
