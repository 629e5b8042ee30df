"""Core execution workflow for PlanWatcher."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .diff import describe_changes, diff_snapshots
from .models import RunSummary, Snapshot
from .notifications import Notifier, notify
from .scraper import scrape_floor_plans
from .store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class PlanWatcherRunner:
    """Coordinates scrape, diff, persistence and notification steps."""

    target_url: str
    store: SnapshotStore
    notifier: Optional[Notifier] = None
    scraper: Callable[[str], Snapshot] = field(
        default_factory=lambda: scrape_floor_plans
    )
    last_summary: Optional[RunSummary] = field(default=None, init=False)

    def run(self, dry_run: bool = False) -> RunSummary:
        """Execute a single monitoring cycle, raising on any failure."""
        logger.info("Starting monitor cycle for %s", self.target_url)
        executed_at = dt.datetime.now(dt.timezone.utc).isoformat()

        current = self.scraper(self.target_url)
        previous = self.store.load()
        diff = diff_snapshots(previous, current)
        summary = RunSummary(
            executed_at=executed_at,
            changed=bool(diff),
            diff=diff,
            snapshot=current,
            dry_run=dry_run,
        )

        if not diff:
            logger.info("No new changes to availability")
            return summary

        logger.info("Detected %d change(s) to availability", len(diff))
        for line in describe_changes(diff):
            logger.debug("  %s", line)

        if dry_run:
            logger.info("Dry run: skipping snapshot update and notification")
            return summary

        self.store.save(current)
        if self.notifier is not None:
            notify(self.notifier, current)
            summary.notified = True
        else:
            logger.debug("No notifier configured; skipping delivery")
        return summary

    def run_once(self, dry_run: bool = False) -> bool:
        """Execute a cycle and reduce its outcome to a boolean."""
        try:
            self.last_summary = self.run(dry_run=dry_run)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Monitor cycle failed: %s", exc)
            return False
        return True
