"""PlanWatcher package initialization."""

from .config import WatcherConfig
from .diff import diff_snapshots, has_changed
from .models import (
    Change,
    FloorPlan,
    RunSummary,
    Snapshot,
    SnapshotDiff,
    UnitAvailability,
)
from .notifications import format_floor_plans, format_money
from .retry import run_with_backoff
from .runner import PlanWatcherRunner
from .scraper import ParseError, parse_floor_plans, scrape_floor_plans
from .store import LocalFileSnapshotStore, S3SnapshotStore, resolve_store

__all__ = [
    "Change",
    "FloorPlan",
    "LocalFileSnapshotStore",
    "ParseError",
    "PlanWatcherRunner",
    "RunSummary",
    "S3SnapshotStore",
    "Snapshot",
    "SnapshotDiff",
    "UnitAvailability",
    "WatcherConfig",
    "diff_snapshots",
    "format_floor_plans",
    "format_money",
    "has_changed",
    "parse_floor_plans",
    "resolve_store",
    "run_with_backoff",
    "scrape_floor_plans",
]
