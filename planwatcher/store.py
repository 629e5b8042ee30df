"""Snapshot persistence backed by a local file or an S3 object."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence, Tuple

from .models import FloorPlan, Snapshot, snapshot_from_data, snapshot_to_data

logger = logging.getLogger(__name__)

S3_PREFIX = "s3://"
FILE_PREFIX = "file://"
SNAPSHOT_FILE_MODE = 0o644


class SnapshotStore(Protocol):
    """Protocol defining the snapshot store contract."""

    def load(self) -> Snapshot:
        ...

    def save(self, snapshot: Sequence[FloorPlan]) -> None:
        ...


def dump_snapshot(snapshot: Sequence[FloorPlan]) -> str:
    """Serialize a snapshot as indented, diff-friendly JSON."""
    return json.dumps(snapshot_to_data(snapshot), indent=4, ensure_ascii=False) + "\n"


def parse_snapshot(text: str) -> Snapshot:
    return snapshot_from_data(json.loads(text))


@dataclass
class LocalFileSnapshotStore:
    """Keeps the last snapshot in a JSON file on disk."""

    path: Path

    def load(self) -> Snapshot:
        logger.debug("Loading previous snapshot from %s", self.path)
        try:
            snapshot = parse_snapshot(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("No previous snapshot at %s; starting from empty", self.path)
            return []
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unable to read previous snapshot from %s: %s", self.path, exc)
            return []
        logger.debug("Loaded %d floor plans from %s", len(snapshot), self.path)
        return snapshot

    def save(self, snapshot: Sequence[FloorPlan]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(dump_snapshot(snapshot))
            os.chmod(tmp_name, SNAPSHOT_FILE_MODE)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved %d floor plans to %s", len(snapshot), self.path)


@dataclass
class S3SnapshotStore:
    """Keeps the last snapshot in a single S3 object."""

    bucket: str
    key: str
    client: Any

    @property
    def location(self) -> str:
        return f"{S3_PREFIX}{self.bucket}/{self.key}"

    def load(self) -> Snapshot:
        logger.debug("Retrieving previous snapshot from %s", self.location)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self.key)
            body = response["Body"].read().decode("utf-8")
            snapshot = parse_snapshot(body)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unable to retrieve previous snapshot from %s: %s", self.location, exc)
            return []
        logger.debug("Retrieved %d floor plans from %s", len(snapshot), self.location)
        return snapshot

    def save(self, snapshot: Sequence[FloorPlan]) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=self.key,
            Body=dump_snapshot(snapshot).encode("utf-8"),
            ContentType="application/json",
        )
        logger.info("Uploaded %d floor plans to %s", len(snapshot), self.location)


def split_s3_location(location: str) -> Tuple[str, str]:
    """Translate ``s3://bucket/key`` into its bucket and key parts."""
    remainder = location[len(S3_PREFIX):]
    bucket, _, key = remainder.partition("/")
    if not bucket or not key:
        raise ValueError(f"S3 location must look like s3://bucket/key, got {location!r}")
    return bucket, key


def resolve_local_path(location: str) -> Path:
    """Translate a file location into an absolute filesystem path."""
    raw_path = location
    if raw_path.startswith(FILE_PREFIX):
        raw_path = raw_path[len(FILE_PREFIX):]
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path.resolve()


def resolve_store(location: str, s3_client: Any = None) -> SnapshotStore:
    """Build the snapshot store named by ``location``."""
    if not location:
        raise ValueError("Snapshot store location must not be empty")

    if location.startswith(S3_PREFIX):
        bucket, key = split_s3_location(location)
        if s3_client is None:
            raise ValueError(f"An S3 client is required for {location}")
        return S3SnapshotStore(bucket=bucket, key=key, client=s3_client)

    return LocalFileSnapshotStore(path=resolve_local_path(location))
