"""Runtime configuration for PlanWatcher.

:class:`WatcherConfig` is resolved once, before the pipeline starts, and then
passed explicitly to every factory that needs it. AWS credentials are carried
here rather than installed on a process-wide default session.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

import boto3

DEFAULT_TARGET_URL = "https://www.thepierceapts.com/floorplans/"
DEFAULT_STORE_LOCATION = "floor-plans.json"
DEFAULT_SUBJECT = "Updated Availability at The Pierce"
DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_DELAY = 30.0
DEFAULT_REQUEST_TIMEOUT = 20

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class WatcherConfig:
    """Static settings for one monitoring process."""

    target_url: str = DEFAULT_TARGET_URL
    store_location: str = DEFAULT_STORE_LOCATION
    sns_topic_arn: Optional[str] = None
    notification_subject: str = DEFAULT_SUBJECT
    slack_webhook: Optional[str] = field(default=None, repr=False)
    aws_region: Optional[str] = None
    aws_access_key_id: Optional[str] = field(default=None, repr=False)
    aws_secret_access_key: Optional[str] = field(default=None, repr=False)
    debug: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WatcherConfig":
        """Construct a configuration from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            target_url=_text(env, "TARGET_URL") or DEFAULT_TARGET_URL,
            store_location=_text(env, "SNAPSHOT_STORE") or DEFAULT_STORE_LOCATION,
            sns_topic_arn=_text(env, "SNS_TOPIC_ARN"),
            notification_subject=_text(env, "NOTIFICATION_SUBJECT") or DEFAULT_SUBJECT,
            slack_webhook=_text(env, "SLACK_WEBHOOK"),
            aws_region=_text(env, "AWS_REGION"),
            aws_access_key_id=_text(env, "AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=_text(env, "AWS_SECRET_ACCESS_KEY"),
            debug=(_text(env, "DEBUG_MODE") or "").lower() in TRUTHY,
            max_retries=_number(env, "MAX_RETRIES", int, DEFAULT_MAX_RETRIES),
            initial_delay=_number(env, "INITIAL_DELAY_SECONDS", float, DEFAULT_INITIAL_DELAY),
            request_timeout=_number(env, "REQUEST_TIMEOUT", int, DEFAULT_REQUEST_TIMEOUT),
        )

    @property
    def uses_s3(self) -> bool:
        return self.store_location.startswith("s3://")

    def boto3_session(self) -> boto3.session.Session:
        """Build an AWS session from the explicit credentials, if any."""
        return boto3.session.Session(
            aws_access_key_id=self.aws_access_key_id,
            aws_secret_access_key=self.aws_secret_access_key,
            region_name=self.aws_region,
        )


def _text(env: Mapping[str, str], name: str) -> Optional[str]:
    value = (env.get(name) or "").strip()
    return value or None


def _number(env: Mapping[str, str], name: str, kind, default):
    raw = _text(env, name)
    if raw is None:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a {kind.__name__}, got {raw!r}") from exc
