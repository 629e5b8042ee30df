"""Notification helpers for delivering availability updates to external channels."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Protocol, Sequence

import requests

from .config import WatcherConfig
from .models import FloorPlan

logger = logging.getLogger(__name__)

SNS_SUBJECT_LIMIT = 100
PRICE_NOISE = re.compile(r"[^\d.\-]")


class NotificationError(RuntimeError):
    """Raised when at least one notification channel failed to deliver."""


class Notifier(Protocol):
    """Protocol defining the notifier contract."""

    def send(self, message: str) -> None:
        ...


@dataclass
class SnsNotifier:
    """Publish messages to an SNS topic with a fixed subject."""

    topic_arn: str
    subject: str
    client: Any

    def send(self, message: str) -> None:
        logger.debug("Publishing message to SNS topic %s", self.topic_arn)
        self.client.publish(
            TopicArn=self.topic_arn,
            Subject=self.subject[:SNS_SUBJECT_LIMIT],
            Message=message,
        )
        logger.info("Message published to SNS topic %s", self.topic_arn)


@dataclass
class SlackNotifier:
    """Send messages to Slack via Incoming Webhook."""

    webhook_url: str
    timeout: int = 10

    def send(self, message: str) -> None:
        payload = {"text": message}
        response = requests.post(
            self.webhook_url,
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()


@dataclass
class CompositeNotifier:
    """Fan-out notifier that forwards messages to multiple channels."""

    notifiers: List[Notifier]

    def send(self, message: str) -> None:
        failures = []
        for notifier in self.notifiers:
            try:
                notifier.send(message)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "Failed to deliver notification via %s: %s", type(notifier).__name__, exc
                )
                failures.append((type(notifier).__name__, exc))
        if failures:
            names = ", ".join(name for name, _ in failures)
            raise NotificationError(f"Notification delivery failed via {names}") from failures[0][1]


def build_notifier(config: WatcherConfig, sns_client: Any = None) -> CompositeNotifier | None:
    """Construct a notifier from the configured channels."""
    notifiers: list[Notifier] = []

    if config.sns_topic_arn:
        if sns_client is None:
            sns_client = config.boto3_session().client("sns")
        notifiers.append(
            SnsNotifier(
                topic_arn=config.sns_topic_arn,
                subject=config.notification_subject,
                client=sns_client,
            )
        )

    if config.slack_webhook:
        notifiers.append(SlackNotifier(webhook_url=config.slack_webhook))

    if not notifiers:
        return None
    return CompositeNotifier(notifiers=notifiers)


def format_money(price: Any) -> str:
    """Render a price as a whole number with thousands separators."""
    text = PRICE_NOISE.sub("", str(price))
    try:
        amount = Decimal(text).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return str(price).strip()
    if not amount.is_finite():
        return str(price).strip()
    return f"{int(amount):,}"


def format_floor_plans(snapshot: Sequence[FloorPlan]) -> str:
    """Render the floor plans that currently advertise units."""
    lines = [""]
    for plan in snapshot:
        if plan.availability is None:
            continue
        lines.append(f"{plan.name} (sq. ft. {plan.square_footage})")
        for unit in plan.availability:
            lines.append(
                f"Unit #{unit.unit} is available {unit.available_on} for ${format_money(unit.price)}"
            )
        lines.append("")
    return "\n".join(lines) + "\n"


def notify(notifier: Notifier, snapshot: Sequence[FloorPlan]) -> str:
    """Format the snapshot and deliver it, returning the message sent."""
    message = format_floor_plans(snapshot)
    notifier.send(message)
    return message


__all__ = [
    "CompositeNotifier",
    "NotificationError",
    "Notifier",
    "SlackNotifier",
    "SnsNotifier",
    "build_notifier",
    "format_floor_plans",
    "format_money",
    "notify",
]
