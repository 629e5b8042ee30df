import pytest

import monitor_plans
from planwatcher import handler as handler_module
from planwatcher.config import WatcherConfig
from planwatcher.handler import build_runner, handler
from planwatcher.notifications import SnsNotifier
from planwatcher.store import LocalFileSnapshotStore, S3SnapshotStore

PAGE = """
<html><body><div>
  <div class="studio"></div>
  <div class="onebed"><div class="accordion-content">
    <div class="accordionsub-container">
      <a class="accordionsub-toggle">A1 Plan • 712 Sq. Ft.</a>
      <div class="accordionsub-content">
        <div class="avail-row"></div>
        <div class="avail-row">
          <div class="avail-unit"><span class="right">0412</span></div>
          <div class="avail-date"><span class="right">Now</span></div>
          <div class="avail-price"><span class="right">2150</span></div>
        </div>
      </div>
    </div>
  </div></div>
</div></body></html>
"""


class FakeSnsClient:

    def __init__(self):
        self.published = []

    def publish(self, **kwargs):
        self.published.append(kwargs)


def test_build_runner_wires_local_store_and_sns(tmp_path):
    client = FakeSnsClient()
    config = WatcherConfig(
        target_url="https://example.com/plans",
        store_location=str(tmp_path / "plans.json"),
        sns_topic_arn="arn:aws:sns:us-east-1:123456789012:plans",
    )

    runner = build_runner(config, sns_client=client)

    assert runner.target_url == "https://example.com/plans"
    assert isinstance(runner.store, LocalFileSnapshotStore)
    assert isinstance(runner.notifier.notifiers[0], SnsNotifier)


def test_build_runner_uses_given_s3_client():
    client = object()
    runner = build_runner(
        WatcherConfig(store_location="s3://pierce-monitor/floor-plans.json"),
        s3_client=client,
    )
    assert isinstance(runner.store, S3SnapshotStore)
    assert runner.store.client is client
    assert runner.notifier is None


def test_handler_runs_pipeline_end_to_end(tmp_path, monkeypatch):
    client = FakeSnsClient()
    monkeypatch.setattr("planwatcher.scraper.fetch_document", lambda url, timeout, session=None: PAGE)
    original_build = handler_module.build_runner
    monkeypatch.setattr(
        handler_module,
        "build_runner",
        lambda config: original_build(config, sns_client=client),
    )
    config = WatcherConfig(
        store_location=str(tmp_path / "plans.json"),
        sns_topic_arn="arn:aws:sns:us-east-1:123456789012:plans",
        max_retries=0,
        initial_delay=0,
    )

    assert handler({}, None, config=config) == {"success": True, "changed": True}
    assert len(client.published) == 1
    assert "Unit #0412 is available Now for $2,150" in client.published[0]["Message"]

    assert handler({}, None, config=config) == {"success": True, "changed": False}
    assert len(client.published) == 1


def test_handler_reports_failure_after_retries(tmp_path, monkeypatch, caplog):
    attempts = []

    def failing_fetch(url, timeout, session=None):
        attempts.append(url)
        raise OSError("network down")

    monkeypatch.setattr("planwatcher.scraper.fetch_document", failing_fetch)
    config = WatcherConfig(
        store_location=str(tmp_path / "plans.json"),
        max_retries=2,
        initial_delay=0,
    )

    with caplog.at_level("ERROR"):
        assert handler({}, None, config=config) == {"success": False, "changed": None}

    assert len(attempts) == 3
    assert "Failure scraping site" in caplog.text


def test_cli_without_action_prints_help(monkeypatch, capsys):
    monkeypatch.delenv("MAX_RETRIES", raising=False)
    assert monitor_plans.main([]) == 1
    assert "PlanWatcher monitoring agent" in capsys.readouterr().out


@pytest.mark.parametrize("flag", ["--once", "--run"])
def test_cli_dry_run_does_not_persist(tmp_path, monkeypatch, flag):
    monkeypatch.setattr("planwatcher.scraper.fetch_document", lambda url, timeout, session=None: PAGE)
    monkeypatch.delenv("SNS_TOPIC_ARN", raising=False)
    monkeypatch.delenv("SLACK_WEBHOOK", raising=False)
    store_path = tmp_path / "plans.json"

    exit_code = monitor_plans.main(
        [flag, "--dry-run", "--store", str(store_path), "--initial-delay", "0"]
    )

    assert exit_code == 0
    assert not store_path.exists()


def test_cli_run_persists_snapshot(tmp_path, monkeypatch):
    monkeypatch.setattr("planwatcher.scraper.fetch_document", lambda url, timeout, session=None: PAGE)
    monkeypatch.delenv("SNS_TOPIC_ARN", raising=False)
    monkeypatch.delenv("SLACK_WEBHOOK", raising=False)
    store_path = tmp_path / "plans.json"

    assert monitor_plans.main(["--once", "--store", str(store_path)]) == 0
    assert '"unit": "0412"' in store_path.read_text(encoding="utf-8")
