import asyncio

import pytest

from planwatcher.retry import retry_sync, run_with_backoff


class FakeSleep:

    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def flaky(failures: int):
    calls = {"count": 0}

    def unit_of_work() -> bool:
        calls["count"] += 1
        return calls["count"] > failures

    return unit_of_work, calls


def run(unit_of_work, max_attempts, initial_delay, sleep):
    outcomes = []
    result = asyncio.run(
        run_with_backoff(
            unit_of_work,
            max_attempts=max_attempts,
            initial_delay=initial_delay,
            on_done=outcomes.append,
            sleep=sleep,
        )
    )
    return result, outcomes


def test_immediate_success_never_waits():
    sleep = FakeSleep()
    unit_of_work, calls = flaky(0)

    result, outcomes = run(unit_of_work, 5, 30, sleep)

    assert result is True
    assert outcomes == [True]
    assert calls["count"] == 1
    assert sleep.delays == []


@pytest.mark.parametrize("failures", [1, 3, 5])
def test_recovers_after_k_failures_with_doubling_delays(failures):
    sleep = FakeSleep()
    unit_of_work, calls = flaky(failures)

    result, outcomes = run(unit_of_work, 5, 30, sleep)

    assert result is True
    assert outcomes == [True]
    assert calls["count"] == failures + 1
    assert sleep.delays == [30 * 2 ** index for index in range(failures)]


def test_always_failing_work_stops_after_budget():
    sleep = FakeSleep()
    unit_of_work, calls = flaky(100)

    result, outcomes = run(unit_of_work, 3, 0.5, sleep)

    assert result is False
    assert outcomes == [False]
    assert calls["count"] == 4
    assert sleep.delays == [0.5, 1.0, 2.0]


def test_zero_attempts_runs_once():
    sleep = FakeSleep()
    unit_of_work, calls = flaky(100)

    result, outcomes = run(unit_of_work, 0, 10, sleep)

    assert (result, outcomes, calls["count"], sleep.delays) == (False, [False], 1, [])


def test_awaitable_unit_of_work_is_awaited():
    sleep = FakeSleep()
    attempts = []

    async def unit_of_work() -> bool:
        attempts.append(len(attempts))
        return len(attempts) == 2

    result, outcomes = run(unit_of_work, 2, 1, sleep)

    assert result is True
    assert outcomes == [True]
    assert attempts == [0, 1]
    assert sleep.delays == [1]


@pytest.mark.parametrize(("max_attempts", "initial_delay"), [(-1, 1), (1, -0.1)])
def test_invalid_arguments_are_rejected(max_attempts, initial_delay):
    with pytest.raises(ValueError):
        run(lambda: True, max_attempts, initial_delay, FakeSleep())


def test_retry_sync_uses_event_loop_timer():
    outcomes = []
    unit_of_work, calls = flaky(2)

    assert retry_sync(unit_of_work, 3, 0, outcomes.append) is True
    assert outcomes == [True]
    assert calls["count"] == 3
