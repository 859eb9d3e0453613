from __future__ import annotations

import math

import pytest

from gcenode.providers.wait import Probe, poll_until_present, retry_until


def _scripted(results: list[bool]):
    calls = []

    def probe() -> Probe[int]:
        calls.append(len(calls))
        done = results[min(len(calls) - 1, len(results) - 1)]
        return Probe(value=len(calls), done=done)

    return probe, calls


class TestRetryUntil:
    def test_first_success_returns_immediately(self, clock):
        probe, calls = _scripted([True])
        result = retry_until(probe, timeout=10, interval=2, sleep=clock.sleep, clock=clock)
        assert result.succeeded
        assert result.value == 1
        assert result.attempts == 1
        assert len(calls) == 1
        assert clock.sleeps == []

    def test_stops_on_first_success(self, clock):
        probe, calls = _scripted([False, False, True, False])
        result = retry_until(probe, timeout=10, interval=2, sleep=clock.sleep, clock=clock)
        assert result.succeeded
        assert result.value == 3
        assert len(calls) == 3
        assert clock.sleeps == [2, 2]

    def test_gives_up_without_raising(self, clock):
        probe, calls = _scripted([False])
        result = retry_until(probe, timeout=10, interval=2, sleep=clock.sleep, clock=clock)
        assert not result.succeeded
        assert result.value == len(calls)
        assert result.attempts == len(calls)

    @pytest.mark.parametrize(
        ("timeout", "interval"),
        [(10, 2), (10, 3), (1, 0.3), (5, 4.9), (60, 1)],
    )
    def test_checks_at_least_timeout_over_interval_times(self, clock, timeout, interval):
        probe, calls = _scripted([False])
        retry_until(probe, timeout=timeout, interval=interval, sleep=clock.sleep, clock=clock)
        assert len(calls) >= math.floor(timeout / interval)

    @pytest.mark.parametrize("timeout", [0, -1, -0.5])
    def test_non_positive_timeout_checks_once(self, clock, timeout):
        probe, calls = _scripted([False])
        result = retry_until(probe, timeout=timeout, interval=1, sleep=clock.sleep, clock=clock)
        assert not result.succeeded
        assert len(calls) == 1
        assert clock.sleeps == []

    def test_check_exception_propagates(self, clock):
        def probe() -> Probe[None]:
            raise RuntimeError("backend unavailable")

        with pytest.raises(RuntimeError, match="backend unavailable"):
            retry_until(probe, timeout=10, interval=2, sleep=clock.sleep, clock=clock)
        assert clock.sleeps == []

    def test_last_observation_is_returned(self, clock):
        seen = iter(["PENDING", "RUNNING", "RUNNING"])

        def probe() -> Probe[str]:
            status = next(seen, "RUNNING")
            return Probe(value=status, done=status == "DONE")

        result = retry_until(probe, timeout=4, interval=2, sleep=clock.sleep, clock=clock)
        assert not result.succeeded
        assert result.value == "RUNNING"


class TestPollUntilPresent:
    def test_returns_value_once_present(self, clock):
        reads = iter([None, None, "instance"])
        result = poll_until_present(
            lambda: next(reads), timeout=10, interval=1, sleep=clock.sleep, clock=clock,
        )
        assert result.succeeded
        assert result.value == "instance"
        assert result.attempts == 3

    def test_never_present(self, clock):
        result = poll_until_present(
            lambda: None, timeout=3, interval=1, sleep=clock.sleep, clock=clock,
        )
        assert not result.succeeded
        assert result.value is None
