"""Generic wait/polling utilities.

The poller is shared by two waits: an operation reaching DONE, and a freshly
created resource becoming readable. Callers supply a zero-argument probe that
returns the latest observation together with a "done" decision; the poller
hands the last observation back instead of mutating shared state.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from tenacity import RetryCallState, Retrying, retry_if_result, wait_fixed

from gcenode.observability.logger import logger

log = logger.bind(component="wait")


@dataclass(frozen=True, slots=True)
class Probe[T]:
    """One observation and whether it satisfies the wait."""
    value: T
    done: bool


@dataclass(frozen=True, slots=True)
class PollResult[T]:
    succeeded: bool
    value: T
    attempts: int


def retry_until[T](
    probe: Callable[[], Probe[T]],
    *,
    timeout: float,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    description: str = "condition",
) -> PollResult[T]:
    """Call ``probe`` every ``interval`` seconds until it reports done.

    Gives up once ``timeout`` seconds have elapsed since the first call; a
    timeout of zero or less checks exactly once. Giving up is not an error
    here: the result says whether the wait succeeded and carries the last
    observation. Exceptions raised by ``probe`` propagate unchanged.

    Args:
        probe: Returns a fresh observation each call.
        timeout: Overall budget in seconds.
        interval: Pause between calls in seconds.
        sleep: Sleep function, injectable for tests.
        clock: Monotonic clock, injectable for tests.
        description: Used in log messages.

    Returns:
        PollResult with the last observation and the number of calls made.
    """
    start = clock()
    attempts = 0

    def _stop(_: RetryCallState) -> bool:
        return clock() - start >= timeout

    def _counted() -> Probe[T]:
        nonlocal attempts
        attempts += 1
        return probe()

    def _give_up(state: RetryCallState) -> Probe[T]:
        return state.outcome.result()  # type: ignore[union-attr]

    retrying = Retrying(
        stop=_stop,
        wait=wait_fixed(max(interval, 0.0)),
        retry=retry_if_result(lambda p: not p.done),
        retry_error_callback=_give_up,
        sleep=sleep,
    )

    last = retrying(_counted)

    if last.done:
        log.debug("{what} satisfied after {n} check(s)", what=description, n=attempts)
    else:
        log.warning(
            "{what} not satisfied after {n} check(s) in {t:.1f}s",
            what=description, n=attempts, t=timeout,
        )
    return PollResult(succeeded=last.done, value=last.value, attempts=attempts)


def poll_until_present[T](
    fetch: Callable[[], T | None],
    *,
    timeout: float,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    description: str = "resource",
) -> PollResult[T | None]:
    """Re-read a resource until the read returns something other than None."""

    def _probe() -> Probe[T | None]:
        value = fetch()
        return Probe(value=value, done=value is not None)

    return retry_until(
        _probe,
        timeout=timeout,
        interval=interval,
        sleep=sleep,
        clock=clock,
        description=description,
    )
