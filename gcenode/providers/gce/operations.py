"""Operation completion for Compute Engine's asynchronous API.

Every mutating call returns an :class:`~gcenode.api.model.Operation`; it is
re-read from the operations endpoint of the same project (and zone, for zonal
operations) until its status is DONE. A failed operation is still DONE: the
error payload is inspected only after the wait.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from gcenode.api.model import status_rank
from gcenode.core.exceptions import OperationFailedError, OperationTimeoutError
from gcenode.observability.logger import logger
from gcenode.providers.wait import Probe, retry_until

if TYPE_CHECKING:
    from gcenode.api.compute import ComputeApi
    from gcenode.api.model import Operation

log = logger.bind(provider="gce")


class OperationDonePredicate:
    """Re-reads an operation and reports whether it reached DONE."""

    def __init__(self, api: ComputeApi, project: Callable[[], str]) -> None:
        self._api = api
        self._project = project

    def __call__(self, operation: Operation) -> Probe[Operation]:
        endpoint = self._api.operations(self._project(), operation.zone)
        fresh = endpoint.get(operation.name)
        if fresh is None:
            # the operations endpoint lost track of it; keep the last view
            log.warning("Operation {name} not found on re-read", name=operation.name)
            return Probe(value=operation, done=False)
        if status_rank(fresh.status) < status_rank(operation.status):
            log.warning(
                "Operation {name} went back from {old} to {new}; keeping {old}",
                name=operation.name, old=operation.status, new=fresh.status,
            )
            return Probe(value=operation, done=operation.is_done)
        log.trace(
            "Operation {name} status={status} progress={progress}",
            name=fresh.name, status=fresh.status, progress=fresh.progress,
        )
        return Probe(value=fresh, done=fresh.is_done)


class OperationWaiter:
    """Blocks until an operation is DONE and raises if it failed or timed out."""

    def __init__(
        self,
        predicate: OperationDonePredicate,
        *,
        timeout: float,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._predicate = predicate
        self._timeout = timeout
        self._interval = interval
        self._sleep = sleep
        self._clock = clock

    def wait(self, operation: Operation) -> Operation:
        """Wait for ``operation`` and return its final state.

        Raises:
            OperationTimeoutError: DONE was not reached within the timeout.
            OperationFailedError: DONE was reached with an HTTP error payload.
        """
        last = operation

        def _check() -> Probe[Operation]:
            nonlocal last
            seen = self._predicate(last)
            last = seen.value
            return seen

        result = retry_until(
            _check,
            timeout=self._timeout,
            interval=self._interval,
            sleep=self._sleep,
            clock=self._clock,
            description=f"operation {operation.name}",
        )
        final = result.value

        if not result.succeeded:
            raise OperationTimeoutError(final, self._timeout)

        if final.failed:
            error = final.http_error
            log.error(
                "Operation {name} failed: {code} {msg}",
                name=final.name, code=error.status_code, msg=error.message,  # type: ignore[union-attr]
            )
            raise OperationFailedError(error.status_code, error.message, final)  # type: ignore[union-attr]

        log.debug("Operation {name} done after {n} poll(s)", name=final.name, n=result.attempts)
        return final
