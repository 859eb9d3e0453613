"""Provider adapters and the polling/paging machinery they share."""

from .paging import ListScope, PagedIterable, advance
from .wait import PollResult, Probe, poll_until_present, retry_until

__all__ = [
    "ListScope",
    "PagedIterable",
    "PollResult",
    "Probe",
    "advance",
    "poll_until_present",
    "retry_until",
]
