"""Resolution of the caller's project name, computed once per process."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from gcenode.core.exceptions import ConfigurationError
from gcenode.observability.logger import logger

if TYPE_CHECKING:
    from gcenode.api.compute import ProjectApi

log = logger.bind(provider="gce")

IDENTITY_SEPARATOR = "@"


class Memoized[T]:
    """Supplier that computes its value on first use and reuses it afterwards.

    A failed computation is not cached; the next call tries again.
    """

    __slots__ = ("_compute", "_lock", "_value", "_ready")

    def __init__(self, compute: Callable[[], T]) -> None:
        self._compute = compute
        self._lock = threading.Lock()
        self._value: T | None = None
        self._ready = False

    def __call__(self) -> T:
        if self._ready:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._ready:
                self._value = self._compute()
                self._ready = True
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        with self._lock:
            self._value = None
            self._ready = False


def project_name_from_identity(identity: str, projects: Callable[[], ProjectApi]) -> str:
    """Map a caller identity to a project name.

    An identity without ``@`` is the project name itself. Otherwise the part
    before ``@`` is a project id whose canonical name is read from the API.
    """
    if IDENTITY_SEPARATOR not in identity:
        return identity

    project_id = identity.split(IDENTITY_SEPARATOR, 1)[0]
    project = projects().get(project_id)
    if project is None:
        raise ConfigurationError(f"project {project_id!r} from identity {identity!r} not found")
    log.info("Resolved project {id} -> {name}", id=project_id, name=project.name)
    return project.name


def project_supplier(identity: str, projects: Callable[[], ProjectApi]) -> Memoized[str]:
    return Memoized(lambda: project_name_from_identity(identity, projects))
