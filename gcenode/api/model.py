from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

type OperationStatus = Literal["PENDING", "RUNNING", "DONE"]

_STATUS_RANK: dict[str, int] = {"PENDING": 0, "RUNNING": 1, "DONE": 2}


def status_rank(status: OperationStatus) -> int:
    """Position of a status in PENDING -> RUNNING -> DONE."""
    return _STATUS_RANK[status]


@dataclass(frozen=True, slots=True)
class HttpError:
    """Error payload attached to an operation that finished unsuccessfully."""
    status_code: int
    message: str


@dataclass(frozen=True, slots=True)
class Operation:
    """Server-side handle for an asynchronous Compute Engine task.

    ``zone`` is set for zonal operations and ``None`` for global ones; it
    decides which operations endpoint is used to re-read the operation.
    ``http_error`` is only present once ``status`` is ``DONE`` and the
    underlying task failed.
    """
    name: str
    status: OperationStatus
    target_link: str = ""
    zone: str | None = None
    id: str = ""
    self_link: str = ""
    operation_type: str = ""
    progress: int = 0
    http_error: HttpError | None = None

    @property
    def is_done(self) -> bool:
        return self.status == "DONE"

    @property
    def failed(self) -> bool:
        return self.is_done and self.http_error is not None


@dataclass(frozen=True, slots=True)
class AccessConfig:
    name: str = "External NAT"
    type: str = "ONE_TO_ONE_NAT"
    nat_ip: str | None = None


@dataclass(frozen=True, slots=True)
class NetworkInterface:
    network: str
    access_configs: tuple[AccessConfig, ...] = ()
    network_ip: str | None = None


@dataclass(frozen=True, slots=True)
class ServiceAccount:
    email: str
    scopes: tuple[str, ...] = ("https://www.googleapis.com/auth/cloud-platform",)


@dataclass(frozen=True, slots=True)
class Instance:
    name: str
    zone: str
    status: str = ""
    id: str = ""
    machine_type: str = ""
    self_link: str = ""
    tags: tuple[str, ...] = ()
    metadata: tuple[tuple[str, str], ...] = ()
    network_interfaces: tuple[NetworkInterface, ...] = ()

    @property
    def external_ip(self) -> str | None:
        for iface in self.network_interfaces:
            for config in iface.access_configs:
                if config.nat_ip:
                    return config.nat_ip
        return None


@dataclass(frozen=True, slots=True)
class MachineType:
    name: str
    self_link: str = ""
    zone: str | None = None
    guest_cpus: int = 0
    memory_mb: int = 0
    description: str = ""


@dataclass(frozen=True, slots=True)
class Image:
    name: str
    self_link: str = ""
    project: str = ""
    family: str = ""
    status: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class Zone:
    name: str
    self_link: str = ""
    region: str = ""
    status: str = ""


@dataclass(frozen=True, slots=True)
class Project:
    name: str
    id: str = ""
    self_link: str = ""


@dataclass(frozen=True, slots=True)
class ListOptions:
    """Filtering applied to a listing; carried forward to every page."""
    filter: str | None = None
    max_results: int | None = None


@dataclass(frozen=True, slots=True)
class ListPage[T]:
    """One page of a listing. ``next_marker`` is None on the last page."""
    items: tuple[T, ...] = ()
    next_marker: str | None = None

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class InstanceTemplate:
    """Body of an instance insert request."""
    machine_type: str
    image: str
    network_interfaces: tuple[NetworkInterface, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    service_accounts: tuple[ServiceAccount, ...] = ()
    description: str | None = None
