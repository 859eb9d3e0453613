"""Naming helpers for Compute Engine resources.

Pure functions and small value types, no API calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

COMPUTE_ENDPOINT = "https://www.googleapis.com/compute/v1"

SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class ZoneScopedId:
    """Zone + resource name, encoded as one opaque node id (``zone/name``)."""

    zone: str
    name: str

    def slash_encode(self) -> str:
        return f"{self.zone}{SEPARATOR}{self.name}"

    @classmethod
    def from_slash_encoded(cls, encoded: str) -> ZoneScopedId:
        zone, sep, name = encoded.partition(SEPARATOR)
        if not sep or not zone or not name or SEPARATOR in name:
            raise ValueError(f"expected <zone>/<name>, got {encoded!r}")
        return cls(zone=zone, name=name)

    def __str__(self) -> str:
        return self.slash_encode()


def short_name(uri: str) -> str:
    """Last path segment of a resource URI ("zones/us-central1-a" -> "us-central1-a")."""
    return uri.rstrip("/").rsplit("/", 1)[-1]


def resource_uri(project: str, collection: str, name: str) -> str:
    """Self link of a global project resource.

    >>> resource_uri("p", "networks", "default")
    'https://www.googleapis.com/compute/v1/projects/p/global/networks/default'
    """
    return f"{COMPUTE_ENDPOINT}/projects/{project}/global/{collection}/{name}"


def network_uri(project: str, network: str) -> str:
    """Accept either a bare network name or an existing network URI."""
    if "/" in network:
        return network
    return resource_uri(project, "networks", network)


_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")


@dataclass(frozen=True, slots=True)
class GroupNamingConvention:
    """Shared resource name for a node group (``<prefix>-<group>``)."""

    prefix: str = "gcenode"

    def shared_name_for_group(self, group: str) -> str:
        cleaned = _INVALID_CHARS.sub("-", group.lower()).strip("-")
        return f"{self.prefix}-{cleaned}"

