"""GCE provider configuration.

Immutable configuration dataclass for the Compute Engine node adapter.
"""

from __future__ import annotations

import os
import typing
from dataclasses import dataclass

from gcenode.core.exceptions import ConfigurationError

if typing.TYPE_CHECKING:
    from gcenode.providers.gce.adapter import GCEComputeServiceAdapter

SHARED_IMAGE_PROJECT = "google"


@dataclass(frozen=True, slots=True)
class GCE:
    """Compute Engine adapter configuration.

    Example:
        >>> from gcenode.providers.gce import GCE
        >>> config = GCE(identity="my-project", operation_timeout=300)

    Args:
        identity: Project name, or ``<project id>@...`` (service account
            style) whose project name is looked up once. Auto-detected from
            GOOGLE_CLOUD_PROJECT, GCLOUD_PROJECT or ADC when omitted.
        credentials_path: Service account key file. ADC when omitted.
        operation_interval: Seconds between operation/visibility polls.
        operation_timeout: Seconds before a wait gives up.
        image_project: Shared project whose public images are merged in.
        group_prefix: Prefix of group-shared resource names.
    """

    identity: str | None = None
    credentials_path: str | None = None
    operation_interval: float = 2.0
    operation_timeout: float = 600.0
    image_project: str = SHARED_IMAGE_PROJECT
    group_prefix: str = "gcenode"

    def __post_init__(self) -> None:
        for name in ("operation_interval", "operation_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise ConfigurationError(
                    f"{name} must be a number of seconds, got {type(value).__name__} {value!r}"
                )
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        optional = ("identity", "credentials_path")
        for name in (*optional, "image_project", "group_prefix"):
            value = getattr(self, name)
            if value is None and name in optional:
                continue
            if not isinstance(value, str):
                raise ConfigurationError(f"{name} must be a string, got {type(value).__name__}")

    @property
    def type(self) -> str: return "gce"

    def resolved_identity(self) -> str:
        """Identity to resolve the project from: explicit > env > ADC."""
        if self.identity:
            return self.identity

        for var in ("GOOGLE_CLOUD_PROJECT", "GCLOUD_PROJECT"):
            if env_project := os.environ.get(var):
                return env_project

        import google.auth
        from google.auth.exceptions import DefaultCredentialsError

        try:
            _, project = google.auth.default()
        except DefaultCredentialsError as e:
            raise ConfigurationError(f"no GCE identity configured: {e}") from e
        if not project:
            raise ConfigurationError(
                "No GCE project found. Set GOOGLE_CLOUD_PROJECT, pass identity= "
                "to GCE(), or configure Application Default Credentials."
            )
        return project

    def create_adapter(self) -> GCEComputeServiceAdapter:
        from gcenode.providers.gce.adapter import GCEComputeServiceAdapter
        from gcenode.providers.gce.client import GoogleComputeApi

        api = GoogleComputeApi.create(self.credentials_path)
        return GCEComputeServiceAdapter.create(self, api)
