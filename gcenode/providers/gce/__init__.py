"""Google Compute Engine node adapter.

NOTE: Only the config class is imported at package level to avoid pulling in
google-cloud-compute. For the adapter and the API client, import explicitly:

    from gcenode.providers.gce.adapter import GCEComputeServiceAdapter
    from gcenode.providers.gce.client import GoogleComputeApi

Environment Variables:
    GOOGLE_CLOUD_PROJECT: Project used when no identity is configured
    GOOGLE_APPLICATION_CREDENTIALS: Path to service account key (optional)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .adapter import GCEComputeServiceAdapter

from .config import GCE

__all__ = ["GCE"]
