"""Custom exception hierarchy for gcenode.

All gcenode-specific exceptions inherit from GCENodeError, enabling
callers to catch every adapter failure with a single except clause.
Not-found is never an exception: read and delete calls return None.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gcenode.api.model import Operation


class GCENodeError(Exception):
    """Base exception for all gcenode errors."""


class ConfigurationError(GCENodeError):
    """Raised for invalid configuration or missing required settings."""


class InvalidTemplateError(GCENodeError, ValueError):
    """Raised when a node template is rejected before any API call."""


class PaginationScopeError(GCENodeError):
    """Raised when a paged listing has no project to continue with.

    This is a programming error: every paged call must carry its scope.
    """


class UnsupportedOperationError(GCENodeError, NotImplementedError):
    """Raised for lifecycle operations the provider does not offer."""


class ProvisioningError(GCENodeError):
    """Raised when node provisioning or destruction fails."""


class OperationFailedError(ProvisioningError):
    """Raised when an operation reached DONE carrying an HTTP error."""

    def __init__(self, status_code: int, message: str, operation: Operation | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.operation = operation
        super().__init__(
            f"operation failed. Http Error Code: {status_code} HttpError: {message}"
        )


class PollTimeoutError(ProvisioningError, TimeoutError):
    """Raised when a wait did not complete within its timeout."""


class OperationTimeoutError(PollTimeoutError):
    """Raised when an operation never reached DONE in time."""

    def __init__(self, operation: Operation, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(
            f"operation {operation.name} did not reach DONE state within {timeout:.1f}s "
            f"(last status: {operation.status})"
        )


class VisibilityTimeoutError(PollTimeoutError):
    """Raised when a created instance never became readable in time."""

    def __init__(self, zone: str, name: str, timeout: float) -> None:
        self.zone = zone
        self.name = name
        self.timeout = timeout
        super().__init__(f"instance {zone}/{name} not visible after {timeout:.1f}s")
