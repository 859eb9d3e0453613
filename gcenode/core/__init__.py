from .exceptions import (
    ConfigurationError,
    GCENodeError,
    InvalidTemplateError,
    OperationFailedError,
    OperationTimeoutError,
    PaginationScopeError,
    PollTimeoutError,
    ProvisioningError,
    UnsupportedOperationError,
    VisibilityTimeoutError,
)

__all__ = [
    "ConfigurationError",
    "GCENodeError",
    "InvalidTemplateError",
    "OperationFailedError",
    "OperationTimeoutError",
    "PaginationScopeError",
    "PollTimeoutError",
    "ProvisioningError",
    "UnsupportedOperationError",
    "VisibilityTimeoutError",
]
