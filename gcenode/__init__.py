"""gcenode: Compute Engine node provisioning adapter.

Example:
    from gcenode import GCE, GCETemplateOptions, Hardware, Location, Template, TemplateImage

    adapter = GCE(identity="my-project").create_adapter()
    result = adapter.create_node_with_group_encoded_into_name(
        "web",
        "web-1",
        Template(
            hardware=Hardware("n1-standard-1"),
            location=Location("us-central1-a", "ZONE"),
            image=TemplateImage("debian-12", "projects/debian-cloud/global/images/family/debian-12"),
            options=GCETemplateOptions(network="default"),
        ),
    )
    print(result.node_id)
"""

from gcenode.api import (
    GCETemplateOptions,
    Hardware,
    Location,
    LoginCredentials,
    NodeAndInitialCredentials,
    Template,
    TemplateImage,
)
from gcenode.config import load_provider
from gcenode.core.exceptions import (
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
from gcenode.providers.gce import GCE

__all__ = [
    "GCE",
    "ConfigurationError",
    "GCENodeError",
    "GCETemplateOptions",
    "Hardware",
    "InvalidTemplateError",
    "Location",
    "LoginCredentials",
    "NodeAndInitialCredentials",
    "OperationFailedError",
    "OperationTimeoutError",
    "PaginationScopeError",
    "PollTimeoutError",
    "ProvisioningError",
    "Template",
    "TemplateImage",
    "UnsupportedOperationError",
    "VisibilityTimeoutError",
    "load_provider",
]
