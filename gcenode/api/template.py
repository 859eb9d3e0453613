"""Provider-neutral node template and the GCE option capability set.

A ``Template`` is what a generic orchestration framework hands to the
adapter: the hardware profile, the target location, the image and the
options. The adapter only relies on the ``TemplateOptions`` protocol, so any
options object exposing the capability set is accepted.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from gcenode.api.model import Instance, ServiceAccount

type LocationScope = Literal["PROVIDER", "REGION", "ZONE"]


@dataclass(frozen=True, slots=True)
class Location:
    id: str
    scope: LocationScope
    description: str = ""


@dataclass(frozen=True, slots=True)
class Hardware:
    name: str


@dataclass(frozen=True, slots=True)
class LoginCredentials:
    """Credentials used to log into a node.

    Images carry their default credentials with ``private_key`` holding
    ``"<public key>:<private key>"``; see
    :func:`gcenode.providers.gce.credentials.derive_login_credentials`.
    """
    user: str | None = None
    private_key: str | None = None
    password: str | None = None
    authenticate_sudo: bool = False


@dataclass(frozen=True, slots=True)
class TemplateImage:
    id: str
    uri: str | None
    default_credentials: LoginCredentials = LoginCredentials()


@runtime_checkable
class TemplateOptions(Protocol):
    """Capabilities the GCE adapter needs from template options."""

    @property
    def network(self) -> str | None: ...

    @property
    def enable_nat(self) -> bool: ...

    @property
    def tags(self) -> Sequence[str]: ...

    @property
    def service_accounts(self) -> Sequence[ServiceAccount]: ...

    @property
    def public_key(self) -> str | None: ...

    @property
    def private_key(self) -> str | None: ...

    @property
    def login_user(self) -> str | None: ...

    @property
    def login_password(self) -> str | None: ...

    @property
    def authenticate_sudo(self) -> bool | None: ...

    @property
    def user_metadata(self) -> Mapping[str, str]: ...

    @property
    def startup_script(self) -> str | None: ...

    @property
    def block_until_running(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class GCETemplateOptions:
    """Concrete options for Compute Engine nodes.

    Args:
        network: Network URI or name the instance attaches to. Required.
        enable_nat: Attach a ONE_TO_ONE_NAT access config (external IP).
        tags: Network tags for the instance.
        service_accounts: Service accounts exposed to the instance.
        public_key: Public key authorized via ``ssh-keys`` metadata.
        private_key: Overrides the image's default private key.
        login_user: Overrides the image's default login user.
        login_password: Overrides the image's default password.
        authenticate_sudo: Overrides the image's sudo flag when not None.
        user_metadata: Extra instance metadata.
        startup_script: Stored under the ``startup-script`` metadata key.
        block_until_running: Wait for the insert operation to reach DONE.
    """

    network: str | None = None
    enable_nat: bool = True
    tags: tuple[str, ...] = ()
    service_accounts: tuple[ServiceAccount, ...] = ()
    public_key: str | None = None
    private_key: str | None = None
    login_user: str | None = None
    login_password: str | None = None
    authenticate_sudo: bool | None = None
    user_metadata: Mapping[str, str] = field(default_factory=dict)
    startup_script: str | None = None
    block_until_running: bool = True


@dataclass(frozen=True, slots=True)
class Template:
    hardware: Hardware
    location: Location
    image: TemplateImage
    options: TemplateOptions


@dataclass(frozen=True, slots=True)
class NodeAndInitialCredentials:
    """Result of node creation."""
    node: Instance
    node_id: str
    credentials: LoginCredentials
