"""Login credential derivation and instance metadata for new nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gcenode.api.template import LoginCredentials

if TYPE_CHECKING:
    from gcenode.api.template import TemplateImage, TemplateOptions

DEFAULT_LOGIN_USER = "gcenode"

SSH_KEYS_KEY = "ssh-keys"
STARTUP_SCRIPT_KEY = "startup-script"


@dataclass(frozen=True, slots=True)
class DerivedCredentials:
    """Effective login credentials plus the public key to authorize."""
    credentials: LoginCredentials
    public_key: str | None


def split_key_material(material: str | None) -> tuple[str | None, str | None]:
    """Split image key material ``"<public>:<private>"`` into its parts.

    Material without a separator is taken as a bare private key.
    """
    if not material:
        return None, None
    public, sep, private = material.partition(":")
    if not sep:
        return None, material
    return public or None, private or None


def derive_login_credentials(image: TemplateImage, options: TemplateOptions) -> DerivedCredentials:
    """Combine the image's default credentials with per-template overrides.

    Explicit option values always win. When no public key is given, the one
    embedded in the image's default key material is reused.
    """
    defaults = image.default_credentials
    image_public, image_private = split_key_material(defaults.private_key)

    user = options.login_user if options.login_user is not None else defaults.user
    private_key = options.private_key if options.private_key is not None else image_private
    password = options.login_password if options.login_password is not None else defaults.password
    sudo = (
        options.authenticate_sudo
        if options.authenticate_sudo is not None
        else defaults.authenticate_sudo
    )
    public_key = options.public_key if options.public_key is not None else image_public

    return DerivedCredentials(
        credentials=LoginCredentials(
            user=user,
            private_key=private_key,
            password=password,
            authenticate_sudo=sudo,
        ),
        public_key=public_key,
    )


def metadata_from_options(options: TemplateOptions, derived: DerivedCredentials) -> dict[str, str]:
    """Instance metadata merged from user metadata, the SSH key and the startup script.

    User-supplied entries come first; the derived ``ssh-keys`` and
    ``startup-script`` entries are only added when the user did not set them.
    """
    metadata = dict(options.user_metadata)

    if derived.public_key:
        user = derived.credentials.user or DEFAULT_LOGIN_USER
        metadata.setdefault(SSH_KEYS_KEY, f"{user}:{derived.public_key}")

    if options.startup_script:
        metadata.setdefault(STARTUP_SCRIPT_KEY, options.startup_script)

    return metadata
