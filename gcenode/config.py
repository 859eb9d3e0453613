"""TOML-based provider configuration.

Loads ~/.gcenode/defaults.toml (global) and gcenode.toml (project), merges
them, and builds the GCE provider configuration. An optional ``[logging]``
table configures the gcenode log sinks.

Example gcenode.toml::

    [provider]
    identity = "my-project"
    operation_interval = 2.0
    operation_timeout = 600.0

    [logging]
    level = "DEBUG"
    file = "gcenode.log"
"""

from __future__ import annotations

import tomllib
from dataclasses import fields
from pathlib import Path
from typing import Any

from gcenode.core.exceptions import ConfigurationError
from gcenode.observability.logger import configure_logging
from gcenode.providers.gce.config import GCE

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".gcenode" / "defaults.toml"
PROJECT_CONFIG_NAME = "gcenode.toml"


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("provider", {})
    return merged


def build_provider(raw: RawConfig) -> GCE:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"[provider] must be a table, got {type(raw).__name__}")
    known = {f.name for f in fields(GCE)}
    if unknown := sorted(set(raw) - known):
        raise ConfigurationError(
            f"Unknown provider settings: {', '.join(unknown)}. Valid: {', '.join(sorted(known))}"
        )
    return GCE(**raw)


def load_provider(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> GCE:
    """Load, merge and validate configuration, applying its logging settings."""
    config = load_config(project_dir=project_dir, global_path=global_path)

    if logging_cfg := config.get("logging"):
        if not isinstance(logging_cfg, dict):
            raise ConfigurationError(
                f"[logging] must be a table with level and file keys, got {type(logging_cfg).__name__}"
            )
        if not isinstance(logging_cfg.get("file", ""), str):
            raise ConfigurationError("[logging] file must be a path string")
        configure_logging(
            level=str(logging_cfg.get("level", "INFO")),
            path=logging_cfg.get("file"),
        )

    return build_provider(config["provider"])
