"""Configuration loading with XDG paths and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specgraph/`` on macOS and Windows.  See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- ``<config_dir>/config.json``, a partial
  :class:`~specgraph.models.SpecgraphConfig`.
* **Project config** -- ``./specgraph.json``, same shape, overriding the user
  file key by key.
* **Precedence resolution** -- :func:`resolve_config` layers CLI flags over
  environment variables over project config over user config over defaults.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specgraph.exceptions import ConfigError
from specgraph.models import SpecgraphConfig

_APP_NAME = "specgraph"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specgraph.json"

ENV_SCHEMAS_BASE = "SPECGRAPH_SCHEMAS_BASE"
ENV_FORMAT = "SPECGRAPH_FORMAT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True on platforms using XDG Base Directory paths (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specgraph/`` (default ``~/.config/specgraph/``).
    On macOS/Windows: ``~/.specgraph/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specgraph/`` (default ``~/.local/share/specgraph/``).
    On macOS/Windows: ``~/.specgraph/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} config at {path}: expected a JSON object")
    return data


def load_user_config() -> Optional[dict[str, Any]]:
    """Load ``config.json`` from the config directory, or ``None`` if absent."""
    return _read_json(get_config_dir() / _CONFIG_FILENAME, "user")


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./specgraph.json`` from the working directory, or ``None`` if absent."""
    return _read_json(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project")


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_schemas_base: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> SpecgraphConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (``cli_schemas_base``, ``cli_format``)
        2. Environment variables (``SPECGRAPH_SCHEMAS_BASE``, ``SPECGRAPH_FORMAT``)
        3. Project config (``./specgraph.json``)
        4. User config (``~/.config/specgraph/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is not valid JSON or has unknown keys.
    """
    data: dict[str, Any] = {}
    for layer in (load_user_config(), load_project_config()):
        if layer is not None:
            data = _merge(data, layer)

    try:
        config = SpecgraphConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    schemas_base = cli_schemas_base or os.environ.get(ENV_SCHEMAS_BASE)
    if schemas_base:
        config.parser.schemas_base = schemas_base

    output_format = cli_format or os.environ.get(ENV_FORMAT)
    if output_format:
        config.output.format = output_format

    return config
