"""Configuration loading and precedence resolution.

hookgen reads its settings from three places, merged by
:func:`resolve_config` into one :class:`~hookgen.models.GeneratorConfig`:

* **Project config** -- ``./hookgen.json`` in the working directory. Any
  :class:`~hookgen.models.GeneratorConfig` field may be set there.
* **Environment** -- ``HOOKGEN_SPEC``, ``HOOKGEN_OUTPUT`` and
  ``HOOKGEN_TEMPLATE``.
* **CLI flags** -- passed in by :mod:`hookgen.app`.

Crash logs go under :func:`get_data_dir`, which follows the XDG Base
Directory layout on Linux/BSD and ``~/.hookgen/`` elsewhere.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from hookgen.exceptions import ConfigError
from hookgen.models import GeneratorConfig

_APP_NAME = "hookgen"
PROJECT_CONFIG_FILENAME = "hookgen.json"

ENV_SPEC = "HOOKGEN_SPEC"
ENV_OUTPUT = "HOOKGEN_OUTPUT"
ENV_TEMPLATE = "HOOKGEN_TEMPLATE"

# Environment variable -> GeneratorConfig field
_ENV_FIELDS = {
    ENV_SPEC: "spec",
    ENV_OUTPUT: "output_dir",
    ENV_TEMPLATE: "hooks_template",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/hookgen/`` (default
    ``~/.local/share/hookgen/``). On macOS/Windows: ``~/.hookgen/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``hookgen.json``.

    Args:
        directory: Where to look. Defaults to the current working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_overrides: Optional[dict[str, Any]] = None,
    directory: Optional[Path] = None,
) -> GeneratorConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags (*cli_overrides*; ``None`` values are ignored)
        2. Environment variables (``HOOKGEN_SPEC``, ``HOOKGEN_OUTPUT``,
           ``HOOKGEN_TEMPLATE``)
        3. Project config (``./hookgen.json``)
        4. Defaults

    Raises:
        ConfigError: If the project file is invalid or the merged values
            fail validation.
    """
    # 4 + 3. Defaults, then the project file
    merged: dict[str, Any] = dict(load_project_config(directory) or {})

    # 2. Environment variables
    for env_var, field_name in _ENV_FIELDS.items():
        value = os.environ.get(env_var)
        if value:
            merged[field_name] = value

    # 1. CLI flags (highest precedence)
    for key, value in (cli_overrides or {}).items():
        if value is not None:
            merged[key] = value

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
