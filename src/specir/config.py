"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for specir:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specir/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~specir.models.GlobalConfig`
  JSON file storing defaults (output format, resolver options).
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written file.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specir.exceptions import ConfigError
from specir.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "specir"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specir.json"

ENV_DEFAULT_TAG = "SPECIR_DEFAULT_TAG"
ENV_EXCLUDE_PARAMETERS = "SPECIR_EXCLUDE_PARAMETERS"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/specir/`` (default ``~/.config/specir/``).
    On macOS/Windows: ``~/.specir/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specir/`` (default ``~/.local/share/specir/``).
    On macOS/Windows: ``~/.specir/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~specir.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")
    logger.debug("Saved global config to %s", global_config_path())


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specir.json``.

    The file typically pins resolver options for one repository, e.g.
    ``{"resolver": {"default_tag": "Api"}}``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _split_names(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


def resolve_config(
    cli_default_tag: Optional[str] = None,
    cli_excluded_parameters: Optional[list[str]] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_default_tag``, ``cli_excluded_parameters``,
           ``cli_format``)
        2. Environment variables (``SPECIR_DEFAULT_TAG``,
           ``SPECIR_EXCLUDE_PARAMETERS`` as a comma-separated list)
        3. Project config (``./specir.json``)
        4. User config (``~/.config/specir/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~specir.models.GlobalConfig`.

    Raises:
        ConfigError: If any config file is invalid.
    """
    # 5 + 4. Defaults and user config
    data = load_global_config().model_dump(mode="json")

    # 3. Project config
    project = load_project_config()
    if project is not None:
        for section in ("output", "resolver"):
            overrides = project.get(section)
            if isinstance(overrides, dict):
                data[section].update(overrides)

    # 2. Environment
    env_tag = os.environ.get(ENV_DEFAULT_TAG)
    if env_tag:
        data["resolver"]["default_tag"] = env_tag
    env_excluded = os.environ.get(ENV_EXCLUDE_PARAMETERS)
    if env_excluded:
        data["resolver"]["excluded_parameters"] = _split_names(env_excluded)

    # 1. CLI flags
    if cli_default_tag is not None:
        data["resolver"]["default_tag"] = cli_default_tag
    if cli_excluded_parameters:
        data["resolver"]["excluded_parameters"] = list(cli_excluded_parameters)
    if cli_format is not None:
        data["output"]["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
