"""Configuration resolution, XDG data paths, and atomic file writes.

This module handles all persistent configuration for specauth:

* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project-local ``./specauth.json`` file, and
  built-in defaults into one :class:`~specauth.models.AppConfig`.
* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specauth/`` on macOS and Windows. Only crash logs live there;
  credentials belong to the project and default to ``./credentials``.
* **Atomic writes** -- :func:`atomic_write` replaces a file via a
  temp-file-then-rename so a crash never leaves a half-written JSON
  document behind.

The resolved configuration is passed explicitly to the components that
need it; nothing here keeps process-wide mutable state.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specauth.exceptions import ConfigurationError
from specauth.models import AppConfig

_APP_NAME = "specauth"
_PROJECT_CONFIG_FILENAME = "specauth.json"

ENV_CREDENTIALS_DIR = "SPECAUTH_CREDENTIALS_DIR"
ENV_INTEGRATIONS_DIR = "SPECAUTH_INTEGRATIONS_DIR"
ENV_OAUTH_PORT = "SPECAUTH_OAUTH_PORT"
ENV_OAUTH_TIMEOUT = "SPECAUTH_OAUTH_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specauth/`` (default ``~/.local/share/specauth/``).
    On macOS/Windows: ``~/.specauth/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original exception re-raised.

    Args:
        path: Destination file. Its parent directory must already exist.
        data: Text content to write (UTF-8).
        mode: Optional permission bits applied before any content is written.
    """
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./specauth.json``.

    Recognised keys mirror :class:`~specauth.models.AppConfig`
    (``credentials_dir``, ``integrations_dir``, ``integrations``,
    ``oauth_port``, ``oauth_timeout``, ...). Relative directories are
    resolved against the current working directory.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigurationError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def _env_number(name: str, cast: type) -> Any:  # noqa: ANN401
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return cast(value)
    except ValueError as exc:
        raise ConfigurationError(f"Environment variable {name} must be a number, got '{value}'") from exc


def resolve_config(
    cli_credentials_dir: Optional[str] = None,
    cli_integrations_dir: Optional[str] = None,
    cli_port: Optional[int] = None,
) -> AppConfig:
    """Resolve the effective configuration with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``--credentials-dir``, ``--integrations-dir``, ``--port``)
        2. Environment variables (``SPECAUTH_CREDENTIALS_DIR``,
           ``SPECAUTH_INTEGRATIONS_DIR``, ``SPECAUTH_OAUTH_PORT``,
           ``SPECAUTH_OAUTH_TIMEOUT``)
        3. Project config (``./specauth.json``)
        4. Defaults (``./credentials``, ``./integrations``, port 3333)

    Returns:
        The validated :class:`~specauth.models.AppConfig`.

    Raises:
        ConfigurationError: If the project config or an environment value
            is invalid.
    """
    cwd = Path.cwd()
    values: dict[str, Any] = {
        "credentials_dir": cwd / "credentials",
        "integrations_dir": cwd / "integrations",
    }

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        values.update(project)

    # 2. Environment variables
    env_credentials = os.environ.get(ENV_CREDENTIALS_DIR)
    if env_credentials:
        values["credentials_dir"] = env_credentials
    env_integrations = os.environ.get(ENV_INTEGRATIONS_DIR)
    if env_integrations:
        values["integrations_dir"] = env_integrations
    env_port = _env_number(ENV_OAUTH_PORT, int)
    if env_port is not None:
        values["oauth_port"] = env_port
    env_timeout = _env_number(ENV_OAUTH_TIMEOUT, float)
    if env_timeout is not None:
        values["oauth_timeout"] = env_timeout

    # 1. CLI flags (highest precedence)
    if cli_credentials_dir is not None:
        values["credentials_dir"] = cli_credentials_dir
    if cli_integrations_dir is not None:
        values["integrations_dir"] = cli_integrations_dir
    if cli_port is not None:
        values["oauth_port"] = cli_port

    try:
        config = AppConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    # Relative paths are anchored to the working directory.
    if not config.credentials_dir.is_absolute():
        config.credentials_dir = cwd / config.credentials_dir
    if not config.integrations_dir.is_absolute():
        config.integrations_dir = cwd / config.integrations_dir
    return config
