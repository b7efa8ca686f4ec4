"""Configuration management with XDG paths and atomic writes.

This module handles all persistent configuration for keydock:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.keydock/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Gateway config** -- A single :class:`~keydock.models.GatewayConfig`
  JSON file (``config.json``), overridable with ``KEYDOCK_CONFIG``.
* **Agent directory** -- Where the auth profile store lives
  (``KEYDOCK_AGENT_DIR`` or ``<data_dir>/agent``). See
  :func:`resolve_agent_dir`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from keydock.exceptions import ConfigError
from keydock.models import GatewayConfig

_APP_NAME = "keydock"
_CONFIG_FILENAME = "config.json"
_AGENT_DIRNAME = "agent"

CONFIG_PATH_ENV = "KEYDOCK_CONFIG"
AGENT_DIR_ENV = "KEYDOCK_AGENT_DIR"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/keydock/`` (default ``~/.config/keydock/``).
    On macOS/Windows: ``~/.keydock/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def data_dir_path() -> Path:
    """Return the data directory path without creating it.

    On Linux/BSD: ``$XDG_DATA_HOME/keydock/`` (default ``~/.local/share/keydock/``).
    On macOS/Windows: ``~/.keydock/data/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    return _fallback_base_dir() / "data"


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    path = data_dir_path()
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_agent_dir(agent_dir: Optional[Path | str] = None) -> Path:
    """Return the agent directory holding ``auth-profiles.json``.

    Precedence (high to low): the *agent_dir* argument, the
    ``KEYDOCK_AGENT_DIR`` environment variable, ``<data_dir>/agent``.
    The directory is not created here; writers create it on demand.
    """
    if agent_dir is not None:
        return Path(agent_dir).expanduser()
    env_value = os.environ.get(AGENT_DIR_ENV, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return data_dir_path() / _AGENT_DIRNAME


def shorten_home_path(path: Path) -> str:
    """Render *path* with the home directory replaced by ``~`` for display."""
    home = str(Path.home())
    text = str(path)
    if home and home != "/" and (text == home or text.startswith(home + os.sep)):
        return "~" + text[len(home):]
    return text


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is guaranteed to be an atomic rename on POSIX systems.
    When *mode* is given the permissions are applied before any content is
    written, so secrets are never world-readable, even momentarily.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in finally
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


# --- Gateway config ---


def gateway_config_path() -> Path:
    """Path to the gateway config file, honouring ``KEYDOCK_CONFIG``."""
    env_value = os.environ.get(CONFIG_PATH_ENV, "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


def load_gateway_config(path: Optional[Path] = None) -> GatewayConfig:
    """Load the gateway configuration.

    Args:
        path: Explicit config file. Defaults to :func:`gateway_config_path`.

    Returns:
        The deserialised :class:`~keydock.models.GatewayConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = path or gateway_config_path()
    if not path.is_file():
        return GatewayConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GatewayConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid gateway config at {path}: {describe_validation_error(exc)}"
        ) from None
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid gateway config at {path}: {exc}") from exc


def save_gateway_config(config: GatewayConfig, path: Optional[Path] = None) -> None:
    """Persist the gateway configuration atomically to disk.

    Args:
        config: The configuration to save.
        path: Explicit config file. Defaults to :func:`gateway_config_path`.
    """
    data = config.model_dump(mode="json", exclude_none=True)
    atomic_write(path or gateway_config_path(), json.dumps(data, indent=2) + "\n")


def describe_validation_error(exc: ValidationError) -> str:
    """Summarise a validation error by field location only.

    Pydantic's default rendering echoes the offending input, which for
    config and store files may be a secret.
    """
    parts = []
    for err in exc.errors(include_url=False, include_input=False):
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)
