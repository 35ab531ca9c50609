"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for textra:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.textra/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~textra.models.GlobalConfig`
  JSON file storing the registered name, credential sources, and transport
  defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and the config file into the effective
  configuration.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts;
  :func:`resolve_credentials` assembles a full
  :class:`~textra.models.Credentials`.

The API key and secret are never written to the config file, only the
descriptors pointing at them.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from textra.exceptions import ConfigError
from textra.models import Credentials, GlobalConfig

_APP_NAME = "textra"
_CONFIG_FILENAME = "config.json"

ENV_NAME = "TEXTRA_NAME"
ENV_KEY = "TEXTRA_KEY"
ENV_SECRET = "TEXTRA_SECRET"
ENV_BASE_URL = "TEXTRA_BASE_URL"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/textra/`` (default ``~/.config/textra/``).
    On macOS/Windows: ``~/.textra/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/textra/`` (default ``~/.local/share/textra/``).
    On macOS/Windows: ``~/.textra/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
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


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~textra.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


def set_config_value(key: str, value: str) -> GlobalConfig:
    """Update one field of the stored config and save it.

    *value* is parsed as JSON when possible (so ``30``, ``false`` and
    ``null`` get their natural types) and kept as a string otherwise.

    Raises:
        ConfigError: If *key* is unknown or the value fails validation.
    """
    if key not in GlobalConfig.model_fields:
        known = ", ".join(sorted(GlobalConfig.model_fields))
        raise ConfigError(f"Unknown config key '{key}'. Known keys: {known}")

    parsed: Any
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    data = load_global_config().model_dump(mode="json")
    data[key] = parsed
    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError:
        # Values such as names made of digits are meant as strings.
        data[key] = value
        try:
            config = GlobalConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid value for '{key}': {exc}") from exc
    save_global_config(config)
    return config


# --- Precedence resolution ---


def resolve_config(cli_base_url: Optional[str] = None) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``)
        2. Environment variables (``TEXTRA_BASE_URL``, ``TEXTRA_NAME``)
        3. User config (``~/.config/textra/config.json``)
        4. Defaults
    """
    config = load_global_config()

    env_name = os.environ.get(ENV_NAME)
    if env_name:
        config.name = env_name

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        config.base_url = cli_base_url
    elif env_base_url:
        config.base_url = env_base_url

    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")


def resolve_credentials(config: GlobalConfig) -> Credentials:
    """Build :class:`~textra.models.Credentials` from *config*.

    ``TEXTRA_KEY`` / ``TEXTRA_SECRET`` in the environment take precedence
    over the configured sources.

    Raises:
        ConfigError: If the name is not configured, a source cannot be
            resolved, or a resolved value is empty.
    """
    if not config.name:
        raise ConfigError(
            f"No registered name configured. Set {ENV_NAME} or run "
            "'textra config set name <login id>'"
        )
    key = os.environ.get(ENV_KEY) or resolve_credential(config.key_source)
    secret = os.environ.get(ENV_SECRET) or resolve_credential(config.secret_source)
    try:
        return Credentials(name=config.name, key=key, secret=secret)
    except ValidationError as exc:
        raise ConfigError(f"Incomplete credentials: {exc}") from exc
