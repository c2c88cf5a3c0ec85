"""XDG-compliant path management for shellstrap.

This module provides standardized paths following the XDG Base Directory
Specification for shellstrap's own configuration.

XDG defaults:
- Config: ~/.config/shellstrap/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "shellstrap"

# Environment variable that points at an explicit config file
CONFIG_ENV_VAR = "SHELLSTRAP_CONFIG"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/shellstrap/ (or XDG_CONFIG_HOME/shellstrap/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the setup configuration file path.

    SHELLSTRAP_CONFIG takes precedence over the XDG location.

    Returns:
        Path to ~/.config/shellstrap/config.toml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "config.toml"


def expand_home(value: str | Path, home: Path) -> Path:
    """Resolve a configured path against a home directory.

    ``~`` prefixes and relative paths are both taken relative to ``home``
    rather than the process home, so an Environment built for another
    root (tests, containers) stays self-contained.

    Args:
        value: Path as written in configuration.
        home: Home directory to resolve against.

    Returns:
        Absolute path.
    """
    text = str(value)
    if text == "~":
        return home
    if text.startswith("~/"):
        return home / text[2:]
    path = Path(text)
    if path.is_absolute():
        return path
    return home / path
