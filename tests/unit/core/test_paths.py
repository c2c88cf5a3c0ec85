"""Unit tests for XDG path management."""

import os
from pathlib import Path
from unittest.mock import patch

from shellstrap.core.paths import (
    APP_NAME,
    CONFIG_ENV_VAR,
    expand_home,
    get_config_dir,
    get_config_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME


class TestGetConfigPath:
    """Tests for get_config_path function."""

    def test_default(self, tmp_path: Path) -> None:
        """The config file is config.toml in the config dir."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}, clear=True):
            assert get_config_path() == tmp_path / APP_NAME / "config.toml"

    def test_env_override(self, tmp_path: Path) -> None:
        """SHELLSTRAP_CONFIG wins over the XDG location."""
        override = tmp_path / "custom.toml"
        with patch.dict(os.environ, {CONFIG_ENV_VAR: str(override)}):
            assert get_config_path() == override


class TestExpandHome:
    """Tests for expand_home function."""

    def test_tilde(self, tmp_path: Path) -> None:
        """~ and ~/x resolve against the given home, not the process home."""
        assert expand_home("~", tmp_path) == tmp_path
        assert expand_home("~/.zshrc", tmp_path) == tmp_path / ".zshrc"

    def test_relative(self, tmp_path: Path) -> None:
        """Relative paths are relative to home."""
        assert expand_home("services", tmp_path) == tmp_path / "services"

    def test_absolute(self, tmp_path: Path) -> None:
        """Absolute paths are kept."""
        assert expand_home("/opt/x", tmp_path) == Path("/opt/x")
