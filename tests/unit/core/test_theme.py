"""Unit tests for the color theme."""

# pyright: reportPrivateUsage=false

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

import shellstrap.core.theme as theme_module
from shellstrap.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    get_user_theme_path,
    load_theme,
    reload_theme,
)


@pytest.fixture
def user_theme(tmp_path: Path) -> Iterator[Path]:
    """Redirect the user override file into tmp_path (not created)."""
    path = tmp_path / "theme.toml"
    with patch("shellstrap.core.theme.get_user_theme_path", return_value=path):
        yield path


class TestThemeColors:
    """Tests for hex color validation."""

    @pytest.mark.parametrize("color", ["#abc", "#C1FF62", " #000000 "])
    def test_accepts(self, color: str) -> None:
        assert ThemeColors(muted=color).muted == color.strip()

    @pytest.mark.parametrize(
        ("color", "message"),
        [
            ("ffffff", "must start with '#'"),
            ("#ff", "must be #RGB or #RRGGBB"),
            ("#gggggg", "invalid hex color"),
            (42, "must be a string"),
        ],
    )
    def test_rejects(self, color: object, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            ThemeColors(failed=color)  # type: ignore[arg-type]

    def test_unknown_color_name(self) -> None:
        with pytest.raises(ValidationError):
            ThemeColors(purple="#800080")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for reading a theme file."""

    def test_keeps_only_strings(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text('[colors]\ninstalled = "#000000"\nbold = true\n')

        assert _load_toml_colors(path) == {"installed": "#000000"}

    def test_missing_or_broken(self, tmp_path: Path) -> None:
        broken = tmp_path / "broken.toml"
        broken.write_text("[colors\n")

        assert _load_toml_colors(tmp_path / "absent.toml") is None
        assert _load_toml_colors(broken) is None

    def test_colors_not_a_table(self, tmp_path: Path) -> None:
        path = tmp_path / "theme.toml"
        path.write_text('colors = "red"\n')

        assert _load_toml_colors(path) is None


class TestLoadTheme:
    """Tests for merging bundled and user colors."""

    def test_bundled_matches_model_defaults(self, user_theme: Path) -> None:
        assert load_theme() == ThemeColors()

    def test_partial_override(self, user_theme: Path) -> None:
        user_theme.write_text('[colors]\nskipped = "#123456"\n')

        colors = load_theme()

        assert colors.skipped == "#123456"
        assert colors.satisfied == ThemeColors().satisfied

    def test_invalid_override_falls_back(self, user_theme: Path) -> None:
        user_theme.write_text('[colors]\nfailed = "red"\n')

        assert load_theme() == ThemeColors()


def test_rich_theme_covers_display_styles() -> None:
    styles = get_rich_theme(ThemeColors()).styles

    for name in ("installed", "satisfied", "skipped", "failed", "bold_header", "border"):
        assert name in styles
    assert styles["failed"].bold


def test_theme_cache() -> None:
    theme_module._cached_theme = None
    first = get_theme()

    assert get_theme() is first
    assert reload_theme() is not first
    assert get_theme() is not first


def test_user_theme_lives_in_config_dir(tmp_path: Path) -> None:
    with patch.dict("os.environ", {"XDG_CONFIG_HOME": str(tmp_path)}):
        assert get_user_theme_path() == tmp_path / "shellstrap" / "theme.toml"
