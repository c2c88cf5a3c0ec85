"""Color theme for shellstrap output.

The bundled ``data/theme.toml`` holds the defaults; a ``theme.toml`` in the
shellstrap config directory may override any subset of its colors.
"""

import logging
import string
import tomllib
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from rich.theme import Theme

from shellstrap.core.paths import get_config_dir

logger = logging.getLogger(__name__)

THEME_FILE = "theme.toml"


class ThemeColors(BaseModel):
    """Named colors, each a #RGB or #RRGGBB hex code."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # One per step outcome
    installed: str = "#c1ff62"
    satisfied: str = "#69B9A1"
    skipped: str = "#b2bec3"
    failed: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, value: object, info: ValidationInfo) -> str:
        """Reject anything that is not a hex color code."""
        name = info.field_name
        if not isinstance(value, str):
            raise ValueError(f"{name}: color must be a string")
        color = value.strip()
        if not color.startswith("#"):
            raise ValueError(f"{name}: color must start with '#'")
        digits = color[1:]
        if len(digits) not in (3, 6):
            raise ValueError(f"{name}: color must be #RGB or #RRGGBB format")
        if not set(digits) <= set(string.hexdigits):
            raise ValueError(f"{name}: invalid hex color '{color}'")
        return color


def get_user_theme_path() -> Path:
    """Location of the optional user override file."""
    return get_config_dir() / THEME_FILE


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped.

    Returns:
        Color name to value, or None if the file is missing or unreadable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return None
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Merge the user overrides onto the bundled colors.

    An invalid merged theme falls back to the built-in defaults.
    """
    with resources.as_file(resources.files("shellstrap.data") / THEME_FILE) as bundled:
        colors = _load_toml_colors(bundled)
    if colors is None:
        logger.error("Bundled theme is missing; the installation may be corrupted")
        colors = {}

    user_path = get_user_theme_path()
    overrides = _load_toml_colors(user_path)
    if overrides:
        logger.debug("Applying theme overrides from %s", user_path)
        colors.update(overrides)

    try:
        return ThemeColors(**colors)
    except ValueError as e:
        logger.warning("Invalid theme, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich styles used by the console helpers and tables."""
    c = colors or load_theme()
    return Theme(
        {
            "text": c.text,
            "muted": c.muted,
            "dim": c.muted,
            "header": c.header,
            "bold_header": f"bold {c.header}",
            "border": c.border,
            "success": c.success,
            "warning": c.warning,
            "error": f"bold {c.error}",
            "info": c.info,
            "installed": f"bold {c.installed}",
            "satisfied": c.satisfied,
            "skipped": c.skipped,
            "failed": f"bold {c.failed}",
            "step.name": f"bold {c.text}",
            "step.detail": c.muted,
        }
    )


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the process-wide Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme


def reload_theme() -> Theme:
    """Re-read the theme files and replace the cached theme."""
    global _cached_theme
    _cached_theme = get_rich_theme()
    return _cached_theme
