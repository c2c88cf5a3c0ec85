"""Unit tests for logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from shellstrap.core.logging_config import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    """Tests for resolve_level."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, expected: int) -> None:
        """--quiet wins over --verbose; the default is WARNING."""
        assert resolve_level(verbose, quiet) == expected


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_single_rich_handler(self) -> None:
        """Repeated setup leaves exactly one Rich handler on the root logger."""
        setup_logging()
        setup_logging(verbose=True)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)
        assert root.level == logging.DEBUG
