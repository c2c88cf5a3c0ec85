"""Fixtures shared by the CLI tests."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from shellstrap.core.environment import Environment


@pytest.fixture(autouse=True)
def host(env: Environment) -> Iterator[Environment]:
    """Commands see the isolated test environment instead of the real host."""
    with patch.object(Environment, "from_os", return_value=env):
        yield env


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config path passed with --config; absent unless a test writes it."""
    return tmp_path / "config" / "config.toml"
