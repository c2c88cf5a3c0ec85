"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from shellstrap.core.environment import Environment


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """An empty directory used as the whole PATH of the test environment."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def env(home: Path, bin_dir: Path) -> Environment:
    """Environment isolated from the host: own HOME, own PATH, Linux x86_64."""
    return Environment(
        home=home,
        user="tester",
        nvm_dir=home / ".nvm",
        dotfiles_dir=home / "dotfiles",
        path=str(bin_dir),
        platform="linux",
        machine="x86_64",
    )


@pytest.fixture
def make_executable(bin_dir: Path) -> Callable[[str], Path]:
    """Factory that drops a fake executable onto the test PATH."""

    def _make(name: str) -> Path:
        path = bin_dir / name
        path.write_text("#!/bin/sh\nexit 0\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _make
