"""System package managers used by installer steps.

This module provides the PackageManager strategy and its APT, YUM and
Homebrew implementations, plus capability-based selection.
"""

from shellstrap.operators.apt import AptManager
from shellstrap.operators.base import InstallResult, PackageManager, PackageManagerKind
from shellstrap.operators.brew import BrewManager
from shellstrap.operators.detect import (
    all_managers,
    detect_package_manager,
    find_package_manager,
)
from shellstrap.operators.yum import YumManager

__all__ = [
    "AptManager",
    "BrewManager",
    "InstallResult",
    "PackageManager",
    "PackageManagerKind",
    "YumManager",
    "all_managers",
    "detect_package_manager",
    "find_package_manager",
]
