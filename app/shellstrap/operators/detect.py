"""Capability-based package manager selection."""

import logging

from shellstrap.core.errors import NoPackageManagerError
from shellstrap.operators.apt import AptManager
from shellstrap.operators.base import PackageManager
from shellstrap.operators.brew import BrewManager
from shellstrap.operators.yum import YumManager

logger = logging.getLogger(__name__)


def all_managers() -> list[PackageManager]:
    """Instances of every supported manager, in probing priority."""
    return [AptManager(), YumManager(), BrewManager()]


def find_package_manager() -> PackageManager | None:
    """Return the first available package manager, or None."""
    for manager in all_managers():
        if manager.is_available():
            logger.debug("Using %s package manager", manager.kind.value)
            return manager
    return None


def detect_package_manager() -> PackageManager:
    """Return the first available package manager.

    Raises:
        NoPackageManagerError: If none of apt-get, yum or brew is available.
    """
    manager = find_package_manager()
    if manager is None:
        msg = "No supported package manager found (apt-get, yum, brew)"
        raise NoPackageManagerError(msg)
    return manager
