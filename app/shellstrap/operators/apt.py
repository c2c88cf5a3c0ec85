"""APT package manager implementation.

Queries the dpkg database for installed packages and installs
missing ones with apt-get.
"""

import logging

from shellstrap.operators.base import PackageManager, PackageManagerKind
from shellstrap.utils.shell import CommandResult, command_exists, privileged, run_command

logger = logging.getLogger(__name__)


class AptManager(PackageManager):
    """Package manager for Debian/Ubuntu systems.

    Uses dpkg-query for presence checks and apt-get for installs.
    Requires sudo privileges unless running as root.
    """

    # dpkg-query status string of a fully installed package
    _INSTALLED_STATUS = "install ok installed"

    @property
    def kind(self) -> PackageManagerKind:
        """Return APT as the package manager."""
        return PackageManagerKind.APT

    def is_available(self) -> bool:
        """Check if apt-get and dpkg-query are available."""
        return command_exists("apt-get") and command_exists("dpkg-query")

    def is_installed(self, package: str) -> bool:
        """Check whether dpkg reports the package as installed."""
        result = run_command(["dpkg-query", "-W", "-f=${Status}", package])
        if not result.success:
            # dpkg-query exits 1 for unknown packages
            return False
        return result.stdout.strip() == self._INSTALLED_STATUS

    def refresh(self) -> CommandResult | None:
        """Update the package lists (apt-get update)."""
        logger.info("Updating APT package lists")
        result = run_command(
            privileged(["apt-get", "update", "-qq"]),
            timeout=self._INSTALL_TIMEOUT,
        )
        if not result.success:
            logger.warning("apt-get update failed: %s", result.error_message)
        return result

    def _install_args(self, package: str) -> list[str]:
        return privileged(["apt-get", "install", "-y", package])
