"""YUM package manager implementation.

Queries the RPM database for installed packages and installs
missing ones with yum.
"""

from shellstrap.operators.base import PackageManager, PackageManagerKind
from shellstrap.utils.shell import command_exists, privileged, run_command


class YumManager(PackageManager):
    """Package manager for CentOS/RHEL systems."""

    @property
    def kind(self) -> PackageManagerKind:
        """Return YUM as the package manager."""
        return PackageManagerKind.YUM

    def is_available(self) -> bool:
        """Check if yum and rpm are available."""
        return command_exists("yum") and command_exists("rpm")

    def is_installed(self, package: str) -> bool:
        """Check whether rpm knows the package."""
        return run_command(["rpm", "-q", package]).success

    def _install_args(self, package: str) -> list[str]:
        return privileged(["yum", "install", "-y", package])
