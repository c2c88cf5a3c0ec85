"""Homebrew package manager implementation."""

from shellstrap.operators.base import PackageManager, PackageManagerKind
from shellstrap.utils.shell import command_exists, run_command


class BrewManager(PackageManager):
    """Package manager for macOS (and Linuxbrew).

    Homebrew refuses to run as root, so commands are never escalated.
    """

    @property
    def kind(self) -> PackageManagerKind:
        """Return Homebrew as the package manager."""
        return PackageManagerKind.BREW

    def is_available(self) -> bool:
        """Check if brew is available."""
        return command_exists("brew")

    def is_installed(self, package: str) -> bool:
        """Check whether brew lists the formula."""
        return run_command(["brew", "list", package]).success

    def _install_args(self, package: str) -> list[str]:
        return ["brew", "install", package]
