"""Abstract base class for system package managers.

This module defines the PackageManager interface that every supported
package manager (APT, YUM, Homebrew) implements. A manager is picked once
per run by capability probing and then used polymorphically.
"""

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from shellstrap.utils.shell import INSTALL_TIMEOUT, CommandResult, run_command


class PackageManagerKind(Enum):
    """Enumeration of supported package managers, in probing priority."""

    APT = "apt"
    YUM = "yum"
    BREW = "brew"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Result of installing a single package.

    Attributes:
        package: Package name.
        success: Whether the install completed.
        error: Error message if the install failed.
    """

    package: str
    success: bool
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the install failed."""
        return not self.success


class PackageManager(ABC):
    """Abstract base class for all package managers.

    Package managers answer "is this package installed?" from the system
    package database and install missing packages one at a time, so one
    bad package never blocks the rest of a list.

    Example:
        >>> manager = AptManager()
        >>> if manager.is_available() and not manager.is_installed("htop"):
        ...     result = manager.install("htop")
    """

    # Timeout for install operations
    _INSTALL_TIMEOUT: float = INSTALL_TIMEOUT

    @property
    @abstractmethod
    def kind(self) -> PackageManagerKind:
        """Return the package manager this class drives."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this package manager is available on the system."""

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Query the package database for a package.

        Must not change system state.
        """

    @abstractmethod
    def _install_args(self, package: str) -> list[str]:
        """Command line that installs a single package."""

    def refresh(self) -> CommandResult | None:
        """Refresh the package index before installing.

        Returns:
            CommandResult of the refresh, or None if the manager needs none.
        """
        return None

    def install(self, package: str) -> InstallResult:
        """Install a single package.

        Args:
            package: Package name.

        Returns:
            InstallResult describing the outcome.

        Raises:
            RuntimeError: If the package manager is not available.
        """
        if not self.is_available():
            msg = f"{self.kind.value.upper()} package manager is not available on this system"
            raise RuntimeError(msg)

        try:
            result = run_command(self._install_args(package), timeout=self._INSTALL_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            return InstallResult(package=package, success=False, error=str(e))

        if result.success:
            return InstallResult(package=package, success=True)
        return InstallResult(package=package, success=False, error=result.error_message)
