"""Package set presence step.

Converges a declarative list of system packages through whichever package
manager the host provides. Each package is checked and installed on its
own; a package that fails to install never stops the rest of the list.
"""

import logging
import subprocess
from collections.abc import Callable, Mapping

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.models.outcome import ApplyResult, ItemCounts, ProbeResult
from shellstrap.operators.base import PackageManager, PackageManagerKind
from shellstrap.operators.detect import find_package_manager
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.formatting import print_info, print_success, print_warning

logger = logging.getLogger(__name__)


class PackagesStep(ConvergenceStep):
    """Ensures every desired package is installed.

    Attributes:
        packages: Desired package names per package manager.
    """

    name = "packages"
    description = "Essential and network packages are installed"

    def __init__(
        self,
        packages: Mapping[PackageManagerKind, list[str]],
        manager_factory: Callable[[], PackageManager | None] = find_package_manager,
    ) -> None:
        """Initialize the step.

        Args:
            packages: Desired package names per package manager, in install order.
            manager_factory: Returns the host's package manager, or None.
        """
        self.packages = {kind: list(names) for kind, names in packages.items()}
        self._manager_factory = manager_factory

    def _wanted(self, manager: PackageManager) -> list[str]:
        return self.packages.get(manager.kind, [])

    @staticmethod
    def _is_installed(manager: PackageManager, package: str) -> bool:
        try:
            return manager.is_installed(package)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Could not query %s: %s", package, e)
            return False

    def probe(self, env: Environment) -> ProbeResult:
        manager = self._manager_factory()
        if manager is None:
            return ProbeResult(satisfied=False, detail="no supported package manager")

        missing = [p for p in self._wanted(manager) if not self._is_installed(manager, p)]
        if missing:
            return ProbeResult(satisfied=False, detail=f"missing: {', '.join(missing)}")
        return ProbeResult(satisfied=True, detail=f"{len(self._wanted(manager))} present")

    def apply(self, env: Environment) -> ApplyResult:
        manager = self._manager_factory()
        if manager is None:
            return ApplyResult.fail(
                "No supported package manager found, skipping package installation",
                ErrorKind.MISSING_CAPABILITY,
            )

        wanted = self._wanted(manager)
        if not wanted:
            return ApplyResult.skip(f"no packages configured for {manager.kind.value}")

        manager.refresh()

        installed = present = failed = 0
        for package in wanted:
            if self._is_installed(manager, package):
                present += 1
                continue

            print_info(f"Installing {package}...")
            result = manager.install(package)
            if result.success:
                installed += 1
                print_success(f"{package} installed")
            else:
                failed += 1
                print_warning(f"Could not install {package}, continuing...")
                logger.debug("Install of %s failed: %s", package, result.error)

        counts = ItemCounts(installed=installed, present=present, failed=failed)
        if failed and not installed:
            return ApplyResult.fail(f"{failed} package(s) could not be installed", counts=counts)
        return ApplyResult.ok(f"via {manager.kind.value}", counts=counts)
