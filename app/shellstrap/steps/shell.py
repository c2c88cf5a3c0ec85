"""Zsh presence and default login shell steps."""

import logging
import os
import pwd
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind, NoPackageManagerError, RecoveryPolicy
from shellstrap.models.outcome import ApplyResult, ProbeResult
from shellstrap.operators.base import PackageManager
from shellstrap.operators.detect import detect_package_manager
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.shell import privileged, run_command

logger = logging.getLogger(__name__)

# Checked after a PATH lookup, in order
ZSH_FALLBACK_PATHS: tuple[Path, ...] = (Path("/usr/bin/zsh"), Path("/bin/zsh"))


def find_zsh(env: Environment, fallback_paths: Sequence[Path] = ZSH_FALLBACK_PATHS) -> str | None:
    """Locate the zsh interpreter.

    Args:
        env: Environment whose PATH is searched first.
        fallback_paths: Fixed install locations checked afterwards.

    Returns:
        Path to zsh, or None if not installed.
    """
    found = env.which("zsh")
    if found:
        return found
    for candidate in fallback_paths:
        if candidate.is_file():
            return str(candidate)
    return None


def same_executable(a: str, b: str) -> bool:
    """Compare two interpreter paths, following symlinks (/bin -> /usr/bin)."""
    if a == b:
        return True
    return os.path.realpath(a) == os.path.realpath(b)


def read_login_shell(env: Environment) -> str | None:
    """Read the user's configured login shell from the account database.

    macOS keeps it in Directory Services (dscl); elsewhere the passwd
    database is authoritative.

    Returns:
        The login shell path, or None if it cannot be determined.
    """
    if env.user is None:
        return None

    if env.is_macos and env.has_command("dscl"):
        result = run_command(["dscl", ".", "-read", f"/Users/{env.user}", "UserShell"])
        if not result.success:
            return None
        # Output: "UserShell: /bin/zsh"
        parts = result.stdout.split()
        return parts[1] if len(parts) >= 2 else None

    try:
        return pwd.getpwnam(env.user).pw_shell or None
    except KeyError:
        logger.debug("User %s not found in passwd database", env.user)
        return None


class ZshStep(ConvergenceStep):
    """Ensures the zsh interpreter is installed."""

    name = "zsh"
    description = "Zsh is installed"

    def __init__(
        self,
        fallback_paths: Sequence[Path] = ZSH_FALLBACK_PATHS,
        manager_factory: Callable[[], PackageManager] = detect_package_manager,
    ) -> None:
        """Initialize the step.

        Args:
            fallback_paths: Fixed install locations checked after PATH.
            manager_factory: Returns the package manager to install with.
        """
        self._fallback_paths = tuple(fallback_paths)
        self._manager_factory = manager_factory

    def probe(self, env: Environment) -> ProbeResult:
        path = find_zsh(env, self._fallback_paths)
        if path is None:
            return ProbeResult(satisfied=False, detail="zsh not found")
        return ProbeResult(satisfied=True, detail=path)

    def apply(self, env: Environment) -> ApplyResult:
        try:
            manager = self._manager_factory()
        except NoPackageManagerError as e:
            return ApplyResult.fail(
                f"{e}. Please install zsh manually.", ErrorKind.MISSING_CAPABILITY
            )

        logger.info("Installing zsh via %s", manager.kind.value)
        manager.refresh()
        result = manager.install("zsh")
        if result.failed:
            return ApplyResult.fail(f"Failed to install zsh: {result.error}")

        path = find_zsh(env, self._fallback_paths)
        if path is None:
            return ApplyResult.fail("zsh still not found after installation")
        return ApplyResult.ok(f"installed via {manager.kind.value} at {path}")


class DefaultShellStep(ConvergenceStep):
    """Ensures zsh is the operating user's login shell.

    Changing the login shell needs privileges that restricted environments
    (containers, managed machines) often deny; such a rejection is recorded
    as a warning rather than a failure.
    """

    name = "default-shell"
    description = "Zsh is the default login shell"
    policy = RecoveryPolicy(
        recoverable=frozenset({ErrorKind.PRIVILEGE_DENIED, ErrorKind.MISSING_CAPABILITY})
    )
    requires = ("zsh",)

    def __init__(self, fallback_paths: Sequence[Path] = ZSH_FALLBACK_PATHS) -> None:
        self._fallback_paths = tuple(fallback_paths)

    def probe(self, env: Environment) -> ProbeResult:
        zsh = find_zsh(env, self._fallback_paths)
        if zsh is None:
            return ProbeResult(satisfied=False, detail="zsh not found")

        current = read_login_shell(env)
        if current is None:
            return ProbeResult(satisfied=False, detail="current login shell unknown")
        if same_executable(current, zsh):
            return ProbeResult(satisfied=True, detail=current)
        return ProbeResult(satisfied=False, detail=f"current login shell is {current}")

    def apply(self, env: Environment) -> ApplyResult:
        if env.user is None:
            return ApplyResult.skip("could not determine current user")

        zsh = find_zsh(env, self._fallback_paths)
        if zsh is None:
            return ApplyResult.fail("Cannot find zsh installation")

        try:
            result = run_command(privileged(["chsh", "-s", zsh, env.user]))
        except FileNotFoundError:
            return ApplyResult.fail(
                "chsh is not available; run zsh manually", ErrorKind.MISSING_CAPABILITY
            )
        except subprocess.SubprocessError as e:
            return ApplyResult.fail(f"chsh did not complete: {e}", ErrorKind.PRIVILEGE_DENIED)

        if not result.success:
            return ApplyResult.fail(
                "Could not change default shell (common in containers), you can run zsh manually",
                ErrorKind.PRIVILEGE_DENIED,
            )
        return ApplyResult.ok(f"default shell set to {zsh}")
