"""Subprocess helpers for installers.

Every external command goes through ``run_command`` so steps see a uniform
CommandResult, and through ``privileged`` when it needs root.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass

# Remote install scripts and package managers can take a while
INSTALL_TIMEOUT: float = 600.0


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output and exit status of a finished command.

    Attributes:
        stdout: Standard output.
        stderr: Standard error.
        returncode: Exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command exited with status 0."""
        return self.returncode == 0

    @property
    def error_message(self) -> str:
        """Last line of stderr (or stdout), else the exit status."""
        text = self.stderr.strip() or self.stdout.strip()
        if not text:
            return f"exit code {self.returncode}"
        return text.splitlines()[-1]


def _merged_env(env: dict[str, str] | None) -> dict[str, str] | None:
    return {**os.environ, **env} if env else None


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command to completion and capture its output.

    A non-zero exit is returned, not raised.

    Args:
        args: Command and arguments.
        timeout: Seconds to wait before giving up, None for no limit.
        cwd: Working directory, defaults to the current one.
        env: Variables added on top of the inherited environment.

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.TimeoutExpired: If the command runs past ``timeout``.
    """
    proc = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        cwd=cwd,
        env=_merged_env(env),
    )
    return CommandResult(stdout=proc.stdout, stderr=proc.stderr, returncode=proc.returncode)


def run_script(
    script: str,
    *,
    timeout: float | None = INSTALL_TIMEOUT,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a snippet through ``bash -c``.

    Used for ``curl ... | bash`` installers and for commands that only exist
    as shell functions (nvm).
    """
    return run_command(["bash", "-c", script], timeout=timeout, cwd=cwd, env=env)


def command_exists(name: str, path: str | None = None) -> bool:
    """Check if a command resolves on PATH (or on the given search path)."""
    return shutil.which(name, path=path) is not None


def is_root() -> bool:
    """Check whether the current process runs with uid 0."""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def privileged(args: list[str]) -> list[str]:
    """Prefix a command with sudo unless already root or sudo is absent.

    Containers typically run as root without sudo installed.
    """
    if is_root() or not command_exists("sudo"):
        return list(args)
    return ["sudo", *args]


def run_interactive(
    args: list[str],
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run a command attached to the terminal and return its exit status.

    Output is not captured, so interactive programs such as ``docker run -it``
    work.

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    return subprocess.run(args, check=False, cwd=cwd, env=_merged_env(env)).returncode
