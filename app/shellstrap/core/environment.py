"""Immutable execution context threaded through probers and appliers.

Replaces the global shell state the setup scripts relied on (exported
variables, current directory) with one explicit value built at startup.
"""

import getpass
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from platform import machine as _machine

logger = logging.getLogger(__name__)

DOTFILES_ENV_VAR = "SHELLSTRAP_DOTFILES_DIR"


def _current_user() -> str | None:
    """Resolve the operating user: $USER first, then the login database."""
    user = os.environ.get("USER")
    if user:
        return user
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        logger.debug("Could not determine current user: %s", e)
        return None


@dataclass(frozen=True, slots=True)
class Environment:
    """Snapshot of the host facts steps are allowed to depend on.

    Attributes:
        home: User profile root ($HOME).
        user: Login name of the operating user, None if unknown.
        nvm_dir: nvm root ($NVM_DIR, default ~/.nvm).
        dotfiles_dir: Directory holding the externally owned .aliases file.
        path: PATH used for command lookups.
        platform: sys.platform value ("linux", "darwin", ...).
        machine: CPU architecture as reported by platform.machine().
        extra_env: Variables passed to every installer subprocess.
    """

    home: Path
    user: str | None
    nvm_dir: Path
    dotfiles_dir: Path
    path: str = ""
    platform: str = sys.platform
    machine: str = field(default_factory=_machine)
    extra_env: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_os(cls) -> "Environment":
        """Build the environment from the current process."""
        home = Path(os.environ.get("HOME") or Path.home())
        nvm_dir = os.environ.get("NVM_DIR")
        dotfiles_dir = os.environ.get(DOTFILES_ENV_VAR)
        return cls(
            home=home,
            user=_current_user(),
            nvm_dir=Path(nvm_dir) if nvm_dir else home / ".nvm",
            dotfiles_dir=Path(dotfiles_dir) if dotfiles_dir else home / "dotfiles",
            path=os.environ.get("PATH", ""),
        )

    @property
    def is_macos(self) -> bool:
        """Check if running on macOS."""
        return self.platform == "darwin"

    @property
    def aliases_path(self) -> Path:
        """Location of the dotfiles aliases file sourced by the zshrc."""
        return self.dotfiles_dir / ".aliases"

    @property
    def nvm_script(self) -> Path:
        """nvm's shell entry point."""
        return self.nvm_dir / "nvm.sh"

    def which(self, name: str) -> str | None:
        """Look a command up on this environment's PATH."""
        return shutil.which(name, path=self.path or None)

    def has_command(self, name: str) -> bool:
        """Check if a command is available on this environment's PATH."""
        return self.which(name) is not None

    def subprocess_env(self) -> dict[str, str]:
        """Variables to pass to installer subprocesses."""
        env = {"HOME": str(self.home), "NVM_DIR": str(self.nvm_dir)}
        if self.path:
            env["PATH"] = self.path
        env.update(dict(self.extra_env))
        return env

    def with_path_prepended(self, *dirs: Path) -> "Environment":
        """Return a copy whose PATH starts with the given directories."""
        parts = [str(d) for d in dirs] + ([self.path] if self.path else [])
        return replace(self, path=os.pathsep.join(parts))
