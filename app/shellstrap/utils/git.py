"""Git helpers for clone-if-absent steps."""

import logging
import subprocess
from pathlib import Path

from shellstrap.utils.shell import INSTALL_TIMEOUT, CommandResult, run_command

logger = logging.getLogger(__name__)


def git_clone(
    url: str,
    target: Path,
    *,
    depth: int | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Clone a repository into ``target``.

    Missing git or a timeout is reported as a failed CommandResult rather
    than raised, so callers can treat every clone failure alike.

    Args:
        url: Repository URL.
        target: Destination directory (must not exist).
        depth: Optional shallow clone depth.
        env: Additional environment variables.

    Returns:
        CommandResult of the clone.
    """
    args = ["git", "clone"]
    if depth is not None:
        args += ["--depth", str(depth)]
    args += [url, str(target)]

    logger.info("Cloning %s into %s", url, target)
    try:
        return run_command(args, timeout=INSTALL_TIMEOUT, env=env)
    except FileNotFoundError:
        return CommandResult(stdout="", stderr="git is not installed", returncode=127)
    except subprocess.TimeoutExpired:
        return CommandResult(stdout="", stderr=f"git clone of {url} timed out", returncode=124)
