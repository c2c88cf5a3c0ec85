"""nvm, Node.js runtime and global npm tool steps.

nvm is a shell function, not an executable, so every node/npm command runs
through ``bash -c`` with nvm.sh sourced first when it is installed.
"""

import logging
import re
import shlex
import subprocess
from collections.abc import Sequence

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.models.outcome import ApplyResult, ProbeResult
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.formatting import print_info, print_success, print_warning
from shellstrap.utils.shell import INSTALL_TIMEOUT, CommandResult, run_script

logger = logging.getLogger(__name__)

NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/{version}/install.sh"

_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)(?:\.|\s*$)")


def parse_major_version(text: str) -> int | None:
    """Extract the major version from ``node --version`` output.

    Example:
        >>> parse_major_version("v18.1.0")
        18
    """
    match = _VERSION_PATTERN.match(text)
    return int(match.group(1)) if match else None


def nvm_shell(env: Environment, command: str, timeout: float | None = 60.0) -> CommandResult:
    """Run a command in bash with nvm loaded, if nvm is installed.

    Raises:
        FileNotFoundError: If bash is not available.
        subprocess.TimeoutExpired: If the command exceeds the timeout.
    """
    script = command
    if env.nvm_script.is_file():
        script = f". {shlex.quote(str(env.nvm_script))} >/dev/null 2>&1; {command}"
    return run_script(script, timeout=timeout, env=env.subprocess_env())


def _has(env: Environment, command: str) -> bool:
    return nvm_shell(env, f"command -v {shlex.quote(command)}").success


class NvmStep(ConvergenceStep):
    """Ensures nvm is installed in $NVM_DIR."""

    name = "nvm"
    description = "nvm is installed"

    def __init__(self, version: str = "v0.40.1") -> None:
        self.version = version

    def probe(self, env: Environment) -> ProbeResult:
        script = env.nvm_script
        if script.is_file() and script.stat().st_size > 0:
            return ProbeResult(satisfied=True, detail=str(env.nvm_dir))
        return ProbeResult(satisfied=False, detail=f"{script} not found")

    def apply(self, env: Environment) -> ApplyResult:
        print_info("Installing nvm...")
        # The installer refuses a custom NVM_DIR that does not exist yet
        env.nvm_dir.mkdir(parents=True, exist_ok=True)
        url = NVM_INSTALL_URL.format(version=self.version)
        # PROFILE=/dev/null: the managed .zshrc already loads nvm
        extra = {**env.subprocess_env(), "PROFILE": "/dev/null"}
        try:
            result = run_script(f"curl -o- {url} | bash", env=extra)
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"nvm installer did not run: {e}", ErrorKind.NETWORK)

        if not result.success or not self.probe(env).satisfied:
            return ApplyResult.fail(
                f"Failed to install nvm ({result.error_message}). "
                "You can install manually from: https://github.com/nvm-sh/nvm",
                ErrorKind.NETWORK,
            )
        print_success("nvm installed successfully")
        return ApplyResult.ok(f"{self.version} in {env.nvm_dir}")


class NodeRuntimeStep(ConvergenceStep):
    """Ensures Node.js of at least a minimum major version, with npm.

    Attributes:
        min_major: Lowest acceptable major version.
        nvm: Step used to install nvm on demand.
    """

    name = "node"
    description = "Node.js and npm are installed"

    def __init__(self, min_major: int = 22, nvm: NvmStep | None = None) -> None:
        self.min_major = min_major
        self.nvm = nvm or NvmStep()
        self.description = f"Node.js {min_major}+ and npm are installed"

    def current_version(self, env: Environment) -> str | None:
        """Active ``node --version``, or None if node is unavailable."""
        result = nvm_shell(env, "node --version")
        if not result.success:
            return None
        return result.stdout.strip() or None

    def probe(self, env: Environment) -> ProbeResult:
        version = self.current_version(env)
        if version is None:
            return ProbeResult(satisfied=False, detail="node not found")

        major = parse_major_version(version)
        if major is None or major < self.min_major:
            return ProbeResult(
                satisfied=False, detail=f"node {version} is below v{self.min_major}"
            )
        if not _has(env, "npm"):
            return ProbeResult(satisfied=False, detail="npm not found")
        return ProbeResult(satisfied=True, detail=f"node {version}")

    def apply(self, env: Environment) -> ApplyResult:
        nvm_result = self.nvm.converge(env)
        if nvm_result.failed:
            return ApplyResult.fail(
                f"Could not install nvm, cannot install Node.js: {nvm_result.error}",
                nvm_result.error_kind or ErrorKind.COMMAND_FAILED,
            )

        print_info(f"Installing Node.js {self.min_major} via nvm...")
        script = (
            f"nvm install {self.min_major} && "
            f"nvm alias default {self.min_major} && "
            "nvm use default"
        )
        try:
            result = nvm_shell(env, script, timeout=INSTALL_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"nvm did not run: {e}", ErrorKind.NETWORK)
        if not result.success:
            return ApplyResult.fail(
                f"Failed to install Node.js {self.min_major} via nvm: {result.error_message}",
                ErrorKind.NETWORK,
            )

        probe = self.probe(env)
        if not probe.satisfied:
            return ApplyResult.fail(f"Node.js installation may have failed: {probe.detail}")
        print_success(f"Node.js {self.min_major} set as default version")
        return ApplyResult.ok(probe.detail)


class NpmToolStep(ConvergenceStep):
    """A command-line tool installed globally with npm.

    The step is named after the npm package.
    """

    def __init__(
        self,
        package: str,
        commands: Sequence[str] | None = None,
        node: NodeRuntimeStep | None = None,
    ) -> None:
        self.name = package
        self.package = package
        self.commands = tuple(commands or (package,))
        self.node = node or NodeRuntimeStep()
        self.description = f"{package} is installed via npm"

    def probe(self, env: Environment) -> ProbeResult:
        for command in self.commands:
            if _has(env, command):
                return ProbeResult(satisfied=True, detail=command)
        return ProbeResult(satisfied=False, detail=f"{self.commands[0]} not found")

    def apply(self, env: Environment) -> ApplyResult:
        if not _has(env, "npm"):
            print_info(f"npm is not installed. Installing Node.js before {self.package}...")
            node_result = self.node.converge(env)
            if node_result.failed:
                return ApplyResult.fail(
                    f"Failed to install Node.js, cannot install {self.package}: "
                    f"{node_result.error}",
                    node_result.error_kind or ErrorKind.COMMAND_FAILED,
                )

        print_info(f"Installing {self.package} via npm...")
        command = f"npm i -g {shlex.quote(self.package)}"
        try:
            result = nvm_shell(env, command, timeout=INSTALL_TIMEOUT)
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"npm did not run: {e}", ErrorKind.NETWORK)
        if not result.success:
            print_warning(f"You can install it manually: {command}")
            return ApplyResult.fail(
                f"Failed to install {self.package}: {result.error_message}", ErrorKind.NETWORK
            )
        print_success(f"{self.package} installed successfully")
        return ApplyResult.ok(command)
