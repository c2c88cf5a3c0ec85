"""Standalone tool steps: lazygit, oh-my-posh and its themes, script installers.

Each tool is probed by looking its command up on PATH (plus ~/.local/bin,
where vendor scripts drop binaries for non-root users) and installed through
a chain of methods, tried in order until one produces the binary.
"""

import logging
import subprocess
import tarfile
import zipfile
from collections.abc import Sequence
from pathlib import Path
from tempfile import TemporaryDirectory

from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.models.outcome import ApplyResult, ProbeResult
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.download import download, latest_release_tag
from shellstrap.utils.formatting import print_info, print_success, print_warning
from shellstrap.utils.shell import INSTALL_TIMEOUT, privileged, run_command, run_script

logger = logging.getLogger(__name__)

SYSTEM_BIN_DIR = Path("/usr/local/bin")

LAZYGIT_REPO = "jesseduffield/lazygit"
LAZYGIT_FALLBACK_VERSION = "0.44.1"

POSH_INSTALL_SCRIPT = "curl -s https://ohmyposh.dev/install.sh | bash -s"
POSH_BREW_FORMULA = "jandedobbeleer/oh-my-posh/oh-my-posh"
POSH_RELEASE_URL = "https://github.com/JanDeDobbeleer/oh-my-posh/releases/latest/download"

CURSOR_INSTALL_SCRIPT = "curl https://cursor.com/install -fsS | bash"

# platform.machine() -> (lazygit asset arch, oh-my-posh asset arch)
_ARCHITECTURES: dict[str, tuple[str, str]] = {
    "x86_64": ("x86_64", "amd64"),
    "amd64": ("x86_64", "amd64"),
    "aarch64": ("arm64", "arm64"),
    "arm64": ("arm64", "arm64"),
}


def user_env(env: Environment) -> Environment:
    """Environment whose PATH also covers ~/.local/bin."""
    return env.with_path_prepended(env.home / ".local" / "bin")


def find_any(env: Environment, commands: Sequence[str]) -> str | None:
    """Return the first of ``commands`` found, searching ~/.local/bin too."""
    lookup = user_env(env)
    for command in commands:
        found = lookup.which(command)
        if found:
            return found
    return None


def install_binary(source: Path, target_dir: Path, name: str | None = None) -> ApplyResult:
    """Copy an executable into a system bin directory with privilege escalation."""
    target = target_dir / (name or source.name)
    try:
        result = run_command(privileged(["install", "-m", "755", str(source), str(target)]))
    except (OSError, subprocess.SubprocessError) as e:
        return ApplyResult.fail(f"Could not install {target}: {e}", ErrorKind.PRIVILEGE_DENIED)
    if not result.success:
        return ApplyResult.fail(
            f"Could not install {target}: {result.error_message}", ErrorKind.PRIVILEGE_DENIED
        )
    return ApplyResult.ok(str(target))


def _brew_install(env: Environment, formula: str) -> ApplyResult:
    try:
        result = run_command(
            ["brew", "install", formula], timeout=INSTALL_TIMEOUT, env=env.subprocess_env()
        )
    except (OSError, subprocess.SubprocessError) as e:
        return ApplyResult.fail(f"brew install {formula} did not run: {e}")
    if not result.success:
        return ApplyResult.fail(f"brew install {formula} failed: {result.error_message}")
    return ApplyResult.ok(f"installed via brew ({formula})")


class CommandToolStep(ConvergenceStep):
    """Base for tools that are present when one of their commands resolves."""

    commands: tuple[str, ...] = ()

    def probe(self, env: Environment) -> ProbeResult:
        found = find_any(env, self.commands)
        if found is None:
            return ProbeResult(satisfied=False, detail=f"{' / '.join(self.commands)} not found")
        return ProbeResult(satisfied=True, detail=found)

    def _verify(self, env: Environment, result: ApplyResult) -> ApplyResult:
        """Turn a successful install into a failure if the command is still missing."""
        if result.success and find_any(env, self.commands) is None:
            return ApplyResult.fail(f"{self.commands[0]} still not found after installation")
        return result


class LazygitStep(CommandToolStep):
    """Ensures the lazygit terminal UI is installed.

    Homebrew is used wherever it is available. Otherwise (Linux only) the
    release tarball matching the CPU architecture is downloaded from GitHub
    and installed system-wide.
    """

    name = "lazygit"
    description = "lazygit is installed"
    commands = ("lazygit",)

    def __init__(self, bin_dir: Path = SYSTEM_BIN_DIR) -> None:
        self.bin_dir = bin_dir

    @staticmethod
    def resolve_version() -> str:
        """Latest release version without the leading ``v``, or the pinned fallback."""
        tag = latest_release_tag(LAZYGIT_REPO)
        if not tag:
            return LAZYGIT_FALLBACK_VERSION
        return tag.removeprefix("v")

    @staticmethod
    def asset_url(version: str, arch: str) -> str:
        """Download URL of the Linux release tarball."""
        return (
            f"https://github.com/{LAZYGIT_REPO}/releases/download/"
            f"v{version}/lazygit_{version}_Linux_{arch}.tar.gz"
        )

    def _install_from_release(self, env: Environment) -> ApplyResult:
        arches = _ARCHITECTURES.get(env.machine.lower())
        if arches is None:
            return ApplyResult.fail(
                f"No lazygit release for architecture {env.machine}", ErrorKind.MISSING_CAPABILITY
            )

        version = self.resolve_version()
        print_info(f"Installing lazygit {version} from GitHub releases...")
        with TemporaryDirectory(prefix="shellstrap-lazygit-") as tmp:
            workdir = Path(tmp)
            try:
                archive = download(self.asset_url(version, arches[0]), workdir / "lazygit.tar.gz")
                with tarfile.open(archive, "r:gz") as tar:
                    tar.extract("lazygit", path=workdir, filter="data")
            except KeyError:
                return ApplyResult.fail("lazygit binary missing from release archive")
            except (OSError, tarfile.TarError) as e:
                return ApplyResult.fail(f"Could not download lazygit: {e}", ErrorKind.NETWORK)
            return install_binary(workdir / "lazygit", self.bin_dir)

    def apply(self, env: Environment) -> ApplyResult:
        if env.has_command("brew"):
            print_info("Installing lazygit via Homebrew...")
            return self._verify(env, _brew_install(env, "lazygit"))
        if env.is_macos:
            return ApplyResult.fail(
                "Homebrew is required to install lazygit on macOS",
                ErrorKind.MISSING_CAPABILITY,
            )
        return self._verify(env, self._install_from_release(env))


class OhMyPoshStep(CommandToolStep):
    """Ensures the oh-my-posh prompt renderer is installed.

    Tries the vendor install script, then Homebrew, then the raw release
    binary.
    """

    name = "oh-my-posh"
    description = "oh-my-posh is installed"
    commands = ("oh-my-posh",)

    def __init__(self, bin_dir: Path = SYSTEM_BIN_DIR) -> None:
        self.bin_dir = bin_dir

    def _install_script(self, env: Environment) -> ApplyResult:
        try:
            result = run_script(POSH_INSTALL_SCRIPT, env=env.subprocess_env())
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"install script did not run: {e}", ErrorKind.NETWORK)
        if not result.success:
            return ApplyResult.fail(
                f"install script failed: {result.error_message}", ErrorKind.NETWORK
            )
        return ApplyResult.ok("installed via install script")

    def _install_binary(self, env: Environment) -> ApplyResult:
        arches = _ARCHITECTURES.get(env.machine.lower())
        if arches is None or env.platform != "linux":
            return ApplyResult.fail(
                f"No oh-my-posh binary for {env.platform}/{env.machine}",
                ErrorKind.MISSING_CAPABILITY,
            )
        with TemporaryDirectory(prefix="shellstrap-posh-") as tmp:
            binary = Path(tmp) / "oh-my-posh"
            try:
                download(f"{POSH_RELEASE_URL}/posh-linux-{arches[1]}", binary)
            except OSError as e:
                return ApplyResult.fail(f"Could not download oh-my-posh: {e}", ErrorKind.NETWORK)
            return install_binary(binary, self.bin_dir)

    def apply(self, env: Environment) -> ApplyResult:
        print_info("Downloading oh-my-posh...")
        result = self._verify(env, self._install_script(env))
        if result.success:
            return result

        print_warning(
            "Failed to install oh-my-posh via install script, trying alternative method..."
        )
        logger.debug("oh-my-posh install script: %s", result.error)
        if env.has_command("brew"):
            result = self._verify(env, _brew_install(env, POSH_BREW_FORMULA))
        else:
            result = self._verify(env, self._install_binary(env))
        return result


class PoshThemesStep(ConvergenceStep):
    """Ensures the oh-my-posh theme collection is unpacked in ~/.poshthemes."""

    name = "oh-my-posh-themes"
    description = "oh-my-posh themes are downloaded"

    def __init__(self, themes_url: str = f"{POSH_RELEASE_URL}/themes.zip") -> None:
        self.themes_url = themes_url

    @staticmethod
    def themes_dir(env: Environment) -> Path:
        return env.home / ".poshthemes"

    def probe(self, env: Environment) -> ProbeResult:
        directory = self.themes_dir(env)
        if not directory.is_dir():
            return ProbeResult(satisfied=False, detail=f"{directory} does not exist")
        # An empty directory is what an interrupted download leaves behind
        if not any(directory.glob("*.json")):
            return ProbeResult(satisfied=False, detail=f"{directory} contains no themes")
        return ProbeResult(satisfied=True, detail=str(directory))

    def apply(self, env: Environment) -> ApplyResult:
        directory = self.themes_dir(env)
        print_info("Downloading oh-my-posh themes...")
        directory.mkdir(parents=True, exist_ok=True)
        archive = directory / "themes.zip"
        try:
            download(self.themes_url, archive)
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(directory)
        except zipfile.BadZipFile as e:
            return ApplyResult.fail(f"Invalid themes archive: {e}", ErrorKind.NETWORK)
        except OSError as e:
            return ApplyResult.fail(f"Could not download themes: {e}", ErrorKind.NETWORK)
        finally:
            archive.unlink(missing_ok=True)

        themes = list(directory.glob("*.json"))
        for theme in themes:
            theme.chmod(theme.stat().st_mode | 0o600)
        print_success("oh-my-posh themes downloaded")
        return ApplyResult.ok(f"{len(themes)} theme(s)")


class ScriptToolStep(CommandToolStep):
    """A tool installed by piping a vendor script into bash.

    Attributes:
        name: Step name.
        commands: Commands any of which proves the tool is installed.
        script: Installer snippet.
    """

    def __init__(
        self,
        name: str,
        commands: Sequence[str],
        script: str,
        description: str = "",
    ) -> None:
        self.name = name
        self.commands = tuple(commands)
        self.script = script
        self.description = description or f"{name} is installed"

    def apply(self, env: Environment) -> ApplyResult:
        print_info(f"Installing {self.name}...")
        try:
            result = run_script(self.script, env=env.subprocess_env())
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"{self.name} installer did not run: {e}", ErrorKind.NETWORK)
        if not result.success:
            return ApplyResult.fail(
                f"{self.name} installer failed: {result.error_message}. "
                f"You can install it manually: {self.script}",
                ErrorKind.NETWORK,
            )
        verified = self._verify(env, ApplyResult.ok(f"installed via {self.script}"))
        if verified.success:
            print_success(f"{self.name} installed")
        return verified


def cursor_cli_step() -> ScriptToolStep:
    """The Cursor CLI, which ships an ``agent`` and (older) ``cursor`` command."""
    return ScriptToolStep(
        "cursor-cli",
        commands=("agent", "cursor"),
        script=CURSOR_INSTALL_SCRIPT,
        description="Cursor CLI (agent) is installed",
    )
