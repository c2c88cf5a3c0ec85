"""Oh My Zsh framework and plugin presence step.

Two-level convergence: the framework root, then every configured plugin
under ``custom/plugins``. Plugins are independent of each other; a clone
that fails is reported and the remaining plugins are still attempted.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from shellstrap.core.config import PluginSpec
from shellstrap.core.environment import Environment
from shellstrap.core.errors import ErrorKind
from shellstrap.models.outcome import ApplyResult, ItemCounts, ProbeResult
from shellstrap.steps.base import ConvergenceStep
from shellstrap.utils.formatting import print_info, print_success, print_warning
from shellstrap.utils.git import git_clone
from shellstrap.utils.shell import run_script

logger = logging.getLogger(__name__)

OMZ_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"


def framework_dir(env: Environment) -> Path:
    """Oh My Zsh installation root."""
    return env.home / ".oh-my-zsh"


def custom_plugins_dir(env: Environment) -> Path:
    """Directory holding third-party plugins."""
    return framework_dir(env) / "custom" / "plugins"


class OhMyZshStep(ConvergenceStep):
    """Ensures Oh My Zsh and the configured plugins are present.

    Attributes:
        plugins: Plugins to clone, in order.
    """

    name = "oh-my-zsh"
    description = "Oh My Zsh and plugins are installed"

    def __init__(self, plugins: Sequence[PluginSpec], install_url: str = OMZ_INSTALL_URL) -> None:
        self.plugins = list(plugins)
        self._install_url = install_url

    def _missing_plugins(self, env: Environment) -> list[PluginSpec]:
        base = custom_plugins_dir(env)
        return [p for p in self.plugins if not (base / p.name).is_dir()]

    def probe(self, env: Environment) -> ProbeResult:
        if not framework_dir(env).is_dir():
            return ProbeResult(satisfied=False, detail="Oh My Zsh not installed")
        missing = self._missing_plugins(env)
        if missing:
            names = ", ".join(p.name for p in missing)
            return ProbeResult(satisfied=False, detail=f"missing plugins: {names}")
        return ProbeResult(satisfied=True, detail=f"{len(self.plugins)} plugin(s) present")

    def _install_framework(self, env: Environment) -> ApplyResult:
        """Run the official installer unattended, leaving .zshrc and the shell alone."""
        print_info("Installing Oh My Zsh...")
        script = f'sh -c "$(curl -fsSL {self._install_url})" "" --unattended'
        extra = {
            **env.subprocess_env(),
            "ZSH": str(framework_dir(env)),
            "RUNZSH": "no",
            "CHSH": "no",
            "KEEP_ZSHRC": "yes",
        }
        try:
            result = run_script(script, env=extra)
        except (OSError, subprocess.SubprocessError) as e:
            return ApplyResult.fail(f"Oh My Zsh installer did not run: {e}", ErrorKind.NETWORK)

        if not result.success or not framework_dir(env).is_dir():
            return ApplyResult.fail(
                f"Oh My Zsh installer failed: {result.error_message}", ErrorKind.NETWORK
            )
        print_success("Oh My Zsh installed")
        return ApplyResult.ok()

    def _install_plugin(self, env: Environment, plugin: PluginSpec) -> bool:
        """Clone one plugin; True if the plugin directory exists afterwards."""
        target = custom_plugins_dir(env) / plugin.name
        print_info(f"Installing {plugin.name} from {plugin.url}")
        result = git_clone(plugin.url, target, env=env.subprocess_env())
        if result.success:
            print_success(f"{plugin.name} installed")
            return True

        print_warning(f"Failed to install {plugin.name}, continuing...")
        if target.is_dir():
            # Partial clone still leaves a usable checkout more often than not
            print_success(f"{plugin.name} directory exists, plugin may be available")
            return True
        logger.debug("Clone of %s failed: %s", plugin.name, result.error_message)
        return False

    def apply(self, env: Environment) -> ApplyResult:
        installed = present = failed = 0

        if framework_dir(env).is_dir():
            present += 1
        else:
            framework = self._install_framework(env)
            if framework.failed:
                # Plugins live inside the framework tree; cloning them now would
                # create a bare ~/.oh-my-zsh that blocks the installer next run.
                counts = ItemCounts(present=0, failed=1 + len(self.plugins))
                return ApplyResult.fail(framework.error or "", ErrorKind.NETWORK, counts=counts)
            installed += 1

        custom_plugins_dir(env).mkdir(parents=True, exist_ok=True)

        for plugin in self.plugins:
            if (custom_plugins_dir(env) / plugin.name).is_dir():
                present += 1
            elif self._install_plugin(env, plugin):
                installed += 1
            else:
                failed += 1

        counts = ItemCounts(installed=installed, present=present, failed=failed)
        if failed and not installed:
            return ApplyResult.fail(
                f"{failed} plugin(s) could not be cloned", ErrorKind.NETWORK, counts=counts
            )
        return ApplyResult.ok(counts=counts)
