"""The stock convergence plan, built from configuration."""

from shellstrap.core.backup import BackupRotator
from shellstrap.core.config import SetupConfig
from shellstrap.core.environment import Environment
from shellstrap.core.paths import expand_home
from shellstrap.core.registry import StepRegistry
from shellstrap.operators.base import PackageManagerKind
from shellstrap.steps.base import ConvergenceStep
from shellstrap.steps.node import NodeRuntimeStep, NpmToolStep, NvmStep
from shellstrap.steps.ohmyzsh import OhMyZshStep
from shellstrap.steps.packages import PackagesStep
from shellstrap.steps.repository import RepositoryStep
from shellstrap.steps.shell import DefaultShellStep, ZshStep
from shellstrap.steps.tools import LazygitStep, OhMyPoshStep, PoshThemesStep, cursor_cli_step
from shellstrap.steps.zshrc import ZshrcStep


def build_steps(config: SetupConfig, env: Environment) -> list[ConvergenceStep]:
    """Instantiate every step in run order, before filtering."""
    nvm = NvmStep(config.node.nvm_version)
    node = NodeRuntimeStep(config.node.min_major, nvm)

    aliases = (
        expand_home(config.zshrc.aliases, env.home) if config.zshrc.aliases else env.aliases_path
    )
    packages = {
        PackageManagerKind.APT: config.packages.apt,
        PackageManagerKind.YUM: config.packages.yum,
        PackageManagerKind.BREW: config.packages.brew,
    }

    steps: list[ConvergenceStep] = [
        ZshStep(),
        DefaultShellStep(),
        PackagesStep(packages),
        LazygitStep(),
        OhMyPoshStep(),
        PoshThemesStep(),
        OhMyZshStep(config.plugins),
    ]
    if config.repository.enabled:
        steps.append(
            RepositoryStep(
                config.repository.name,
                config.repository.url,
                [expand_home(p, env.home) for p in config.repository.parents],
            )
        )
    steps += [nvm, node]
    steps += [NpmToolStep(package, node=node) for package in config.node.npm_tools]
    steps += [
        cursor_cli_step(),
        ZshrcStep(
            expand_home(config.zshrc.path, env.home),
            aliases,
            [p.name for p in config.plugins],
            BackupRotator(config.zshrc.backups_keep),
        ),
    ]
    return steps


def build_registry(config: SetupConfig, env: Environment) -> StepRegistry:
    """Register the enabled steps in run order.

    A disabled step's dependents lose the dependency instead of failing
    registration, so disabling ``zsh`` still lets ``default-shell`` run.

    Raises:
        DuplicateStepError: If two steps share a name (e.g. an npm tool
            named like a built-in step).
    """
    registry = StepRegistry()
    for step in build_steps(config, env):
        if not config.is_enabled(step.name):
            continue
        registry.add(step, requires=tuple(name for name in step.requires if name in registry))
    return registry
