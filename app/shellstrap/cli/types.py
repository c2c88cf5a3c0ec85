"""Shared helpers for CLI commands.

Commands read the global options stored on the Typer context and build the
configuration, environment and step registry the same way.
"""

from pathlib import Path

import typer

from shellstrap.core.config import ConfigError, SetupConfig, load_config_or_default
from shellstrap.core.environment import Environment
from shellstrap.core.errors import ShellstrapError
from shellstrap.core.registry import StepRegistry
from shellstrap.steps.defaults import build_registry
from shellstrap.utils.formatting import print_error, print_info


def get_config_path(ctx: typer.Context) -> Path | None:
    """Config path given with --config, or None for the default location."""
    obj = ctx.obj or {}
    return obj.get("config_path")


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether --quiet was given."""
    return bool((ctx.obj or {}).get("quiet"))


def load_config_or_exit(ctx: typer.Context) -> SetupConfig:
    """Load the configuration, exiting with code 1 on invalid content.

    A missing file is not an error; defaults apply.
    """
    try:
        return load_config_or_default(get_config_path(ctx))
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        print_info("Run 'shellstrap config init --force' to write a fresh default config.")
        raise typer.Exit(code=1) from e


def get_registry(config: SetupConfig, env: Environment) -> StepRegistry:
    """Build the step registry, exiting with code 1 if the plan is invalid."""
    try:
        return build_registry(config, env)
    except ShellstrapError as e:
        print_error(f"Invalid step configuration: {e}")
        raise typer.Exit(code=1) from e


def check_step_names(registry: StepRegistry, names: list[str]) -> None:
    """Exit with code 1 if any name is not a registered step."""
    unknown = [name for name in names if name not in registry]
    if unknown:
        print_error(f"Unknown step(s): {', '.join(unknown)}")
        print_info(f"Available steps: {', '.join(registry.names())}")
        raise typer.Exit(code=1)
