"""Steps command: list the registered steps in run order."""

import typer

from shellstrap.cli.display import create_steps_table
from shellstrap.cli.types import get_registry, load_config_or_exit
from shellstrap.core.environment import Environment
from shellstrap.utils.formatting import console, print_info

app = typer.Typer(
    help="List registered steps.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_steps(ctx: typer.Context) -> None:
    """List registered steps, their dependencies and tolerated errors."""
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit(ctx)
    registry = get_registry(config, Environment.from_os())
    console.print(create_steps_table(registry))

    if config.steps.disabled:
        print_info(f"Disabled by config: {', '.join(config.steps.disabled)}")
