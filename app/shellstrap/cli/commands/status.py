"""Status command: probe every step without changing anything."""

import typer

from shellstrap.cli.display import create_probe_table
from shellstrap.cli.types import get_registry, load_config_or_exit
from shellstrap.core.environment import Environment
from shellstrap.core.runner import ConvergenceRunner
from shellstrap.utils.formatting import console, print_success

app = typer.Typer(
    help="Show which steps are already satisfied.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_status(ctx: typer.Context) -> None:
    """Show which steps are already satisfied.

    Runs only the read-only probes. Always exits 0.
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit(ctx)
    env = Environment.from_os()
    registry = get_registry(config, env)

    results = ConvergenceRunner(env).probe_all(registry)
    console.print(create_probe_table(results))

    satisfied = sum(1 for _, probe in results if probe.satisfied)
    if satisfied == len(results):
        print_success("Everything is in place.")
    else:
        console.print(
            f"\n[satisfied]{satisfied} satisfied[/satisfied], "
            f"[warning]{len(results) - satisfied} pending[/warning]. "
            "Run 'shellstrap run' to converge."
        )
