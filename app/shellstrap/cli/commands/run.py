"""Run command implementation.

Converges every registered step: probe, apply what is missing, report.
"""

from typing import Annotated

import typer

from shellstrap.cli.display import create_report_table, print_report_summary, print_step_line
from shellstrap.cli.types import check_step_names, get_registry, is_quiet, load_config_or_exit
from shellstrap.core.environment import Environment
from shellstrap.core.registry import Step
from shellstrap.core.runner import ConvergenceRunner
from shellstrap.utils.formatting import console, print_error, print_header, print_info

app = typer.Typer(
    help="Converge the shell environment.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def run_setup(
    ctx: typer.Context,
    only: Annotated[
        list[str] | None,
        typer.Option(
            "--only",
            "-o",
            help="Run only this step (repeatable).",
        ),
    ] = None,
    skip: Annotated[
        list[str] | None,
        typer.Option(
            "--skip",
            "-s",
            help="Skip this step (repeatable).",
        ),
    ] = None,
) -> None:
    """Converge the shell environment.

    Every step is probed first; only steps whose desired state does not
    hold are applied. A failing step never stops the remaining steps.

    Examples:
        shellstrap run                      # Converge everything
        shellstrap run --only zsh --only zshrc
        shellstrap run --skip repository    # Everything except the clone
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit(ctx)
    env = Environment.from_os()
    registry = get_registry(config, env)
    check_step_names(registry, [*(only or []), *(skip or [])])

    quiet = is_quiet(ctx)
    if not quiet:
        print_header("Setting up Zsh Configuration")
        print_info(f"Home directory: {env.home}")
        print_info(f"Dotfiles directory: {env.dotfiles_dir}")

    def on_start(step: Step) -> None:
        if not quiet:
            print_info(f"Checking {step.description or step.name}...")

    runner = ConvergenceRunner(
        env,
        on_start=on_start,
        on_outcome=None if quiet else print_step_line,
    )
    report = runner.run(registry, only=only, skip=skip)

    console.print()
    console.print(create_report_table(report))
    print_report_summary(report)

    # Exit with error code if any step failed
    if report.has_failures:
        print_error("Some steps failed. Fix the issues above and run again.")
        raise typer.Exit(code=1)

    if not quiet:
        print_info("Restart your terminal or run 'zsh' to start using the new configuration.")
