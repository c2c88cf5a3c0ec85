"""shellstrap command-line entry point.

Holds the global options; every command lives in ``cli/commands``.
"""

from pathlib import Path
from typing import Annotated

import typer

from shellstrap import __version__
from shellstrap.cli.commands import backups, config, docker, run, status, steps
from shellstrap.core.logging_config import setup_logging

app = typer.Typer(
    name="shellstrap",
    help="Converge your shell environment to a declared state.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"shellstrap version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Print the shellstrap version.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every probe and command (DEBUG)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print the summary and errors."),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            envvar="SHELLSTRAP_CONFIG",
            help="Config file (default: ~/.config/shellstrap/config.toml).",
        ),
    ] = None,
) -> None:
    """shellstrap - Bootstrap zsh, Oh My Zsh, prompt and developer tools.

    Declares the desired shell environment, probes what is already there
    and installs only what is missing. Safe to run any number of times.
    """
    setup_logging(verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, quiet=quiet, config_path=config_path)


for _module, _name in (
    (run, "run"),
    (status, "status"),
    (steps, "steps"),
    (backups, "backups"),
    (config, "config"),
):
    app.add_typer(_module.app, name=_name)

# A plain command so options may follow the action argument
app.command("docker")(docker.docker)


if __name__ == "__main__":
    app()
