"""Config commands: show, initialise and locate the configuration file."""

from typing import Annotated

import tomli_w
import typer

from shellstrap.cli.types import get_config_path, load_config_or_exit
from shellstrap.core.config import ConfigError, SetupConfig, config_to_dict, save_config
from shellstrap.core.paths import get_config_path as default_config_path
from shellstrap.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage the shellstrap configuration file.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective configuration as TOML (defaults included)."""
    config = load_config_or_exit(ctx)
    console.print(tomli_w.dumps(config_to_dict(config)), markup=False, highlight=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file holding the default settings."""
    path = get_config_path(ctx) or default_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(SetupConfig(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config written to {saved}")


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the config file location."""
    typer.echo(str(get_config_path(ctx) or default_config_path()))
