"""Backups command: list and prune timestamped ~/.zshrc backups."""

from typing import Annotated

import typer
from rich.table import Table

from shellstrap.cli.types import load_config_or_exit
from shellstrap.core.backup import BackupRotator
from shellstrap.core.environment import Environment
from shellstrap.core.paths import expand_home
from shellstrap.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="List and prune backups of the managed .zshrc.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_backups(
    ctx: typer.Context,
    prune: Annotated[
        bool,
        typer.Option(
            "--prune",
            help="Delete all but the newest backups.",
        ),
    ] = False,
    keep: Annotated[
        int | None,
        typer.Option(
            "--keep",
            "-k",
            min=1,
            help="Backups to keep when pruning (default: zshrc.backups_keep).",
        ),
    ] = None,
) -> None:
    """List backups of the managed .zshrc, newest first.

    Examples:
        shellstrap backups                  # List backups
        shellstrap backups --prune          # Keep the configured number
        shellstrap backups --prune -k 1     # Keep only the newest
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit(ctx)
    env = Environment.from_os()
    managed = expand_home(config.zshrc.path, env.home)
    rotator = BackupRotator(keep or config.zshrc.backups_keep)

    if prune:
        purged = rotator.rotate(managed)
        if purged:
            print_success(f"Removed {len(purged)} old backup file(s)")
        else:
            print_info(f"Nothing to prune (keeping {rotator.keep})")

    backups = rotator.list_backups(managed)
    if not backups:
        print_info(f"No backups of {managed} found.")
        return

    table = Table(
        title=f"Backups of {managed}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Created", no_wrap=True)
    table.add_column("File")
    table.add_column("Size", justify="right", style="muted")

    for backup in backups:
        table.add_row(
            backup.created.strftime("%Y-%m-%d %H:%M:%S"),
            backup.path.name,
            f"{backup.path.stat().st_size} B",
        )

    console.print(table)
