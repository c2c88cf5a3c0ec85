"""CLI package for shellstrap.

This package contains the Typer application and all subcommands.
"""

from shellstrap.cli.main import app

__all__ = ["app"]
