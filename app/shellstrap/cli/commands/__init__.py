"""CLI commands for shellstrap.

This package contains all subcommand implementations.
"""

from shellstrap.cli.commands import backups, config, docker, run, status, steps

__all__ = ["backups", "config", "docker", "run", "status", "steps"]
