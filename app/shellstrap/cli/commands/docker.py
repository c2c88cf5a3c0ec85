"""Docker test harness.

Builds a throwaway image from ``Dockerfile.test`` and runs the bootstrap
inside it, so changes can be tried without touching the host.
"""

from pathlib import Path
from typing import Annotated

import typer

from shellstrap.utils.formatting import print_error, print_info, print_success
from shellstrap.utils.shell import run_command, run_interactive

IMAGE_NAME = "dotfiles-test"
CONTAINER_NAME = "dotfiles-test-container"
DOCKERFILE = "Dockerfile.test"

USAGE = """Usage: shellstrap docker [build|run|shell|clean]

Commands:
  build  - Build the Docker image only
  run    - Build and run (default) - runs bootstrap and drops into zsh
  shell  - Build and run with bash (skip bootstrap for debugging)
  clean  - Remove Docker image and container"""

def _docker(args: list[str], context: Path) -> int:
    """Run a docker command attached to the terminal."""
    try:
        return run_interactive(["docker", *args], cwd=str(context))
    except FileNotFoundError as e:
        print_error("docker is not installed or not on PATH.")
        raise typer.Exit(code=1) from e


def build_image(dockerfile: str, context: Path) -> None:
    """Build the test image, exiting with docker's code on failure."""
    code = _docker(["build", "-f", dockerfile, "-t", IMAGE_NAME, "."], context)
    if code != 0:
        print_error("Docker build failed.")
        raise typer.Exit(code=code)


def run_container(context: Path, *command: str) -> None:
    """Start an interactive, auto-removed container from the test image."""
    code = _docker(["run", "-it", "--rm", "--name", CONTAINER_NAME, IMAGE_NAME, *command], context)
    if code != 0:
        raise typer.Exit(code=code)


def clean_resources() -> None:
    """Remove the container and image; missing resources are not an error."""
    for args in (["docker", "rm", "-f", CONTAINER_NAME], ["docker", "rmi", IMAGE_NAME]):
        try:
            run_command(args)
        except FileNotFoundError as e:
            print_error("docker is not installed or not on PATH.")
            raise typer.Exit(code=1) from e


def docker(
    action: Annotated[
        str,
        typer.Argument(help="build, run, shell or clean."),
    ] = "run",
    dockerfile: Annotated[
        str,
        typer.Option(
            "--file",
            "-f",
            help="Dockerfile to build from.",
        ),
    ] = DOCKERFILE,
    context: Annotated[
        Path,
        typer.Option(
            "--context",
            help="Build context directory.",
            file_okay=False,
        ),
    ] = Path("."),
) -> None:
    """Test the bootstrap inside a Docker container.

    Examples:
        shellstrap docker           # Build and run, drops into zsh
        shellstrap docker shell     # Build and open bash, no bootstrap
        shellstrap docker clean     # Remove image and container
    """
    if action == "build":
        print_info("Building Docker image...")
        build_image(dockerfile, context)
        print_success("Image built successfully!")
    elif action == "run":
        print_info("Building and running Docker container...")
        build_image(dockerfile, context)
        print_info("Starting container (will run bootstrap and drop into zsh)...")
        run_container(context)
    elif action == "shell":
        print_info("Starting container with bash (no bootstrap)...")
        build_image(dockerfile, context)
        run_container(context, "/bin/bash")
    elif action == "clean":
        print_info("Cleaning up Docker resources...")
        clean_resources()
        print_success("Cleanup complete!")
    else:
        typer.echo(USAGE)
