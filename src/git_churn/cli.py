"""Command line interface for git-churn."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .config import ConfigManager
from .services.activity_loop import ActivityLoop, PreflightError
from .services.git_gateway import GitGateway
from .utils.exception_logger import ExceptionLogger

logger = logging.getLogger(__name__)

console = Console()


@click.command()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option(
    "--path",
    "-p",
    type=click.Path(exists=True, file_okay=False),
    help="Repository directory to run in (default: current directory)",
)
@click.option(
    "--max-iterations",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many iterations (default: run forever)",
)
@click.option(
    "--init",
    "init_config",
    is_flag=True,
    help="Write a default configuration file and exit",
)
@click.option(
    "--force", "-f", is_flag=True, help="Overwrite an existing configuration (with --init)"
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="git-churn")
def cli(
    config: Optional[str],
    path: Optional[str],
    max_iterations: Optional[int],
    init_config: bool,
    force: bool,
    verbose: bool,
):
    """Generate endless synthetic activity in a Git repository.

    \b
    Every iteration:
      1. writes 1-11 random files of 24-48 KB into ./assets
      2. commits them (message = SHA-256 of the millisecond timestamp)
      3. pushes the commit to origin/<current branch>
      4. creates 1-7 random tags (SHA-512 names) and pushes them

    \b
    CONFIGURATION:
      Config file: .git-churn/config.json (optional)
      Create one with: git-churn --init
      Keys: assets_dir, remote_name, min_files, max_files, min_file_kb,
            max_file_kb, min_tags, max_tags, tag_digits, iteration_delay,
            git_timeout

    The loop only stops on its own when HEAD is detached.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    repo_dir = Path(path).resolve() if path else Path.cwd()

    if config:
        config_manager = ConfigManager(Path(config))
    else:
        config_manager = ConfigManager.for_repository(repo_dir)

    if init_config:
        if config_manager.config_path.exists() and not force:
            console.print(
                f"Error: {config_manager.config_path} already exists. "
                "Use --force to overwrite.",
                style="red",
                markup=False,
            )
            sys.exit(1)
        config_manager.create_default_config()
        console.print(
            f"✅ Wrote default configuration to {config_manager.config_path}",
            style="green",
            markup=False,
        )
        return

    try:
        churn_config = config_manager.load()
    except ValueError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        sys.exit(1)

    gateway = GitGateway(repo_dir, timeout=churn_config.git_timeout)
    loop = ActivityLoop(churn_config, gateway, console=console)

    try:
        loop.preflight()
    except PreflightError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        sys.exit(1)

    ExceptionLogger.initialize(repo_dir)

    if verbose:
        console.print(f"📁 Repository: {repo_dir}", style="dim", markup=False)
        console.print(
            f"🔧 Assets: {churn_config.assets_dir} -> remote '{churn_config.remote_name}'",
            style="dim",
            markup=False,
        )

    try:
        iterations = loop.run(max_iterations=max_iterations)
    except KeyboardInterrupt:
        console.print("\nInterrupted, stopping.", style="yellow")
        sys.exit(130)

    logger.debug("Loop finished after %d iteration(s)", iterations)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
