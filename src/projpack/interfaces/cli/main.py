"""Main CLI orchestrator for projpack."""

import sys
from typing import Optional

import rich_click as click
from loguru import logger

from ... import __version__
from ...progress import get_console

# Initialize console for rich output
console = get_console()

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {extra[service]} | {message}"


def _stderr_sink(message) -> None:
    sys.stderr.write(message)


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Route loguru output for command-line use.

    Warnings and errors go to stderr by default; ``verbose`` lowers the
    threshold to DEBUG. ``log_file`` adds a DEBUG-level file sink.
    """
    logger.remove()
    logger.configure(extra={"service": "projpack"})
    logger.add(
        _stderr_sink,
        level="DEBUG" if verbose else "WARNING",
        format=LOG_FORMAT,
        colorize=False,
    )
    if log_file:
        logger.add(log_file, level="DEBUG", format=LOG_FORMAT, encoding="utf-8")


# Create the main command group
@click.group(name="projpack")
@click.version_option(version=__version__, prog_name="projpack")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Also write a debug log to this file",
)
def cli(verbose: bool, log_file: Optional[str]):
    """projpack - Package a project folder into a clean ZIP archive.

    Build output, IDE state and package caches (bin, obj, .vs, packages,
    node_modules) and temporary files are left out.
    """
    configure_logging(verbose=verbose, log_file=log_file)


def create_main_cli():
    """Create and configure the main CLI with all subcommands."""
    # Import subcommands here to avoid circular imports
    from .pack import check, pack, rules

    # Register all subcommands
    cli.add_command(pack)
    cli.add_command(check)
    cli.add_command(rules)

    return cli


def main():
    """Console script entry point."""
    create_main_cli()()
