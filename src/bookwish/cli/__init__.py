# ABOUTME: CLI package for bookwish, built on Click.
# ABOUTME: Defines the root command group, log verbosity, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from bookwish.cli.commands import candidates_cmd, enrich_cmd, request_cmd, status_cmd

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


@click.group()
@click.version_option(package_name="bookwish")
@click.option("-v", "--verbose", count=True, help="Show progress (-v) or scoring detail (-vv).")
def cli(verbose: int) -> None:
    """bookwish - request e-books through Readarr."""
    logging.basicConfig(
        level=_LOG_LEVELS.get(verbose, logging.DEBUG),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


cli.add_command(request_cmd.request)
cli.add_command(candidates_cmd.candidates)
cli.add_command(status_cmd.status)
cli.add_command(enrich_cmd.enrich)
