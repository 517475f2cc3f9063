"""CLI entry point for repolens.

Commands:
  review     — AI review of a public GitHub repository plus its commit history
  languages  — list the languages that can be reviewed
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from repolens_cli.commands.languages import languages_cmd
from repolens_cli.commands.review import review_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route library logging through rich. Library modules never configure handlers themselves."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )
    if verbose:
        # PyGithub and the HTTP stack are very chatty at DEBUG.
        for noisy in ("github", "urllib3", "httpx", "httpcore"):
            logging.getLogger(noisy).setLevel(logging.INFO)


@click.group()
@click.version_option(
    version=importlib.metadata.version("repolens"),
    prog_name="repolens",
)
@click.option(
    "--config",
    "config_path",
    default=".repolens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REPOLENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review for public GitHub repositories."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(languages_cmd)
