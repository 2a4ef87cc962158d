"""CLI entry point for relops.

Commands:
  image-status — per-tag Docker Hub build status of container images
  sync         — clone or update all repositories of the organization
  comment      — post the CI result as a comment on the merged pull request
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from relops_cli.commands.comment import comment_cmd
from relops_cli.commands.image_status import image_status_cmd
from relops_cli.commands.sync import sync_cmd


def _get_version() -> str:
    """Read the relops version from the installed package metadata."""
    try:
        return importlib.metadata.version("relops")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0+unknown"


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich; stdout stays for command output."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=_get_version(),
    prog_name="relops",
)
@click.option(
    "--config",
    "config_path",
    default=".relops.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="RELOPS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Release workflow helpers: build status, repository sync and CI comments."""
    from relops_cli.auth import resolve_github_token
    from relops_cli.errors import reported_errors
    from relops_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    with reported_errors():
        config = load_config(config_path)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(image_status_cmd)
main.add_command(sync_cmd)
main.add_command(comment_cmd)
