"""CLI entry point for the mDNS scanner."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import Config
from .tui.runner import run_scanner
from .utils.log_setup import configure_logging


@click.command()
@click.argument("query", required=False)
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="MDNS_SCANNER_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None, # Falls back to the Config value
    help="Override the logging level (e.g., DEBUG, INFO)."
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Override logging format."
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, resolve_path=True),
    default=None,
    help="Write logs to this file instead of stderr."
)
@click.version_option(__version__, prog_name="mdns-scanner")
def cli(query: Optional[str], config_file: Optional[str], log_level: Optional[str], log_format: Optional[str], log_file: Optional[str]) -> None:
    """Simple TUI for discovering mDNS capable devices.

    QUERY is the mDNS service type, e.g. "_http._tcp.local". Without it the
    scanner starts in edit mode. Press "/" to edit the query, Enter to scan,
    "q" or Esc to quit.
    """
    try:
        if config_file:
            cfg = Config.from_file(Path(config_file))
        else:
            # Environment variables (and .env file if present)
            cfg = Config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if log_level:
        cfg.logging.level = log_level.upper()
    if log_format:
        cfg.logging.format = log_format.lower()
    if log_file:
        cfg.logging.file = Path(log_file)

    configure_logging(cfg.logging)

    try:
        asyncio.run(run_scanner(cfg, initial_query=query))
    except KeyboardInterrupt:
        sys.exit(130) # Standard exit code for Ctrl+C
    except Exception as e:
        click.echo(f"An unexpected error occurred: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
