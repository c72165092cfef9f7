"""Command-line interface for offlinelink.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Save endpoint and retry settings
- status: Show how many mutations are waiting
- list: List queued mutations in replay order
- flush: Replay the queue against the server once
- drop: Remove one queued mutation
- clear: Remove every queued mutation
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from offlinelink.client.cli.config import (
    get_config_dir,
    get_config_file,
    get_queue_db,
    load_config,
    save_config,
)
from offlinelink.client.cli.configure import configure
from offlinelink.client.cli.queue import clear, drop, flush, list_queue, status


def setup_logging(verbose: bool) -> None:
    """Send offlinelink logs to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    offlinelink_logger = logging.getLogger("offlinelink")
    for existing in offlinelink_logger.handlers[:]:
        offlinelink_logger.removeHandler(existing)
    offlinelink_logger.addHandler(handler)
    offlinelink_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="offlinelink")
@click.option(
    "--storage",
    "storage_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Queue database (default: ~/.offlinelink/queue.db).",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
@click.pass_context
def cli(ctx: click.Context, storage_path: Path | None, verbose: bool) -> None:
    """offlinelink - Offline-first queue for GraphQL mutations."""
    setup_logging(verbose)
    ctx.obj = {"storage_path": storage_path or get_queue_db()}


cli.add_command(configure)
cli.add_command(status)
cli.add_command(list_queue)
cli.add_command(flush)
cli.add_command(drop)
cli.add_command(clear)

__all__ = [
    "cli",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]
