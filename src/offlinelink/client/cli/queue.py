"""Queue commands for the offlinelink CLI.

Commands:
- status: Show how many mutations are waiting
- list: List queued mutations in replay order
- flush: Replay the queue against the server once
- drop: Remove one queued mutation
- clear: Remove every queued mutation
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from offlinelink.client.cli.config import get_retry_interval, load_config
from offlinelink.client.storage import SqliteStorage
from offlinelink.client.sync.queue import MutationQueue
from offlinelink.core.types import SyncReport


@contextmanager
def open_queue(storage_path: Path) -> Iterator[MutationQueue]:
    """Open and hydrate the queue stored at storage_path, closing it on exit."""
    with SqliteStorage(storage_path) as storage:
        queue = MutationQueue(storage)
        queue.hydrate()
        yield queue


@click.command()
@click.pass_obj
def status(obj: dict[str, Path]) -> None:
    """Show the number of pending mutations."""
    with open_queue(obj["storage_path"]) as queue:
        click.echo(f"Pending mutations: {len(queue)}")


@click.command(name="list")
@click.pass_obj
def list_queue(obj: dict[str, Path]) -> None:
    """List queued mutations in the order they will be replayed."""
    with open_queue(obj["storage_path"]) as queue:
        if not queue:
            click.echo("Queue is empty.")
            return

        for position, attempt in enumerate(queue, start=1):
            name = attempt.operation.operation_name or "<anonymous>"
            click.echo(f"{position:>3}. {attempt.id}  {name}")


@click.command()
@click.option("--endpoint", help="GraphQL endpoint URL (defaults to the configured one).")
@click.option(
    "--sequential/--concurrent",
    default=None,
    help="Replay queued mutations in order, or all at once.",
)
@click.pass_obj
def flush(obj: dict[str, Path], endpoint: str | None, sequential: bool | None) -> None:
    """Replay every queued mutation against the server once.

    Mutations the server accepts or rejects are removed from the queue;
    mutations that could not reach the server stay queued.
    """
    from offlinelink.client.api import GraphQLClient
    from offlinelink.client.link import OfflineLink
    from offlinelink.client.transport import HTTPTransport
    from offlinelink.core.config import OfflineLinkConfig, ServerConfig

    config = load_config()
    endpoint = endpoint or config.get("endpoint")
    if not endpoint:
        click.echo(
            "Error: No endpoint configured. Run 'offlinelink configure --endpoint URL' first.",
            err=True,
        )
        sys.exit(1)

    if sequential is None:
        sequential = bool(config.get("sequential", False))

    server_config = ServerConfig(endpoint=endpoint, token=config.get("token"))

    async def run() -> SyncReport:
        storage = SqliteStorage(obj["storage_path"])
        link = OfflineLink(
            OfflineLinkConfig(
                storage=storage,
                retry_interval=get_retry_interval(config),
                sequential=sequential,
            )
        )
        async with HTTPTransport(server_config) as transport:
            client = GraphQLClient(transport, links=[link])
            try:
                return await link.setup(client)
            finally:
                await link.aclose()
                storage.close()

    report = asyncio.run(run())
    if report.skipped:
        click.echo("Queue is empty, nothing to flush.")
        return

    click.echo(
        f"Delivered: {len(report.succeeded)}, "
        f"discarded: {len(report.discarded)}, "
        f"still queued: {len(report.retained)}"
    )
    if not report.complete:
        sys.exit(2)


@click.command()
@click.argument("attempt_id")
@click.pass_obj
def drop(obj: dict[str, Path], attempt_id: str) -> None:
    """Remove one queued mutation without sending it."""
    with open_queue(obj["storage_path"]) as queue:
        if attempt_id not in queue:
            click.echo(f"Error: No queued mutation with id {attempt_id}", err=True)
            sys.exit(1)

        queue.remove(attempt_id)
    click.echo(f"Dropped {attempt_id}")


@click.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def clear(obj: dict[str, Path], yes: bool) -> None:
    """Remove every queued mutation without sending it."""
    with open_queue(obj["storage_path"]) as queue:
        if not queue:
            click.echo("Queue is empty.")
            return

        if not yes:
            click.confirm(f"Discard {len(queue)} pending mutations?", abort=True)

        count = queue.clear()
    click.echo(f"Cleared {count} mutations")
