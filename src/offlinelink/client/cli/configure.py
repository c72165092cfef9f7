"""Configure command for the offlinelink CLI.

Commands:
- configure: Save endpoint and retry settings
"""

from __future__ import annotations

import click

from offlinelink.client.cli.config import get_config_file, load_config, save_config


@click.command()
@click.option("--endpoint", help="GraphQL endpoint URL.")
@click.option("--token", help="Bearer token sent with every request.")
@click.option(
    "--retry-interval",
    type=click.FloatRange(min=0),
    help="Seconds to wait after a failure before retrying.",
)
@click.option(
    "--sequential/--concurrent",
    default=None,
    help="Replay queued mutations in order, or all at once.",
)
def configure(
    endpoint: str | None,
    token: str | None,
    retry_interval: float | None,
    sequential: bool | None,
) -> None:
    """Save connection and retry settings."""
    config = load_config()

    if endpoint is not None:
        config["endpoint"] = endpoint.rstrip("/")
    if token is not None:
        config["token"] = token
    if retry_interval is not None:
        config["retry_interval"] = retry_interval
    if sequential is not None:
        config["sequential"] = sequential

    save_config(config)
    click.echo(f"Configuration saved to {get_config_file()}")
    for key, value in sorted(config.items()):
        shown = "********" if key == "token" else value
        click.echo(f"  {key}: {shown}")
