# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Main CLI entry point for actionstream.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..capture.producer import StreamProducer
from ..processing.server import create_redis_client, serve, setup_logging
from ..shared.config import Config, ConfigError
from ..store.redis_store import RedisLogStore

# Create console for rich output
console = Console()

# Pass context through Click
pass_config = click.make_pass_decorator(Config, ensure=True)


def _parse_pairs(pairs: Tuple[str, ...]) -> List[Tuple[str, str]]:
    fields = []
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="FIELDS")
        fields.append((name, value))
    return fields


def _store(config: Config) -> RedisLogStore:
    return RedisLogStore(create_redis_client(config))


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="actionstream")
@click.option(
    "--config",
    "config_path",
    envvar="ACTIONSTREAM_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml"
)
@click.option(
    "--stream",
    default=None,
    help="Stream key (overrides config)"
)
@click.option(
    "--debug",
    envvar="ACTIONSTREAM_DEBUG",
    is_flag=True,
    help="Enable debug logging"
)
@click.pass_context
def cli(ctx, config_path: Optional[Path], stream: Optional[str], debug: bool):
    """
    actionstream - append action events to a Redis Stream and tail them.

    Examples:
        actionstream run
        actionstream append name=Action1 description="first action"
        actionstream simulate --count 1000
        actionstream status
    """
    config = Config(config_path=config_path)
    if stream:
        config.stream_key = stream
    if debug:
        config.log_level = "DEBUG"

    try:
        config.validate()
    except ConfigError as e:
        raise click.UsageError(str(e))

    ctx.obj = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@pass_config
def run(config: Config):
    """Tail the stream until interrupted."""
    setup_logging(config.log_level)
    console.print(f"[bold green]Tailing[/bold green] {config.stream_key} (Ctrl+C to stop)")
    asyncio.run(serve(config))


@cli.command()
@click.argument("fields", nargs=-1, required=True)
@pass_config
def append(config: Config, fields: Tuple[str, ...]):
    """Append one entry made of NAME=VALUE fields."""
    pairs = _parse_pairs(fields)
    entry_id = StreamProducer(_store(config), config.stream_key).append(pairs)
    console.print(f"[green]✓[/green] Appended {entry_id}")


@cli.command()
@click.option("--count", default=1000, show_default=True, type=click.IntRange(min=1), help="Number of actions")
@pass_config
def simulate(config: Config, count: int):
    """Append one entry carrying COUNT synthetic actions."""
    entry_id = StreamProducer(_store(config), config.stream_key).simulate(count)
    console.print(f"[green]✓[/green] Appended {entry_id} with {count} actions")


@cli.command()
@pass_config
def status(config: Config):
    """Show configuration and current stream length."""
    store = _store(config)
    length = store.length(config.stream_key)

    table = Table(title="actionstream status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Redis", f"{config.redis_host}:{config.redis_port}/{config.redis_db}")
    table.add_row("Stream", config.stream_key)
    table.add_row("Length", str(length))
    table.add_row("Idle interval", f"{config.idle_interval}s")
    table.add_row("Active interval", f"{config.active_interval}s")
    table.add_row("Cleanup", config.cleanup)
    console.print(table)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("ACTIONSTREAM_DEBUG"):
            console.print_exception()
        else:
            console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
