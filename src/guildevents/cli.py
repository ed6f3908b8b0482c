"""GuildEvents CLI - fetch and synchronise bucket resources."""

import asyncio
import sys
from functools import wraps
from collections.abc import Callable, Coroutine
from typing import Any, NoReturn, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.table import Table

from guildevents.bucket.blocking import BlockingBucketClient
from guildevents.bucket.client import BucketClient
from guildevents.bucket.results import Resource
from guildevents.bucket.signer import Credentials, trace_signature
from guildevents.bucket.sync import ResourceSynchronizer, SyncStatus
from guildevents.bucket.timestamps import amz_date
from guildevents.common.cache import create_resource_cache
from guildevents.common.errors import BucketConfigError
from guildevents.common.logging import setup_logging
from guildevents.common.settings import Settings
from guildevents.common.tracing import setup_tracing

console = Console()
err_console = Console(stderr=True)

P = ParamSpec("P")
R = TypeVar("R")

RESOURCES = {
    "events": Resource.EVENTS,
    "organisations": Resource.ORGANISATIONS,
}

_STATUS_STYLES = {
    SyncStatus.UPDATED: "green",
    SyncStatus.UNCHANGED: "cyan",
    SyncStatus.SKIPPED: "red",
}


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Decorator to run async commands."""

    @wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _credentials(settings: Settings) -> Credentials:
    try:
        return Credentials.from_settings(settings)
    except BucketConfigError as e:
        _fail(str(e))


@click.group()
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read GUILDEVENTS_* settings from this file instead of .env",
)
@click.option("--log-level", default=None, help="Log level (overrides GUILDEVENTS_LOG_LEVEL)")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
@click.pass_context
def cli(
    ctx: click.Context,
    env_file: str | None,
    log_level: str | None,
    json_logs: bool,
) -> None:
    """GuildEvents CLI - Read the events bucket with signed requests."""
    settings = Settings(_env_file=env_file) if env_file else Settings()

    setup_logging(log_level or settings.log_level, json_output=json_logs or settings.log_json)
    if settings.tracing_enabled:
        setup_tracing(
            service_name=settings.tracing_service_name or "guildevents",
            otlp_endpoint=settings.tracing_otlp_endpoint,
            enable_console=settings.tracing_console,
        )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("fetch")
@click.argument("resource", type=click.Choice(sorted(RESOURCES)))
@click.pass_context
def fetch(ctx: click.Context, resource: str) -> None:
    """Print the current contents of a resource."""
    settings: Settings = ctx.obj["settings"]
    _credentials(settings)

    with BlockingBucketClient(settings) as client:
        body = client.fetch_object(RESOURCES[resource].value)

    if body is None:
        _fail(f"Could not fetch {RESOURCES[resource].value}")
    click.echo(body)


@cli.command("last-modified")
@click.argument("resource", type=click.Choice(sorted(RESOURCES)))
@click.pass_context
def last_modified(ctx: click.Context, resource: str) -> None:
    """Print when a resource last changed in the bucket."""
    settings: Settings = ctx.obj["settings"]
    _credentials(settings)

    with BlockingBucketClient(settings) as client:
        timestamp = client.fetch_last_modified(RESOURCES[resource].value)

    if timestamp is None:
        _fail(f"Could not read Last-Modified for {RESOURCES[resource].value}")
    click.echo(timestamp.isoformat())


@cli.command("sign")
@click.argument("method", type=click.Choice(["GET", "HEAD"], case_sensitive=False))
@click.argument("path")
@click.option("--timestamp", help="x-amz-date to sign with (defaults to now)")
@click.pass_context
def sign(ctx: click.Context, method: str, path: str, timestamp: str | None) -> None:
    """Show every step of a request signature."""
    credentials = _credentials(ctx.obj["settings"])
    try:
        signature = trace_signature(credentials, method.upper(), path, timestamp or amz_date())
    except ValueError as e:
        _fail(str(e))

    console.rule("Canonical request")
    console.print(signature.canonical_request, markup=False, highlight=False, soft_wrap=True)
    console.rule("String to sign")
    console.print(signature.string_to_sign, markup=False, highlight=False, soft_wrap=True)
    console.rule("Authorization")
    console.print(signature.authorization, markup=False, highlight=False, soft_wrap=True)


@cli.command("sync")
@click.argument("resources", nargs=-1, type=click.Choice(sorted(RESOURCES)))
@click.option("--force", is_flag=True, help="Download even if the cached copy is current")
@click.pass_context
@async_command
async def sync(ctx: click.Context, resources: tuple[str, ...], force: bool) -> None:
    """Download resources that changed since the last sync."""
    settings: Settings = ctx.obj["settings"]
    _credentials(settings)

    selected = [RESOURCES[name] for name in resources] or list(Resource)
    cache = create_resource_cache(settings.cache_storage, settings.cache_sqlite_path)

    async with BucketClient(settings) as client:
        outcomes = await ResourceSynchronizer(client, cache).refresh_all(selected, force=force)

    table = Table(title="Sync Results")
    table.add_column("Resource", style="cyan")
    table.add_column("Status")
    table.add_column("Last Modified")

    for outcome in outcomes:
        style = _STATUS_STYLES[outcome.status]
        table.add_row(
            outcome.resource.value,
            f"[{style}]{outcome.status.value}[/{style}]",
            outcome.last_modified.isoformat() if outcome.last_modified else "-",
        )

    console.print(table)

    if any(outcome.status == SyncStatus.SKIPPED for outcome in outcomes):
        sys.exit(1)


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
