"""Inventory lookup commands."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

import typer

from inventory.config import settings
from inventory.db import MetadataQueryService, SqliteExecutor, StorageError, distinct_endpoints
from inventory.timeutil import DEFAULT_WINDOW_MINUTES, resolve_window

inventory_app = typer.Typer(help="Query the service inventory.", no_args_is_help=True)

_START = typer.Option(None, "--start", help="Window start, epoch milliseconds.")
_END = typer.Option(None, "--end", help="Window end, epoch milliseconds (default: now).")
_MINUTES = typer.Option(
    DEFAULT_WINDOW_MINUTES, "--minutes", help="Window length when --start is omitted."
)


def _service() -> MetadataQueryService:
    return MetadataQueryService(SqliteExecutor(settings.db_path), settings.query_config())


def _window(start: Optional[int], end: Optional[int], minutes: int) -> tuple[int, int]:
    try:
        return resolve_window(start, end, minutes)
    except ValueError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1) from exc


def handle_storage_errors(func: Callable) -> Callable:
    """Turn a :class:`StorageError` into a message and exit code 1."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StorageError as exc:
            typer.echo(f"❌ Storage error: {exc}")
            raise typer.Exit(code=1) from exc

    return wrapper


@inventory_app.command("brief")
@handle_storage_errors
def inventory_brief(
    start: Optional[int] = _START,
    end: Optional[int] = _END,
    minutes: int = _MINUTES,
) -> None:
    """Show inventory counts."""
    start, end = _window(start, end, minutes)
    brief = _service().cluster_brief(start, end)
    typer.echo(f"Services : {brief.num_of_service}")
    typer.echo(f"Endpoints: {brief.num_of_endpoint}")
    typer.echo(f"Databases: {brief.num_of_database}")
    typer.echo(f"Caches   : {brief.num_of_cache}")
    typer.echo(f"MQ       : {brief.num_of_mq}")


@inventory_app.command("services")
@handle_storage_errors
def inventory_services(
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k", help="Name substring."),
    start: Optional[int] = _START,
    end: Optional[int] = _END,
    minutes: int = _MINUTES,
) -> None:
    """List live services."""
    start, end = _window(start, end, minutes)
    services = _service().search_services(start, end, keyword)
    if not services:
        typer.echo("No services found.")
        return
    for s in services:
        typer.echo(f"  {s.id}  {s.name}")


@inventory_app.command("browsers")
@handle_storage_errors
def inventory_browsers(
    start: Optional[int] = _START,
    end: Optional[int] = _END,
    minutes: int = _MINUTES,
) -> None:
    """List live browser applications."""
    start, end = _window(start, end, minutes)
    services = _service().get_all_browser_services(start, end)
    if not services:
        typer.echo("No browser services found.")
        return
    for s in services:
        typer.echo(f"  {s.id}  {s.name}")


@inventory_app.command("find")
@handle_storage_errors
def inventory_find(name: str = typer.Argument(..., help="Exact service name.")) -> None:
    """Look a service up by exact name."""
    service = _service().search_service(name)
    if service is None:
        typer.echo(f"❌ Service not found: {name!r}")
        raise typer.Exit(code=1)
    typer.echo(f"  {service.id}  {service.name}")


@inventory_app.command("instances")
@handle_storage_errors
def inventory_instances(
    service_id: int = typer.Argument(..., help="Service id."),
    start: Optional[int] = _START,
    end: Optional[int] = _END,
    minutes: int = _MINUTES,
) -> None:
    """List live instances of a service with their attributes."""
    start, end = _window(start, end, minutes)
    instances = _service().get_service_instances(start, end, service_id)
    if not instances:
        typer.echo("No instances found.")
        return
    for i in instances:
        typer.echo(f"  {i.id}  {i.name}  [{i.language.value}]  {i.instance_uuid}")
        for a in i.attributes:
            typer.echo(f"      {a.name} = {a.value}")


@inventory_app.command("endpoints")
@handle_storage_errors
def inventory_endpoints(
    service_id: int = typer.Argument(..., help="Service id."),
    keyword: Optional[str] = typer.Option(None, "--keyword", "-k", help="Name substring."),
    limit: int = typer.Option(20, "--limit", min=1, help="Maximum endpoints to show."),
) -> None:
    """List server endpoints of a service."""
    endpoints = distinct_endpoints(_service().search_endpoints(keyword, service_id, limit), limit)
    if not endpoints:
        typer.echo("No endpoints found.")
        return
    for e in endpoints:
        typer.echo(f"  {e.id}  {e.name}")


@inventory_app.command("databases")
@handle_storage_errors
def inventory_databases() -> None:
    """List database services and their type."""
    databases = _service().get_all_databases()
    if not databases:
        typer.echo("No databases found.")
        return
    for d in databases:
        typer.echo(f"  {d.id}  [{d.type}]  {d.name}")
