# src/wildhorizons/cli.py
"""
Wild Horizons Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`. It
talks to the same document stores as the HTTP API, so the catalog can be
searched and sightings recorded without running a server.

Usage
-----
    # Serve the HTTP API
    $ wildhorizons serve --port 8000

    # Search the catalog (options act like the /api/continent/... path segment)
    $ wildhorizons destinations is_open_to_public=true --continent africa

    # Read and append the sightings log
    $ wildhorizons sightings list
    $ wildhorizons sightings add title="Red fox" location=Dartmoor
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import Annotated, Any

import typer
import uvicorn
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wildhorizons.api.schemas import DraftAdapter
from wildhorizons.core.errors import MalformedInputError, PersistenceError
from wildhorizons.core.query import QueryValidator, filter_records, merge_path_filter
from wildhorizons.core.records import DETAILS_FIELD, Record
from wildhorizons.core.settings import get_logger, load_settings
from wildhorizons.core.store import DocumentStore

load_dotenv()

app = typer.Typer(
    help="Wild Horizons: search the destinations catalog and keep a sightings log.",
    rich_markup_mode="markdown",
    no_args_is_help=True,
)
sightings_app = typer.Typer(help="Read and append the sightings log.", no_args_is_help=True)
app.add_typer(sightings_app, name="sightings")

console = Console()
logger = get_logger("wildhorizons.cli")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def parse_pairs(pairs: Sequence[str]) -> dict[str, str]:
    """Turn ``["key=value", ...]`` into a mapping; later keys win."""
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise MalformedInputError(f"Expected KEY=VALUE, got {pair!r}")
        parsed[key] = value
    return parsed


def _columns(records: Sequence[Record]) -> list[str]:
    """Union of top-level keys in first-seen order, nested details excluded."""
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            if key != DETAILS_FIELD:
                seen.setdefault(key, None)
    return list(seen)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)


def _render(records: Sequence[Record], title: str, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(list(records), indent=2, ensure_ascii=False))
        return
    if not records:
        console.print(f"[dim]No {title.lower()} found.[/dim]")
        return

    columns = _columns(records)
    table = Table(title=f"{title} ({len(records)})", show_lines=False)
    for column in columns:
        table.add_column(column, overflow="fold")
    for record in records:
        table.add_row(*(_cell(record.get(column)) for column in columns))
    console.print(table)


def _fail(message: str, code: int) -> typer.Exit:
    console.print(f"[bold red]{escape(message)}[/bold red]")
    return typer.Exit(code=code)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address (default: HOST)")] = None,
    port: Annotated[int | None, typer.Option(help="Bind port (default: PORT)")] = None,
    reload: Annotated[bool, typer.Option(help="Restart on code changes")] = False,
) -> None:
    """Serve the HTTP API with uvicorn."""
    settings = load_settings()
    uvicorn.run(
        "wildhorizons.api.server:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def destinations(
    filters: Annotated[
        list[str] | None, typer.Argument(help="Filters as KEY=VALUE, e.g. country=kenya")
    ] = None,
    continent: Annotated[
        str | None, typer.Option(help="Only this continent (overrides continent=...)")
    ] = None,
    country: Annotated[
        str | None, typer.Option(help="Only this country (overrides country=...)")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON")] = False,
) -> None:
    """Search the destinations catalog."""
    try:
        query = parse_pairs(filters or [])
    except MalformedInputError as exc:
        raise _fail(str(exc), 2) from exc

    invalid = QueryValidator().validate(query)
    if invalid is not None:
        raise _fail(f'Invalid filter key: "{invalid}".', 1)

    if continent is not None:
        query = merge_path_filter(query, "continent", continent)
    if country is not None:
        query = merge_path_filter(query, "country", country)

    settings = load_settings()
    store = DocumentStore(settings.catalog_path, read_only=True, name="destinations")
    records = asyncio.run(store.load())
    _render(filter_records(records, query), "Destinations", as_json)


@sightings_app.command("list")
def list_sightings(
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON")] = False,
) -> None:
    """Show every recorded sighting, oldest first."""
    settings = load_settings()
    store = DocumentStore(settings.sightings_path, name="sightings")
    _render(asyncio.run(store.load()), "Sightings", as_json)


async def _append(store: DocumentStore, draft: dict[str, Any]) -> Record:
    async with store:
        return await store.append(draft)


@sightings_app.command("add")
def add_sighting(
    fields: Annotated[
        list[str] | None, typer.Argument(help="Fields as KEY=VALUE, e.g. title='Red fox'")
    ] = None,
    payload: Annotated[
        str | None, typer.Option("--json", help="Whole draft as a JSON object")
    ] = None,
) -> None:
    """Append one sighting to the log and print the stored record."""
    try:
        draft: dict[str, Any] = DraftAdapter.validate_json(payload) if payload else {}
        draft.update(parse_pairs(fields or []))
    except ValidationError as exc:
        raise _fail(f"Invalid JSON format: {exc.errors()[0]['msg']}", 2) from exc
    except MalformedInputError as exc:
        raise _fail(str(exc), 2) from exc

    if not draft:
        raise _fail("Nothing to record: pass KEY=VALUE fields or --json.", 2)

    settings = load_settings()
    store = DocumentStore(settings.sightings_path, indent=settings.json_indent, name="sightings")
    try:
        record = asyncio.run(_append(store, draft))
    except PersistenceError as exc:
        logger.error("Could not record sighting: %s", exc)
        raise _fail(f"Could not record sighting: {exc}", 1) from exc

    console.print(f"[green]Recorded sighting[/green] [bold]{record['uuid']}[/bold]")
    typer.echo(json.dumps(record, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
