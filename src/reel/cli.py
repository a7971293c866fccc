"""Command line interface for Reel."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from reel.config import AppConfig
from reel.index.storage import SQLiteCardStore
from reel.ingestion.fetcher import ThrottledFetcher
from reel.ingestion.sources import FileContentSource
from reel.library import CardLibrary
from reel.web.app import app as web_app


console = Console()
app = typer.Typer(help="Reel - full-text search and recency browsing for documentation cards")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _resolve_db(db: Path | None) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _open_existing_store(db: Path | None) -> SQLiteCardStore:
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")
    return SQLiteCardStore(resolved_db)


async def _sync_directory(root: Path, store: SQLiteCardStore, config: AppConfig):
    async with ThrottledFetcher(config.concurrency) as fetcher:
        source = FileContentSource(root, fetcher, suffixes=config.include, exclude=config.exclude)
        library = CardLibrary(store, source)
        return await library.sync(source.list_cards())


@app.command()
def index(
    root: Path = typer.Argument(
        ..., help="Directory containing markdown/HTML cards.", resolve_path=True
    ),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    concurrency: int = typer.Option(AppConfig().concurrency, help="Maximum concurrent reads"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index every card under ROOT and prune cards that no longer exist."""
    _setup_logging(verbose)
    if not root.is_dir():
        raise typer.BadParameter(f"Not a directory: {root}")

    config = AppConfig(db_path=db if db is not None else AppConfig().db_path, concurrency=concurrency)
    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    store = SQLiteCardStore(resolved_db)
    console.print(f"Indexing into [bold]{resolved_db}[/bold]...")
    try:
        stats = asyncio.run(_sync_directory(root, store, config))
    finally:
        store.close()

    if not stats.processed_paths:
        console.print("[yellow]No cards found.[/yellow]")
    console.print(
        f"Inserted: {stats.inserted}, updated: {stats.updated}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}, pruned: {stats.pruned}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(AppConfig().search_limit, help="Maximum number of results"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search cards by keyword, tolerating typos."""
    _setup_logging(verbose)
    store = _open_existing_store(db)
    try:
        results = asyncio.run(CardLibrary(store).search_scored(query, limit))
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Card")
    table.add_column("Title")
    table.add_column("Summary")

    for result in results:
        score = f"~{result.score:.2f}" if result.fuzzy else f"{result.score:g}"
        table.add_row(score, result.card.path, result.card.title, result.card.summary[:120])

    console.print(table)


@app.command()
def recent(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(10, help="Number of cards to display"),
) -> None:
    """List the most recently updated cards."""
    store = _open_existing_store(db)
    try:
        cards = asyncio.run(CardLibrary(store).recent(limit))
    finally:
        store.close()

    if not cards:
        console.print("[yellow]No cards indexed.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Card")
    table.add_column("Title")
    for card in cards:
        table.add_row(card.path, card.title)
    console.print(table)


@app.command()
def show(
    path: str = typer.Argument(..., help="Card path, e.g. /guide/intro.md"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Print one stored card."""
    store = _open_existing_store(db)
    try:
        card = asyncio.run(CardLibrary(store).get(path))
    finally:
        store.close()

    if card is None:
        console.print(f"[yellow]Card not found: {path}[/yellow]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{card.title}[/bold] ({card.path})")
    if card.summary:
        console.print(card.summary)
    console.print(f"hash: {card.hash}")


@app.command()
def remove(
    path: str = typer.Argument(..., help="Card path to remove"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Remove a card and its index entries."""
    store = _open_existing_store(db)
    try:
        removed = asyncio.run(CardLibrary(store).remove_card(path))
    finally:
        store.close()

    if removed:
        console.print(f"Removed {path}.")
    else:
        console.print(f"[yellow]Card not found: {path}[/yellow]")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Start the JSON web API."""
    import uvicorn

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, searches might fail.[/yellow]")
    web_app.state.db_path = resolved_db

    console.print(f"Starting web API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
