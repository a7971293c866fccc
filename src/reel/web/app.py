"""FastAPI application exposing the card library as a JSON API."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from reel.config import AppConfig
from reel.errors import StorageError
from reel.index.storage import SQLiteCardStore
from reel.ingestion.fetcher import ThrottledFetcher
from reel.ingestion.sources import FileContentSource
from reel.library import CardLibrary
from reel.models import Card

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Reel", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.db_path = None


class SearchPayload(BaseModel):
    query: str
    db: Path | None = None
    limit: int = 100


class DeleteCardRequest(BaseModel):
    path: str
    db: Path | None = None


class PrunePayload(BaseModel):
    paths: List[str]
    db: Path | None = None


class IndexPayload(BaseModel):
    root: str
    db: str | None = None
    concurrency: int | None = None


def _resolve_db_path(db: Path | None) -> Path:
    if db is None and app.state.db_path is not None:
        return Path(app.state.db_path)
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _open_store(db: Path | None) -> SQLiteCardStore:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Database not found at {resolved_db}. Index some cards first.",
        )
    return SQLiteCardStore(resolved_db)


def _card_payload(card: Card, *, include_body: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "path": card.path,
        "title": card.title,
        "summary": card.summary,
        "hash": card.hash,
        "updated_at": card.updated_at,
    }
    if include_body:
        payload["body"] = card.body
    return payload


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/search")
async def search_cards(payload: SearchPayload) -> dict[str, Any]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    limit = max(1, min(payload.limit, 100))
    store = _open_store(payload.db)
    try:
        results = await CardLibrary(store).search_scored(query, limit)
    except StorageError as exc:
        LOGGER.exception("Search failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    finally:
        store.close()

    return {
        "results": [
            {**_card_payload(result.card), "score": result.score, "fuzzy": result.fuzzy}
            for result in results
        ]
    }


@app.get("/recent")
async def recent_cards(limit: int = 100, db: Path | None = None) -> dict[str, Any]:
    store = _open_store(db)
    try:
        cards = await CardLibrary(store).recent(max(0, limit))
    finally:
        store.close()
    return {"cards": [_card_payload(card) for card in cards]}


@app.get("/cards")
async def get_card(path: str, db: Path | None = None) -> dict[str, Any]:
    store = _open_store(db)
    try:
        card = await CardLibrary(store).get(path)
    finally:
        store.close()

    if card is None:
        raise HTTPException(status_code=404, detail=f"Card not found: {path}")
    return {"card": _card_payload(card, include_body=True)}


@app.post("/cards/delete")
async def delete_card(payload: DeleteCardRequest) -> dict[str, Any]:
    store = _open_store(payload.db)
    try:
        removed = await CardLibrary(store).remove_card(payload.path)
    finally:
        store.close()

    if not removed:
        raise HTTPException(status_code=404, detail=f"Card not found: {payload.path}")
    return {"status": "ok"}


@app.post("/prune")
async def prune_cards(payload: PrunePayload) -> dict[str, Any]:
    store = _open_store(payload.db)
    try:
        pruned = await CardLibrary(store).prune_cards(payload.paths)
    finally:
        store.close()
    return {"status": "ok", "pruned": pruned}


@app.post("/index")
async def index_cards(payload: IndexPayload) -> dict[str, Any]:
    clean_root = payload.root.strip().replace("\r", "").replace("\n", "")
    if not clean_root:
        raise HTTPException(status_code=400, detail="No root provided")
    if "\0" in clean_root:
        raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

    # Only directories below the user's home may be indexed; compare canonical paths
    # so symlinks cannot escape it.
    safe_base_dir = os.path.realpath(str(Path.home()))
    real_root = os.path.realpath(os.path.expanduser(clean_root))
    if not (real_root + os.sep).startswith(safe_base_dir + os.sep):
        raise HTTPException(
            status_code=403,
            detail="Access denied: path is outside allowed directory",
        )

    root = Path(real_root)
    if not root.is_dir():
        raise HTTPException(status_code=400, detail=f"Root must be a directory: {clean_root}")

    config_defaults = AppConfig()
    config = AppConfig(
        db_path=Path(payload.db) if payload.db is not None else config_defaults.db_path,
        concurrency=payload.concurrency or config_defaults.concurrency,
    )
    resolved_db = (
        Path(app.state.db_path)
        if payload.db is None and app.state.db_path is not None
        else config.resolve_db_path(Path.cwd())
    )
    _ensure_db_parent(resolved_db)

    store = SQLiteCardStore(resolved_db)
    try:
        async with ThrottledFetcher(config.concurrency) as fetcher:
            source = FileContentSource(root, fetcher, suffixes=config.include, exclude=config.exclude)
            stats = await CardLibrary(store, source).sync(source.list_cards())
    except StorageError as exc:
        LOGGER.exception("Indexing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    finally:
        store.close()

    return {
        "status": "ok",
        "db": str(resolved_db),
        "stats": {
            "inserted": stats.inserted,
            "updated": stats.updated,
            "skipped": stats.skipped,
            "failed": stats.failed,
            "pruned": stats.pruned,
        },
    }
