"""SQLite-backed card store and inverted search index."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List

from reel.errors import StorageError
from reel.models import Card, IndexEntry

SCHEMA_VERSION = "2"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cards (
    path       TEXT PRIMARY KEY,
    title      TEXT NOT NULL DEFAULT '',
    summary    TEXT NOT NULL DEFAULT '',
    body       TEXT NOT NULL DEFAULT '',
    hash       TEXT NOT NULL DEFAULT '',
    updated_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_cards_updated_at ON cards(updated_at);

-- The primary key doubles as the by-word index.
CREATE TABLE IF NOT EXISTS search_index (
    word  TEXT NOT NULL,
    path  TEXT NOT NULL,
    score REAL NOT NULL CHECK (score >= 0),
    PRIMARY KEY (word, path)
) WITHOUT ROWID;

CREATE INDEX IF NOT EXISTS idx_search_index_path ON search_index(path);

CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT
);
"""


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise StorageError(str(exc)) from exc


def _row_to_card(row: sqlite3.Row) -> Card:
    return Card(
        path=row["path"],
        title=row["title"],
        summary=row["summary"],
        body=row["body"],
        hash=row["hash"],
        updated_at=row["updated_at"],
    )


class SQLiteCardStore:
    """Persistence layer for cards and their index entries.

    Each thread gets its own connection. Statements issued outside
    :meth:`transaction` autocommit individually; statements issued inside it
    commit or roll back together.
    """

    def __init__(self, db_path: Path, *, busy_timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._get_connection()

    def _get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            with _translate_errors():
                conn = sqlite3.connect(
                    self.db_path,
                    timeout=self.busy_timeout,
                    isolation_level=None,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
            self._local.conn = conn
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    def close(self) -> None:
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one atomic write transaction.

        The write lock is taken up front so a read-compare-write sequence
        inside the block cannot interleave with another writer. Nested use
        joins the outer transaction.
        """
        conn = self._get_connection()
        if conn.in_transaction:
            yield conn
            return

        with _translate_errors():
            conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        try:
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise StorageError(str(exc)) from exc

    @contextmanager
    def snapshot(self) -> Iterator[sqlite3.Connection]:
        """Read inside one transaction so every statement sees the same commit."""
        conn = self._get_connection()
        if conn.in_transaction:
            yield conn
            return

        with _translate_errors():
            conn.execute("BEGIN")
        try:
            yield conn
        finally:
            conn.rollback()

    def _ensure_schema(self) -> None:
        conn = self._get_connection()
        with _translate_errors():
            conn.executescript(SCHEMA_SQL)
        with self.transaction() as conn:
            with _translate_errors():
                conn.execute(
                    "INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', ?)",
                    (SCHEMA_VERSION,),
                )

    # Card operations

    def get(self, path: str) -> Card | None:
        with _translate_errors():
            row = self._get_connection().execute(
                "SELECT * FROM cards WHERE path = ?", (path,)
            ).fetchone()
        return _row_to_card(row) if row else None

    def put(self, card: Card) -> None:
        with _translate_errors():
            self._get_connection().execute(
                """
                INSERT INTO cards(path, title, summary, body, hash, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    title = excluded.title,
                    summary = excluded.summary,
                    body = excluded.body,
                    hash = excluded.hash,
                    updated_at = excluded.updated_at
                """,
                (card.path, card.title, card.summary, card.body, card.hash, card.updated_at),
            )

    def delete(self, path: str) -> bool:
        with _translate_errors():
            cursor = self._get_connection().execute("DELETE FROM cards WHERE path = ?", (path,))
        return cursor.rowcount > 0

    def iter_cards(self) -> Iterator[Card]:
        """Yield every card in primary key order."""
        with _translate_errors():
            rows = self._get_connection().execute("SELECT * FROM cards ORDER BY path").fetchall()
        for row in rows:
            yield _row_to_card(row)

    def recent_cards(self, limit: int) -> List[Card]:
        """Walk the updated_at index backwards."""
        if limit <= 0:
            return []
        with _translate_errors():
            rows = self._get_connection().execute(
                "SELECT * FROM cards ORDER BY updated_at DESC, path DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_row_to_card(row) for row in rows]

    def list_paths(self) -> List[str]:
        with _translate_errors():
            rows = self._get_connection().execute("SELECT path FROM cards ORDER BY path").fetchall()
        return [row["path"] for row in rows]

    # Index entry operations

    def put_index_entry(self, entry: IndexEntry) -> None:
        self.put_index_entries([entry])

    def put_index_entries(self, entries: Iterable[IndexEntry]) -> None:
        with _translate_errors():
            self._get_connection().executemany(
                "INSERT OR REPLACE INTO search_index(word, path, score) VALUES (?, ?, ?)",
                [(entry.word, entry.path, entry.score) for entry in entries],
            )

    def delete_index_entries_by_path(self, path: str) -> int:
        with _translate_errors():
            cursor = self._get_connection().execute(
                "DELETE FROM search_index WHERE path = ?", (path,)
            )
        return cursor.rowcount

    def get_index_entries_by_word(self, word: str) -> List[IndexEntry]:
        with _translate_errors():
            rows = self._get_connection().execute(
                "SELECT word, path, score FROM search_index WHERE word = ? ORDER BY path",
                (word,),
            ).fetchall()
        return [IndexEntry(word=row["word"], path=row["path"], score=row["score"]) for row in rows]

    def index_entries_for_path(self, path: str) -> List[IndexEntry]:
        with _translate_errors():
            rows = self._get_connection().execute(
                "SELECT word, path, score FROM search_index WHERE path = ? ORDER BY word",
                (path,),
            ).fetchall()
        return [IndexEntry(word=row["word"], path=row["path"], score=row["score"]) for row in rows]

    def stats(self) -> dict[str, int]:
        with self.snapshot() as conn, _translate_errors():
            card_count = conn.execute("SELECT COUNT(*) FROM cards").fetchone()[0]
            entry_count = conn.execute("SELECT COUNT(*) FROM search_index").fetchone()[0]
            word_count = conn.execute(
                "SELECT COUNT(DISTINCT word) FROM search_index"
            ).fetchone()[0]
        return {"card_count": card_count, "entry_count": entry_count, "word_count": word_count}
