"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CONCURRENCY = 6
DEFAULT_SEARCH_LIMIT = 100
DEFAULT_RECENT_LIMIT = 100


def _get_default_db_path() -> Path:
    """Get the default database path based on the execution context."""
    # When running from a checkout, prefer local data/ if it exists
    local_db = Path("data/reel.db")
    if local_db.exists():
        return local_db

    return Path.home() / ".local" / "share" / "reel" / "reel.db"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    search_limit: int = DEFAULT_SEARCH_LIMIT
    recent_limit: int = DEFAULT_RECENT_LIMIT
    include: tuple[str, ...] = (".md", ".html")
    exclude: frozenset[str] = field(
        default_factory=lambda: frozenset({"node_modules", ".git", "out", "__pycache__"})
    )

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
