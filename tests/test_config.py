"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from reel.config import AppConfig, _get_default_db_path


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        """Should create config with default values."""
        config = AppConfig()

        assert config.db_path == _get_default_db_path()
        assert config.concurrency == 6
        assert config.search_limit == 100
        assert config.recent_limit == 100
        assert config.include == (".md", ".html")
        assert "node_modules" in config.exclude

    def test_custom_config(self) -> None:
        """Should accept custom values."""
        config = AppConfig(db_path=Path("/custom/path.db"), concurrency=2, search_limit=10)

        assert config.db_path == Path("/custom/path.db")
        assert config.concurrency == 2
        assert config.search_limit == 10

    def test_invalid_concurrency(self) -> None:
        """Should reject a concurrency below one."""
        with pytest.raises(ValueError):
            AppConfig(concurrency=0)

    def test_resolve_db_path_absolute(self) -> None:
        """Absolute paths are returned unchanged."""
        config = AppConfig(db_path=Path("/absolute/path/db.db"))

        assert config.resolve_db_path() == Path("/absolute/path/db.db")

    def test_resolve_db_path_relative_no_base(self) -> None:
        config = AppConfig(db_path=Path("relative/db.db"))

        assert config.resolve_db_path(base_dir=None) == Path("relative/db.db")

    def test_resolve_db_path_relative_with_base(self) -> None:
        """Relative paths are resolved against the base directory."""
        config = AppConfig(db_path=Path("relative/db.db"))

        resolved = config.resolve_db_path(base_dir=Path("/base/directory"))

        assert resolved == Path("/base/directory/relative/db.db")


class TestDefaultDbPath:
    """Test _get_default_db_path."""

    def test_prefers_local_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should use data/reel.db when the data directory exists."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "reel.db").touch()

        assert _get_default_db_path() == Path("data/reel.db")

    def test_falls_back_to_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the user data directory."""
        monkeypatch.chdir(tmp_path)

        assert _get_default_db_path() == Path.home() / ".local" / "share" / "reel" / "reel.db"
