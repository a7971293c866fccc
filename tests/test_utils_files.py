"""Tests for file utilities."""

from __future__ import annotations

import hashlib
from pathlib import Path

from reel.utils.files import card_path_for, compute_sha256, iter_card_paths


class TestIterCardPaths:
    """Test iter_card_paths."""

    def test_finds_markdown_and_html(self, tmp_path: Path) -> None:
        """Test that markdown and HTML files are found."""
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "b.HTML").write_text("b")
        (tmp_path / "c.txt").write_text("c")

        names = [path.name for path in iter_card_paths(tmp_path)]

        assert names == ["a.md", "b.HTML"]

    def test_descends_into_subdirectories(self, tmp_path: Path) -> None:
        """Test recursive discovery."""
        nested = tmp_path / "docs" / "guide"
        nested.mkdir(parents=True)
        (nested / "intro.md").write_text("x")

        assert list(iter_card_paths(tmp_path)) == [nested / "intro.md"]

    def test_excluded_directories_skipped(self, tmp_path: Path) -> None:
        """Test that excluded directories are skipped."""
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "notes.md").write_text("x")
        (tmp_path / "keep.md").write_text("x")

        paths = list(iter_card_paths(tmp_path, exclude={".git"}))

        assert paths == [tmp_path / "keep.md"]

    def test_custom_suffixes(self, tmp_path: Path) -> None:
        """Test custom suffix filtering."""
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "b.rst").write_text("b")

        assert [p.name for p in iter_card_paths(tmp_path, suffixes=[".rst"])] == ["b.rst"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list(iter_card_paths(tmp_path)) == []


class TestCardPathFor:
    """Test card_path_for."""

    def test_posix_key_with_leading_slash(self, tmp_path: Path) -> None:
        """Test the path key format."""
        assert card_path_for(tmp_path, tmp_path / "guide" / "intro.md") == "/guide/intro.md"


class TestComputeSha256:
    """Test compute_sha256."""

    def test_matches_hashlib(self) -> None:
        """Test against hashlib."""
        assert compute_sha256("hello") == hashlib.sha256(b"hello").hexdigest()

    def test_unicode(self) -> None:
        assert compute_sha256("café") == hashlib.sha256("café".encode("utf-8")).hexdigest()
