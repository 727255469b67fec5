"""Shared test fixtures for notesearch."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from notesearch.config import Config
from notesearch.infrastructure.reindex import IndexSynchronizer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


def _set_mtime(path: Path, seconds: int) -> None:
    """Pin *path*'s modification time to a whole number of seconds."""
    ns = seconds * 1_000_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture()
def notes_root(tmp_path: Path) -> Path:
    """Create a small notes tree: three markdown notes and one text file."""
    root = tmp_path / "notes"
    (root / "projects").mkdir(parents=True)
    (root / "garden.md").write_text("Tomatoes need staking in June.\n", encoding="utf-8")
    (root / "recipes.md").write_text("Tomato soup with basil.\nServes four.\n", encoding="utf-8")
    (root / "projects" / "roadmap.md").write_text(
        "Roadmap: ship the indexer.\n", encoding="utf-8"
    )
    (root / "todo.txt").write_text("buy tomatoes\n", encoding="utf-8")
    _set_mtime(root / "garden.md", 1_700_000_000)
    _set_mtime(root / "recipes.md", 1_700_000_100)
    _set_mtime(root / "projects" / "roadmap.md", 1_700_000_200)
    return root


@pytest.fixture()
def config(tmp_path: Path, notes_root: Path) -> Config:
    """Config pointing at *notes_root* with cache and logs under *tmp_path*."""
    return Config(
        root_path=notes_root,
        editor="true",
        extensions=(".md",),
        cache_dir=tmp_path / "cache",
        config_dir=tmp_path / "config",
        max_workers=4,
    )


@pytest.fixture()
def synchronizer(config: Config) -> Iterator[IndexSynchronizer]:
    """An IndexSynchronizer with its index open."""
    sync = IndexSynchronizer.from_config(config)
    sync.open_index()
    yield sync
    sync.close_index()


@pytest.fixture()
def config_file(tmp_path: Path, notes_root: Path) -> Path:
    """Write a config.yaml for *notes_root* and return its path."""
    config_dir = tmp_path / "config"
    config_dir.mkdir(exist_ok=True)
    path = config_dir / "config.yaml"
    path.write_text(
        f"root_path: {notes_root}\n"
        "editor: 'true'\n"
        "extensions: [.md]\n"
        f"cache_dir: {tmp_path / 'cache'}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def set_mtime() -> Callable[[Path, int], None]:
    """Return a helper pinning a file's mtime to whole seconds."""
    return _set_mtime
