"""File watcher: synchronize the index whenever notes change."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from notesearch.infrastructure.reindex import SYNC_ERRORS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from notesearch.infrastructure.reindex import IndexSynchronizer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500


def filter_relevant(
    changes: Iterable[tuple[object, str]],
    root: Path,
    extensions: Iterable[str],
) -> list[str]:
    """Keep changed paths under *root* with an indexed extension, minus temp files."""
    allowed = frozenset(extensions)
    result: list[str] = []

    for _change_type, path_str in changes:
        p = Path(path_str)

        # Ignore editor temp files (name starts with ~ or ends with .tmp).
        if p.name.startswith("~") or p.name.endswith(".tmp"):
            continue

        if p.suffix not in allowed:
            continue

        if not p.is_relative_to(root):
            continue

        result.append(path_str)

    return sorted(set(result))


def _format_time() -> str:
    """Return current local time as ``HH:MM:SS`` string."""
    return datetime.now().astimezone().strftime("%H:%M:%S")


@dataclass(frozen=True)
class WatchEvent:
    """One synchronization pass triggered by the watcher."""

    files_changed: int
    indexed: int
    deleted: int


def watch(
    synchronizer: IndexSynchronizer,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    callback: Callable[[WatchEvent], None] | None = None,
) -> None:
    """Watch the notes root and run a synchronization pass on changes.

    The index handle must be open; runs until interrupted with Ctrl+C.
    """
    from rich.console import Console
    from rich.markup import escape
    from watchfiles import watch as fs_watch

    console = Console()
    root = synchronizer.root

    console.print(f"[bold blue]Watching:[/bold blue] {root}")
    console.print(f"[dim]Debounce: {debounce_ms}ms  |  Press Ctrl+C to stop[/dim]")
    console.print()

    try:
        for batch in fs_watch(root, debounce=debounce_ms):
            relevant = filter_relevant(batch, root, synchronizer.extensions)
            if not relevant:
                continue

            timestamp = _format_time()
            try:
                result = synchronizer.sync()
            except SYNC_ERRORS as exc:
                logger.debug("Synchronization pass failed", exc_info=True)
                console.print(f"[dim]{timestamp}[/dim] [red]sync failed[/red] {escape(str(exc))}")
                continue

            console.print(
                f"[dim]{timestamp}[/dim] "
                f"[green]synced[/green] "
                f"({len(relevant)} file{'s' if len(relevant) != 1 else ''} changed, "
                f"{result.indexed} indexed, {result.deleted} deleted)"
            )

            if callback is not None:
                callback(
                    WatchEvent(
                        files_changed=len(relevant),
                        indexed=result.indexed,
                        deleted=result.deleted,
                    )
                )

    except KeyboardInterrupt:
        console.print("\n[yellow]Watch stopped.[/yellow]")
