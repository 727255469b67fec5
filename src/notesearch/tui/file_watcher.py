"""File watcher Worker for the TUI: detects note changes and posts ReindexNeeded.

Uses ``watchfiles`` to monitor the notes root.  The TUI does not reindex on
its own; it flags pending changes in the status bar until the next refresh.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from textual.message import Message
from textual.worker import Worker, WorkerCancelled, get_current_worker
from watchfiles import watch

from notesearch.infrastructure.watcher import DEFAULT_DEBOUNCE_MS, filter_relevant

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from textual.app import App

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Custom messages
# ---------------------------------------------------------------------------


class ReindexNeeded(Message):
    """Posted when notes change on disk and a refresh is recommended."""

    def __init__(self, changed_paths: list[str]) -> None:
        self.changed_paths = changed_paths
        super().__init__()


# ---------------------------------------------------------------------------
# Worker entry-point (run in a thread via Textual Worker)
# ---------------------------------------------------------------------------


def _watch_loop(
    app: App[None],
    root: Path,
    extensions: tuple[str, ...],
    debounce_ms: int,
    stop_event: threading.Event,
) -> None:
    """Blocking watch loop executed inside a Textual Worker thread.

    Posts :class:`ReindexNeeded` to *app* whenever relevant files change.
    Exits cleanly when *stop_event* is set or the worker is cancelled.
    """
    worker = get_current_worker()

    try:
        for batch in watch(
            root,
            debounce=debounce_ms,
            step=100,
            stop_event=stop_event,
        ):
            if worker.is_cancelled or stop_event.is_set():
                return

            changed = filter_relevant(batch, root, extensions)  # type: ignore[arg-type]
            if not changed:
                continue

            logger.info(
                "File watcher detected %d change(s): %s",
                len(changed),
                ", ".join(changed[:5]),
            )
            try:
                app.post_message(ReindexNeeded(changed))
            except RuntimeError:
                logger.debug("File watcher: RuntimeError posting message (interpreter shutdown)")
                return
    except WorkerCancelled:
        return


# ---------------------------------------------------------------------------
# Public API, called from NotesSearchApp
# ---------------------------------------------------------------------------


def start_file_watcher(
    app: App[None],
    root: Path,
    extensions: Iterable[str],
    *,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
) -> Worker[None] | None:
    """Start the file-watcher Worker, or return ``None`` if it cannot run.

    Parameters
    ----------
    app:
        The Textual application instance (used to post messages and run workers).
    root:
        Notes root directory.
    extensions:
        Suffixes of indexed files; other changes are ignored.
    debounce_ms:
        Debounce window in milliseconds.

    Returns
    -------
    The ``Worker`` instance if started, or ``None`` when the root does not
    exist.
    """
    if not root.is_dir():
        logger.warning("Notes root %s missing, file watcher disabled.", root)
        return None

    logger.info("Starting file watcher on %s", root)

    stop_event = threading.Event()
    exts = tuple(extensions)

    def _run() -> None:
        _watch_loop(app, root, exts, debounce_ms, stop_event)

    worker: Worker[None] = app.run_worker(
        _run,
        name="file-watcher",
        group="file-watcher",
        exclusive=True,
        thread=True,
    )
    # Attach stop_event to worker so app can signal clean shutdown
    worker._stop_event = stop_event  # type: ignore[attr-defined]
    return worker
