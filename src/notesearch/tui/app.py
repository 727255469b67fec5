"""Main Textual application: search-as-you-type over the notes index."""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, ClassVar

from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Footer, Input

from notesearch.infrastructure.reindex import SYNC_ERRORS, IndexSynchronizer, SyncResult
from notesearch.search.query import run_query
from notesearch.tui.editor import index_released, run_editor
from notesearch.tui.file_watcher import ReindexNeeded, start_file_watcher
from notesearch.tui.query_serializer import QueryResult, QuerySerializer
from notesearch.tui.widgets.help_overlay import HelpOverlay
from notesearch.tui.widgets.preview import SCROLL_STEP, NotePreview
from notesearch.tui.widgets.result_list import ResultList
from notesearch.tui.widgets.status_bar import StatusBarWidget

if TYPE_CHECKING:
    from concurrent.futures import Future

    from textual.worker import Worker

    from notesearch.config import Config
    from notesearch.search.engine import SearchResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Custom messages (posted from worker threads)
# ---------------------------------------------------------------------------


class SearchResultReady(Message):
    """A query finished; it may or may not still be the latest one."""

    def __init__(self, outcome: QueryResult) -> None:
        self.outcome = outcome
        super().__init__()


class SyncFinished(Message):
    """A synchronization pass ended, successfully or with *error*."""

    def __init__(self, result: SyncResult | None, error: str | None = None) -> None:
        self.result = result
        self.error = error
        super().__init__()


def describe_sync(result: SyncResult) -> str:
    """One-line summary of a pass for the status bar."""
    if result.nothing_changed:
        return f"Index up to date ({result.scanned} notes)"
    text = f"Indexed {result.indexed}, deleted {result.deleted}"
    if result.skipped:
        text += f", skipped {len(result.skipped)}"
    return text


class NotesSearchApp(App[None]):
    """Interactive note search: query box, ranked hits, preview, editor."""

    TITLE = "notesearch"
    CSS_PATH = "styles/app.tcss"

    BINDINGS: ClassVar[list[Binding | tuple[str, str] | tuple[str, str, str]]] = [
        Binding("tab", "move_selection(1)", "Next", priority=True),
        Binding("shift+tab", "move_selection(-1)", "Previous", priority=True, show=False),
        Binding("escape", "close_preview", "Close preview", key_display="Esc"),
        Binding("ctrl+k", "scroll_preview(-1)", "Scroll up", show=False, priority=True),
        Binding("ctrl+j", "scroll_preview(1)", "Scroll down", show=False, priority=True),
        Binding("ctrl+o", "open_editor", "Edit", priority=True),
        Binding("ctrl+r", "reindex", "Refresh", priority=True),
        Binding("f1", "help", "Help"),
        Binding("ctrl+c", "quit", "Quit", priority=True),
    ]

    def __init__(
        self,
        config: Config,
        *,
        synchronizer: IndexSynchronizer | None = None,
        no_watch: bool = False,
    ) -> None:
        super().__init__()
        self.config = config
        self.synchronizer = synchronizer or IndexSynchronizer.from_config(config)
        self.no_watch = no_watch
        self.serializer = QuerySerializer(self._search)
        self._sync_pending = False
        self._file_watcher_worker: Worker[None] | None = None

    # -- layout ----------------------------------------------------------

    def compose(self) -> ComposeResult:
        """Compose the application layout.

        Widget references are kept on the app: ``query_one`` only searches
        the active screen, and results keep arriving while the help overlay
        is shown.
        """
        self.query_input = Input(placeholder="query", id="query-input")
        self.results = ResultList(widget_id="results")
        self.preview = NotePreview(widget_id="preview")
        self.status_bar = StatusBarWidget(widget_id="status-bar")

        with Vertical(id="main"):
            yield self.query_input
            with Horizontal(id="body"):
                yield self.results
                yield self.preview
        yield self.status_bar
        yield Footer()

    def on_mount(self) -> None:
        """Open the index, start the first sync, run the empty query, start watcher."""
        self.query_input.border_title = "Search"
        self.query_input.focus()
        try:
            self.synchronizer.open_index()
        except (OSError, sqlite3.Error) as exc:
            logger.exception("Cannot open search index")
            self.status_bar.set_last_action(f"Index unavailable: {exc}")
        else:
            self._refresh_doc_count()
            self._start_sync()

        self._issue_query(self.query_input.value)

        if not self.no_watch:
            self._start_file_watcher()

    def _start_file_watcher(self) -> None:
        worker = start_file_watcher(self, self.config.root_path, self.config.extensions)
        self._file_watcher_worker = worker
        self.status_bar.set_watcher_active(worker is not None)

    def on_unmount(self) -> None:
        """Stop the watcher and query pool, release the index."""
        if self._file_watcher_worker is not None:
            stop_event = getattr(self._file_watcher_worker, "_stop_event", None)
            if stop_event is not None:
                stop_event.set()
            self._file_watcher_worker.cancel()
            self._file_watcher_worker = None
        self.serializer.shutdown()
        self.synchronizer.close_index()

    # -- queries ---------------------------------------------------------

    def _search(self, text: str) -> SearchResult:
        return run_query(self.synchronizer.engine, text)

    def _issue_query(self, text: str) -> int:
        query_id, future = self.serializer.issue(text)
        future.add_done_callback(self._post_outcome)
        return query_id

    def _post_outcome(self, future: Future[QueryResult]) -> None:
        """Done-callback (query thread): hand the outcome to the UI thread."""
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Query crashed: %s", exc)
            return
        self.post_message(SearchResultReady(future.result()))

    def on_input_changed(self, event: Input.Changed) -> None:
        self._issue_query(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.action_open_preview()

    def on_search_result_ready(self, message: SearchResultReady) -> None:
        """Apply a finished query only if it is still the latest one."""
        outcome = message.outcome
        if not self.serializer.on_result(outcome.query_id, outcome.result):
            return
        result = outcome.result
        self.query_input.set_class(result.failed, "-error")
        if result.failed:
            self.status_bar.set_last_action(f"Search failed: {result.error}")
        self.results.set_hits(result.hits, root=str(self.config.root_path))
        self.status_bar.set_hit_count(len(result.hits))

    # -- synchronization -------------------------------------------------

    def _start_sync(self, *, full: bool = False) -> bool:
        """Start a background pass unless one is already running."""
        if self._sync_pending or self.synchronizer.is_syncing:
            self.notify("Reindex already running", severity="warning")
            return False
        self._sync_pending = True
        self.status_bar.set_syncing(True)

        def _run() -> None:
            try:
                result = self.synchronizer.sync(full=full)
            except SYNC_ERRORS as exc:
                logger.exception("Reindex failed")
                self.post_message(SyncFinished(None, str(exc)))
            else:
                self.post_message(SyncFinished(result))

        self.run_worker(_run, name="reindex", group="reindex", thread=True)
        return True

    def on_sync_finished(self, message: SyncFinished) -> None:
        """Update counters and re-run the current query against the new index."""
        self._sync_pending = False
        self.status_bar.set_syncing(False)
        if message.result is None:
            self.status_bar.set_last_action(f"Reindex failed: {message.error}")
            self.notify(f"Reindex failed: {message.error}", severity="error")
            return
        self.status_bar.clear_changes()
        self.status_bar.set_last_action(describe_sync(message.result))
        self._refresh_doc_count()
        self._issue_query(self.query_input.value)

    def _refresh_doc_count(self) -> None:
        try:
            count = self.synchronizer.engine.count()
        except (RuntimeError, sqlite3.Error):
            logger.debug("Document count unavailable", exc_info=True)
            return
        self.status_bar.set_doc_count(count)

    def on_reindex_needed(self, message: ReindexNeeded) -> None:
        """Handle file-change notification from the watcher."""
        count = len(message.changed_paths)
        logger.info("Reindex needed: %d file(s) changed", count)
        self.status_bar.set_changes_detected(count)

    # -- actions ---------------------------------------------------------

    def action_move_selection(self, delta: int) -> None:
        self.results.move(delta)
        if self.preview.is_open and self.results.selected_path is not None:
            self.preview.show_note(self.results.selected_path)

    def action_open_preview(self) -> None:
        path = self.results.selected_path
        if path is not None:
            self.preview.show_note(path)

    def action_close_preview(self) -> None:
        self.preview.close()

    def action_scroll_preview(self, direction: int) -> None:
        if self.preview.is_open:
            self.preview.scroll_lines(direction * SCROLL_STEP)

    def action_reindex(self) -> None:
        """Run an incremental pass in the background."""
        if self._start_sync():
            self.status_bar.set_last_action("Reindexing...")

    def action_open_editor(self) -> None:
        """Open the selected note in the configured editor.

        The index handle is released while the editor runs so other tools
        can use it, and reacquired afterwards.  Refused while a pass runs.
        """
        path = self.results.selected_path or self.preview.path
        if path is None:
            return
        if self._sync_pending or self.synchronizer.is_syncing:
            self.notify("Reindex in progress, try again when it finishes", severity="warning")
            return

        try:
            with self.suspend(), index_released(self.synchronizer):
                code = run_editor(self.config.editor, path)
        except SuspendNotSupported:
            self.notify("Cannot suspend this terminal to run the editor", severity="error")
            return
        except (OSError, ValueError) as exc:
            logger.warning("Editor failed: %s", exc)
            self.notify(f"Editor failed: {exc}", severity="error")
            return

        if code != 0:
            self.status_bar.set_last_action(f"Editor exited with {code}")
        if self.preview.is_open:
            self.preview.show_note(path)
        self._issue_query(self.query_input.value)

    def action_help(self) -> None:
        """Show help overlay with all keyboard bindings."""
        self.push_screen(HelpOverlay())
