"""notesearch TUI -- search-as-you-type over the notes index."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notesearch.config import Config
    from notesearch.infrastructure.reindex import IndexSynchronizer

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_file_logging(config: Config, level: int = logging.DEBUG) -> logging.Handler:
    """Send log records to ``debug.log``; the terminal belongs to the UI."""
    config.log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def launch(
    config: Config,
    *,
    synchronizer: IndexSynchronizer | None = None,
    no_watch: bool = False,
) -> None:
    """Launch the notesearch TUI application.

    Parameters
    ----------
    config:
        Loaded application configuration.
    synchronizer:
        Synchronizer whose index the caller already opened; built from
        *config* when omitted.
    no_watch:
        If True, disable the file watcher (useful for CI/testing).
    """
    from notesearch.tui.app import NotesSearchApp

    configure_file_logging(config)
    app = NotesSearchApp(config, synchronizer=synchronizer, no_watch=no_watch)
    app.run()
