"""Search engine: SQLite FTS5 index with open/close/index/delete/search."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from notesearch.infrastructure.db import SCHEMA_VERSION, create_schema, get_meta, open_db, set_meta
from notesearch.infrastructure.snapshot import format_mod_time

if TYPE_CHECKING:
    from types import TracebackType

    from notesearch.search.query import SearchRequest

logger = logging.getLogger(__name__)

# Fragment shown for hits that carry no highlighted text.
NO_FRAGMENT = "..."

# Highlight markers wrapped around matched terms in fragments.
MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"


@dataclass(frozen=True)
class IndexedDocument:
    """A note as submitted to the index, keyed by path."""

    path: str
    body: str
    mod_time: datetime


@dataclass(frozen=True)
class DocumentMatch:
    """A single search hit: the note path and a (highlighted) fragment."""

    path: str
    content: str


@dataclass
class SearchResult:
    """Ranked hits for one query, or the error that prevented them."""

    hits: list[DocumentMatch] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SearchEngine:
    """Handle on the on-disk FTS5 index.

    All statements go through one connection guarded by a lock, so
    document-level ``index`` / ``delete`` calls and searches may come from
    any number of threads.  ``open`` and ``close`` are idempotent; every other
    operation requires an open handle and raises ``RuntimeError`` otherwise.
    """

    def __init__(self, index_path: Path) -> None:
        self.index_path = index_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def __enter__(self) -> SearchEngine:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """Open the index, creating it when absent.

        An index file SQLite cannot read is discarded and re-created; a
        failure on the fresh file propagates to the caller.
        """
        with self._lock:
            if self._conn is not None:
                return
            self.index_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = self._connect()
            except sqlite3.DatabaseError as exc:
                logger.warning("Index %s unreadable (%s); re-creating", self.index_path, exc)
                self._remove_index_files()
                conn = self._connect()
            self._conn = conn
            logger.debug("Opened index %s", self.index_path)

    def _connect(self) -> sqlite3.Connection:
        conn = open_db(self.index_path)
        try:
            create_schema(conn)
            set_meta(conn, "schema_version", SCHEMA_VERSION)
        except sqlite3.DatabaseError:
            conn.close()
            raise
        return conn

    def _remove_index_files(self) -> None:
        for suffix in ("", "-wal", "-shm"):
            Path(f"{self.index_path}{suffix}").unlink(missing_ok=True)

    def close(self) -> None:
        """Close the index.  Committed documents stay on disk."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            logger.debug("Closed index %s", self.index_path)

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            msg = f"Search index is closed: {self.index_path}"
            raise RuntimeError(msg)
        return self._conn

    def index(self, document: IndexedDocument) -> None:
        """Add *document*, replacing any previous version with the same path."""
        with self._lock:
            conn = self._require_conn()
            conn.execute(
                "INSERT INTO documents (path, body, mod_time) VALUES (?, ?, ?) "
                "ON CONFLICT(path) DO UPDATE SET body = excluded.body, "
                "mod_time = excluded.mod_time",
                (document.path, document.body, format_mod_time(document.mod_time)),
            )
            conn.commit()

    def delete(self, path: str) -> None:
        """Remove the document for *path*.  Unknown paths are a no-op."""
        with self._lock:
            conn = self._require_conn()
            conn.execute("DELETE FROM documents WHERE path = ?", (path,))
            conn.commit()

    def clear(self) -> None:
        """Remove every document from the index."""
        with self._lock:
            conn = self._require_conn()
            conn.execute("DELETE FROM documents")
            conn.commit()

    def count(self) -> int:
        """Return the number of indexed documents."""
        with self._lock:
            conn = self._require_conn()
            row = conn.execute("SELECT count(*) FROM documents").fetchone()
            return int(row[0])

    def contains(self, path: str) -> bool:
        with self._lock:
            conn = self._require_conn()
            row = conn.execute("SELECT 1 FROM documents WHERE path = ?", (path,)).fetchone()
            return row is not None

    def get_meta(self, key: str) -> str | None:
        with self._lock:
            return get_meta(self._require_conn(), key)

    def mark_synced(self) -> None:
        """Record the time of the last completed synchronization pass."""
        now = datetime.now(tz=timezone.utc).isoformat()
        with self._lock:
            set_meta(self._require_conn(), "last_sync_at", now)

    def search(self, request: SearchRequest) -> list[DocumentMatch]:
        """Run *request* against the index.

        A request without a match expression returns every document, newest
        first.  Otherwise hits are ordered by FTS5 rank (bm25).

        Raises ``sqlite3.Error`` when FTS5 rejects the expression.
        """
        with self._lock:
            conn = self._require_conn()
            if request.match is None:
                rows = conn.execute(
                    "SELECT path, NULL AS fragment FROM documents "
                    "ORDER BY mod_time DESC, path "
                    "LIMIT ?",
                    (request.size,),
                ).fetchall()
            elif request.highlight:
                rows = conn.execute(
                    "SELECT d.path, "
                    "snippet(documents_fts, 1, ?, ?, '...', 32) AS fragment "
                    "FROM documents_fts JOIN documents d ON d.id = documents_fts.rowid "
                    "WHERE documents_fts MATCH ? "
                    "ORDER BY rank "
                    "LIMIT ?",
                    (MARK_OPEN, MARK_CLOSE, request.match, request.size),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT d.path, NULL AS fragment "
                    "FROM documents_fts JOIN documents d ON d.id = documents_fts.rowid "
                    "WHERE documents_fts MATCH ? "
                    "ORDER BY rank "
                    "LIMIT ?",
                    (request.match, request.size),
                ).fetchall()

        return [
            DocumentMatch(path=str(r["path"]), content=r["fragment"] or NO_FRAGMENT)
            for r in rows
        ]
