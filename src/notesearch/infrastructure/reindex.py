"""Index synchronizer: bring the search index in line with the notes on disk."""

from __future__ import annotations

import logging
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from notesearch.infrastructure.planner import ReindexPlan, plan_reindex
from notesearch.infrastructure.scanner import scan_tree
from notesearch.infrastructure.snapshot import FileRecord, SnapshotStore
from notesearch.search.engine import IndexedDocument, SearchEngine

if TYPE_CHECKING:
    from collections.abc import Iterable
    from concurrent.futures import Future

    from notesearch.config import Config

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

# Failures confined to a single document; the pass carries on without it.
_ITEM_ERRORS = (OSError, sqlite3.Error, RuntimeError)

# Failures that end a whole pass: closed index, engine error, snapshot write.
SYNC_ERRORS = (OSError, RuntimeError, sqlite3.Error)


@dataclass
class SyncResult:
    """Summary of a synchronization pass."""

    scanned: int = 0
    deleted: int = 0
    indexed: int = 0
    skipped: list[str] = field(default_factory=list)
    nothing_changed: bool = False
    full: bool = False


def read_document(record: FileRecord) -> IndexedDocument:
    """Read the note behind *record* from disk.

    Raises ``OSError`` when the file vanished or is unreadable.
    """
    body = Path(record.path).read_text(encoding="utf-8", errors="replace")
    return IndexedDocument(path=record.path, body=body, mod_time=record.mod_time)


def _settled_snapshot(
    old: Iterable[FileRecord],
    current: Iterable[FileRecord],
    skipped: Iterable[str],
) -> list[FileRecord]:
    """Snapshot to persist once the pass has settled.

    Paths whose operation failed keep their previous record (or none), so the
    next pass plans them again instead of treating them as up to date.
    """
    old_by_path = {r.path: r for r in old}
    failed = set(skipped)
    records: list[FileRecord] = []
    current_paths: set[str] = set()

    for record in current:
        current_paths.add(record.path)
        if record.path not in failed:
            records.append(record)
        elif record.path in old_by_path:
            records.append(old_by_path[record.path])

    # A failed delete leaves the document in the index; keep its record too.
    for path in failed - current_paths:
        if path in old_by_path:
            records.append(old_by_path[path])

    return records


class IndexSynchronizer:
    """Scan the notes root, diff against the stored snapshot, update the index.

    Deletions and (re)indexing of distinct paths are independent, so one pass
    fans them out over a fixed-size thread pool and waits for all of them
    before the new snapshot is written.  The snapshot is written exactly once
    per pass.
    """

    def __init__(
        self,
        engine: SearchEngine,
        store: SnapshotStore,
        root: Path,
        extensions: Iterable[str],
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.engine = engine
        self.store = store
        self.root = root
        self.extensions = tuple(extensions)
        self.max_workers = max_workers
        self._sync_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config) -> IndexSynchronizer:
        return cls(
            SearchEngine(config.index_path),
            SnapshotStore(config.snapshot_path),
            config.root_path,
            config.extensions,
            max_workers=config.max_workers,
        )

    # -- index handle lifecycle ------------------------------------------

    def open_index(self) -> None:
        """Acquire the index handle (no-op when already open)."""
        self.engine.open()

    def close_index(self) -> None:
        """Release the index handle (no-op when already closed)."""
        self.engine.close()

    @property
    def is_open(self) -> bool:
        return self.engine.is_open

    @property
    def is_syncing(self) -> bool:
        return self._sync_lock.locked()

    def _require_open(self) -> None:
        if not self.engine.is_open:
            msg = "Cannot synchronize: the search index is closed"
            raise RuntimeError(msg)

    # -- pass ------------------------------------------------------------

    def scan(self) -> list[FileRecord]:
        return scan_tree(self.root, self.extensions)

    def _delete(self, record: FileRecord) -> None:
        self.engine.delete(record.path)

    def _index(self, record: FileRecord) -> None:
        self.engine.index(read_document(record))

    def apply(self, plan: ReindexPlan) -> SyncResult:
        """Apply *plan* to the index and wait for every operation to finish.

        Per-document failures are logged and listed in ``SyncResult.skipped``;
        they never abort the pass.
        """
        self._require_open()
        result = SyncResult()

        with ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="notesearch-sync",
        ) as pool:
            deletes: dict[Future[None], FileRecord] = {
                pool.submit(self._delete, r): r for r in plan.deleted
            }
            writes: dict[Future[None], FileRecord] = {
                pool.submit(self._index, r): r for r in plan.to_index
            }
            wait([*deletes, *writes])

        for futures, action in ((deletes, "delete"), (writes, "index")):
            for future, record in futures.items():
                exc = future.exception()
                if exc is None:
                    if action == "delete":
                        result.deleted += 1
                    else:
                        result.indexed += 1
                elif isinstance(exc, _ITEM_ERRORS):
                    logger.warning("Skipping %s of %s: %s", action, record.path, exc)
                    result.skipped.append(record.path)
                else:
                    raise exc

        result.skipped.sort()
        return result

    def sync(self, *, full: bool = False) -> SyncResult:
        """Run one synchronization pass.

        Parameters
        ----------
        full:
            Ignore the stored snapshot and rebuild the index from scratch.

        Returns
        -------
        SyncResult
            Counts for the pass.  Raises ``RuntimeError`` when the index is
            closed.
        """
        with self._sync_lock:
            self._require_open()

            current = self.scan()
            old: list[FileRecord] = [] if full else self.store.load()
            if not full and not old and self.engine.count():
                logger.warning("No usable snapshot for a non-empty index; rebuilding")
                full = True
            if full:
                self.engine.clear()

            plan = plan_reindex(old, current)
            logger.info(
                "Reindex plan: %d deleted, %d modified, %d created",
                len(plan.deleted),
                len(plan.modified),
                len(plan.created),
            )

            result = self.apply(plan)
            result.scanned = len(current)
            result.full = full
            result.nothing_changed = plan.is_empty

            self.store.store(_settled_snapshot(old, current, result.skipped))
            self.engine.mark_synced()

        logger.info(
            "Sync complete: %d indexed, %d deleted, %d skipped",
            result.indexed,
            result.deleted,
            len(result.skipped),
        )
        return result
