"""Infrastructure domain: database layer, snapshots, scanning and reindex planning.

Note: ``notesearch.infrastructure.reindex`` and ``notesearch.infrastructure.watcher``
are intentionally NOT re-exported here because they depend on the search
engine, which itself imports the database layer from this package.  Import
them directly::

    from notesearch.infrastructure.reindex import IndexSynchronizer
"""

from notesearch.infrastructure.db import (
    SCHEMA_VERSION,
    create_schema,
    get_meta,
    open_db,
    set_meta,
)
from notesearch.infrastructure.planner import ReindexPlan, plan_reindex
from notesearch.infrastructure.scanner import scan_tree
from notesearch.infrastructure.snapshot import FileRecord, SnapshotStore

__all__ = [
    "SCHEMA_VERSION",
    "FileRecord",
    "ReindexPlan",
    "SnapshotStore",
    "create_schema",
    "get_meta",
    "open_db",
    "plan_reindex",
    "scan_tree",
    "set_meta",
]
