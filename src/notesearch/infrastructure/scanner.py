"""Tree scanner: walk the notes root and collect {path, mod_time} records."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from notesearch.infrastructure.snapshot import FileRecord, mod_time_from_ns

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable entry %s: %s", exc.filename, exc)


def iter_note_paths(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Yield files under *root* whose suffix is one of *extensions*.

    Matching is case-sensitive on the last suffix including the dot
    (``notes.MD`` does not match ``.md``).  Directories that cannot be listed
    are skipped without aborting the walk.
    """
    allowed = frozenset(extensions)
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        for name in filenames:
            if Path(name).suffix in allowed:
                yield Path(dirpath) / name


def stat_record(path: Path) -> FileRecord | None:
    """Build a FileRecord for *path*, or ``None`` if it cannot be stat'ed."""
    try:
        st = path.stat()
    except OSError as exc:
        logger.debug("Dropping %s: stat failed: %s", path, exc)
        return None
    return FileRecord(path=str(path), mod_time=mod_time_from_ns(st.st_mtime_ns))


def scan_tree(root: Path, extensions: Iterable[str]) -> list[FileRecord]:
    """Scan *root* and return the current snapshot, sorted by path.

    Parameters
    ----------
    root:
        Directory to walk recursively.
    extensions:
        Allowed file suffixes, e.g. ``[".md", ".txt"]``.

    Returns
    -------
    list[FileRecord]
        One record per matching file that could be stat'ed.
    """
    records: list[FileRecord] = []
    for path in iter_note_paths(root, extensions):
        record = stat_record(path)
        if record is not None:
            records.append(record)
    records.sort(key=lambda r: r.path)
    logger.debug("Scanned %s: %d file(s)", root, len(records))
    return records
