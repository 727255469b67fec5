"""File snapshot: the persisted {path, mod_time} set the index was built from."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FileRecord:
    """One indexed file: its path and last modification time."""

    path: str
    mod_time: datetime

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "mod_time": format_mod_time(self.mod_time)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        path = data.get("path")
        mod_time = data.get("mod_time")
        if not isinstance(path, str) or not isinstance(mod_time, str):
            msg = f"Invalid snapshot entry: {data!r}"
            raise ValueError(msg)
        return cls(path=path, mod_time=datetime.fromisoformat(mod_time))


def mod_time_from_ns(mtime_ns: int) -> datetime:
    """Convert ``st_mtime_ns`` to an aware UTC datetime (microsecond precision).

    Integer arithmetic keeps the conversion exact, so a stat of an untouched
    file always yields a value equal to the one stored in the snapshot.
    """
    return _EPOCH + timedelta(microseconds=mtime_ns // 1000)


def format_mod_time(value: datetime) -> str:
    """Serialise a mod_time as fixed-width ISO 8601 (sortable as text)."""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class SnapshotStore:
    """Load and store the snapshot file.

    The file is a JSON list of ``{"path", "mod_time"}`` objects.  A missing
    file is an empty snapshot (first run indexes everything).
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> list[FileRecord]:
        """Read the stored snapshot.

        Returns an empty list when the file is missing.  An unreadable or
        malformed file is logged and also treated as empty.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Cannot read snapshot %s: %s", self.path, exc)
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                msg = "snapshot root must be a list"
                raise ValueError(msg)
            return [FileRecord.from_dict(item) for item in data]
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring malformed snapshot %s: %s", self.path, exc)
            return []

    def store(self, records: Iterable[FileRecord]) -> None:
        """Overwrite the snapshot with *records*.

        Writes to a temporary file in the same directory and renames it over
        the old snapshot, so readers never observe a partial file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        ordered = sorted(records, key=lambda r: r.path)
        payload = json.dumps(
            [r.to_dict() for r in ordered],
            ensure_ascii=False,
            indent=1,
        )
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.path.parent),
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Stored snapshot (%d files) to %s", len(ordered), self.path)
