"""Reindex planner: diff the stored snapshot against the current one."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from notesearch.infrastructure.snapshot import FileRecord


@dataclass
class ReindexPlan:
    """Files to delete from, re-index in, and add to the search index.

    The three lists never share a path.  ``modified`` records carry the
    current mod_time, since that is what gets re-submitted.
    """

    deleted: list[FileRecord] = field(default_factory=list)
    modified: list[FileRecord] = field(default_factory=list)
    created: list[FileRecord] = field(default_factory=list)

    @property
    def to_index(self) -> list[FileRecord]:
        return self.modified + self.created

    @property
    def is_empty(self) -> bool:
        return not (self.deleted or self.modified or self.created)


def plan_reindex(
    old: Iterable[FileRecord],
    current: Iterable[FileRecord],
) -> ReindexPlan:
    """Compare *old* and *current* snapshots. Returns the reindex plan.

    Unchanged means equal mod_time; contents are never compared.
    """
    old_by_path = {r.path: r for r in old}
    current_by_path = {r.path: r for r in current}
    plan = ReindexPlan()

    for path, record in old_by_path.items():
        now = current_by_path.get(path)
        if now is None:
            plan.deleted.append(record)
        elif now.mod_time != record.mod_time:
            plan.modified.append(now)

    for path, record in current_by_path.items():
        if path not in old_by_path:
            plan.created.append(record)

    return plan
