"""Tests for notesearch.infrastructure.planner: snapshot diffing."""

from __future__ import annotations

from datetime import datetime, timezone

from notesearch.infrastructure.planner import ReindexPlan, plan_reindex
from notesearch.infrastructure.snapshot import FileRecord


def _t(second: int) -> datetime:
    return datetime(2024, 5, 1, 8, 0, second, tzinfo=timezone.utc)


def _rec(path: str, second: int) -> FileRecord:
    return FileRecord(path=path, mod_time=_t(second))


def _paths(records: list[FileRecord]) -> list[str]:
    return sorted(r.path for r in records)


class TestPlanReindex:
    def test_mixed_changes(self) -> None:
        """a deleted, b modified, c created; d unchanged is left alone."""
        old = [_rec("a", 1), _rec("b", 1), _rec("d", 1)]
        current = [_rec("b", 2), _rec("c", 3), _rec("d", 1)]

        plan = plan_reindex(old, current)

        assert _paths(plan.deleted) == ["a"]
        assert _paths(plan.modified) == ["b"]
        assert _paths(plan.created) == ["c"]

    def test_modified_carries_current_mod_time(self) -> None:
        plan = plan_reindex([_rec("b", 1)], [_rec("b", 9)])
        assert plan.modified == [_rec("b", 9)]

    def test_older_mod_time_also_counts_as_modified(self) -> None:
        """Any mod_time difference triggers a reindex, not only newer ones."""
        plan = plan_reindex([_rec("b", 9)], [_rec("b", 1)])
        assert _paths(plan.modified) == ["b"]

    def test_first_run_creates_everything(self) -> None:
        current = [_rec("a", 1), _rec("b", 2)]
        plan = plan_reindex([], current)
        assert _paths(plan.created) == ["a", "b"]
        assert plan.deleted == []
        assert plan.modified == []

    def test_empty_tree_deletes_everything(self) -> None:
        plan = plan_reindex([_rec("a", 1), _rec("b", 2)], [])
        assert _paths(plan.deleted) == ["a", "b"]
        assert plan.to_index == []

    def test_identical_snapshots_give_empty_plan(self) -> None:
        snap = [_rec("a", 1), _rec("b", 2)]
        plan = plan_reindex(snap, list(snap))
        assert plan.is_empty

    def test_plan_against_itself_is_idempotent(self) -> None:
        """Re-planning with the new snapshot as the old one yields nothing."""
        old = [_rec("a", 1), _rec("b", 1)]
        current = [_rec("b", 2), _rec("c", 3)]
        plan_reindex(old, current)
        assert plan_reindex(current, current).is_empty

    def test_categories_are_disjoint(self) -> None:
        old = [_rec(f"n{i}", i % 3) for i in range(30)]
        current = [_rec(f"n{i}", (i % 3) + (i % 2)) for i in range(10, 40)]

        plan = plan_reindex(old, current)

        deleted = set(_paths(plan.deleted))
        modified = set(_paths(plan.modified))
        created = set(_paths(plan.created))
        assert not deleted & modified
        assert not deleted & created
        assert not modified & created
        assert deleted == {f"n{i}" for i in range(10)}
        assert created == {f"n{i}" for i in range(30, 40)}
        assert modified == {f"n{i}" for i in range(10, 30) if i % 2}

    def test_to_index_is_modified_then_created(self) -> None:
        plan = ReindexPlan(modified=[_rec("m", 1)], created=[_rec("c", 1)])
        assert [r.path for r in plan.to_index] == ["m", "c"]
        assert not plan.is_empty
