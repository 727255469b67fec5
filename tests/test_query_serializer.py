"""Tests for notesearch.tui.query_serializer: latest-query-wins ordering."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from notesearch.search.engine import DocumentMatch, SearchResult
from notesearch.tui.query_serializer import QuerySerializer


def _result(tag: str) -> SearchResult:
    return SearchResult(hits=[DocumentMatch(path=f"/{tag}.md", content=tag)])


class _GatedSearch:
    """Search callable whose queries block until released one by one."""

    def __init__(self) -> None:
        self.gates: dict[str, threading.Event] = {}

    def gate(self, text: str) -> threading.Event:
        return self.gates.setdefault(text, threading.Event())

    def __call__(self, text: str) -> SearchResult:
        assert self.gate(text).wait(timeout=5)
        return _result(text)


class TestIds:
    def test_ids_increase_from_one(self) -> None:
        serializer = QuerySerializer(_result)
        try:
            assert serializer.next_id == 0
            ids = [serializer.issue(t)[0] for t in ("a", "ab", "abc")]
            assert ids == [1, 2, 3]
            assert serializer.next_id == 3
        finally:
            serializer.shutdown()

    def test_future_resolves_to_tagged_result(self) -> None:
        serializer = QuerySerializer(_result)
        try:
            query_id, future = serializer.issue("tomato")
            outcome = future.result(timeout=5)
            assert outcome.query_id == query_id
            assert outcome.text == "tomato"
            assert outcome.result.hits[0].path == "/tomato.md"
        finally:
            serializer.shutdown()


class TestOnResult:
    def test_latest_result_is_applied(self) -> None:
        serializer = QuerySerializer(_result)
        serializer.next_id = 1
        assert serializer.on_result(1, _result("a"))
        assert serializer.current_id == 1
        assert serializer.current is not None

    def test_results_arriving_2_1_3(self) -> None:
        """Issue 1, 2, 3; completions 2, 1, 3: only 3 is ever current."""
        serializer = QuerySerializer(_result)
        serializer.next_id = 3

        assert not serializer.on_result(2, _result("b"))
        assert serializer.current is None
        assert not serializer.on_result(1, _result("a"))
        assert serializer.current is None
        assert serializer.on_result(3, _result("c"))
        assert serializer.current_id == 3

    def test_stale_result_does_not_replace_current(self) -> None:
        serializer = QuerySerializer(_result)
        serializer.next_id = 2
        assert serializer.on_result(2, _result("new"))
        assert not serializer.on_result(1, _result("old"))
        assert serializer.current is not None
        assert serializer.current.hits[0].path == "/new.md"

    def test_result_discarded_once_newer_query_issued(self) -> None:
        serializer = QuerySerializer(_result)
        try:
            first_id, first = serializer.issue("a")
            serializer.issue("ab")
            outcome = first.result(timeout=5)
            assert not serializer.on_result(outcome.query_id, outcome.result)
            assert not serializer.is_latest(first_id)
        finally:
            serializer.shutdown()

    def test_failed_result_still_applied_when_latest(self) -> None:
        serializer = QuerySerializer(_result)
        serializer.next_id = 1
        failed = SearchResult(error="fts5: syntax error")
        assert serializer.on_result(1, failed)
        assert serializer.current is failed


class TestConcurrentCompletion:
    @pytest.mark.parametrize("completion_order", [("b", "a", "c"), ("c", "b", "a")])
    def test_only_last_issued_wins(self, completion_order: tuple[str, str, str]) -> None:
        search = _GatedSearch()
        applied: list[int] = []
        serializer = QuerySerializer(search, executor=ThreadPoolExecutor(max_workers=3))
        try:
            futures = {text: serializer.issue(text)[1] for text in ("a", "b", "c")}
            for text in completion_order:
                search.gate(text).set()
                outcome = futures[text].result(timeout=5)
                if serializer.on_result(outcome.query_id, outcome.result):
                    applied.append(outcome.query_id)
        finally:
            serializer.shutdown()

        assert applied == [3]
        assert serializer.current_id == 3

    def test_shutdown_leaves_external_executor_running(self) -> None:
        executor = ThreadPoolExecutor(max_workers=1)
        serializer = QuerySerializer(_result, executor=executor)
        serializer.shutdown()
        assert executor.submit(lambda: 42).result(timeout=5) == 42
        executor.shutdown()
