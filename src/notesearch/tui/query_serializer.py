"""Query serializer: tag each search with an id and keep only the latest result.

Every keystroke issues a new query.  Queries run concurrently against an
index that may be mid-rebuild, so they can complete in any order.  A result
is applied only when its id equals the id of the most recently *issued*
query; anything older is dropped on arrival.  Superseded queries are not
cancelled.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from notesearch.search.engine import SearchResult

logger = logging.getLogger(__name__)

_DEFAULT_QUERY_WORKERS = 4


@dataclass(frozen=True)
class QueryResult:
    """A finished query: the id it was issued with and its result."""

    query_id: int
    text: str
    result: SearchResult


class QuerySerializer:
    """Issue tagged queries and apply results in issuance order.

    Parameters
    ----------
    search:
        Callable running one query to completion.  It should report failures
        inside the returned :class:`SearchResult` rather than raise.
    executor:
        Where queries run.  Defaults to a private thread pool, which
        :meth:`shutdown` releases.
    """

    def __init__(
        self,
        search: Callable[[str], SearchResult],
        *,
        executor: Executor | None = None,
    ) -> None:
        self._search = search
        self._owns_executor = executor is None
        self._executor: Executor = executor or ThreadPoolExecutor(
            max_workers=_DEFAULT_QUERY_WORKERS,
            thread_name_prefix="notesearch-query",
        )
        self.next_id = 0
        self.current: SearchResult | None = None
        self.current_id: int | None = None

    def issue(self, text: str) -> tuple[int, Future[QueryResult]]:
        """Start a search for *text*.

        Returns the new query id and a future resolving to its
        :class:`QueryResult`.
        """
        self.next_id += 1
        query_id = self.next_id
        logger.debug("Issuing query %d: %r", query_id, text)
        future = self._executor.submit(self._run, query_id, text)
        return query_id, future

    def _run(self, query_id: int, text: str) -> QueryResult:
        return QueryResult(query_id=query_id, text=text, result=self._search(text))

    def is_latest(self, query_id: int) -> bool:
        return query_id == self.next_id

    def on_result(self, query_id: int, result: SearchResult) -> bool:
        """Accept *result* if *query_id* is the latest issued query.

        Returns ``True`` when the result became current, ``False`` when it
        was stale and discarded.
        """
        if not self.is_latest(query_id):
            logger.debug("Discarding stale result %d (latest is %d)", query_id, self.next_id)
            return False
        self.current = result
        self.current_id = query_id
        return True

    def shutdown(self) -> None:
        """Stop the private executor without waiting for in-flight queries."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
