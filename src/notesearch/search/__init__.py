"""Search domain: FTS5 engine handle and query construction."""

from notesearch.search.engine import (
    DocumentMatch,
    IndexedDocument,
    SearchEngine,
    SearchResult,
)
from notesearch.search.query import SearchRequest, build_request, run_query

__all__ = [
    "DocumentMatch",
    "IndexedDocument",
    "SearchEngine",
    "SearchRequest",
    "SearchResult",
    "build_request",
    "run_query",
]
