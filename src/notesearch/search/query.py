"""Query construction: turn raw input text into a search request."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import TYPE_CHECKING

from notesearch.search.engine import SearchResult

if TYPE_CHECKING:
    from notesearch.search.engine import SearchEngine

logger = logging.getLogger(__name__)

# Queries shorter than this (after trimming) browse by recency instead.
MIN_QUERY_CHARS = 3

# Maximum hits returned per query.
DEFAULT_SIZE = 100


@dataclass(frozen=True)
class SearchRequest:
    """A query as handed to the search engine.

    ``match`` is an FTS5 expression, or ``None`` for "all documents,
    newest first".
    """

    match: str | None
    size: int = DEFAULT_SIZE
    highlight: bool = False

    @property
    def is_match_all(self) -> bool:
        return self.match is None


def _quote(word: str) -> str:
    """Quote *word* as an FTS5 string so operators are taken literally."""
    return '"' + word.replace('"', '""') + '"'


def build_request(text: str, *, size: int = DEFAULT_SIZE) -> SearchRequest:
    """Build the search request for the input *text*.

    Short input (fewer than three characters after trimming) lists every
    note sorted by modification time, newest first.  Longer input becomes a
    token query whose last word is prefix-completed, so results follow the
    user while they type.
    """
    query = text.strip()
    if len(query) < MIN_QUERY_CHARS:
        return SearchRequest(match=None, size=size)

    words = [_quote(w) for w in query.split()]
    words[-1] += "*"
    return SearchRequest(match=" ".join(words), size=size, highlight=True)


def run_query(engine: SearchEngine, text: str, *, size: int = DEFAULT_SIZE) -> SearchResult:
    """Search *engine* for *text*, reporting failures in the result.

    A query FTS5 rejects, or a closed index, yields a failed
    :class:`SearchResult` instead of raising.
    """
    request = build_request(text, size=size)
    try:
        hits = engine.search(request)
    except (sqlite3.Error, RuntimeError) as exc:
        logger.debug("Query %r failed: %s", text, exc)
        return SearchResult(error=str(exc))
    return SearchResult(hits=hits)
