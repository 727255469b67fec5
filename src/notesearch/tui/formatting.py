"""Formatting of search hits for the one-line result list."""

from __future__ import annotations

import re
from pathlib import Path

from rich.text import Text

from notesearch.search.engine import MARK_CLOSE, MARK_OPEN

# ANSI escape sequences (CSI and OSC) that may be embedded in note bodies.
_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07]*\x07")
_SPACE_RUN_RE = re.compile(r"\s{2,}|\t+")
_MARK_RE = re.compile(re.escape(MARK_OPEN) + r"(.*?)" + re.escape(MARK_CLOSE), re.DOTALL)

NEWLINE_MARKER = " ↵ "

MATCH_STYLE = "color(205)"
CONTEXT_STYLE = "color(242)"


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def format_content(content: str) -> str:
    """Flatten a fragment onto one line.

    Strips ANSI escapes, shows newlines as ``↵`` and collapses whitespace runs.
    """
    s = strip_ansi(content)
    s = s.replace("\n", NEWLINE_MARKER)
    return _SPACE_RUN_RE.sub(" ", s)


def strip_marks(fragment: str) -> str:
    """Drop highlight markers, keeping the matched text."""
    return fragment.replace(MARK_OPEN, "").replace(MARK_CLOSE, "")


def render_fragment(fragment: str) -> Text:
    """Render a ``<mark>``-highlighted fragment as Rich Text.

    Matched terms get :data:`MATCH_STYLE`; surrounding text is dimmed.
    """
    text = Text(no_wrap=True, overflow="ellipsis")
    pos = 0
    for match in _MARK_RE.finditer(fragment):
        if match.start() > pos:
            text.append(fragment[pos : match.start()], style=CONTEXT_STYLE)
        text.append(match.group(1), style=MATCH_STYLE)
        pos = match.end()
    if pos < len(fragment):
        text.append(fragment[pos:], style=CONTEXT_STYLE)
    return text


def render_hit(path: str, content: str, *, root: str | None = None) -> Text:
    """Two-line list entry: the note path, then its formatted fragment."""
    title = path
    if root and Path(path).is_relative_to(root):
        relative = Path(path).relative_to(root)
        if relative.parts:
            title = str(relative)
    text = Text(no_wrap=True, overflow="ellipsis")
    text.append(title, style="bold")
    text.append("\n")
    text.append_text(render_fragment(format_content(content)))
    return text
