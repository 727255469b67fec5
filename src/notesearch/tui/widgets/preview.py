"""Preview pane showing the full text of the selected note."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

if TYPE_CHECKING:
    from textual.app import ComposeResult

logger = logging.getLogger(__name__)

# Lines moved per scroll key press.
SCROLL_STEP = 5

_MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})


def render_note(path: str) -> Markdown | Syntax | Text:
    """Render the note at *path* for display.

    Markdown files are rendered; other files are syntax-highlighted by
    their name and content.  A read failure is rendered as an error line
    instead of raising.
    """
    try:
        body = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Cannot preview %s: %s", path, exc)
        return Text(f"Cannot read {path}: {exc}", style="bold red")
    if Path(path).suffix.lower() in _MARKDOWN_SUFFIXES:
        return Markdown(body)
    return Syntax(body, Syntax.guess_lexer(path, body), word_wrap=True)


class NotePreview(VerticalScroll):
    """Scrollable pane holding one rendered note.  Hidden until opened."""

    DEFAULT_CSS = """
    NotePreview {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
        display: none;
    }

    NotePreview.-open {
        display: block;
    }
    """

    def __init__(self, *, widget_id: str | None = None) -> None:
        super().__init__(id=widget_id)
        self._path: str | None = None

    def compose(self) -> ComposeResult:
        yield Static("", id="preview-body")

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def is_open(self) -> bool:
        return self.has_class("-open")

    def show_note(self, path: str) -> None:
        """Load *path* into the pane and make it visible."""
        self._path = path
        self.border_title = Path(path).name
        self.query_one("#preview-body", Static).update(render_note(path))
        self.add_class("-open")
        self.scroll_home(animate=False)

    def close(self) -> None:
        self._path = None
        self.remove_class("-open")

    def scroll_lines(self, delta: int) -> None:
        """Scroll by *delta* lines (negative scrolls up)."""
        self.scroll_relative(y=delta, animate=False)
