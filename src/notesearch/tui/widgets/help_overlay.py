"""Help overlay: modal screen showing all keyboard bindings."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, Static

if TYPE_CHECKING:
    from textual.app import ComposeResult


_SEARCH_BINDINGS: list[tuple[str, str]] = [
    ("typing", "Search (under 3 chars: newest notes first)"),
    ("Tab", "Next result"),
    ("S-Tab", "Previous result"),
    ("Enter", "Preview selected note"),
    ("Esc", "Close preview"),
]

_PREVIEW_BINDINGS: list[tuple[str, str]] = [
    ("C-k", "Scroll preview up"),
    ("C-j", "Scroll preview down"),
]

_GLOBAL_BINDINGS: list[tuple[str, str]] = [
    ("C-o", "Open selected note in editor"),
    ("C-r", "Refresh the index"),
    ("F1", "Help overlay (this screen)"),
    ("C-c", "Quit"),
]


def _format_section(title: str, bindings: list[tuple[str, str]]) -> str:
    """Format a section of keybindings as a text block."""
    lines: list[str] = [f"  {title}", "  " + "-" * len(title)]
    for key, desc in bindings:
        lines.append(f"  {key:<8} {desc}")
    lines.append("")
    return "\n".join(lines)


def build_help_text() -> str:
    """Build the full help text with all keybinding sections."""
    sections: list[str] = [
        "",
        "  notesearch: Keyboard Reference",
        "  " + "=" * 31,
        "",
        _format_section("Search", _SEARCH_BINDINGS),
        _format_section("Preview", _PREVIEW_BINDINGS),
        _format_section("Global", _GLOBAL_BINDINGS),
        "  Press Esc to close this help screen.",
        "",
    ]
    return "\n".join(sections)


class HelpOverlay(ModalScreen[None]):
    """Modal overlay showing all keyboard bindings.

    Activated by pressing ``F1``.  Press ``Esc`` to dismiss.
    """

    DEFAULT_CSS = """
    HelpOverlay {
        align: center middle;
    }

    HelpOverlay #help-container {
        width: 60;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    HelpOverlay #help-title {
        text-align: center;
        text-style: bold;
        width: 100%;
        margin-bottom: 1;
    }

    HelpOverlay #help-content {
        width: 100%;
    }
    """

    BINDINGS: ClassVar[list[Binding | tuple[str, str] | tuple[str, str, str]]] = [
        Binding("escape", "close_help", "Close", key_display="Esc"),
    ]

    def compose(self) -> ComposeResult:
        """Compose the help overlay layout."""
        with Vertical(id="help-container"):
            yield Label("Help", id="help-title")
            yield Static(build_help_text(), id="help-content")

    def action_close_help(self) -> None:
        """Dismiss the help overlay."""
        self.dismiss()
