"""Result list: one entry per search hit, path over highlighted fragment."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.widgets import OptionList
from textual.widgets.option_list import Option

from notesearch.tui.formatting import render_hit

if TYPE_CHECKING:
    from notesearch.search.engine import DocumentMatch


class ResultList(OptionList):
    """Search hits in rank order.  Navigation is driven by the app."""

    DEFAULT_CSS = """
    ResultList {
        height: 1fr;
        border: none;
    }
    """

    def __init__(self, *, widget_id: str | None = None) -> None:
        super().__init__(id=widget_id)
        self._paths: list[str] = []
        self.can_focus = False

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    def set_hits(self, hits: list[DocumentMatch], *, root: str | None = None) -> None:
        """Replace the list contents with *hits*, highlighting the first."""
        self._paths = [hit.path for hit in hits]
        self.clear_options()
        self.add_options(
            [Option(render_hit(hit.path, hit.content, root=root)) for hit in hits]
        )
        self.highlighted = 0 if hits else None

    @property
    def selected_path(self) -> str | None:
        index = self.highlighted
        if index is None or not 0 <= index < len(self._paths):
            return None
        return self._paths[index]

    def move(self, delta: int) -> None:
        """Move the highlight by *delta*, clamped to the list bounds."""
        if not self._paths:
            return
        current = self.highlighted if self.highlighted is not None else 0
        self.highlighted = max(0, min(len(self._paths) - 1, current + delta))
