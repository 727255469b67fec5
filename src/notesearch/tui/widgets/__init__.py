"""notesearch TUI widgets."""

from notesearch.tui.widgets.help_overlay import HelpOverlay
from notesearch.tui.widgets.preview import NotePreview
from notesearch.tui.widgets.result_list import ResultList
from notesearch.tui.widgets.status_bar import StatusBarWidget

__all__ = [
    "HelpOverlay",
    "NotePreview",
    "ResultList",
    "StatusBarWidget",
]
