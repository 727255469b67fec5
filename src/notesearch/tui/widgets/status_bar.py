"""Status bar widget showing result/index counts, watcher status, and last action."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

# Watcher status indicators
_WATCHER_ACTIVE = "●"  # filled circle
_WATCHER_INACTIVE = "○"  # empty circle

# Watcher state constants
WATCHER_OFF = "off"
WATCHER_WATCHING = "watching"
WATCHER_CHANGES = "changes"


class StatusBarWidget(Static):
    """Bottom status bar: hit count, indexed documents, watcher state, last action.

    Watcher states:
    - ``"watching"``: watcher active, no pending changes (green).
    - ``"changes"``: watcher detected file changes (yellow + count).
    - ``"off"``: watcher disabled or notes root missing (dim).
    """

    DEFAULT_CSS = """
    StatusBarWidget {
        width: 100%;
        height: 1;
        background: $surface;
        color: $text;
        padding: 0 1;
        dock: bottom;
    }
    """

    def __init__(self, *, widget_id: str | None = None) -> None:
        super().__init__(id=widget_id)
        self._hit_count: int = 0
        self._doc_count: int = 0
        self._syncing: bool = False
        self._watcher_state: str = WATCHER_OFF
        self._change_count: int = 0
        self._last_action: str = ""

    def render(self) -> Text:
        """Render the status bar as Rich Text."""
        text = Text()

        text.append(f" {self._hit_count} results", style="bold")
        text.append(f"  {self._doc_count} indexed", style="bold")
        if self._syncing:
            text.append("  indexing...", style="bold cyan")

        text.append("  |  ")

        if self._watcher_state == WATCHER_CHANGES:
            label = f"{_WATCHER_ACTIVE} changes detected ({self._change_count})"
            text.append(label, style="yellow")
        elif self._watcher_state == WATCHER_WATCHING:
            text.append(f"{_WATCHER_ACTIVE} watching", style="green")
        else:
            text.append(f"{_WATCHER_INACTIVE} watcher off", style="dim")

        if self._last_action:
            text.append(f"  |  {self._last_action}", style="italic")

        return text

    @property
    def hit_count(self) -> int:
        return self._hit_count

    @property
    def watcher_state(self) -> str:
        return self._watcher_state

    def set_hit_count(self, count: int) -> None:
        self._hit_count = count
        self.refresh()

    def set_doc_count(self, count: int) -> None:
        self._doc_count = count
        self.refresh()

    def set_syncing(self, syncing: bool) -> None:
        self._syncing = syncing
        self.refresh()

    def set_watcher_active(self, active: bool) -> None:
        """Switch the watcher indicator between ``"watching"`` and ``"off"``."""
        self._watcher_state = WATCHER_WATCHING if active else WATCHER_OFF
        if not active:
            self._change_count = 0
        self.refresh()

    def set_changes_detected(self, count: int) -> None:
        """Signal that the watcher detected *count* changed files."""
        self._watcher_state = WATCHER_CHANGES
        self._change_count = count
        self.refresh()

    def clear_changes(self) -> None:
        """Clear the changes badge (after a refresh)."""
        if self._watcher_state == WATCHER_CHANGES:
            self._watcher_state = WATCHER_WATCHING
        self._change_count = 0
        self.refresh()

    def set_last_action(self, message: str) -> None:
        """Show a transient action message in the status bar."""
        self._last_action = message
        self.refresh()
