"""External editor invocation with the index handle released meanwhile."""

from __future__ import annotations

import logging
import shlex
import subprocess
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from notesearch.infrastructure.reindex import IndexSynchronizer

logger = logging.getLogger(__name__)


def build_editor_command(editor: str, path: str) -> list[str]:
    """Split the configured *editor* command and append *path*.

    ``"code --wait"`` becomes ``["code", "--wait", path]``.
    """
    args = shlex.split(editor)
    if not args:
        msg = "Editor command is empty"
        raise ValueError(msg)
    return [*args, path]


@contextmanager
def index_released(synchronizer: IndexSynchronizer) -> Iterator[None]:
    """Close the index for the duration of the block, then reopen it.

    The reopen happens even when the block raises, so the session keeps a
    usable handle after a failed editor launch.
    """
    synchronizer.close_index()
    try:
        yield
    finally:
        synchronizer.open_index()


def run_editor(editor: str, path: str) -> int:
    """Run *editor* on *path* in the foreground and return its exit code."""
    command = build_editor_command(editor, path)
    logger.info("Opening editor: %s", " ".join(command))
    completed = subprocess.run(command, check=False)  # noqa: S603
    return completed.returncode
