"""notesearch CLI entry point."""

from __future__ import annotations

import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from notesearch import __version__
from notesearch.config import CONFIG_ENV_VAR, load_config

if TYPE_CHECKING:
    from notesearch.config import Config
    from notesearch.infrastructure.reindex import IndexSynchronizer

logger = logging.getLogger(__name__)

_OPEN_ERRORS = (OSError, sqlite3.Error)


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    """Route log records to stderr through rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(ctx: click.Context) -> Config:
    """Load configuration or exit with an error message."""
    try:
        return load_config(ctx.obj.get("config_path"))
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _open_synchronizer(config: Config) -> IndexSynchronizer:
    """Build the synchronizer for *config* and open its index, or exit."""
    from notesearch.infrastructure.reindex import IndexSynchronizer

    synchronizer = IndexSynchronizer.from_config(config)
    try:
        synchronizer.open_index()
    except _OPEN_ERRORS as exc:
        click.echo(f"Error: cannot open index {config.index_path}: {exc}", err=True)
        sys.exit(1)
    return synchronizer


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="notesearch")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    default=None,
    help="Config file (default: $XDG_CONFIG_HOME/notesearch/config.yaml).",
)
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """notesearch - incremental full-text search over a notes directory.

    Without a command, launches the interactive search UI.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path
    _configure_logging(verbose=verbose, quiet=quiet)

    if ctx.invoked_subcommand is None:
        ctx.invoke(ui)


@main.command()
@click.option("--no-watch", is_flag=True, help="Disable the file watcher.")
@click.pass_context
def ui(ctx: click.Context, *, no_watch: bool = False) -> None:
    """Launch the interactive search UI.

    Logs go to debug.log next to the config file while the UI runs.
    """
    config = _load(ctx)
    synchronizer = _open_synchronizer(config)

    from notesearch.tui import launch

    launch(config, synchronizer=synchronizer, no_watch=no_watch)


@main.command()
@click.option(
    "--full",
    is_flag=True,
    default=False,
    help="Ignore the snapshot and rebuild the index from scratch.",
)
@click.pass_context
def index(ctx: click.Context, *, full: bool) -> None:
    """Synchronize the search index with the notes directory.

    By default only created, modified and deleted notes are processed.
    """
    from notesearch.infrastructure.reindex import SYNC_ERRORS

    config = _load(ctx)
    synchronizer = _open_synchronizer(config)
    try:
        result = synchronizer.sync(full=full)
        total = synchronizer.engine.count()
    except SYNC_ERRORS as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        synchronizer.close_index()

    if result.nothing_changed:
        click.echo("No changes detected. Index is up to date.")
    else:
        click.echo(f"Indexed: {result.indexed}")
        click.echo(f"Deleted: {result.deleted}")
    click.echo(f"Notes:   {total}")
    if result.skipped:
        click.echo("")
        for path in result.skipped:
            click.echo(f"  [skip] {path}")


@main.command()
@click.argument("query")
@click.option("--limit", default=20, type=click.IntRange(min=1), help="Maximum results.")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def search(ctx: click.Context, query: str, *, limit: int, output_json: bool) -> None:
    """Search the index once and print the hits.

    Queries shorter than three characters list the most recently
    modified notes.
    """
    from notesearch.search.query import run_query
    from notesearch.tui.formatting import format_content, strip_marks

    config = _load(ctx)
    synchronizer = _open_synchronizer(config)
    try:
        result = run_query(synchronizer.engine, query, size=limit)
    finally:
        synchronizer.close_index()

    if result.failed:
        click.echo(f"Error: search failed: {result.error}", err=True)
        sys.exit(1)

    if output_json:
        hits = [{"path": hit.path, "content": hit.content} for hit in result.hits]
        click.echo(json.dumps(hits, indent=2, ensure_ascii=False))
        return

    if not result.hits:
        click.echo("No results found.")
        return
    for hit in result.hits:
        click.echo(hit.path)
        click.echo(f"  {format_content(strip_marks(hit.content))}")


@main.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, *, output_json: bool) -> None:
    """Show configuration, index and snapshot statistics."""
    from notesearch.infrastructure.snapshot import SnapshotStore

    config = _load(ctx)
    store = SnapshotStore(config.snapshot_path)
    info: dict[str, object] = {
        "root_path": str(config.root_path),
        "extensions": list(config.extensions),
        "editor": config.editor,
        "index_path": str(config.index_path),
        "snapshot_path": str(config.snapshot_path),
        "snapshot_records": len(store.load()) if store.exists() else 0,
        "indexed": None,
        "last_sync_at": None,
    }

    if config.index_path.exists():
        synchronizer = _open_synchronizer(config)
        try:
            info["indexed"] = synchronizer.engine.count()
            info["last_sync_at"] = synchronizer.engine.get_meta("last_sync_at")
        finally:
            synchronizer.close_index()

    if output_json:
        click.echo(json.dumps(info, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="notesearch", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Root", str(info["root_path"]))
    table.add_row("Extensions", ", ".join(config.extensions))
    table.add_row("Editor", config.editor)
    table.add_row("Index", str(info["index_path"]))
    table.add_row("Indexed", "not built" if info["indexed"] is None else str(info["indexed"]))
    table.add_row("Snapshot records", str(info["snapshot_records"]))
    table.add_row("Last sync", str(info["last_sync_at"] or "never"))
    Console().print(table)


@main.command("watch")
@click.option("--debounce", default=500, type=int, help="Debounce delay in ms.")
@click.pass_context
def watch_cmd(ctx: click.Context, *, debounce: int) -> None:
    """Watch the notes directory and synchronize on changes."""
    from notesearch.infrastructure.watcher import watch

    config = _load(ctx)
    synchronizer = _open_synchronizer(config)
    try:
        watch(synchronizer, debounce_ms=debounce)
    finally:
        synchronizer.close_index()
