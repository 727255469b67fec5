"""Tests for the notesearch CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import patch

from click.testing import CliRunner

from notesearch.cli import main

if TYPE_CHECKING:
    from pathlib import Path


def _invoke(config_file: Path, *args: str) -> tuple[int, str]:
    runner = CliRunner()
    result = runner.invoke(main, ["--config", str(config_file), *args])
    return result.exit_code, result.output


class TestCliIndex:
    def test_first_index(self, config_file: Path) -> None:
        code, output = _invoke(config_file, "index")
        assert code == 0, output
        assert "Indexed: 3" in output
        assert "Notes:   3" in output

    def test_second_index_reports_up_to_date(self, config_file: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "index")
        assert code == 0
        assert "No changes detected" in output

    def test_full_rebuild(self, config_file: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "index", "--full")
        assert code == 0
        assert "Indexed: 3" in output


class TestCliSearch:
    def test_search_prints_paths_and_fragments(
        self, config_file: Path, notes_root: Path
    ) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "search", "staking")
        assert code == 0, output
        assert str(notes_root / "garden.md") in output
        assert "Tomatoes need staking" in output
        assert "<mark>" not in output

    def test_search_json(self, config_file: Path, notes_root: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "search", "tomat", "--json")
        assert code == 0
        hits = json.loads(output)
        assert {h["path"] for h in hits} == {
            str(notes_root / "garden.md"),
            str(notes_root / "recipes.md"),
        }
        assert all("<mark>" in h["content"] for h in hits)

    def test_short_query_lists_newest_first(self, config_file: Path, notes_root: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "search", "x", "--json", "--limit", "2")
        assert code == 0
        assert [h["path"] for h in json.loads(output)] == [
            str(notes_root / "projects" / "roadmap.md"),
            str(notes_root / "recipes.md"),
        ]

    def test_no_results(self, config_file: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "search", "zucchini")
        assert code == 0
        assert "No results found." in output


class TestCliStatus:
    def test_status_before_index(self, config_file: Path) -> None:
        code, output = _invoke(config_file, "status", "--json")
        assert code == 0
        info = json.loads(output)
        assert info["indexed"] is None
        assert info["snapshot_records"] == 0
        assert info["extensions"] == [".md"]

    def test_status_after_index(self, config_file: Path) -> None:
        _invoke(config_file, "index")
        code, output = _invoke(config_file, "status", "--json")
        info = json.loads(output)
        assert code == 0
        assert info["indexed"] == 3
        assert info["snapshot_records"] == 3
        assert info["last_sync_at"] is not None

    def test_status_table(self, config_file: Path) -> None:
        code, output = _invoke(config_file, "status")
        assert code == 0
        assert "not built" in output


class TestCliErrors:
    def test_snapshot_write_failure_reports_error(self, config_file: Path) -> None:
        denied = PermissionError(13, "Permission denied")
        with patch(
            "notesearch.infrastructure.snapshot.SnapshotStore.store", side_effect=denied
        ):
            code, output = _invoke(config_file, "index")
        assert code == 1
        assert "Error:" in output
        assert "Permission denied" in output

    def test_missing_config(self, tmp_path: Path) -> None:
        code, output = _invoke(tmp_path / "missing.yaml", "index")
        assert code == 1
        assert "Error: Config file not found" in output

    def test_invalid_root(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(f"root_path: {tmp_path / 'nowhere'}\n", encoding="utf-8")
        code, output = _invoke(path, "status")
        assert code == 1
        assert "not a directory" in output

    def test_config_from_environment(self, config_file: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["index"], env={"NOTESEARCH_CONFIG": str(config_file)})
        assert result.exit_code == 0, result.output
        assert "Indexed: 3" in result.output


class TestCliUi:
    def test_ui_launches_app(self, config_file: Path, notes_root: Path) -> None:
        with patch("notesearch.tui.launch") as launch:
            code, output = _invoke(config_file, "ui", "--no-watch")
        assert code == 0, output
        launch.assert_called_once()
        config = launch.call_args.args[0]
        assert config.root_path == notes_root.resolve()
        assert launch.call_args.kwargs["no_watch"] is True
        assert launch.call_args.kwargs["synchronizer"].is_open

    def test_no_subcommand_launches_ui(self, config_file: Path) -> None:
        with patch("notesearch.tui.launch") as launch:
            code, _output = _invoke(config_file)
        assert code == 0
        launch.assert_called_once()
        assert launch.call_args.kwargs["no_watch"] is False

    def test_unopenable_index_exits(self, config_file: Path, tmp_path: Path) -> None:
        """The index path is blocked by a regular file where the cache dir should be."""
        (tmp_path / "cache").write_text("not a directory", encoding="utf-8")
        with patch("notesearch.tui.launch") as launch:
            code, output = _invoke(config_file, "ui")
        assert code == 1
        assert "Error: cannot open index" in output
        launch.assert_not_called()


class TestCliHelp:
    def test_watch_help(self) -> None:
        result = CliRunner().invoke(main, ["watch", "--help"])
        assert result.exit_code == 0
        assert "--debounce" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "notesearch" in result.output
