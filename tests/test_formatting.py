"""Tests for notesearch.tui.formatting: one-line hit rendering."""

from __future__ import annotations

from notesearch.tui.formatting import (
    CONTEXT_STYLE,
    MATCH_STYLE,
    NEWLINE_MARKER,
    format_content,
    render_fragment,
    render_hit,
    strip_ansi,
    strip_marks,
)


class TestFormatContent:
    def test_newlines_become_markers(self) -> None:
        assert format_content("one\ntwo") == f"one{NEWLINE_MARKER}two"

    def test_whitespace_runs_collapse(self) -> None:
        assert format_content("a    b\t\tc") == "a b c"

    def test_blank_lines_collapse_to_single_marker_spacing(self) -> None:
        assert format_content("a\n\nb") == "a ↵ ↵ b"

    def test_ansi_sequences_removed(self) -> None:
        assert strip_ansi("\x1b[31mred\x1b[0m text") == "red text"
        assert format_content("\x1b[1mbold\x1b[0m") == "bold"


class TestRenderFragment:
    def test_marked_terms_are_styled(self) -> None:
        text = render_fragment("need <mark>Tomatoes</mark> now")

        assert text.plain == "need Tomatoes now"
        styles = {text.plain[s.start : s.end]: str(s.style) for s in text.spans}
        assert styles["Tomatoes"] == MATCH_STYLE
        assert styles["need "] == CONTEXT_STYLE
        assert styles[" now"] == CONTEXT_STYLE

    def test_plain_fragment_is_all_context(self) -> None:
        text = render_fragment("...")
        assert text.plain == "..."
        assert [str(s.style) for s in text.spans] == [CONTEXT_STYLE]

    def test_strip_marks(self) -> None:
        assert strip_marks("a <mark>b</mark> c") == "a b c"


class TestRenderHit:
    def test_path_relative_to_root(self) -> None:
        text = render_hit("/home/u/notes/sub/a.md", "x <mark>y</mark>", root="/home/u/notes")
        title, fragment = text.plain.split("\n")
        assert title == "sub/a.md"
        assert fragment == "x y"

    def test_path_outside_root_is_unchanged(self) -> None:
        text = render_hit("/other/a.md", "...", root="/home/u/notes")
        assert text.plain.startswith("/other/a.md\n")

    def test_sibling_directory_with_shared_prefix_is_unchanged(self) -> None:
        text = render_hit("/home/u/notes2/a.md", "x", root="/home/u/notes")
        assert text.plain.startswith("/home/u/notes2/a.md\n")

    def test_multiline_fragment_stays_on_one_line(self) -> None:
        text = render_hit("/n/a.md", "first\nsecond")
        assert text.plain.count("\n") == 1
