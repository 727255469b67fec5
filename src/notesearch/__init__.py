"""notesearch: incremental full-text search over a directory of notes."""

__version__ = "0.3.0"
