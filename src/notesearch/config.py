"""Configuration: read ``config.yaml`` and derive cache/index/log locations."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

APP_NAME = "notesearch"

# Env var overriding the config file location.
CONFIG_ENV_VAR = "NOTESEARCH_CONFIG"

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)
DEFAULT_MAX_WORKERS = 8


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value)
    return Path.home() / fallback


def default_config_dir() -> Path:
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / APP_NAME


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/notesearch/config.yaml``."""
    return default_config_dir() / "config.yaml"


def default_cache_dir() -> Path:
    """Return ``$XDG_CACHE_HOME/notesearch`` (index and snapshot live here)."""
    return _xdg_dir("XDG_CACHE_HOME", ".cache") / APP_NAME


@dataclass(frozen=True)
class Config:
    """Application settings, loaded once at startup."""

    root_path: Path
    editor: str
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    cache_dir: Path | None = None
    config_dir: Path | None = None
    max_workers: int = DEFAULT_MAX_WORKERS

    @property
    def data_dir(self) -> Path:
        return self.cache_dir or default_cache_dir()

    @property
    def index_path(self) -> Path:
        return self.data_dir / "index.db"

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / "snapshot.json"

    @property
    def log_path(self) -> Path:
        return (self.config_dir or default_config_dir()) / "debug.log"


def _normalize_extensions(value: Any) -> tuple[str, ...]:
    """Validate ``extensions``; a missing leading dot is added (``md`` -> ``.md``)."""
    if value is None:
        return DEFAULT_EXTENSIONS
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value:
        msg = "'extensions' must be a non-empty list of file suffixes"
        raise ValueError(msg)
    result: list[str] = []
    for ext in value:
        if not isinstance(ext, str) or not ext.strip(".").strip():
            msg = f"Invalid entry in 'extensions': {ext!r}"
            raise ValueError(msg)
        ext = ext.strip()
        result.append(ext if ext.startswith(".") else f".{ext}")
    return tuple(dict.fromkeys(result))


def _default_editor() -> str:
    return os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"


def parse_config(data: dict[str, Any], *, config_dir: Path | None = None) -> Config:
    """Build a :class:`Config` from the parsed YAML mapping.

    Raises ``ValueError`` when a required key is missing or a value has the
    wrong type.
    """
    root = data.get("root_path")
    if not isinstance(root, str) or not root.strip():
        msg = "'root_path' is required and must be a directory path"
        raise ValueError(msg)
    root_path = Path(root).expanduser().resolve()
    if not root_path.is_dir():
        msg = f"'root_path' is not a directory: {root_path}"
        raise ValueError(msg)

    editor = data.get("editor")
    if editor is not None and (not isinstance(editor, str) or not editor.strip()):
        msg = "'editor' must be a command string"
        raise ValueError(msg)

    cache_dir = data.get("cache_dir")
    if cache_dir is not None and not isinstance(cache_dir, str):
        msg = "'cache_dir' must be a directory path"
        raise ValueError(msg)

    max_workers = data.get("max_workers", DEFAULT_MAX_WORKERS)
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        msg = "'max_workers' must be a positive integer"
        raise ValueError(msg)

    return Config(
        root_path=root_path,
        editor=editor or _default_editor(),
        extensions=_normalize_extensions(data.get("extensions")),
        cache_dir=Path(cache_dir).expanduser() if cache_dir else None,
        config_dir=config_dir,
        max_workers=max_workers,
    )


def load_config(path: Path | None = None) -> Config:
    """Read the config file at *path* (default: :func:`default_config_path`).

    Raises ``ValueError`` when the file is missing, is not valid YAML, or
    fails validation.
    """
    config_path = path or default_config_path()
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        msg = f"Config file not found: {config_path}"
        raise ValueError(msg) from None
    except OSError as exc:
        msg = f"Cannot read config file {config_path}: {exc}"
        raise ValueError(msg) from exc

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse config file {config_path}: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Config file {config_path} must contain a mapping"
        raise ValueError(msg)

    return parse_config(data, config_dir=config_path.parent)
