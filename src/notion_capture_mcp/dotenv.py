"""Shared env file for API keys and Notion credentials.

MCP hosts often start servers with a bare environment, so keys can live in
``~/.config/notion-capture-mcp/.env``. Only the variables the server reads
(``config.ENV_KEYS``) are taken from the file, and a value already set in
the process environment always wins.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "notion-capture-mcp" / ".env"

_ASSIGNMENT_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def read_env_file(path: Path) -> dict[str, str]:
    """Return the ``KEY=VALUE`` assignments in *path*; ``{}`` if it is missing.

    Blank lines, ``#`` comments and lines that are not assignments are
    skipped. An ``export`` prefix and matching quotes are stripped.
    """
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        match = _ASSIGNMENT_RE.match(line.strip())
        if match:
            values[match.group(1)] = _unquote(match.group(2).strip())
    return values


def _is_unset(key: str, current: str | None) -> bool:
    """Blank values and unexpanded ``$KEY`` / ``${KEY}`` placeholders count as unset."""
    if current is None:
        return True
    current = _unquote(current.strip()).strip()
    return current in {"", f"${key}", f"${{{key}}}"} or current.startswith(f"${{{key}:-")


def load_env_file(keys: Iterable[str], path: Path | None = None) -> dict[str, str]:
    """Copy *keys* from the env file into ``os.environ`` where they are unset.

    Args:
        keys: Variable names to take from the file; others are ignored.
        path: Env file. Defaults to :data:`DEFAULT_ENV_PATH`.

    Returns:
        The variables that were applied.
    """
    file_values = read_env_file(path or DEFAULT_ENV_PATH)
    applied: dict[str, str] = {}
    for key in keys:
        if key in file_values and _is_unset(key, os.environ.get(key)):
            os.environ[key] = file_values[key]
            applied[key] = file_values[key]
    return applied
