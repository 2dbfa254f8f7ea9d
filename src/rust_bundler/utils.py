# src/rust_bundler/utils.py

import json
import os
import re
import sys
from collections.abc import Sized
from contextlib import suppress
from pathlib import Path
from typing import Any, TextIO, cast

# string literals are matched first so markers inside them survive
_STRING = r'(?P<string>"(?:\\.|[^"\\])*")'
_JSONC_COMMENT = re.compile(_STRING + r"|//[^\n]*|#[^\n]*|/\*.*?\*/", re.DOTALL)
_JSONC_TRAILING_COMMA = re.compile(_STRING + r"|,(?=\s*[}\]])")


def should_use_color() -> bool:
    """Return True if colored diagnostics should be enabled."""
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True
    # diagnostics go to stderr, stdout may be the bundled source
    return sys.stderr.isatty()


def strip_jsonc(text: str) -> str:
    """Drop //, # and /* */ comments and trailing commas outside strings."""

    def keep_strings(m: re.Match[str]) -> str:
        return m.group("string") or ""

    text = _JSONC_COMMENT.sub(keep_strings, text)
    return _JSONC_TRAILING_COMMA.sub(keep_strings, text)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load a JSON-with-comments file.

    Returns None when the file holds nothing but comments. Error messages
    never repeat the path, callers name the file themselves.
    """
    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)
    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = strip_jsonc(path.read_text(encoding="utf-8")).strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = f"Invalid JSONC syntax: {e.msg} (line {e.lineno}, column {e.colno})"
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return cast("dict[str, Any] | list[Any]", data)


def plural(count: int | Sized) -> str:
    """Return 's' unless `count` (or its length) is exactly one."""
    n = count if isinstance(count, int) else len(count)
    return "" if n == 1 else "s"


def safe_log(msg: str) -> None:
    """Emergency logger that never fails."""
    stream = cast("TextIO", sys.__stderr__)
    try:
        print(msg, file=stream)
    except Exception:  # noqa: BLE001
        with suppress(Exception):
            stream.write(f"[INTERNAL] {msg}\n")


def read_source(path: Path) -> str | None:
    """Return the text of a source file, or None if it cannot be opened."""
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def get_sys_version_info() -> tuple[int, ...]:
    return tuple(sys.version_info[:3])
