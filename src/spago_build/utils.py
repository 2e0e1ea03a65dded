# src/spago_build/utils.py


import json
import os
import re
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Any, TextIO, cast

_TRUTHY = {"1", "true", "yes"}


def should_use_color() -> bool:
    """NO_COLOR wins over FORCE_COLOR; otherwise color only on a terminal."""
    if "NO_COLOR" in os.environ:
        return False
    return os.getenv("FORCE_COLOR", "").lower() in _TRUTHY or sys.stdout.isatty()


# --- JSONC --------------------------------------------------------------------

# string literals are matched first so comment markers inside globs
# ("src/**/*.purs") survive
_STRING = r'"(?:\\.|[^"\\])*"'
_COMMENT = re.compile(rf"{_STRING}|//[^\n]*|/\*.*?\*/|#[^\n]*", re.DOTALL)
_TRAILING_COMMA = re.compile(rf"{_STRING}|,(?=\s*[}}\]])")


def _strip_match(match: re.Match[str]) -> str:
    token = match.group(0)
    return token if token.startswith('"') else ""


def parse_jsonc(text: str) -> dict[str, Any] | list[Any] | None:
    """Parse JSON that may carry comments and trailing commas.

    Returns None when nothing but whitespace and comments is left.
    Error messages name the line and column, never a file.
    """
    text = _TRAILING_COMMA.sub(_strip_match, _COMMENT.sub(_strip_match, text))
    if not text.strip():
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = f"{e.msg} (line {e.lineno}, column {e.colno})"
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"unexpected root type {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return cast("dict[str, Any] | list[Any]", data)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    if not path.is_file():
        if path.exists():
            xmsg = f"Expected a file: {path}"
            raise ValueError(xmsg)
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)
    return parse_jsonc(path.read_text(encoding="utf-8"))


# --- text ---------------------------------------------------------------------


def plural(obj: Any) -> str:
    """'s' unless `obj` (a count or a sized collection) is exactly one."""
    count = len(obj) if hasattr(obj, "__len__") else obj
    return "" if count == 1 else "s"


def bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"  • {item}" for item in items)


# --- terminal / process -------------------------------------------------------


def clear_screen(stream: TextIO | None = None) -> None:
    """Clear the terminal (ANSI) if the stream is a TTY."""
    stream = stream or sys.stdout
    if stream.isatty():
        stream.write("\033[2J\033[H")
        stream.flush()


def safe_log(msg: str) -> None:
    """Write straight to the real stderr; used when logging itself is broken."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(OSError, ValueError, AttributeError):
        stream.write(f"{msg}\n")
        stream.flush()


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Temporarily change the process working directory."""
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield path
    finally:
        os.chdir(previous)
