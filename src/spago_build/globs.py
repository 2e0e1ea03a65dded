# src/spago_build/globs.py
"""Source glob compilation and matching.

Semantics:
  - `*` and `?` never cross a path separator
  - a whole `**` segment matches zero or more directories
  - `[abc]`, `[a-z]`, `[!abc]` / `[^abc]` character classes
  - `/` and `\\` are both accepted as separators, in patterns and paths
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import PurePosixPath

from .errors import PatternError
from .logs import get_logger

_GLOB_CHARS = "*?["


@dataclass(frozen=True)
class CompiledGlob:
    pattern: str  # normalized source pattern
    regex: re.Pattern[str]
    literal_parts: tuple[str, ...]  # leading segments without wildcards
    has_wildcard: bool

    def __str__(self) -> str:
        return self.pattern


def has_glob_chars(s: str) -> bool:
    return any(c in s for c in "*?[]")


def normalize_path_string(raw: str) -> str:
    r"""Normalize a user-supplied path string for cross-platform use.

      - Treat both '/' and '\\' as valid separators and normalize all to '/'.
      - Collapse redundant slashes and drop a leading './'.
      - Never resolve '..' or touch the filesystem.
    """
    if not raw:
        return ""

    path = raw.strip().replace("\\", "/")
    path = re.sub(r"/{2,}", "/", path)
    while path.startswith("./"):
        path = path[2:]
    return path


def _translate_class(pattern: str, segment: str, start: int) -> tuple[str, int]:
    """Translate a `[...]` class starting at `segment[start]`.

    Returns the regex fragment and the index just past the closing bracket.
    """
    i = start + 1
    negate = False
    if i < len(segment) and segment[i] in "!^":
        negate = True
        i += 1

    body: list[str] = []
    # a ']' directly after the opening bracket is a literal member
    if i < len(segment) and segment[i] == "]":
        body.append(r"\]")
        i += 1

    while i < len(segment) and segment[i] != "]":
        ch = segment[i]
        if (
            i + 2 < len(segment)
            and segment[i + 1] == "-"
            and segment[i + 2] != "]"
        ):
            lo, hi = ch, segment[i + 2]
            if lo > hi:
                raise PatternError(pattern, f"invalid range {lo}-{hi}")
            body.append(f"{re.escape(lo)}-{re.escape(hi)}")
            i += 3
            continue
        body.append(re.escape(ch))
        i += 1

    if i >= len(segment):
        raise PatternError(pattern, "unterminated character class")
    if not body:
        raise PatternError(pattern, "empty character class")

    prefix = "^/" if negate else ""
    return f"[{prefix}{''.join(body)}]", i + 1


def _translate_segment(pattern: str, segment: str) -> str:
    parts: list[str] = []
    i = 0
    while i < len(segment):
        ch = segment[i]
        if ch == "*":
            # consecutive stars inside a segment behave like a single star
            while i < len(segment) and segment[i] == "*":
                i += 1
            parts.append("[^/]*")
            continue
        if ch == "?":
            parts.append("[^/]")
        elif ch == "[":
            fragment, i = _translate_class(pattern, segment, i)
            parts.append(fragment)
            continue
        elif ch == "]":
            raise PatternError(pattern, "unmatched ']'")
        else:
            parts.append(re.escape(ch))
        i += 1
    return "".join(parts)


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> CompiledGlob:
    """Compile a source glob, raising PatternError on malformed syntax."""
    if not isinstance(pattern, str) or not pattern.strip():
        raise PatternError(str(pattern), "empty pattern")

    normalized = normalize_path_string(pattern)
    absolute = normalized.startswith("/")
    segments = [s for s in normalized.split("/") if s]

    regex_parts: list[str] = ["/" if absolute else ""]
    literal: list[str] = []
    wildcard_seen = False
    last = len(segments) - 1

    for idx, seg in enumerate(segments):
        is_wild = any(c in seg for c in _GLOB_CHARS)
        if not is_wild and "]" in seg:
            raise PatternError(pattern, "unmatched ']'")
        if is_wild:
            wildcard_seen = True
        elif not wildcard_seen:
            literal.append(seg)

        if seg == "**":
            # zero or more whole directories; at the end, anything below
            regex_parts.append("(?:[^/]+/)*" if idx < last else ".*")
            continue

        regex_parts.append(_translate_segment(pattern, seg))
        if idx < last:
            regex_parts.append("/")

    regex = re.compile("".join(regex_parts) + r"\Z")
    compiled = CompiledGlob(
        pattern=normalized,
        regex=regex,
        literal_parts=tuple(literal),
        has_wildcard=wildcard_seen,
    )
    get_logger().trace("[GLOB] %r → %s", pattern, regex.pattern)
    return compiled


def matches(compiled: CompiledGlob, path: str) -> bool:
    """Return True if `path` satisfies the compiled glob."""
    return compiled.regex.match(normalize_path_string(str(path))) is not None


def matches_any(globs: Iterable[CompiledGlob], path: str) -> bool:
    normalized = normalize_path_string(str(path))
    return any(g.regex.match(normalized) is not None for g in globs)


def watchable_parent(compiled: CompiledGlob) -> str:
    """Return the directory to attach a filesystem watch to.

    The longest literal prefix of the pattern, or the parent directory when
    the pattern has no wildcard at all. Falls back to '.'.
    """
    absolute = compiled.pattern.startswith("/")
    parts = list(compiled.literal_parts)
    if not compiled.has_wildcard:
        parts = parts[:-1]

    if not parts:
        return "/" if absolute else "."
    joined = str(PurePosixPath(*parts))
    return f"/{joined}" if absolute else joined
