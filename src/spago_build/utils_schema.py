# src/spago_build/utils_schema.py
"""Check a loaded config mapping against the TypedDict schemas in `types`.

Problems are sorted into a `ValidationSummary`: type mismatches are errors,
everything else is a warning that `strict_config` turns into a failure.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from difflib import get_close_matches
from typing import Any, get_args, get_origin

from typing_extensions import is_typeddict

from .constants import DEFAULT_HINT_CUTOFF
from .utils import plural
from .utils_types import safe_isinstance, schema_from_typeddict


@dataclass
class ValidationSummary:
    strict: bool = False
    errors: list[str] = field(default_factory=list)
    strict_warnings: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors and not self.strict_warnings

    def error(self, msg: str) -> None:
        self.errors.append(msg)

    def warn(self, msg: str) -> None:
        if self.strict:
            self.strict_warnings.append(msg)
        else:
            self.warnings.append(msg)

    def counts(self) -> str:
        """e.g. '1 error, 2 warnings' (empty when there is nothing to report)."""
        parts = [
            f"{len(bucket)} {label}{plural(bucket)}"
            for label, bucket in (
                ("error", self.errors),
                ("strict warning", self.strict_warnings),
                ("warning", self.warnings),
            )
            if bucket
        ]
        return ", ".join(parts)


def describe_type(tp: Any) -> str:
    if is_typeddict(tp):
        return "an object"
    origin = get_origin(tp)
    if origin is list:
        (item,) = get_args(tp) or (Any,)
        return f"a list of {describe_type(item)}"
    if origin is dict:
        return "an object"
    if origin is not None:
        return " or ".join(describe_type(a) for a in get_args(tp))
    return getattr(tp, "__name__", repr(tp))


def suggest(key: str, choices: Iterable[str]) -> str | None:
    close = get_close_matches(key, list(choices), n=1, cutoff=DEFAULT_HINT_CUTOFF)
    return close[0] if close else None


def check_typed_dict(
    data: Mapping[str, Any],
    schema: type[Any],
    where: str,
    summary: ValidationSummary,
    *,
    skip: Iterable[str] = (),
) -> None:
    """Record type errors and unknown keys of `data` into `summary`.

    Nested TypedDicts are checked recursively. Keys in `skip` were already
    reported by the caller.
    """
    fields = schema_from_typeddict(schema)
    skipped = set(skip)

    for key, value in data.items():
        if key in skipped:
            continue

        expected = fields.get(key)
        if expected is None:
            msg = f"Unknown key `{key}` {where}."
            hint = suggest(key, fields)
            if hint:
                msg += f" Did you mean `{hint}`?"
            summary.warn(msg)
        elif is_typeddict(expected) and isinstance(value, dict):
            check_typed_dict(value, expected, f"{where} → `{key}`", summary)
        elif not safe_isinstance(value, expected):
            summary.error(
                f"`{key}` {where} must be {describe_type(expected)},"
                f" got {type(value).__name__}"
            )
