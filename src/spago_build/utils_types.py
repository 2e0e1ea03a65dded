# src/spago_build/utils_types.py

import types
from typing import (
    Any,
    Literal,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from typing_extensions import is_typeddict

T = TypeVar("T")


def cast_hint(typ: type[T], value: Any) -> T:
    """Explicit cast that documents intent; a no-op at runtime."""
    return cast(T, value)


def schema_from_typeddict(td: type[Any]) -> dict[str, Any]:
    """Return a {field: type} mapping for a TypedDict (annotations resolved)."""
    try:
        return dict(get_type_hints(td))
    except (NameError, TypeError):
        # unresolved forward refs: fall back to the raw annotations
        return dict(getattr(td, "__annotations__", {}))


def safe_isinstance(value: Any, expected_type: Any) -> bool:  # noqa: PLR0911
    """isinstance() that understands Any, unions, Literal and list/dict generics."""
    if expected_type is Any:
        return True

    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is Union or origin is types.UnionType:
        return any(safe_isinstance(value, arg) for arg in args)

    if origin is Literal:
        return value in args

    if is_typeddict(expected_type):
        return isinstance(value, dict)

    if origin is list:
        if not isinstance(value, list):
            return False
        if not args:
            return True
        return all(safe_isinstance(v, args[0]) for v in value)  # pyright: ignore[reportUnknownVariableType]

    if origin is dict:
        if not isinstance(value, dict):
            return False
        if not args:
            return True
        key_type, val_type = args
        return all(
            safe_isinstance(k, key_type) and safe_isinstance(v, val_type)
            for k, v in value.items()  # pyright: ignore[reportUnknownVariableType]
        )

    if expected_type is type(None) or expected_type is None:
        return value is None

    # bools are ints to python, but not to a config file
    if expected_type in (int, float) and isinstance(value, bool):
        return False
    if expected_type is float:
        return isinstance(value, (int, float))

    if isinstance(expected_type, type):
        return isinstance(value, expected_type)

    return False
