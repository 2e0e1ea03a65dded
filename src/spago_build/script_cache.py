# src/spago_build/script_cache.py
"""Stable scratch directories for `script` runs.

Running the same script with the same tag, dependencies and options again
reuses the directory (and whatever was installed into it last time).
"""

from __future__ import annotations

import hashlib
import json
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .constants import CACHE_KEY_VERSION, SCRIPT_DIR_PREFIX
from .errors import ScriptDirError
from .logs import get_logger


def _canonical(value: Any) -> Any:
    """Reduce options to JSON-stable values (tuples→lists, paths→str)."""
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_canonical(v) for v in value)
    if isinstance(value, Path):
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    xmsg = f"Cannot derive a cache key from {type(value).__name__}"
    raise TypeError(xmsg)


def canonical_key_input(
    script_path: str | Path,
    tag: str | None,
    dependencies: Sequence[str],
    options: Mapping[str, Any],
) -> str:
    """Versioned, canonical serialization of the four cache-key inputs.

    Dependency order is kept: it is part of what the user asked for.
    """
    payload = {
        "version": CACHE_KEY_VERSION,
        "script": str(script_path),
        "tag": tag,
        "dependencies": list(dependencies),
        "options": _canonical(options),
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def key_for(
    script_path: str | Path,
    tag: str | None,
    dependencies: Sequence[str],
    options: Mapping[str, Any],
) -> str:
    """SHA-256 hex digest identifying a script invocation."""
    text = canonical_key_input(script_path, tag, dependencies, options)
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def script_dir_path(digest: str, temp_root: Path | str | None = None) -> Path:
    root = Path(temp_root) if temp_root is not None else Path(tempfile.gettempdir())
    return root / f"{SCRIPT_DIR_PREFIX}-{digest}"


def resolve_script_dir(digest: str, temp_root: Path | str | None = None) -> Path:
    """Create (if needed) and return the scratch directory for a digest.

    Existing contents are left untouched.
    """
    logger = get_logger()
    path = script_dir_path(digest, temp_root)
    logger.debug("Found a system temp directory: %s", path.parent)
    logger.warning("Creating semi-temp directory to run the script: %s", path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        xmsg = f"Could not create script directory {path}: {e.strerror or e}"
        raise ScriptDirError(xmsg) from e
    return path
