# tests/utils/trace.py

import builtins
import importlib
import os

TRACE_ENABLED = os.environ.get("TRACE", "").lower() in {"1", "true", "yes"}


def make_trace(icon: str = "🧪"):
    """Return a TRACE function whose lines start with `icon`."""

    def trace(label: str, *args: object) -> None:
        if not TRACE_ENABLED:
            return
        # the watch tests monkeypatch time, so use a pristine module
        real_time = importlib.import_module("time")
        builtins.print(f"{icon} [TRACE {real_time.monotonic():.6f}] {label}:", *args, flush=True)

    return trace


TRACE = make_trace()
