# src/spago_build/logs.py
"""The program logger: a TRACE level, emoji/colored tags, stdout vs stderr.

The active level lives in `current_runtime["log_level"]` so the CLI, the
config loader and tests all steer the same logger.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime
from .utils import safe_log

RESET = "\033[0m"
CYAN = "\033[36m"
GREEN = "\033[92m"
GRAY = "\033[90m"

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

# name → numeric level, quietest last
LEVELS = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,
}
LEVEL_ORDER = list(LEVELS)

# numeric level → (color, tag); info has no tag
TAGS = {
    TRACE_LEVEL: (GRAY, "[TRACE]"),
    logging.DEBUG: (CYAN, "[DEBUG]"),
    logging.WARNING: ("", "⚠️ "),
    logging.ERROR: ("", "❌ "),
    logging.CRITICAL: ("", "💥 "),
}


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color and color else text


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.getEffectiveLevel()).lower()

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error; include the active traceback only when debugging."""
        self.error(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        self.critical(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color, tag = TAGS.get(record.levelno, ("", ""))
        if not tag:
            return msg
        use_color = current_runtime.get("use_color", True)
        return f"{colorize(tag, color, use_color=use_color)} {msg}"


class DualStreamHandler(logging.Handler):
    """Warnings and worse go to stderr, the rest to stdout.

    The streams are looked up per record so redirected `sys.stdout` /
    `sys.stderr` (pytest capture, `contextlib.redirect_stdout`) are honored.
    """

    def emit(self, record: logging.LogRecord) -> None:
        stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        try:
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:  # noqa: BLE001
            self.handleError(record)


def _create_logger() -> LoggerWithTrace:
    # only this logger gets the subclass; the global logger class stays put
    previous = logging.getLoggerClass()
    logging.setLoggerClass(LoggerWithTrace)
    try:
        logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
    finally:
        logging.setLoggerClass(previous)

    handler = DualStreamHandler()
    handler.setFormatter(TagFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


_logger = _create_logger()


def _sync_level() -> None:
    name = current_runtime.get("log_level") or "error"
    _logger.setLevel(LEVELS.get(str(name).lower(), logging.INFO))


def get_logger() -> LoggerWithTrace:
    _sync_level()
    return _logger


def set_log_level(level: str) -> None:
    """Set the level for the whole program; unknown names are reported and ignored."""
    if level not in LEVELS:
        safe_log(f"[LOGGER ERROR] ❌ Unknown log level: {level!r}")
        return
    current_runtime["log_level"] = level
    _sync_level()


@contextmanager
def temporary_log_level(level: str) -> Iterator[None]:
    previous = current_runtime["log_level"]
    set_log_level(level)
    try:
        yield
    finally:
        current_runtime["log_level"] = previous
        _sync_level()


def log_dynamic(level: str, message: str) -> None:
    """Log at a level given by name, e.g. a configurable 'missing config' level."""
    if level == "silent":
        return
    numeric = LEVELS.get(level.lower())
    if numeric is None:
        get_logger().error("Unknown log level: %r", level)
        return
    get_logger().log(numeric, message)
