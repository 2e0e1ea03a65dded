# src/spago_build/config.py
"""Finding, reading and validating `.spago-build.json(c)`."""

import argparse
import os
from pathlib import Path
from typing import Any

from .config_validate import validate_config
from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .logs import get_logger, log_dynamic, set_log_level
from .meta import PROGRAM_ENV, PROGRAM_SCRIPT
from .types import RootConfigInput
from .utils import bullet_list, load_jsonc
from .utils_schema import ValidationSummary
from .utils_types import cast_hint

CONFIG_NAMES = (f".{PROGRAM_SCRIPT}.jsonc", f".{PROGRAM_SCRIPT}.json")


def can_run_configless(args: argparse.Namespace) -> bool:
    """Without a config file we need at least one source glob (--path)."""
    return bool(getattr(args, "path", None)) or getattr(args, "command", None) == "script"


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """--log-level, then SPAGO_BUILD_LOG_LEVEL / LOG_LEVEL, then the config."""
    candidates = (
        getattr(args, "log_level", None),
        os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}"),
        os.getenv(DEFAULT_ENV_LOG_LEVEL),
        config_log_level,
    )
    return next((c for c in candidates if c), DEFAULT_LOG_LEVEL)


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "error",
) -> Path | None:
    """Return `--config` if given, else the project config in `cwd`, if any.

    An explicit path that does not exist is an error. A missing default
    config is only logged (at `missing_level`).
    """
    explicit = getattr(args, "config", None)
    if explicit:
        path = Path(explicit).expanduser().resolve()
        if path.is_dir():
            xmsg = f"Config path is a directory, not a file: {path}"
            raise ValueError(xmsg)
        if not path.exists():
            xmsg = f"Config file not found: {path}"
            raise FileNotFoundError(xmsg)
        return path

    present = [cwd / name for name in CONFIG_NAMES if (cwd / name).is_file()]
    if not present:
        log_dynamic(missing_level, f"No {' or '.join(CONFIG_NAMES)} in {cwd}")
        return None
    if len(present) > 1:
        get_logger().warning(
            "Both %s exist; reading %s.",
            " and ".join(p.name for p in present),
            present[0].name,
        )
    return present[0]


def load_config(config_path: Path) -> dict[str, Any] | list[Any] | None:
    """Parse a config file; None means it is empty (or only comments)."""
    try:
        return load_jsonc(config_path)
    except ValueError as e:
        xmsg = f"Could not read {config_path.name}: {e}"
        raise ValueError(xmsg) from e


def report_validation(summary: ValidationSummary, config_path: Path) -> None:
    logger = get_logger()
    mode = "strict" if summary.strict else "lenient"
    counts = summary.counts()

    if not counts:
        logger.debug("%s is valid (%s).", config_path.name, mode)
        return

    if summary.valid:
        logger.warning("%s has problems (%s, %s):", config_path.name, mode, counts)
    else:
        logger.error("%s is invalid (%s, %s):", config_path.name, mode, counts)

    if summary.errors:
        logger.error("%s", bullet_list(summary.errors))
    if summary.strict_warnings:
        logger.error("%s", bullet_list(summary.strict_warnings))
    if summary.warnings:
        logger.warning("%s", bullet_list(summary.warnings))


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, RootConfigInput] | None:
    """Find, load and validate the project config.

    Returns None when there is no config (or it is empty). The log level is
    applied before validation so the config's own `log_level` takes effect
    for the validation report.
    """
    set_log_level(determine_log_level(args))

    missing_level = "warning" if can_run_configless(args) else "error"
    config_path = find_config(args, Path.cwd().resolve(), missing_level=missing_level)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if not raw_config:
        return None
    if not isinstance(raw_config, dict):
        kind = type(raw_config).__name__
        xmsg = f"{config_path.name} must hold an object, not a {kind}"
        raise TypeError(xmsg)

    config_log_level = raw_config.get("log_level")
    if isinstance(config_log_level, str):
        set_log_level(determine_log_level(args, config_log_level))

    summary = validate_config(raw_config)
    report_validation(summary, config_path)
    if not summary.valid:
        xmsg = f"{config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = summary  # type: ignore[attr-defined]
        raise exception

    return config_path, cast_hint(RootConfigInput, raw_config)
