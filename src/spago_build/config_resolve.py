# src/spago_build/config_resolve.py


import argparse
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .compiler import find_flag
from .constants import (
    CACHE_DIR,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PURS,
    DEFAULT_SOURCES,
    DEFAULT_WATCH_DEBOUNCE,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import get_logger
from .meta import PROGRAM_ENV
from .types import (
    BuildOptions,
    HooksResolved,
    PackageGlobs,
    ProjectConfig,
    RootConfigInput,
)

# --------------------------------------------------------------------------- #
# packages
# --------------------------------------------------------------------------- #


def default_package_globs(names: Iterable[str]) -> PackageGlobs:
    """Source globs of installed packages: `.spago/<name>/<version>/src/**`."""
    return {name: [f"{CACHE_DIR}/{name}/*/src/**/*.purs"] for name in names}


def discover_installed_packages(root: Path) -> list[str]:
    """Names of packages installed under `<root>/.spago`, sorted."""
    cache = root / CACHE_DIR
    if not cache.is_dir():
        return []
    return sorted(p.name for p in cache.iterdir() if p.is_dir())


def resolve_package_globs(
    declared: dict[str, list[str] | str] | None,
    dependencies: list[str],
    installed: list[str],
) -> PackageGlobs:
    """Merge explicit package globs with the default layout.

    Order matters (first match wins when attributing a file): explicit
    entries in declaration order, then declared dependencies, then any
    other installed package.
    """
    packages: PackageGlobs = {}
    for name, globs in (declared or {}).items():
        packages[name] = [globs] if isinstance(globs, str) else list(globs)

    for name in [*dependencies, *installed]:
        if name not in packages:
            packages.update(default_package_globs([name]))
    return packages


# --------------------------------------------------------------------------- #
# project
# --------------------------------------------------------------------------- #


def resolve_project(
    root_cfg: RootConfigInput | None,
    config_dir: Path,
    config_path: Path | None = None,
) -> ProjectConfig:
    """Turn the loaded config (or its absence) into a ProjectConfig."""
    logger = get_logger()
    cfg: dict[str, Any] = dict(root_cfg or {})

    sources = list(cfg.get("sources", DEFAULT_SOURCES if root_cfg else []))
    dependencies = list(cfg.get("dependencies", []))
    packages = resolve_package_globs(
        cfg.get("packages"), dependencies, discover_installed_packages(config_dir)
    )

    project: ProjectConfig = {
        "name": cfg.get("name", config_dir.name),
        "sources": sources,
        "dependencies": dependencies,
        "packages": packages,
        "output": cfg.get("output", DEFAULT_OUTPUT_DIR),
        "purs": cfg.get("purs", DEFAULT_PURS),
    }
    if config_path is not None:
        project["config_path"] = str(config_path)

    logger.trace("[RESOLVE] project=%s", project)
    return project


# --------------------------------------------------------------------------- #
# options
# --------------------------------------------------------------------------- #


def _resolve_watch_interval(args: argparse.Namespace, cfg: dict[str, Any]) -> float:
    """--watch-interval → env → config → default."""
    logger = get_logger()
    if getattr(args, "watch_interval", None) is not None:
        return float(args.watch_interval)

    env_watch = os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_WATCH_INTERVAL}") or os.getenv(
        DEFAULT_ENV_WATCH_INTERVAL
    )
    if env_watch is not None:
        try:
            return float(env_watch)
        except ValueError:
            logger.warning(
                "Invalid %s=%r, using default.", DEFAULT_ENV_WATCH_INTERVAL, env_watch
            )
            return DEFAULT_WATCH_INTERVAL

    return float(cfg.get("watch_interval", DEFAULT_WATCH_INTERVAL))


def resolve_options(
    args: argparse.Namespace,
    root_cfg: RootConfigInput | None = None,
) -> BuildOptions:
    """Merge CLI flags over config values into the options for one invocation."""
    cfg: dict[str, Any] = dict(root_cfg or {})
    cfg_hooks: dict[str, list[str]] = dict(cfg.get("hooks", {}))

    hooks: HooksResolved = {
        "before": [*cfg_hooks.get("before", []), *(getattr(args, "before", None) or [])],
        "else": [*cfg_hooks.get("else", []), *(getattr(args, "else_", None) or [])],
        "then": [*cfg_hooks.get("then", []), *(getattr(args, "then", None) or [])],
    }

    backend = getattr(args, "backend", None) or cfg.get("backend") or None
    purs_args = [*cfg.get("purs_args", []), *(getattr(args, "purs_args", None) or [])]
    if "output" in cfg and find_flag("o", "output", purs_args) is None:
        purs_args += ["--output", cfg["output"]]

    options: BuildOptions = {
        "source_paths": list(getattr(args, "path", None) or []),
        "deps_only": bool(getattr(args, "deps_only", False)),
        "alternate_backend": backend,
        "purs_args": purs_args,
        "watch_mode": "watch" if getattr(args, "watch", False) else "once",
        "should_clear": bool(getattr(args, "clear_screen", False))
        or bool(cfg.get("clear_screen", False)),
        "allow_ignored_dirs": bool(getattr(args, "allow_ignored", False))
        or bool(cfg.get("allow_ignored", False)),
        "hooks": hooks,
        "watch_interval": _resolve_watch_interval(args, cfg),
        "watch_debounce": float(cfg.get("watch_debounce", DEFAULT_WATCH_DEBOUNCE)),
    }
    get_logger().trace("[RESOLVE] options=%s", options)
    return options
