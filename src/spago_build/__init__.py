# src/spago_build/__init__.py

"""Spago Build: compile, check and watch PureScript projects.

The names below are importable straight from `spago_build` for scripts that
drive builds from Python. Start with:
    - main()                     → the `spago-build` command line
    - build()                    → compile once, or keep rebuilding on changes
    - analyze_dependency_usage() → unused and transitively-imported packages
    - key_for()                  → cache key of a `script` run
Submodules keep their own names (`spago_build.watch`, `spago_build.graph`);
nothing exported here shadows them.
"""

from .actions import (
    bundle_app,
    bundle_module,
    get_metadata,
    node_launcher,
    run,
    run_module,
    script,
    test,
)
from .cli import main
from .compiler import PursCompiler, find_flag, output_path
from .config import find_config, load_and_validate_config, load_config
from .config_resolve import default_package_globs, resolve_options, resolve_project
from .config_validate import validate_config
from .constants import (
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SOURCES,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_WATCH_INTERVAL,
)
from .deps_check import DependencyReport, analyze_dependency_usage, check_imports
from .errors import (
    BuildError,
    ConfigConflictError,
    GraphError,
    HookError,
    ModuleNotFoundInBuildError,
    PatternError,
    ScriptDirError,
    SubprocessError,
    TransitiveDependencyError,
)
from .globs import CompiledGlob, compile_glob, matches, matches_any, watchable_parent
from .graph import ModuleGraph, is_project_file, owner_package
from .logs import LEVEL_ORDER, RESET, colorize, get_logger
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .pipeline import build, collect_globs, run_pipeline
from .process import Failure, ProcessResult, Success
from .runtime import Runtime, current_runtime
from .script_cache import key_for, resolve_script_dir
from .types import (
    BuildOptions,
    ModuleGraphNode,
    OriginType,
    ProjectConfig,
    RootConfigInput,
    WatchMode,
)
from .utils import load_jsonc, should_use_color
from .utils_types import safe_isinstance, schema_from_typeddict
from .watch import (
    PollingWatcher,
    RebuildScheduler,
    partition_globs,
    watch_and_rebuild,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "bundle_app",
    "bundle_module",
    "get_metadata",  # version info
    "main",
    "node_launcher",
    "run",
    "run_module",
    "script",
    "test",
    #
    # --- Build Engine ---
    "PursCompiler",
    "build",
    "collect_globs",
    "find_flag",
    "output_path",
    "run_pipeline",
    "Failure",
    "ProcessResult",
    "Success",
    #
    # --- Analysis ---
    "DependencyReport",
    "ModuleGraph",
    "analyze_dependency_usage",
    "check_imports",
    "is_project_file",
    "owner_package",
    #
    # --- Watching ---
    "PollingWatcher",
    "RebuildScheduler",
    "partition_globs",
    "watch_and_rebuild",
    #
    # --- Script cache ---
    "key_for",
    "resolve_script_dir",
    #
    # --- Config Handling ---
    "default_package_globs",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "resolve_options",
    "resolve_project",
    "validate_config",
    #
    # --- Errors ---
    "BuildError",
    "ConfigConflictError",
    "GraphError",
    "HookError",
    "ModuleNotFoundInBuildError",
    "PatternError",
    "ScriptDirError",
    "SubprocessError",
    "TransitiveDependencyError",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_ENV_WATCH_INTERVAL",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_SOURCES",
    "DEFAULT_STRICT_CONFIG",
    "DEFAULT_WATCH_INTERVAL",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "CompiledGlob",
    "LEVEL_ORDER",
    "RESET",
    "colorize",
    "compile_glob",
    "get_logger",
    "load_jsonc",
    "matches",
    "matches_any",
    "safe_isinstance",
    "schema_from_typeddict",
    "should_use_color",
    "watchable_parent",
    #
    # --- Types ---
    "BuildOptions",
    "ModuleGraphNode",
    "OriginType",
    "ProjectConfig",
    "RootConfigInput",
    "Runtime",
    "WatchMode",
]
