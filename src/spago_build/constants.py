# src/spago_build/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = False
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_PURS: str = "purs"
DEFAULT_OUTPUT_DIR: str = "output"
DEFAULT_SOURCES: tuple[str, ...] = ("src/**/*.purs", "test/**/*.purs")
DEFAULT_WATCH_INTERVAL: float = 0.5  # seconds between polls
DEFAULT_WATCH_DEBOUNCE: float = 0.1  # seconds of quiet before a rebuild
DEFAULT_HINT_CUTOFF: float = 0.6

# --- project layout ---
CACHE_DIR: str = ".spago"
RUN_SCRIPT: str = ".spago/run.js"

# --- modules ---
DEFAULT_MAIN_MODULE: str = "Main"
DEFAULT_TEST_MODULE: str = "Test.Main"
DEFAULT_BUNDLE_TARGET: str = "index.js"

# --- dependency analysis ---
# packages never reported as unused, the repl needs them implicitly
DEFAULT_PACKAGES: frozenset[str] = frozenset({"psci-support"})

# --- script cache ---
SCRIPT_DIR_PREFIX: str = "spago-script-tmp"
SCRIPT_DEFAULT_PACKAGES: tuple[str, ...] = ("effect", "console", "prelude")
CACHE_KEY_VERSION: int = 1
