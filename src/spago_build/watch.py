# src/spago_build/watch.py
"""Watch mode: rebuild whenever a watched source file changes.

A polling listener thread reports changes to a RebuildScheduler, which runs
rebuilds on the calling thread. At most one build is in flight; any number
of events during a build cause exactly one follow-up build.
"""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from fnmatch import fnmatch
from pathlib import Path

from .constants import CACHE_DIR, DEFAULT_WATCH_DEBOUNCE, DEFAULT_WATCH_INTERVAL
from .globs import (
    CompiledGlob,
    compile_glob,
    matches_any,
    normalize_path_string,
    watchable_parent,
)
from .logs import get_logger
from .types import BuildOptions
from .utils import bullet_list, clear_screen

# --------------------------------------------------------------------------- #
# glob partitioning
# --------------------------------------------------------------------------- #


def _has_files(directory: Path) -> bool:
    if not directory.is_dir():
        return False
    return any(p.is_file() for p in directory.rglob("*"))


def partition_globs(globs: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split globs into (matches, mismatches).

    A glob matches when its watchable parent directory currently holds at
    least one file. Mismatches are reported by their parent directory.
    """
    logger = get_logger()
    matched: list[str] = []
    mismatched: list[str] = []
    for glob in globs:
        parent = watchable_parent(compile_glob(glob))
        if _has_files(Path(parent)):
            matched.append(glob)
        else:
            mismatched.append(parent)
        logger.trace("[PARTITION] %s → parent=%s", glob, parent)
    return matched, mismatched


def warn_mismatches(mismatches: Iterable[str], seen: set[str]) -> list[str]:
    """Warn once about directories that cannot be watched yet."""
    fresh: list[str] = []
    for directory in mismatches:
        if directory not in seen:
            seen.add(directory)
            fresh.append(directory)

    if fresh:
        get_logger().warning(
            "No matches found when trying to watch the following directories:\n"
            "%s\n"
            "Please check that your source path globs are correct. Note that "
            "new files created in these directories won't be picked up until "
            "you restart.",
            bullet_list(fresh),
        )
    return fresh


# --------------------------------------------------------------------------- #
# watch roots
# --------------------------------------------------------------------------- #


def _in_cache_dir(path: str, cache_dir: str = CACHE_DIR) -> bool:
    return cache_dir in normalize_path_string(path).split("/")


def absolute_globs(
    globs: Iterable[str],
    *,
    cwd: Path | None = None,
    cache_dir: str = CACHE_DIR,
) -> list[str]:
    """Make globs absolute and collapsed, dropping anything in the cache dir."""
    base = str(cwd or Path.cwd())
    result: list[str] = []
    for glob in globs:
        if _in_cache_dir(glob, cache_dir):
            continue
        collapsed = normalize_path_string(os.path.normpath(os.path.join(base, glob)))
        if collapsed not in result:
            result.append(collapsed)
    return result


def watch_roots(globs: Iterable[str]) -> list[str]:
    """Deduplicated directories to poll, without roots nested in others."""
    parents = sorted({watchable_parent(compile_glob(g)) for g in globs})
    roots: list[str] = []
    for parent in parents:
        if any(parent == r or parent.startswith(r.rstrip("/") + "/") for r in roots):
            continue
        roots.append(parent)
    return roots


# --------------------------------------------------------------------------- #
# ignore rules
# --------------------------------------------------------------------------- #


def load_gitignore_patterns(path: Path) -> list[str]:
    """Read .gitignore and return non-comment, non-negated patterns."""
    patterns: list[str] = []
    if path.exists():
        for raw in path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if line and not line.startswith(("#", "!")):
                patterns.append(line)
    return patterns


def is_ignored(rel_path: str, patterns: Sequence[str]) -> bool:
    """Approximate gitignore matching for a path relative to the repo root."""
    parts = normalize_path_string(rel_path).split("/")
    for raw in patterns:
        dir_only = raw.endswith("/")
        pat = raw.strip("/")
        if "/" in pat:
            # anchored: match the path or any of its leading directories
            for i in range(1, len(parts) + 1):
                if dir_only and i == len(parts):
                    break
                if fnmatch("/".join(parts[:i]), pat):
                    return True
            continue
        candidates = parts[:-1] if dir_only else parts
        if any(fnmatch(part, pat) for part in candidates):
            return True
    return False


# --------------------------------------------------------------------------- #
# scheduler
# --------------------------------------------------------------------------- #


class RebuildScheduler:
    """Coalesce change notifications into serialized rebuilds.

    `notify()` may be called from any thread. `run_once()` waits until a
    rebuild is due (pending, and no new event for `debounce` seconds),
    then runs it. Events during a build only set the pending flag again.
    """

    def __init__(
        self,
        rebuild: Callable[[], None],
        *,
        debounce: float = DEFAULT_WATCH_DEBOUNCE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._rebuild = rebuild
        self._debounce = debounce
        self._clock = clock
        self._cond = threading.Condition()
        self._pending = False
        self._building = False
        self._stopped = False
        self._last_event = float("-inf")
        self.builds = 0

    @property
    def pending(self) -> bool:
        with self._cond:
            return self._pending

    @property
    def building(self) -> bool:
        with self._cond:
            return self._building

    def notify(self, *, immediate: bool = False) -> None:
        with self._cond:
            self._pending = True
            self._last_event = float("-inf") if immediate else self._clock()
            self._cond.notify_all()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    def _wait_until_due(self) -> bool:
        with self._cond:
            while not self._stopped:
                if self._pending:
                    remaining = self._last_event + self._debounce - self._clock()
                    if remaining <= 0:
                        self._pending = False
                        self._building = True
                        return True
                    self._cond.wait(remaining)
                else:
                    self._cond.wait()
            return False

    def run_once(self) -> bool:
        """Run the next due rebuild. Returns False once stopped."""
        if not self._wait_until_due():
            return False
        logger = get_logger()
        try:
            self.builds += 1
            self._rebuild()
        except Exception as e:  # noqa: BLE001
            # a failed rebuild never ends the watch loop
            logger.error_if_not_debug(str(e))
        finally:
            with self._cond:
                self._building = False
        return True

    def run_forever(self) -> None:
        while self.run_once():
            pass


# --------------------------------------------------------------------------- #
# polling listener
# --------------------------------------------------------------------------- #


class PollingWatcher(threading.Thread):
    """Poll modification times under the watch roots on a daemon thread."""

    def __init__(
        self,
        globs: Sequence[str],
        roots: Sequence[str],
        on_change: Callable[[list[Path]], None],
        *,
        interval: float = DEFAULT_WATCH_INTERVAL,
        allow_ignored: bool = False,
        ignore_root: Path | None = None,
    ) -> None:
        super().__init__(name="spago-build-watch", daemon=True)
        self.compiled: list[CompiledGlob] = [compile_glob(g) for g in globs]
        self.roots = [Path(r) for r in roots]
        self.on_change = on_change
        self.interval = interval
        self.allow_ignored = allow_ignored
        self.ignore_root = ignore_root or Path.cwd()
        self.ignore_patterns = (
            [] if allow_ignored else load_gitignore_patterns(self.ignore_root / ".gitignore")
        )
        self._stop_event = threading.Event()
        self._mtimes: dict[Path, float] = self.scan()

    def _eligible(self, path: Path) -> bool:
        if _in_cache_dir(str(path)):
            return False
        if not matches_any(self.compiled, str(path)):
            return False
        if self.ignore_patterns:
            try:
                rel = path.relative_to(self.ignore_root)
            except ValueError:
                return True
            return not is_ignored(str(rel), self.ignore_patterns)
        return True

    def scan(self) -> dict[Path, float]:
        mtimes: dict[Path, float] = {}
        for root in self.roots:
            if not root.is_dir():
                continue
            for path in root.rglob("*"):
                if path in mtimes or not self._eligible(path):
                    continue
                try:
                    if path.is_file():
                        mtimes[path] = path.stat().st_mtime
                except FileNotFoundError:
                    # vanished between listing and stat
                    continue
        return mtimes

    def poll_once(self) -> list[Path]:
        """Compare against the last snapshot; report and return changed files."""
        current = self.scan()
        changed = [
            p
            for p in current.keys() | self._mtimes.keys()
            if current.get(p) != self._mtimes.get(p)
        ]
        self._mtimes = current
        if changed:
            get_logger().trace("[WATCH] changed: %s", [str(p) for p in changed])
            self.on_change(sorted(changed))
        return changed

    def run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.poll_once()

    def stop(self) -> None:
        self._stop_event.set()


# --------------------------------------------------------------------------- #
# entry
# --------------------------------------------------------------------------- #


def watch_and_rebuild(
    purs_globs: Sequence[str],
    js_globs: Sequence[str],
    build_action: Callable[[Sequence[str]], None],
    options: BuildOptions,
) -> None:
    """Build, then rebuild on every change until interrupted (Ctrl+C)."""
    logger = get_logger()

    ps_matches, ps_mismatches = partition_globs(purs_globs)
    js_matches, js_mismatches = partition_globs(js_globs)
    warn_mismatches([*ps_mismatches, *js_mismatches], set())

    globs = absolute_globs([*ps_matches, *js_matches])
    roots = watch_roots(globs)
    logger.debug("Watch roots:\n%s", bullet_list(roots))

    def rebuild() -> None:
        if options["should_clear"]:
            clear_screen()
        # JS globs are only watched, the compiler gets the PureScript ones
        build_action(ps_matches)

    scheduler = RebuildScheduler(rebuild, debounce=options["watch_debounce"])
    watcher = PollingWatcher(
        globs,
        roots,
        lambda _changed: scheduler.notify(),
        interval=options["watch_interval"],
        allow_ignored=options["allow_ignored_dirs"],
    )

    logger.info(
        "👀 Watching %d director%s for changes... Press Ctrl+C to stop.",
        len(roots),
        "y" if len(roots) == 1 else "ies",
    )
    watcher.start()
    scheduler.notify(immediate=True)  # initial build
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")
    finally:
        watcher.stop()
        # a poll in progress finishes its scan; the stop event ends the wait
        watcher.join(max(options["watch_interval"], 1.0))
        scheduler.stop()
