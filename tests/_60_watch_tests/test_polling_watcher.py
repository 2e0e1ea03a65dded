# tests/_60_watch_tests/test_polling_watcher.py

import threading
from pathlib import Path

import pytest

import spago_build.watch as mod_watch
from tests.utils import force_mtime_advance


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    src = tmp_path / "src"
    src.mkdir()
    (src / "Main.purs").write_text("module Main where\n", encoding="utf-8")
    (src / "Main.js").write_text("export const x = 1;\n", encoding="utf-8")
    (tmp_path / ".spago" / "prelude").mkdir(parents=True)
    (tmp_path / ".spago" / "prelude" / "Prelude.purs").write_text("", encoding="utf-8")
    return tmp_path


def _watcher(root: Path, changes: list[list[Path]], **kwargs) -> mod_watch.PollingWatcher:
    globs = [f"{root.as_posix()}/**/*.purs"]
    return mod_watch.PollingWatcher(
        globs,
        mod_watch.watch_roots(globs),
        changes.append,
        interval=0.01,
        ignore_root=root,
        **kwargs,
    )


def test_initial_scan_reports_nothing(tree: Path) -> None:
    changes: list[list[Path]] = []
    watcher = _watcher(tree, changes)

    assert watcher.poll_once() == []
    assert changes == []


def test_modified_file_is_reported(tree: Path) -> None:
    # --- setup ---
    changes: list[list[Path]] = []
    watcher = _watcher(tree, changes)

    # --- execute ---
    force_mtime_advance(tree / "src" / "Main.purs")
    watcher.poll_once()

    # --- verify ---
    assert changes == [[tree / "src" / "Main.purs"]]


def test_new_and_deleted_files_are_reported(tree: Path) -> None:
    changes: list[list[Path]] = []
    watcher = _watcher(tree, changes)

    (tree / "src" / "Extra.purs").write_text("", encoding="utf-8")
    (tree / "src" / "Main.purs").unlink()
    watcher.poll_once()

    assert changes == [[tree / "src" / "Extra.purs", tree / "src" / "Main.purs"]]


def test_non_matching_and_cache_files_are_ignored(tree: Path) -> None:
    changes: list[list[Path]] = []
    watcher = _watcher(tree, changes)

    force_mtime_advance(tree / "src" / "Main.js")
    force_mtime_advance(tree / ".spago" / "prelude" / "Prelude.purs")
    watcher.poll_once()

    assert changes == []


def test_gitignored_files_are_ignored_unless_allowed(tree: Path) -> None:
    # --- setup ---
    (tree / ".gitignore").write_text("generated/\n", encoding="utf-8")
    gen = tree / "generated"
    gen.mkdir()
    (gen / "Types.purs").write_text("", encoding="utf-8")

    strict: list[list[Path]] = []
    lenient: list[list[Path]] = []
    strict_watcher = _watcher(tree, strict)
    lenient_watcher = _watcher(tree, lenient, allow_ignored=True)

    # --- execute ---
    force_mtime_advance(gen / "Types.purs")
    strict_watcher.poll_once()
    lenient_watcher.poll_once()

    # --- verify ---
    assert strict == []
    assert lenient == [[gen / "Types.purs"]]


@pytest.mark.slow
def test_thread_polls_until_stopped(tree: Path) -> None:
    seen = threading.Event()
    globs = [f"{tree.as_posix()}/src/*.purs"]
    watcher = mod_watch.PollingWatcher(
        globs, mod_watch.watch_roots(globs), lambda _c: seen.set(), interval=0.01
    )
    watcher.start()
    try:
        force_mtime_advance(tree / "src" / "Main.purs")
        assert seen.wait(2.0)
    finally:
        watcher.stop()
        watcher.join(2.0)
    assert not watcher.is_alive()
