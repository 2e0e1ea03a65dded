# tests/_60_watch_tests/test_rebuild_scheduler.py

import threading

import pytest

import spago_build.watch as mod_watch


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_burst_of_events_builds_once() -> None:
    # --- setup ---
    builds: list[int] = []
    scheduler = mod_watch.RebuildScheduler(
        lambda: builds.append(1), debounce=0.0, clock=_Clock()
    )

    # --- execute ---
    for _ in range(3):
        scheduler.notify()
    scheduler.run_once()

    # --- verify ---
    assert builds == [1]
    assert not scheduler.pending
    assert not scheduler.building


def test_events_during_build_cause_one_follow_up() -> None:
    # --- setup ---
    builds: list[str] = []
    scheduler: mod_watch.RebuildScheduler

    def rebuild() -> None:
        builds.append("build")
        assert scheduler.building
        if len(builds) == 1:
            # two changes arrive while the first build runs
            scheduler.notify()
            scheduler.notify()

    scheduler = mod_watch.RebuildScheduler(rebuild, debounce=0.0, clock=_Clock())

    # --- execute ---
    scheduler.notify(immediate=True)
    scheduler.run_once()
    assert scheduler.pending
    scheduler.run_once()

    # --- verify ---
    assert builds == ["build", "build"]
    assert not scheduler.pending
    assert scheduler.builds == 2


def test_debounce_waits_for_quiet_period() -> None:
    """With a real clock, a build is not due before the debounce elapsed."""
    # --- setup ---
    started = threading.Event()
    scheduler = mod_watch.RebuildScheduler(started.set, debounce=0.05)

    # --- execute ---
    scheduler.notify()
    worker = threading.Thread(target=scheduler.run_once, daemon=True)
    worker.start()

    # --- verify ---
    assert not started.wait(0.01)
    assert started.wait(2.0)
    worker.join(2.0)


def test_failed_build_keeps_loop_alive(capsys: pytest.CaptureFixture[str]) -> None:
    # --- setup ---
    attempts: list[int] = []

    def rebuild() -> None:
        attempts.append(1)
        raise RuntimeError("compile exploded")

    scheduler = mod_watch.RebuildScheduler(rebuild, debounce=0.0, clock=_Clock())

    # --- execute ---
    scheduler.notify()
    assert scheduler.run_once() is True
    scheduler.notify()
    assert scheduler.run_once() is True

    # --- verify ---
    assert len(attempts) == 2
    assert "compile exploded" in capsys.readouterr().err
    assert not scheduler.building


def test_stop_ends_run_forever() -> None:
    scheduler = mod_watch.RebuildScheduler(lambda: None, debounce=0.0)
    worker = threading.Thread(target=scheduler.run_forever, daemon=True)
    worker.start()

    scheduler.stop()
    worker.join(2.0)

    assert not worker.is_alive()
    assert scheduler.run_once() is False
