# tests/_50_pipeline_tests/test_process.py

import sys
from pathlib import Path

import pytest

import spago_build.errors as mod_errors
import spago_build.process as mod_process


def test_run_shell_success_and_failure() -> None:
    ok = mod_process.run_shell("exit 0", "Before")
    bad = mod_process.run_shell("exit 3", "Before")

    assert ok == mod_process.Success("Before")
    assert isinstance(bad, mod_process.Failure)
    assert bad.exit_code == 3


def test_run_shell_respects_cwd(tmp_path: Path) -> None:
    mod_process.run_shell("echo hi > marker.txt", "Then", cwd=tmp_path)

    assert (tmp_path / "marker.txt").exists()


def test_run_command_captures_stdout() -> None:
    result = mod_process.run_command(
        [sys.executable, "-c", "print('graph')"], "Graph", capture=True
    )

    assert isinstance(result, mod_process.Success)
    assert result.stdout.strip() == "graph"


def test_run_command_stdin_is_closed() -> None:
    """Child processes must not wait for keyboard input."""
    result = mod_process.run_command(
        [sys.executable, "-c", "import sys; print(repr(sys.stdin.read()))"],
        "Compilation",
        capture=True,
    )

    assert isinstance(result, mod_process.Success)
    assert result.stdout.strip() == "''"


def test_missing_executable_is_subprocess_error() -> None:
    with pytest.raises(mod_errors.SubprocessError) as exc:
        mod_process.run_command(["definitely-not-a-real-binary-xyz"], "Compilation")

    assert exc.value.exit_code == 127


def test_raise_for_failure() -> None:
    mod_process.raise_for_failure(mod_process.Success("Bundling"))

    with pytest.raises(
        mod_errors.SubprocessError, match="Bundling Main failed. exit code: 1"
    ):
        mod_process.raise_for_failure(
            mod_process.Failure("Bundling", 1), "Bundling Main failed."
        )
