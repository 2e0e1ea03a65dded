# src/spago_build/process.py
"""Subprocess wrappers that report outcomes as tagged results.

Callers branch on `Success` / `Failure` instead of raw exit codes, and call
`raise_for_failure()` when a failure should abort the pipeline.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .errors import SubprocessError
from .logs import get_logger


@dataclass(frozen=True)
class Success:
    phase: str
    stdout: str = field(default="", repr=False)


@dataclass(frozen=True)
class Failure:
    phase: str
    exit_code: int
    stderr: str = field(default="", repr=False)


ProcessResult = Union[Success, Failure]


def raise_for_failure(result: ProcessResult, message: str | None = None) -> None:
    """Turn a Failure into a SubprocessError; do nothing on Success.

    A custom message gets the exit code appended.
    """
    if isinstance(result, Failure):
        if message is not None:
            message = f"{message} exit code: {result.exit_code}"
        raise SubprocessError(result.phase, result.exit_code, message)


def _to_result(
    phase: str, completed: subprocess.CompletedProcess[str]
) -> ProcessResult:
    if completed.returncode == 0:
        return Success(phase, completed.stdout or "")
    return Failure(phase, completed.returncode, completed.stderr or "")


def run_shell(
    command: str,
    phase: str,
    *,
    inherit_stdin: bool = False,
    cwd: Path | str | None = None,
) -> ProcessResult:
    """Run a command string through the platform shell.

    Standard input is only forwarded when `inherit_stdin` is set, which is
    reserved for the final run process of interactive programs.
    """
    logger = get_logger()
    logger.debug("Running command `%s`", command)
    completed = subprocess.run(  # noqa: S602
        command,
        shell=True,
        cwd=cwd,
        stdin=None if inherit_stdin else subprocess.DEVNULL,
        check=False,
        text=True,
    )
    result = _to_result(phase, completed)
    logger.trace("[PROCESS] %s → %r", command, result)
    return result


def run_command(
    argv: Sequence[str],
    phase: str,
    *,
    capture: bool = False,
    cwd: Path | str | None = None,
) -> ProcessResult:
    """Run an executable with an argument list (no shell)."""
    logger = get_logger()
    logger.debug("Running command `%s`", " ".join(argv))
    try:
        completed = subprocess.run(  # noqa: S603
            list(argv),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            capture_output=capture,
            check=False,
            text=True,
        )
    except FileNotFoundError as e:
        xmsg = f"{phase}: executable not found: {argv[0]}"
        raise SubprocessError(phase, 127, xmsg) from e
    result = _to_result(phase, completed)
    logger.trace("[PROCESS] %s → %r", argv[0], result)
    return result
