# src/spago_build/compiler.py
"""Adapter around the external `purs` compiler executable."""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from .constants import DEFAULT_OUTPUT_DIR, DEFAULT_PURS
from .errors import GraphError
from .graph import ModuleGraph
from .logs import get_logger
from .process import Failure, ProcessResult, run_command


def split_args(args: Sequence[str]) -> list[str]:
    """Flatten args given as whole strings (e.g. "--codegen corefn")."""
    flat: list[str] = []
    for arg in args:
        flat.extend(shlex.split(arg))
    return flat


def find_flag(short: str, long: str, args: Sequence[str]) -> str | None:
    """Return the value of `-<short> X`, `--<long> X` or `--<long>=X`."""
    flat = split_args(args)
    for i, arg in enumerate(flat):
        if arg in (f"-{short}", f"--{long}"):
            return flat[i + 1] if i + 1 < len(flat) else ""
        if arg.startswith(f"--{long}="):
            return arg.split("=", 1)[1]
        if arg.startswith(f"-{short}") and not arg.startswith("--") and len(arg) > 2:
            return arg[2:]
    return None


def output_path(purs_args: Sequence[str]) -> str:
    """Compiler output directory, honouring `-o` / `--output`."""
    return find_flag("o", "output", purs_args) or DEFAULT_OUTPUT_DIR


class PursCompiler:
    """Runs `purs` subcommands; every call blocks until the process exits."""

    def __init__(self, command: str = DEFAULT_PURS) -> None:
        self.command = command

    def __repr__(self) -> str:
        return f"PursCompiler({self.command!r})"

    def compile(self, globs: Sequence[str], purs_args: Sequence[str]) -> ProcessResult:
        logger = get_logger()
        logger.info("Compiling %d source glob(s)...", len(globs))
        argv = [self.command, "compile", *globs, *split_args(purs_args)]
        return run_command(argv, "Compilation")

    def graph(self, globs: Sequence[str]) -> ModuleGraph | None:
        """Ask the compiler for the module graph; None if it cannot emit one."""
        logger = get_logger()
        result = run_command([self.command, "graph", *globs], "Graph", capture=True)
        if isinstance(result, Failure):
            logger.debug(
                "Could not get the module graph (exit code %d), skipping import check",
                result.exit_code,
            )
            return None
        try:
            return ModuleGraph.from_json(result.stdout)
        except (GraphError, ValueError) as e:
            logger.debug("Ignoring unreadable module graph: %s", e)
            return None

    def bundle(
        self,
        module: str,
        target: str,
        *,
        with_main: bool,
        source_maps: bool = False,
        output_dir: str = DEFAULT_OUTPUT_DIR,
    ) -> ProcessResult:
        argv = [
            self.command,
            "bundle",
            f"{output_dir}/*/*.js",
            "-m",
            module,
            *(["--main", module] if with_main else []),
            "-o",
            target,
            *(["--source-maps"] if source_maps else []),
        ]
        return run_command(argv, "Bundling")
