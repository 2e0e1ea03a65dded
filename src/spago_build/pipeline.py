# src/spago_build/pipeline.py
"""The build pipeline: before-hooks → compile → post-action → then-hooks.

If the compile step or the post-action fails, the else-hooks run and the
original failure is re-raised; then-hooks only run on success.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .compiler import PursCompiler, find_flag
from .deps_check import check_imports
from .errors import ConfigConflictError, HookError, SubprocessError
from .logs import get_logger
from .process import Failure, raise_for_failure, run_shell
from .types import BuildOptions, PackageGlobs, ProjectConfig
from .watch import watch_and_rebuild

Action = Callable[[], None]


# --------------------------------------------------------------------------- #
# globs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Globs:
    project: tuple[str, ...]  # empty when building dependencies only
    packages: PackageGlobs
    extra: tuple[str, ...]  # --path globs from the command line

    @property
    def purs_globs(self) -> list[str]:
        dep_globs = [g for globs in self.packages.values() for g in globs]
        return _unique([*dep_globs, *self.project, *self.extra])

    @property
    def js_globs(self) -> list[str]:
        """Foreign (FFI) sources next to each PureScript glob."""
        return _unique(
            re.sub(r"\.purs$", ".js", g) for g in self.purs_globs if g.endswith(".purs")
        )


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def collect_globs(options: BuildOptions, project: ProjectConfig) -> Globs:
    project_globs = () if options["deps_only"] else tuple(project["sources"])
    return Globs(
        project=project_globs,
        packages={name: list(g) for name, g in project["packages"].items()},
        extra=tuple(options["source_paths"]),
    )


# --------------------------------------------------------------------------- #
# hooks
# --------------------------------------------------------------------------- #


def run_hooks(label: str, commands: Sequence[str]) -> None:
    """Run hook commands in order; the first non-zero exit is fatal."""
    logger = get_logger()
    for command in commands:
        logger.debug("Running %s command `%s`", label, command)
        result = run_shell(command, label)
        if isinstance(result, Failure):
            raise HookError(label, result.exit_code)


# --------------------------------------------------------------------------- #
# compile step
# --------------------------------------------------------------------------- #


def check_backend_conflict(options: BuildOptions) -> None:
    """Refuse an explicit --codegen when an alternate backend is configured."""
    if options["alternate_backend"] and (
        find_flag("g", "codegen", options["purs_args"]) is not None
    ):
        xmsg = (
            "Can't pass `--codegen` option to build when using a backend.\n"
            "Hint: No need to pass `--codegen corefn` explicitly when using "
            "the `backend` option.\n"
            "Remove the argument to solve the error."
        )
        raise ConfigConflictError(xmsg)


def make_compile_step(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    globs: Sequence[str],
    project_globs: Sequence[str],
) -> Action:
    """Return the compile action: direct, or corefn + backend when configured.

    The dependency check runs after a successful compilation.
    """
    check_backend_conflict(options)
    backend = options["alternate_backend"]
    purs_args = list(options["purs_args"])
    globs = list(globs)

    def compile_step() -> None:
        logger = get_logger()
        if backend is None:
            raise_for_failure(
                compiler.compile(globs, purs_args),
                _compile_failed_message(compiler),
            )
        else:
            raise_for_failure(
                compiler.compile(globs, [*purs_args, "--codegen", "corefn"]),
                _compile_failed_message(compiler),
            )
            logger.debug('Compiling with backend "%s"', backend)
            result = run_shell(backend, "Backend")
            if isinstance(result, Failure):
                xmsg = f'Backend "{backend}" exited with error: {result.exit_code}'
                raise SubprocessError("Backend", result.exit_code, xmsg)

        check_imports(
            compiler.graph(globs),
            project_globs,
            project["packages"],
            project["dependencies"],
        )
        logger.info("Build succeeded.")

    return compile_step


def _compile_failed_message(compiler: PursCompiler) -> str:
    return f"Failed to build with `{compiler.command}`."


# --------------------------------------------------------------------------- #
# pipeline
# --------------------------------------------------------------------------- #


def run_pipeline(
    before: Sequence[str],
    compile_step: Action,
    post_action: Action | None,
    else_hooks: Sequence[str],
    then_hooks: Sequence[str],
) -> None:
    logger = get_logger()
    run_hooks("Before", before)
    try:
        compile_step()
        if post_action is not None:
            post_action()
    except Exception as e:
        logger.trace("[PIPELINE] failed with %r, running else hooks", e)
        # a failing else hook propagates, chained to the original error
        run_hooks("Else", else_hooks)
        raise
    run_hooks("Then", then_hooks)


def build(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    post_build: Action | None = None,
) -> None:
    """Build the project once, or keep rebuilding it in watch mode."""
    logger = get_logger()
    logger.debug("Running build (mode=%s)", options["watch_mode"])
    check_backend_conflict(options)

    globs = collect_globs(options, project)
    hooks = options["hooks"]

    def build_action(purs_globs: Sequence[str]) -> None:
        compile_step = make_compile_step(
            options, project, compiler, purs_globs, globs.project
        )
        run_pipeline(
            hooks["before"], compile_step, post_build, hooks["else"], hooks["then"]
        )

    if options["watch_mode"] == "once":
        build_action(globs.purs_globs)
    else:
        watch_and_rebuild(globs.purs_globs, globs.js_globs, build_action, options)
