# src/spago_build/actions.py
"""Commands built on top of the pipeline: run, test, bundle and script."""

import json
import os
import re
import shlex
import subprocess
from collections.abc import Sequence
from contextlib import suppress
from pathlib import Path

from .compiler import PursCompiler, output_path
from .config_resolve import default_package_globs
from .constants import (
    DEFAULT_BUNDLE_TARGET,
    DEFAULT_MAIN_MODULE,
    DEFAULT_TEST_MODULE,
    RUN_SCRIPT,
    SCRIPT_DEFAULT_PACKAGES,
)
from .errors import BuildError, ModuleNotFoundInBuildError, SubprocessError
from .logs import get_logger
from .meta import PROGRAM_SCRIPT, Metadata
from .pipeline import Action, build, collect_globs
from .process import Failure, raise_for_failure, run_command, run_shell
from .script_cache import key_for, resolve_script_dir
from .types import BuildOptions, ProjectConfig
from .utils import working_directory


# options that only matter in watch mode; they never change a script build
WATCH_ONLY_OPTIONS = frozenset(
    {
        "watch_mode",
        "watch_interval",
        "watch_debounce",
        "should_clear",
        "allow_ignored_dirs",
    }
)


# --------------------------------------------------------------------------- #
# run / test
# --------------------------------------------------------------------------- #


def node_launcher(source_dir: Path, output_dir: str, module: str) -> str:
    """Body of the generated `run.js` that calls `<module>.main()`."""
    base = str(source_dir).replace("\\", "/")
    return f"#!/usr/bin/env node\n\nrequire('{base}/{output_dir}/{module}').main()"


def _node_action(
    module: str,
    output_dir: str,
    *,
    source_dir: Path,
    execute_dir: Path,
    extra_args: Sequence[str],
    success_message: str | None,
    failure_message: str,
) -> Action:
    def action() -> None:
        logger = get_logger()
        run_js = source_dir / RUN_SCRIPT
        logger.debug("Writing %s", run_js)
        run_js.parent.mkdir(parents=True, exist_ok=True)
        run_js.write_text(node_launcher(source_dir, output_dir, module), encoding="utf-8")
        run_js.chmod(run_js.stat().st_mode | 0o111)

        command = " ".join(
            ["node", shlex.quote(str(run_js)), *(shlex.quote(a) for a in extra_args)]
        )
        logger.debug("Executing from: %s", execute_dir)
        # stdin is forwarded so interactive programs work
        result = run_shell(command, "Run", inherit_stdin=True, cwd=execute_dir)
        if isinstance(result, Failure):
            xmsg = f"{failure_message}exit code: {result.exit_code}"
            raise SubprocessError("Run", result.exit_code, xmsg)
        if success_message:
            logger.info(success_message)

    return action


def _backend_action(
    backend: str,
    module: str,
    *,
    extra_args: Sequence[str],
    success_message: str | None,
    failure_message: str,
) -> Action:
    def action() -> None:
        logger = get_logger()
        argv = [backend, "--run", f"{module}.main", *extra_args]
        result = run_command(argv, "Run")
        if isinstance(result, Failure):
            xmsg = (
                f'{failure_message}Backend "{backend}" exited with error: '
                f"{result.exit_code}"
            )
            raise SubprocessError("Run", result.exit_code, xmsg)
        if success_message:
            logger.info(success_message)

    return action


def run_module(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    module: str,
    extra_args: Sequence[str] = (),
    *,
    source_dir: Path | None = None,
    execute_dir: Path | None = None,
    success_message: str | None = None,
    failure_message: str = "Running failed; ",
) -> None:
    """Build, then execute `<module>.main` with node or the backend."""
    logger = get_logger()
    backend = options["alternate_backend"]
    logger.debug("Running with backend: %s", backend or "nodejs")

    source_dir = source_dir or Path.cwd()
    post: Action
    if backend:
        post = _backend_action(
            backend,
            module,
            extra_args=extra_args,
            success_message=success_message,
            failure_message=failure_message,
        )
    else:
        post = _node_action(
            module,
            output_path(options["purs_args"]),
            source_dir=source_dir,
            execute_dir=execute_dir or source_dir,
            extra_args=extra_args,
            success_message=success_message,
            failure_message=failure_message,
        )
    build(options, project, compiler, post_build=post)


def run(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    module: str | None = None,
    extra_args: Sequence[str] = (),
) -> None:
    run_module(options, project, compiler, module or DEFAULT_MAIN_MODULE, extra_args)


def test(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    module: str | None = None,
    extra_args: Sequence[str] = (),
) -> None:
    """Build and run the test entry point (default `Test.Main`)."""
    module = module or DEFAULT_TEST_MODULE
    graph = compiler.graph(collect_globs(options, project).purs_globs)
    if graph is not None and module not in graph:
        raise ModuleNotFoundInBuildError(module)

    run_module(
        options,
        project,
        compiler,
        module,
        extra_args,
        success_message="Tests succeeded.",
        failure_message="Tests failed: ",
    )


# prevent pytest from collecting the command as a test function
test.__test__ = False  # type: ignore[attr-defined]


# --------------------------------------------------------------------------- #
# bundling
# --------------------------------------------------------------------------- #


def bundle_app(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    module: str | None = None,
    target: str | None = None,
    *,
    no_build: bool = False,
    source_maps: bool = False,
) -> None:
    """Bundle the project into a single runnable JS file."""
    module = module or DEFAULT_MAIN_MODULE
    target = target or DEFAULT_BUNDLE_TARGET

    def action() -> None:
        result = compiler.bundle(
            module,
            target,
            with_main=True,
            source_maps=source_maps,
            output_dir=output_path(options["purs_args"]),
        )
        raise_for_failure(result, f"Bundling {module} failed.")
        get_logger().info("Bundle succeeded and output file to %s", target)

    if no_build:
        action()
    else:
        build(options, project, compiler, post_build=action)


def bundle_module(
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
    module: str | None = None,
    target: str | None = None,
    *,
    no_build: bool = False,
    source_maps: bool = False,
) -> None:
    """Bundle the project into a CommonJS module exporting `module`."""
    module = module or DEFAULT_MAIN_MODULE
    target = target or DEFAULT_BUNDLE_TARGET
    js_export = f'\nmodule.exports = PS["{module}"];\n'

    def action() -> None:
        logger = get_logger()
        logger.info("Bundling first...")
        result = compiler.bundle(
            module,
            target,
            with_main=False,
            source_maps=source_maps,
            output_dir=output_path(options["purs_args"]),
        )
        raise_for_failure(result, f"Bundling {module} failed.")
        try:
            with Path(target).open("a", encoding="utf-8") as fh:
                fh.write(js_export)
        except OSError as e:
            xmsg = f"Make module failed: {e}"
            raise BuildError(xmsg) from e
        logger.info("Make module succeeded and output file to %s", target)

    if no_build:
        action()
    else:
        build(options, project, compiler, post_build=action)


# --------------------------------------------------------------------------- #
# script
# --------------------------------------------------------------------------- #


def script(
    script_path: str | Path,
    tag: str | None,
    packages: Sequence[str],
    options: BuildOptions,
    compiler: PursCompiler,
    *,
    temp_root: Path | None = None,
) -> Path:
    """Compile and run a single module file as a script.

    The scratch project lives in a directory derived from the inputs, so
    identical invocations share it. Returns that directory.
    """
    logger = get_logger()
    logger.debug("Running script %s", script_path)

    absolute = Path(os.path.abspath(script_path))
    current_dir = Path.cwd()
    options = {**options, "watch_mode": "once"}  # type: ignore[typeddict-item]

    keyed = {k: v for k, v in options.items() if k not in WATCH_ONLY_OPTIONS}
    digest = key_for(absolute, tag, packages, keyed)
    script_dir = resolve_script_dir(digest, temp_root)

    dependencies = [*SCRIPT_DEFAULT_PACKAGES, *packages]
    project: ProjectConfig = {
        "name": "script",
        "sources": [str(absolute)],
        "dependencies": dependencies,
        "packages": default_package_globs(dependencies),
        "output": "output",
        "purs": compiler.command,
    }
    config_file = script_dir / f".{PROGRAM_SCRIPT}.json"
    scratch = {
        "name": project["name"],
        "sources": project["sources"],
        "dependencies": dependencies,
    }
    if tag is not None:
        scratch["set"] = tag
    config_file.write_text(json.dumps(scratch, indent=2) + "\n", encoding="utf-8")

    with working_directory(script_dir):
        run_module(
            options,
            project,
            compiler,
            DEFAULT_MAIN_MODULE,
            source_dir=script_dir,
            execute_dir=current_dir,
            failure_message="Script failed to run; ",
        )
    return script_dir


# --------------------------------------------------------------------------- #
# metadata
# --------------------------------------------------------------------------- #


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool from pyproject.toml and git."""
    logger = get_logger()
    version = "unknown"
    commit = "unknown"

    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    with suppress(OSError, subprocess.CalledProcessError):
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip()

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)
