# src/spago_build/cli.py

import argparse
import platform
import shlex
import sys
from difflib import get_close_matches
from pathlib import Path

from . import actions
from .compiler import PursCompiler
from .config import can_run_configless, determine_log_level, load_and_validate_config
from .config_resolve import resolve_options, resolve_project
from .constants import (
    DEFAULT_BUNDLE_TARGET,
    DEFAULT_HINT_CUTOFF,
    DEFAULT_MAIN_MODULE,
    DEFAULT_TEST_MODULE,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .pipeline import build
from .runtime import current_runtime
from .types import BuildOptions, ProjectConfig
from .utils import safe_log

# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that suggests the closest flag for a mistyped one."""

    def _known_flags(self) -> list[str]:
        flags: dict[str, None] = {}
        for action in self._actions:
            flags.update(dict.fromkeys(action.option_strings))
            # a subcommand's flags are rejected by the top-level parser
            if isinstance(action, argparse._SubParsersAction):  # noqa: SLF001
                for sub in action.choices.values():
                    flags.update(dict.fromkeys(sub._known_flags()))  # noqa: SLF001
        return list(flags)

    def error(self, message: str) -> None:  # type: ignore[override]
        _, marker, rest = message.partition("unrecognized arguments:")
        hints = []
        if marker:
            known = self._known_flags()
            for token in rest.split():
                close = get_close_matches(token, known, n=1, cutoff=DEFAULT_HINT_CUTOFF)
                if token.startswith("-") and close:
                    hints.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        self.exit(2, "\n".join([f"{self.prog}: error: {message}", *hints]) + "\n")


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    """Flags every subcommand understands (config, color, verbosity)."""
    parser.add_argument("-c", "--config", help="Path to the project config file.")

    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Never color the output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Always color the output, even when not on a terminal.",
    )
    color.set_defaults(use_color=None)

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Only show warnings and errors (--log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Show debug output (--log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="How much to log.",
    )


def _add_build_flags(parser: argparse.ArgumentParser) -> None:
    """Flags shared by everything that runs the build pipeline."""
    parser.add_argument(
        "-p",
        "--path",
        action="append",
        metavar="GLOB",
        help="Extra source glob to compile (repeatable).",
    )
    parser.add_argument(
        "--deps-only",
        action="store_true",
        help="Only compile dependencies, skip the project's own sources.",
    )
    parser.add_argument(
        "-u",
        "--purs-args",
        action="append",
        metavar="ARGS",
        help="Arguments passed through to `purs compile` (repeatable).",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Rebuild automatically when sources change.",
    )
    parser.add_argument(
        "--watch-interval",
        type=float,
        metavar="SECONDS",
        default=None,
        help=f"Polling interval in watch mode (default: {DEFAULT_WATCH_INTERVAL}).",
    )
    parser.add_argument(
        "-l",
        "--clear-screen",
        action="store_true",
        help="Clear the screen before each rebuild in watch mode.",
    )
    parser.add_argument(
        "--allow-ignored",
        action="store_true",
        help="Also react to changes in files ignored by .gitignore.",
    )
    parser.add_argument(
        "--before",
        action="append",
        metavar="CMD",
        help="Shell command to run before the build (repeatable).",
    )
    parser.add_argument(
        "--then",
        action="append",
        metavar="CMD",
        help="Shell command to run after a successful build (repeatable).",
    )
    parser.add_argument(
        "--else",
        dest="else_",
        action="append",
        metavar="CMD",
        help="Shell command to run after a failed build (repeatable).",
    )


def _add_run_flags(parser: argparse.ArgumentParser, default_module: str) -> None:
    parser.add_argument(
        "-m",
        "--main",
        metavar="MODULE",
        default=None,
        help=f"Module whose `main` is run (default: {default_module}).",
    )
    parser.add_argument(
        "--node-args",
        metavar="ARGS",
        default="",
        help="Arguments passed to the program, as one shell-quoted string.",
    )


def _add_bundle_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m",
        "--main",
        metavar="MODULE",
        default=None,
        help=f"Entry module of the bundle (default: {DEFAULT_MAIN_MODULE}).",
    )
    parser.add_argument(
        "-t",
        "--to",
        metavar="FILE",
        default=None,
        help=f"Target file of the bundle (default: {DEFAULT_BUNDLE_TARGET}).",
    )
    parser.add_argument(
        "-s",
        "--no-build",
        action="store_true",
        help="Skip the build step and bundle the existing output.",
    )
    parser.add_argument(
        "--source-maps",
        action="store_true",
        help="Also emit source maps.",
    )


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)
    parser.add_argument(
        "--version", action="store_true", help=f"Print the {PROGRAM_DISPLAY} version."
    )

    sub = parser.add_subparsers(
        dest="command", metavar="COMMAND", parser_class=HintingArgumentParser
    )

    build_cmd = sub.add_parser("build", help="Compile the project.")
    _add_build_flags(build_cmd)
    _add_common_flags(build_cmd)

    run_cmd = sub.add_parser("run", help="Compile and run a module's `main`.")
    _add_build_flags(run_cmd)
    _add_run_flags(run_cmd, DEFAULT_MAIN_MODULE)
    _add_common_flags(run_cmd)

    test_cmd = sub.add_parser("test", help="Compile and run the test suite.")
    _add_build_flags(test_cmd)
    _add_run_flags(test_cmd, DEFAULT_TEST_MODULE)
    _add_common_flags(test_cmd)

    app_cmd = sub.add_parser(
        "bundle-app", help="Bundle the project into a runnable JS file."
    )
    _add_build_flags(app_cmd)
    _add_bundle_flags(app_cmd)
    _add_common_flags(app_cmd)

    module_cmd = sub.add_parser(
        "bundle-module", help="Bundle the project into a CommonJS module."
    )
    _add_build_flags(module_cmd)
    _add_bundle_flags(module_cmd)
    _add_common_flags(module_cmd)

    script_cmd = sub.add_parser("script", help="Compile and run a single file.")
    script_cmd.add_argument("file", metavar="FILE", help="PureScript module to run.")
    script_cmd.add_argument(
        "-t",
        "--tag",
        default=None,
        help="Package set tag the script is built against.",
    )
    script_cmd.add_argument(
        "-d",
        "--dependency",
        dest="packages",
        action="append",
        metavar="PACKAGE",
        default=[],
        help="Extra package the script depends on (repeatable).",
    )
    script_cmd.add_argument(
        "-u",
        "--purs-args",
        action="append",
        metavar="ARGS",
        help="Arguments passed through to `purs compile` (repeatable).",
    )
    _add_common_flags(script_cmd)
    return parser


def _runtime_from_args(args: argparse.Namespace) -> None:
    use_color = getattr(args, "use_color", None)
    if use_color is not None:
        current_runtime["use_color"] = use_color
    set_log_level(determine_log_level(args))


def _dispatch(
    args: argparse.Namespace,
    options: BuildOptions,
    project: ProjectConfig,
    compiler: PursCompiler,
) -> None:
    command = args.command
    if command == "build":
        build(options, project, compiler)
    elif command in ("run", "test"):
        runner = actions.run if command == "run" else actions.test
        runner(options, project, compiler, args.main, shlex.split(args.node_args))
    elif command in ("bundle-app", "bundle-module"):
        bundler = actions.bundle_app if command == "bundle-app" else actions.bundle_module
        bundler(
            options,
            project,
            compiler,
            args.main,
            args.to,
            no_build=args.no_build,
            source_maps=args.source_maps,
        )
    else:  # pragma: no cover - argparse rejects unknown commands
        xmsg = f"Unknown command: {command}"
        raise ValueError(xmsg)


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def _run(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    logger = get_logger()

    if getattr(args, "version", None):
        meta = actions.get_metadata()
        logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
        return 0

    if args.command is None:
        parser.print_help()
        return 1

    # scripts build in their own scratch project, no config involved
    if args.command == "script":
        options = resolve_options(args)
        actions.script(args.file, args.tag, args.packages, options, PursCompiler())
        return 0

    cwd = Path.cwd().resolve()
    loaded = load_and_validate_config(args)
    config_path, root_cfg = loaded if loaded else (None, None)
    logger.trace("[CONFIG] log level after config: %s", logger.level_name)

    if root_cfg is None and not can_run_configless(args):
        logger.error(
            "No project config found (.%s.json) and no --path given.", PROGRAM_SCRIPT
        )
        return 1

    config_dir = config_path.parent if config_path else cwd
    if config_path:
        logger.info("🔧 Using config: %s", config_path.name)
    else:
        logger.info("🔧 No config file, using command line options only.")
    logger.debug("📁 Project root: %s (invoked from %s)", config_dir, cwd)

    project = resolve_project(root_cfg, config_dir, config_path)
    options = resolve_options(args, root_cfg)
    _dispatch(args, options, project, PursCompiler(project["purs"]))
    return 0


def _report(error: BaseException, *, expected: bool) -> int:
    """Log a fatal error (unless it was already reported) and pick an exit code."""
    if not getattr(error, "silent", False):
        logger = get_logger()
        try:
            if expected:
                logger.error_if_not_debug(str(error))
            else:
                logger.critical_if_not_debug("Unexpected internal error: %s", error)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {error}")
    return getattr(error, "code", 1)


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()
    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)
        _runtime_from_args(args)
        logger.trace("[BOOT] log level: %s", logger.level_name)
        logger.debug(
            "Python %s (%s)",
            platform.python_version(),
            platform.python_implementation(),
        )
        return _run(parser, args)
    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        return _report(e, expected=True)
    except Exception as e:  # noqa: BLE001
        return _report(e, expected=False)
