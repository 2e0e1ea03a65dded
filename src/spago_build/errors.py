# src/spago_build/errors.py
"""Exceptions raised by the build core.

Every class derives from a built-in (ValueError / RuntimeError) so that
`cli.main()` can treat them as controlled terminations. `code` is the exit
code the CLI returns; `silent` marks errors that were already reported.
"""


class BuildError(RuntimeError):
    """Base class for failures while running the build pipeline."""

    code: int = 1
    silent: bool = False


class ConfigConflictError(ValueError):
    """Two options that cannot be combined were requested together."""

    code: int = 1
    silent: bool = False


class PatternError(ValueError):
    """A source glob could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class GraphError(ValueError):
    """The module graph emitted by the compiler has an unexpected shape."""


class TransitiveDependencyError(BuildError):
    def __init__(self, packages: list[str]) -> None:
        listing = "\n".join(f"  - {p}" for p in packages)
        super().__init__(
            "Some of your project files import modules from packages that are "
            "not in the direct dependencies of your project.\n"
            "To fix this error add the following packages to the list of "
            f"dependencies in your config:\n{listing}"
        )
        self.packages = packages


class SubprocessError(BuildError):
    """A subprocess exited with a non-zero code."""

    def __init__(self, phase: str, exit_code: int, message: str | None = None):
        super().__init__(message or f"{phase} failed. exit code: {exit_code}")
        self.phase = phase
        self.exit_code = exit_code


class HookError(SubprocessError):
    def __init__(self, label: str, exit_code: int) -> None:
        super().__init__(
            label, exit_code, f"{label} command failed. exit code: {exit_code}"
        )


class ModuleNotFoundInBuildError(BuildError):
    def __init__(self, module: str) -> None:
        super().__init__(
            f"Module '{module}' not found! Are you including it in your build?"
        )
        self.module = module


class ScriptDirError(BuildError):
    """The script cache directory could not be created."""
