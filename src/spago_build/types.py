# src/spago_build/types.py
from __future__ import annotations

from typing import Literal, TypedDict

from typing_extensions import NotRequired

WatchMode = Literal["once", "watch"]
OriginType = Literal["cli", "config", "default", "code", "test"]

# package name → source globs, in declaration order
PackageGlobs = dict[str, list[str]]


class ModuleGraphNode(TypedDict):
    path: str
    depends: list[str]


# `else` is a keyword, so hook mappings use the functional syntax
HooksResolved = TypedDict(
    "HooksResolved",
    {"before": list[str], "else": list[str], "then": list[str]},
)

HooksConfigInput = TypedDict(
    "HooksConfigInput",
    {"before": list[str], "else": list[str], "then": list[str]},
    total=False,
)


class RootConfigInput(TypedDict, total=False):
    """Keys accepted in a `.spago-build.json(c)` / `.spago-build.py` file."""

    name: str
    sources: list[str]
    dependencies: list[str]
    packages: dict[str, list[str] | str]
    backend: str
    output: str
    purs: str
    purs_args: list[str]
    hooks: HooksConfigInput

    # watch behavior
    watch_interval: float
    watch_debounce: float
    clear_screen: bool
    allow_ignored: bool

    # runtime behavior
    strict_config: bool
    log_level: str


class BuildOptions(TypedDict):
    """Options for one invocation, merged from config and CLI flags."""

    source_paths: list[str]  # extra globs from the command line
    deps_only: bool
    alternate_backend: str | None
    purs_args: list[str]
    watch_mode: WatchMode
    should_clear: bool
    allow_ignored_dirs: bool
    hooks: HooksResolved

    watch_interval: float
    watch_debounce: float


class ProjectConfig(TypedDict):
    """What the project declares (external inputs for one build)."""

    name: str
    sources: list[str]
    dependencies: list[str]
    packages: PackageGlobs
    output: str
    purs: str
    config_path: NotRequired[str]
