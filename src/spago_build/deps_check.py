# src/spago_build/deps_check.py
"""Detect drift between declared dependencies and what project files import.

Two kinds of drift are reported:
  - unused: declared but never imported from a project file (warning)
  - transitive: imported but not declared (fatal, a reproducibility hazard)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .constants import DEFAULT_PACKAGES
from .errors import TransitiveDependencyError
from .globs import CompiledGlob, compile_glob
from .graph import ModuleGraph, compile_package_globs, is_project_file, owner_package
from .logs import get_logger
from .utils import bullet_list


@dataclass(frozen=True)
class DependencyReport:
    project_modules: frozenset[str]
    imported_modules: frozenset[str]
    imported_packages: frozenset[str]
    unused: list[str]  # sorted
    transitive: list[str]  # sorted

    @property
    def ok(self) -> bool:
        return not self.unused and not self.transitive


def analyze_dependency_usage(
    graph: ModuleGraph,
    project_globs: Iterable[str | CompiledGlob],
    package_globs: Mapping[str, Iterable[str]],
    dependencies: Iterable[str],
    default_packages: Iterable[str] = DEFAULT_PACKAGES,
) -> DependencyReport:
    """Compute unused and transitive packages. Pure, no logging side effects."""
    compiled_project = [
        g if isinstance(g, CompiledGlob) else compile_glob(g) for g in project_globs
    ]
    compiled_packages = compile_package_globs(package_globs)

    project_modules = frozenset(
        name
        for name, node in graph.items()
        if is_project_file(node["path"], compiled_project)
    )

    imported: set[str] = set()
    for module in project_modules:
        imported |= graph.imports_of(module)
    imported_modules = frozenset(imported - project_modules)

    imported_packages: set[str] = set()
    for module in imported_modules:
        path = graph.path_of(module)
        if path is None:
            continue
        package = owner_package(path, compiled_packages)
        if package is not None:
            imported_packages.add(package)

    declared = set(dependencies)
    unused = declared - (imported_packages | set(default_packages))
    transitive = imported_packages - declared

    return DependencyReport(
        project_modules=project_modules,
        imported_modules=imported_modules,
        imported_packages=frozenset(imported_packages),
        unused=sorted(unused),
        transitive=sorted(transitive),
    )


def check_imports(
    graph: ModuleGraph | None,
    project_globs: Iterable[str | CompiledGlob],
    package_globs: Mapping[str, Iterable[str]],
    dependencies: Iterable[str],
    default_packages: Iterable[str] = DEFAULT_PACKAGES,
) -> DependencyReport | None:
    """Warn about unused dependencies and fail on transitive imports.

    Skipped entirely (returns None) when no module graph is available.
    """
    logger = get_logger()
    if graph is None:
        logger.debug("No module graph available, skipping dependency check")
        return None

    report = analyze_dependency_usage(
        graph, project_globs, package_globs, dependencies, default_packages
    )
    logger.trace(
        "[DEPS] project=%d imported=%d packages=%s",
        len(report.project_modules),
        len(report.imported_modules),
        sorted(report.imported_packages),
    )

    if report.unused:
        logger.warning(
            "None of your project files import modules from some projects "
            "that are in the direct dependencies of your project.\n"
            "These dependencies are unused. To fix this warning, remove the "
            "following packages from the list of dependencies in your config:\n%s",
            bullet_list(report.unused),
        )

    if report.transitive:
        raise TransitiveDependencyError(report.transitive)

    return report
