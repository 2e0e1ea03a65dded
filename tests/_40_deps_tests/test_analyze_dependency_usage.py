# tests/_40_deps_tests/test_analyze_dependency_usage.py

import spago_build.deps_check as mod_deps
from tests.utils import make_graph

PACKAGES = {
    "a": [".spago/a/*/src/**/*.purs"],
    "b": [".spago/b/*/src/**/*.purs"],
    "c": [".spago/c/*/src/**/*.purs"],
    "s": [".spago/s/*/src/**/*.purs"],
}


def _graph():
    return make_graph(
        {
            "Main": ("src/Main.purs", ["B", "C", "Main.Util"]),
            "Main.Util": ("src/Main/Util.purs", ["B"]),
            "A": (".spago/a/v1/src/A.purs", []),
            "B": (".spago/b/v1/src/B.purs", ["A"]),
            "C": (".spago/c/v1/src/C.purs", []),
        }
    )


def test_unused_and_transitive() -> None:
    """D={a,b}, I={b,c}, default={s}: unused={a}, transitive={c}."""
    # --- execute ---
    report = mod_deps.analyze_dependency_usage(
        _graph(), ["src/**/*.purs"], PACKAGES, ["a", "b"], default_packages={"s"}
    )

    # --- verify ---
    assert report.project_modules == frozenset({"Main", "Main.Util"})
    assert report.imported_modules == frozenset({"B", "C"})
    assert report.imported_packages == frozenset({"b", "c"})
    assert report.unused == ["a"]
    assert report.transitive == ["c"]
    assert not report.ok


def test_default_packages_are_never_unused() -> None:
    report = mod_deps.analyze_dependency_usage(
        _graph(), ["src/**/*.purs"], PACKAGES, ["b", "c", "s"], default_packages={"s"}
    )

    assert report.unused == []
    assert report.transitive == []
    assert report.ok


def test_imports_between_dependencies_do_not_count() -> None:
    """B imports A, but no project file does: `a` is still unused."""
    report = mod_deps.analyze_dependency_usage(
        _graph(), ["src/**/*.purs"], PACKAGES, ["a", "b", "c"], default_packages=()
    )

    assert "a" not in report.imported_packages
    assert report.unused == ["a"]


def test_unknown_imports_and_unowned_files_are_ignored() -> None:
    # --- setup ---
    graph = make_graph(
        {
            "Main": ("src/Main.purs", ["Ghost", "Local"]),
            "Local": ("vendor/Local.purs", []),
        }
    )

    # --- execute ---
    report = mod_deps.analyze_dependency_usage(
        graph, ["src/**/*.purs"], PACKAGES, [], default_packages=()
    )

    # --- verify ---
    assert report.imported_modules == frozenset({"Ghost", "Local"})
    assert report.imported_packages == frozenset()
    assert report.ok


def test_results_are_sorted() -> None:
    graph = make_graph(
        {
            "Main": ("src/Main.purs", ["C", "B"]),
            "B": (".spago/b/v1/src/B.purs", []),
            "C": (".spago/c/v1/src/C.purs", []),
        }
    )

    report = mod_deps.analyze_dependency_usage(
        graph, ["src/**/*.purs"], PACKAGES, ["s", "a"], default_packages=()
    )

    assert report.unused == ["a", "s"]
    assert report.transitive == ["b", "c"]


def test_no_project_globs_means_nothing_imported() -> None:
    report = mod_deps.analyze_dependency_usage(
        _graph(), [], PACKAGES, ["a"], default_packages=()
    )

    assert report.project_modules == frozenset()
    assert report.unused == ["a"]
    assert report.transitive == []
