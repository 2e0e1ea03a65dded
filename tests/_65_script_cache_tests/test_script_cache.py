# tests/_65_script_cache_tests/test_script_cache.py

import json
from pathlib import Path

import pytest

import spago_build.errors as mod_errors
import spago_build.script_cache as mod_cache
from tests.utils import make_options


def test_key_is_deterministic() -> None:
    # --- setup ---
    options = make_options()

    # --- execute ---
    first = mod_cache.key_for("/s/Main.purs", "tag", ["a", "b"], options)
    second = mod_cache.key_for("/s/Main.purs", "tag", ["a", "b"], dict(options))

    # --- verify ---
    assert first == second
    assert len(first) == 64
    int(first, 16)  # hex digest


@pytest.mark.parametrize(
    ("path", "tag", "deps", "overrides"),
    [
        ("/s/Other.purs", "tag", ["a", "b"], {}),
        ("/s/Main.purs", None, ["a", "b"], {}),
        ("/s/Main.purs", "tag", ["b", "a"], {}),
        ("/s/Main.purs", "tag", ["a"], {}),
        ("/s/Main.purs", "tag", ["a", "b"], {"purs_args": ["--strict"]}),
        ("/s/Main.purs", "tag", ["a", "b"], {"alternate_backend": "purerl"}),
    ],
)
def test_key_changes_with_each_input(
    path: str, tag: str | None, deps: list[str], overrides: dict[str, object]
) -> None:
    base = mod_cache.key_for("/s/Main.purs", "tag", ["a", "b"], make_options())

    other = mod_cache.key_for(path, tag, deps, make_options(**overrides))

    assert other != base


def test_key_ignores_option_key_order() -> None:
    options = make_options()
    reordered = dict(reversed(list(options.items())))

    assert mod_cache.key_for("/s", None, [], options) == mod_cache.key_for(
        "/s", None, [], reordered
    )


def test_canonical_input_is_versioned() -> None:
    payload = json.loads(mod_cache.canonical_key_input("/s", None, ["a"], {}))

    assert payload["version"] == 1
    assert payload["dependencies"] == ["a"]


def test_uncanonical_option_value_raises() -> None:
    with pytest.raises(TypeError):
        mod_cache.key_for("/s", None, [], {"bad": object()})


def test_resolve_script_dir_creates_and_reuses(tmp_path: Path) -> None:
    # --- execute ---
    first = mod_cache.resolve_script_dir("abc", tmp_path)
    (first / "file").write_text("x", encoding="utf-8")
    second = mod_cache.resolve_script_dir("abc", tmp_path)

    # --- verify ---
    assert first == second == tmp_path / "spago-script-tmp-abc"
    assert (second / "file").read_text(encoding="utf-8") == "x"


def test_resolve_script_dir_failure(tmp_path: Path) -> None:
    # --- setup ---
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")

    # --- execute and verify ---
    with pytest.raises(mod_errors.ScriptDirError, match="Could not create"):
        mod_cache.resolve_script_dir("abc", blocker)
