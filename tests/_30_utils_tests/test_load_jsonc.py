# tests/_30_utils_tests/test_load_jsonc.py

from pathlib import Path

import pytest

import spago_build.utils as mod_utils


def test_comments_and_trailing_commas(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "cfg.jsonc"
    path.write_text(
        """
        {
          // project name
          "name": "demo",
          /* block
             comment */
          "sources": ["src/**/*.purs",],
          "url": "http://example.com/x", # hash comment
        }
        """,
        encoding="utf-8",
    )

    # --- execute ---
    data = mod_utils.load_jsonc(path)

    # --- verify ---
    assert data == {
        "name": "demo",
        "sources": ["src/**/*.purs"],
        "url": "http://example.com/x",
    }


def test_empty_file_is_none(tmp_path: Path) -> None:
    path = tmp_path / "empty.jsonc"
    path.write_text("// nothing here\n", encoding="utf-8")

    assert mod_utils.load_jsonc(path) is None


def test_scalar_root_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "scalar.json"
    path.write_text("42", encoding="utf-8")

    with pytest.raises(ValueError, match="root type"):
        mod_utils.load_jsonc(path)


def test_invalid_syntax_reports_position(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"a": }', encoding="utf-8")

    with pytest.raises(ValueError, match="line 1"):
        mod_utils.load_jsonc(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        mod_utils.load_jsonc(tmp_path / "nope.json")


def test_bullet_list_and_plural() -> None:
    assert mod_utils.bullet_list(["a", "b"]) == "  • a\n  • b"
    assert mod_utils.bullet_list([]) == ""
    assert mod_utils.plural([1]) == ""
    assert mod_utils.plural([1, 2]) == "s"
    assert mod_utils.plural(0) == "s"


def test_working_directory_restores(tmp_path: Path) -> None:
    before = Path.cwd()

    with mod_utils.working_directory(tmp_path) as inside:
        assert Path.cwd().resolve() == tmp_path.resolve()
        assert inside == tmp_path

    assert Path.cwd() == before
