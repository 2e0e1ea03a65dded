# tests/_70_config_tests/test_validate_config.py

from pathlib import Path

import pytest

import spago_build.config as mod_config
import spago_build.config_validate as mod_validate
import spago_build.logs as mod_logs
from tests.utils import make_summary


def test_valid_config() -> None:
    summary = mod_validate.validate_config(
        {
            "name": "demo",
            "sources": ["src/**/*.purs"],
            "dependencies": ["prelude", "console"],
            "packages": {"prelude": ".spago/prelude/*/src/**/*.purs"},
            "hooks": {"before": ["echo hi"], "else": ["notify-send fail"]},
            "watch_interval": 1,
        }
    )

    assert summary.valid
    assert summary.errors == []
    assert summary.warnings == []


def test_wrong_type_is_an_error() -> None:
    summary = mod_validate.validate_config({"dependencies": "prelude"})

    assert not summary.valid
    assert any("dependencies" in e for e in summary.errors)


def test_unknown_key_hints_close_match() -> None:
    summary = mod_validate.validate_config({"dependecies": ["prelude"]})

    messages = summary.errors + summary.strict_warnings + summary.warnings
    assert any("dependencies" in m for m in messages)


def test_cli_only_keys_warn() -> None:
    summary = mod_validate.validate_config({"watch": True})

    assert summary.valid
    assert any("command line" in w for w in summary.warnings)


def test_strict_mode_promotes_warnings() -> None:
    summary = mod_validate.validate_config({"watch": True, "strict_config": True})

    assert not summary.valid
    assert summary.strict_warnings


def test_duplicate_dependencies_warn() -> None:
    summary = mod_validate.validate_config({"dependencies": ["prelude", "prelude"]})

    assert any("Duplicate dependencies" in w for w in summary.warnings)


def test_nested_hooks_are_checked() -> None:
    summary = mod_validate.validate_config({"hooks": {"then": "echo done"}})

    assert not summary.valid


def test_unknown_key_message_names_the_key() -> None:
    summary = mod_validate.validate_config({"sourcez": ["src/**/*.purs"]})

    assert summary.valid
    assert summary.warnings == [
        "Unknown key `sourcez` in the project config. Did you mean `sources`?"
    ]


def test_summary_counts() -> None:
    summary = make_summary(errors=["a"], warnings=["b", "c"])

    assert summary.counts() == "1 error, 2 warnings"
    assert not summary.valid
    assert make_summary().counts() == ""


def test_warn_respects_strictness() -> None:
    lenient = make_summary()
    strict = make_summary(strict=True)

    lenient.warn("w")
    strict.warn("w")

    assert lenient.valid
    assert lenient.warnings == ["w"]
    assert not strict.valid
    assert strict.strict_warnings == ["w"]


def test_report_validation_lists_every_message(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    # --- setup ---
    mod_logs.set_log_level("info")
    summary = make_summary(errors=["bad type"], warnings=["odd key"])

    # --- execute ---
    mod_config.report_validation(summary, tmp_path / ".spago-build.json")

    # --- verify ---
    err = capsys.readouterr().err
    assert ".spago-build.json is invalid (lenient, 1 error, 1 warning)" in err
    assert "  • bad type" in err
    assert "  • odd key" in err
