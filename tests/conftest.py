# tests/conftest.py
"""Shared test setup for the project."""

from collections.abc import Iterator

import pytest
from pytest import Config, Item as PytestItem

import spago_build.runtime as mod_runtime
from tests.utils import make_trace

TRACE = make_trace("⚡️")


@pytest.fixture(autouse=True)
def _restore_runtime() -> Iterator[None]:
    """CLI runs mutate the shared runtime (log level, color); undo that."""
    saved = dict(mod_runtime.current_runtime)
    yield
    mod_runtime.current_runtime.update(saved)  # type: ignore[typeddict-item]


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Automatically skip debug tests unless asked for."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return  # user explicitly requested them, don't skip

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
