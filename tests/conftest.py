# tests/conftest.py
"""
Shared test setup for project.

- Debug tests (marked `debug`) are skipped unless selected with `-k debug`.
- Every test starts from a known runtime: info log level, no color,
  and no log-level/formatter environment overrides.
"""

from pathlib import Path

import pytest
from pytest import Config, Item as PytestItem

import rust_bundler.meta as mod_meta
import rust_bundler.runtime as mod_runtime
from tests.utils import CrateWorkspace, make_trace

TRACE = make_trace("⚡️")


@pytest.fixture(autouse=True)
def clean_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset shared runtime state and environment overrides per test."""
    for var in (
        f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL",
        "LOG_LEVEL",
        "RUSTFMT",
        "CARGO",
        "NO_COLOR",
        "FORCE_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)


@pytest.fixture
def workspace(tmp_path: Path) -> CrateWorkspace:
    """An empty crate workspace rooted in tmp_path."""
    return CrateWorkspace(tmp_path)


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Automatically skips debug tests unless asked for."""
    # detect if the user is filtering for debug tests
    keywords = config.getoption("-k") or ""
    running_debug = "debug" in keywords.lower()

    if running_debug:
        return  # user explicitly requested them, don't skip

    for item in items:
        if "debug" in item.keywords:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
