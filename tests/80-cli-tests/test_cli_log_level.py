# tests/80-cli-tests/test_cli_log_level.py
"""Verbosity flags and environment overrides of the CLI."""

from pathlib import Path
from typing import Any

import pytest

import rust_bundler.cli as mod_cli
import rust_bundler.meta as mod_meta
import rust_bundler.metadata as mod_metadata
from tests.utils import CrateWorkspace


@pytest.fixture
def app(workspace: CrateWorkspace, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = workspace.add_package(
        "app",
        {
            "src/main.rs": "mod util;\nfn main() {}\n",
            "src/util.rs": "fn x() {}\n",
        },
        lib=False,
        bin=True,
    )
    workspace.manifest("app")
    metadata = workspace.metadata(root)

    def fake_query(_manifest_path: Path) -> dict[str, Any]:
        return metadata

    monkeypatch.setattr(mod_metadata, "query_metadata", fake_query)
    return workspace.root / "app"


def test_default_level_shows_info(
    app: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    code = mod_cli.main([str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    err = capsys.readouterr().err
    assert "expanding mod util" in err
    assert "[DEBUG]" not in err


def test_quiet_hides_info(
    app: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    code = mod_cli.main(["-q", str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    captured = capsys.readouterr()
    assert "expanding" not in captured.err
    assert "mod util {" in captured.out


def test_verbose_shows_debug(
    app: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    code = mod_cli.main(["-v", str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    assert "[DEBUG]" in capsys.readouterr().err


def test_trace_level(
    app: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    code = mod_cli.main(["--log-level", "trace", str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    assert "[TRACE]" in capsys.readouterr().err


def test_env_log_level(
    app: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- patch and execute ---
    monkeypatch.setenv(f"{mod_meta.PROGRAM_ENV}_LOG_LEVEL", "warning")
    code = mod_cli.main([str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    assert "expanding" not in capsys.readouterr().err


def test_cli_beats_env(
    app: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- patch and execute ---
    monkeypatch.setenv("LOG_LEVEL", "error")
    code = mod_cli.main(["--log-level", "info", str(app), "--no-format"])

    # --- verify ---
    assert code == 0
    assert "expanding mod util" in capsys.readouterr().err


def test_color_flag_tags_warnings(
    workspace: CrateWorkspace,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    root = workspace.add_package(
        "app", {"src/main.rs": "extern crate bar;\n"}, lib=False, bin=True
    )
    workspace.manifest("app")
    metadata = workspace.metadata(root)
    monkeypatch.setattr(mod_metadata, "query_metadata", lambda _p: metadata)

    # --- execute ---
    code = mod_cli.main(["--color", str(workspace.root / "app"), "--no-format"])

    # --- verify ---
    assert code == 0
    assert "\033[" in capsys.readouterr().err
