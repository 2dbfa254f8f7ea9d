# tests/60-bundle-tests/test_bundle.py
"""Tests for rust_bundler.bundler (cargo metadata is faked)."""

import subprocess
from pathlib import Path
from typing import Any

import pytest

import rust_bundler.bundler as mod_bundle
import rust_bundler.metadata as mod_metadata
from tests.utils import CrateWorkspace


@pytest.fixture
def app(workspace: CrateWorkspace, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A bin + lib package whose metadata is served without cargo."""
    root = workspace.add_package(
        "app",
        {
            "src/main.rs": "extern crate app;\nuse app::f;\nfn main() { f(); }\n",
            "src/lib.rs": "pub fn f() {}\n",
        },
        bin=True,
        edition="2021",
    )
    workspace.manifest("app")
    metadata = workspace.metadata(root)

    def fake_query(manifest_path: Path) -> dict[str, Any]:
        assert manifest_path == workspace.root / "app" / "Cargo.toml"
        return metadata

    monkeypatch.setattr(mod_metadata, "query_metadata", fake_query)
    return workspace.root / "app"


def test_bundle_unformatted(app: Path) -> None:
    # --- execute ---
    out = mod_bundle.bundle(app, format_code=False)

    # --- verify ---
    assert out == "pub fn f() {}\nfn main() { f(); }\n"


def test_bundle_formats_with_package_edition(
    app: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- setup ---
    calls: list[list[str]] = []

    # --- stubs ---
    def fake_run(cmd: list[str], **kw: Any) -> subprocess.CompletedProcess[str]:
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="// formatted\n")

    # --- patch and execute ---
    monkeypatch.setattr(subprocess, "run", fake_run)
    out = mod_bundle.bundle(app, rustfmt="my-rustfmt")

    # --- verify ---
    assert out == "// formatted\n"
    assert calls == [["my-rustfmt", "--edition", "2021"]]


def test_bundle_formatter_missing_falls_back(
    app: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- stubs ---
    def fake_run(cmd: list[str], **_kw: Any) -> None:
        raise FileNotFoundError(cmd[0])

    # --- patch and execute ---
    monkeypatch.setattr(subprocess, "run", fake_run)
    out = mod_bundle.bundle(app)

    # --- verify ---
    assert out == "pub fn f() {}\nfn main() { f(); }\n"
    assert "output left unformatted" in capsys.readouterr().err


def test_bundle_missing_manifest(tmp_path: Path) -> None:
    # --- execute and verify ---
    with pytest.raises(FileNotFoundError, match="Cargo manifest not found"):
        mod_bundle.bundle(tmp_path, format_code=False)


def test_bundle_runs_independently(
    workspace: CrateWorkspace,
) -> None:
    """Two bundles in one process do not share skip sets."""
    # --- setup ---
    root = workspace.add_package(
        "app",
        {"src/main.rs": "extern crate foo;\nfn main() {}\n"},
        lib=False,
        bin=True,
    )
    dep = workspace.add_package("foo", {"src/lib.rs": "pub fn f() {}\n"})
    workspace.add_dep(root, "foo", dep)
    graph = workspace.graph(root)

    # --- execute ---
    skipped = mod_bundle.bundle_graph(graph, ["foo"])
    expanded = mod_bundle.bundle_graph(graph)

    # --- verify ---
    assert skipped == "extern crate foo;\nfn main() {}\n"
    assert expanded == "pub mod foo {\npub fn f() {}\n}\nfn main() {}\n"
