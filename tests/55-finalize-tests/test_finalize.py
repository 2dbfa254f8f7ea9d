# tests/55-finalize-tests/test_finalize.py
"""Tests for rust_bundler.finalizer (rustfmt is faked)."""

import subprocess
from typing import Any

import pytest

import rust_bundler.finalizer as mod_finalize
import rust_bundler.syntax as mod_syntax


def test_prettify_without_formatter_returns_code() -> None:
    # --- execute and verify ---
    assert mod_finalize.prettify("fn main(){}\n", None) == "fn main(){}\n"


def test_prettify_uses_formatter() -> None:
    # --- execute ---
    out = mod_finalize.prettify("fn main(){}", lambda code: code.upper())

    # --- verify ---
    assert out == "FN MAIN(){}"


def test_prettify_falls_back_when_formatter_fails(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A failing formatter leaves the code as it was and warns."""

    # --- stubs ---
    def broken(_code: str) -> str:
        raise subprocess.CalledProcessError(1, ["rustfmt"], stderr="error: bad\n")

    # --- execute ---
    out = mod_finalize.prettify("fn main(){}", broken)

    # --- verify ---
    assert out == "fn main(){}"
    err = capsys.readouterr().err
    assert "rustfmt failed (exit status 1)" in err
    assert "error: bad" in err


def test_prettify_falls_back_when_formatter_missing(
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- stubs ---
    def missing(_code: str) -> str:
        raise FileNotFoundError("rustfmt")

    # --- execute ---
    out = mod_finalize.prettify("fn main(){}", missing)

    # --- verify ---
    assert out == "fn main(){}"
    assert "output left unformatted" in capsys.readouterr().err


def test_rustfmt_formatter_pipes_code(monkeypatch: pytest.MonkeyPatch) -> None:
    """The formatter feeds code on stdin with the edition flag."""
    # --- setup ---
    calls: list[dict[str, Any]] = []

    # --- stubs ---
    def fake_run(cmd: list[str], **kw: Any) -> subprocess.CompletedProcess[str]:
        calls.append({"cmd": cmd, **kw})
        return subprocess.CompletedProcess(cmd, 0, stdout="fn main() {}\n")

    # --- patch and execute ---
    monkeypatch.setattr(subprocess, "run", fake_run)
    fmt = mod_finalize.rustfmt_formatter("rustfmt --quiet", "2021")
    out = fmt("fn main(){}")

    # --- verify ---
    assert out == "fn main() {}\n"
    assert calls[0]["cmd"] == ["rustfmt", "--quiet", "--edition", "2021"]
    assert calls[0]["input"] == "fn main(){}"


def test_rustfmt_formatter_empty_output_is_an_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- patch ---
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **_kw: subprocess.CompletedProcess(cmd, 0, stdout=""),
    )

    # --- execute and verify ---
    with pytest.raises(RuntimeError, match="no output"):
        mod_finalize.rustfmt_formatter()("fn main(){}")


def test_rustfmt_command_honors_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # --- patch, execute and verify ---
    assert mod_finalize.rustfmt_command() == "rustfmt"
    monkeypatch.setenv("RUSTFMT", "/opt/rustfmt")
    assert mod_finalize.rustfmt_command() == "/opt/rustfmt"


def test_finalize_renders_then_formats() -> None:
    # --- setup ---
    file = mod_syntax.parse("fn main(){}\n")
    seen: list[str] = []

    def record(code: str) -> str:
        seen.append(code)
        return "formatted\n"

    # --- execute ---
    out = mod_finalize.finalize(file, record)

    # --- verify ---
    assert seen == ["fn main(){}\n"]
    assert out == "formatted\n"
