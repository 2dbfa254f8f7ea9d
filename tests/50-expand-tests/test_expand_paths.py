# tests/50-expand-tests/test_expand_paths.py
"""Tests for root-library path rewriting and the expansion context."""

from pathlib import Path

import pytest

import rust_bundler.expand as mod_expand
from rust_bundler.bundler import bundle_graph, make_skip_set
from tests.utils import CrateWorkspace


def root_with_lib(workspace: CrateWorkspace, main: str, **files: str) -> str:
    return workspace.add_package(
        "app",
        {"src/main.rs": main, "src/lib.rs": "pub mod util;\n", **files},
        bin=True,
        lib_name="mylib",
    )


def test_paths_in_bin_lose_root_lib_prefix(workspace: CrateWorkspace) -> None:
    # --- setup ---
    root = root_with_lib(
        workspace,
        """
            extern crate mylib;
            fn main() -> mylib::util::Num {
                ::mylib::util::gcd(4, 6)
            }
        """,
        **{"src/util.rs": "pub type Num = u64;\npub fn gcd(a: u64, b: u64) -> u64 { a }\n"},
    )

    # --- execute ---
    out = bundle_graph(workspace.graph(root))

    # --- verify ---
    assert "fn main() -> util::Num {\n    util::gcd(4, 6)\n}" in out
    assert "mylib" not in out


def test_paths_in_root_modules_are_rewritten(workspace: CrateWorkspace) -> None:
    """Module files of the root package get the same treatment."""
    # --- setup ---
    root = workspace.add_package(
        "app",
        {
            "src/main.rs": "extern crate mylib;\nmod cmd;\nfn main() { cmd::run(); }\n",
            "src/lib.rs": "pub fn helper() {}\n",
            "src/cmd.rs": "pub fn run() { mylib::helper(); }\n",
        },
        bin=True,
        lib_name="mylib",
    )

    # --- execute ---
    out = bundle_graph(workspace.graph(root))

    # --- verify ---
    assert "mod cmd {\npub fn run() { helper(); }\n}" in out


def test_other_paths_are_untouched(workspace: CrateWorkspace) -> None:
    # --- setup ---
    root = root_with_lib(
        workspace,
        """
            extern crate mylib;
            use std::collections::HashMap;
            fn main() { let m: HashMap<u8, u8> = std::collections::HashMap::new(); }
        """,
        **{"src/util.rs": "\n"},
    )

    # --- execute ---
    out = bundle_graph(workspace.graph(root))

    # --- verify ---
    assert "use std::collections::HashMap;" in out
    assert "std::collections::HashMap::new()" in out


def test_single_segment_root_name_is_kept(workspace: CrateWorkspace) -> None:
    """A bare `mylib` path has nothing left to refer to once rewritten."""
    # --- setup ---
    root = root_with_lib(
        workspace,
        "extern crate mylib;\nfn main() { let mylib = 1; let _ = mylib; }\n",
        **{"src/util.rs": "\n"},
    )

    # --- execute ---
    out = bundle_graph(workspace.graph(root))

    # --- verify ---
    assert "let mylib = 1; let _ = mylib;" in out


def test_make_skip_set_always_has_defaults() -> None:
    # --- execute ---
    skip = make_skip_set(["serde"])

    # --- verify ---
    assert skip >= {"std", "core", "alloc", "proc_macro", "test", "serde"}


# ---------------------------------------------------------------------------
# ExpansionContext
# ---------------------------------------------------------------------------


def make_context(tmp_path: Path) -> mod_expand.ExpansionContext:
    return mod_expand.ExpansionContext(
        base_path=tmp_path,
        package={
            "id": "p",
            "name": "p",
            "version": "0.1.0",
            "manifest_path": str(tmp_path / "Cargo.toml"),
            "targets": [],
        },
        target={"name": "p", "kind": ["lib"], "src_path": str(tmp_path / "lib.rs")},
        node={"id": "p", "deps": []},
        skip=make_skip_set(),
    )


def test_context_enter_records_ancestry(tmp_path: Path) -> None:
    # --- setup ---
    ctx = make_context(tmp_path)

    # --- execute ---
    child = ctx.enter(("mod", "a.rs"))

    # --- verify ---
    assert child.ancestry == (("mod", "a.rs"),)
    assert ctx.ancestry == ()  # parent is untouched


def test_context_enter_rejects_repeat(tmp_path: Path) -> None:
    # --- setup ---
    ctx = make_context(tmp_path).enter(("mod", "a.rs")).enter(("mod", "b.rs"))

    # --- execute and verify ---
    with pytest.raises(mod_expand.CircularReferenceError) as e:
        ctx.enter(("mod", "a.rs"))

    assert "a.rs -> b.rs -> a.rs" in str(e.value)
