# src/rust_bundler/actions.py
import re
import shutil
import subprocess
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any

from .bundler import bundle_graph
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .metadata import PackageGraph

# --- self-test crate ---------------------------------------------------------

_SELFTEST_FILES = {
    "app/src/main.rs": (
        "extern crate app;\n"
        "extern crate greet;\n"
        "\n"
        "use app::shout;\n"
        "\n"
        "fn main() {\n"
        '    let msg = app::shout(&greet::hello("selftest"));\n'
        '    println!("{}", msg);\n'
        "}\n"
    ),
    "app/src/lib.rs": (
        "mod util;\n"
        "\n"
        "pub fn shout(s: &str) -> String {\n"
        "    util::upper(s)\n"
        "}\n"
    ),
    "app/src/util.rs": (
        "pub fn upper(s: &str) -> String {\n"
        "    s.to_uppercase()\n"
        "}\n"
    ),
    "greet/src/lib.rs": (
        "pub fn hello(name: &str) -> String {\n"
        '    format!("hello {}", name)\n'
        "}\n"
    ),
}


def _selftest_metadata(root: Path) -> dict[str, Any]:
    """A cargo metadata document describing the self-test workspace."""
    app_id = "app 0.1.0 (path+file://app)"
    greet_id = "greet 0.1.0 (path+file://greet)"

    def target(name: str, kind: str, src: str) -> dict[str, Any]:
        return {"name": name, "kind": [kind], "src_path": str(root / src)}

    return {
        "packages": [
            {
                "id": app_id,
                "name": "app",
                "version": "0.1.0",
                "manifest_path": str(root / "app" / "Cargo.toml"),
                "targets": [
                    target("app", "lib", "app/src/lib.rs"),
                    target("app", "bin", "app/src/main.rs"),
                ],
            },
            {
                "id": greet_id,
                "name": "greet",
                "version": "0.1.0",
                "manifest_path": str(root / "greet" / "Cargo.toml"),
                "targets": [target("greet", "lib", "greet/src/lib.rs")],
            },
        ],
        "resolve": {
            "root": app_id,
            "nodes": [
                {"id": app_id, "deps": [{"name": "greet", "pkg": greet_id}]},
                {"id": greet_id, "deps": []},
            ],
        },
    }


def get_metadata() -> Metadata:
    """Return (version, commit) tuple for this tool.

    Reads pyproject.toml for the version and git for the commit;
    either falls back to "unknown".
    """
    logger = get_logger()
    logger.trace("get_metadata ran from: %s", Path(__file__).resolve())

    version = "unknown"
    commit = "unknown"

    # Try pyproject.toml for version
    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    # Try git for commit
    with suppress(Exception):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip()

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)


def run_selftest() -> bool:
    """Bundle a tiny bin + lib + dependency workspace and check the result.

    Needs neither cargo nor rustfmt: the metadata is built by hand and
    the output is left unformatted.
    """
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        for rel, code in _SELFTEST_FILES.items():
            path = tmp_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")

        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        graph = PackageGraph.from_metadata(_selftest_metadata(tmp_dir))
        code = bundle_graph(graph, logger=logger)

        expected = [
            "pub mod greet {",
            "mod util {",
            "let msg = shout(&greet::hello(",
        ]
        unexpected = ["extern crate", "use app::", "mod util;"]
        if all(e in code for e in expected) and not any(u in code for u in unexpected):
            logger.info(
                "✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        logger.error("Self-test failed: bundled output is not closed.")
        logger.debug("[SELFTEST] output:\n%s", code)
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        # unexpected bug, show the traceback and ask for a report
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
