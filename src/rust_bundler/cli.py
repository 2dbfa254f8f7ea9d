# src/rust_bundler/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest
from .bundler import bundle
from .config import determine_log_level, load_and_validate_config
from .config_resolve import resolve_config
from .constants import DEFAULT_HINT_CUTOFF, MANIFEST_NAME
from .logs import LEVEL_ORDER, get_logger
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .runtime import current_runtime
from .types import BundleConfig
from .utils import get_sys_version_info, safe_log


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --no-fromat ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(
                    arg, known_opts, n=1, cutoff=DEFAULT_HINT_CUTOFF
                )
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        # Print usage + the original error
        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    # --- Positional arguments ---
    parser.add_argument(
        "package_path",
        nargs="?",
        metavar="PACKAGE_PATH",
        help="Directory containing the Cargo.toml of the package to bundle.",
    )
    parser.add_argument(
        "skip",
        nargs="*",
        metavar="SKIP",
        help="Crates whose `extern crate` declarations are left untouched.",
    )

    # --- Standard flags ---
    parser.add_argument(
        "-o",
        "--output",
        metavar="NAME",
        help="Write the result to PACKAGE_PATH/NAME instead of stdout.",
    )
    parser.add_argument("-c", "--config", help="Path to a config file.")

    # --- Formatting ---
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument(
        "--format",
        dest="format",
        action="store_true",
        help="Format the result with rustfmt (default).",
    )
    fmt.add_argument(
        "--no-format",
        dest="format",
        action="store_false",
        help="Leave the result unformatted.",
    )
    fmt.set_defaults(format=None)
    parser.add_argument(
        "--rustfmt",
        metavar="CMD",
        help="Formatter command (default: $RUSTFMT or rustfmt).",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in sanity test to verify tool correctness.",
    )
    return parser


def _write_output(code: str, resolved: BundleConfig) -> None:
    """Send the bundled code to its destination. Failing to write is fatal."""
    logger = get_logger()
    output = resolved["output"]
    if output is None:
        sys.stdout.write(code)
        sys.stdout.flush()
        return

    try:
        output.write_text(code, encoding="utf-8")
    except OSError as e:
        xmsg = f"failed to write output file {output}: {e.strerror or e}"
        raise RuntimeError(xmsg) from e
    logger.info("wrote %s", output)


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:  # noqa: PLR0911
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        current_runtime["log_level"] = determine_log_level(args)
        if args.use_color is not None:
            current_runtime["use_color"] = args.use_color
        logger = get_logger()
        logger.trace("[BOOT] log-level initialized: %s", logger.level_name)

        logger.debug(
            "Runtime: Python %s (%s)\n    %s",
            platform.python_version(),
            platform.python_implementation(),
            sys.version.replace("\n", " "),
        )

        # --- Version flag ---
        if getattr(args, "version", None):
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Python version check ---
        if get_sys_version_info() < (3, 11):
            logger.error("%s requires Python 3.11 or newer.", PROGRAM_DISPLAY)
            return 1

        # --- Self-test mode ---
        if getattr(args, "selftest", None):
            return 0 if run_selftest() else 1

        # --- Package path ---
        if not args.package_path:
            logger.error("missing package path")
            parser.print_usage(sys.stderr)
            return 1
        package_path = Path(args.package_path).expanduser().resolve()
        if not package_path.is_dir():
            xmsg = f"Package path is not a directory: {package_path}"
            raise FileNotFoundError(xmsg)
        manifest = package_path / MANIFEST_NAME
        if not manifest.is_file():
            logger.error("Cargo manifest not found: %s", manifest)
            parser.print_usage(sys.stderr)
            return 1

        # --- Load configuration ---
        config_result = load_and_validate_config(args, package_path)
        config_path, cfg = config_result if config_result else (None, None)
        if config_path:
            logger.debug("🔧 Using config: %s", config_path.name)

        resolved = resolve_config(cfg, args, package_path)
        logger = get_logger()  # log-level now fully set from config file
        logger.trace(
            "[CONFIG] log-level re-resolved from config: %s", logger.level_name
        )

        # --- Bundle ---
        code = bundle(
            resolved["package_path"],
            resolved["skip"],
            format_code=resolved["format"],
            rustfmt=resolved["rustfmt"],
            logger=logger,
        )
        _write_output(code, resolved)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.error_if_not_debug(str(e))
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return getattr(e, "code", 1)

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")

        return getattr(e, "code", 1)

    else:
        return 0
