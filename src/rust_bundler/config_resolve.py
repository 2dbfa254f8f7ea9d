# src/rust_bundler/config_resolve.py


import argparse
from pathlib import Path
from typing import Any

from .config import determine_log_level
from .constants import DEFAULT_FORMAT, DEFAULT_SKIP
from .finalizer import rustfmt_command
from .logs import get_logger
from .metadata import crate_name
from .runtime import current_runtime
from .types import BundleConfig, BundleConfigInput, OriginType


def _resolve_output(
    args: argparse.Namespace,
    cfg: BundleConfigInput,
    package_path: Path,
) -> tuple[Path | None, OriginType]:
    """Output file: CLI → config → stdout (None). Relative to the package."""
    if getattr(args, "output", None):
        return package_path / args.output, "cli"
    if cfg.get("output"):
        return package_path / cfg["output"], "config"
    return None, "default"


def resolve_config(
    cfg_input: BundleConfigInput | None,
    args: argparse.Namespace,
    package_path: Path,
) -> BundleConfig:
    """Merge CLI arguments, a loaded config and defaults into a BundleConfig."""
    logger = get_logger()
    cfg: BundleConfigInput = dict(cfg_input or {})  # type: ignore[assignment]
    origin: dict[str, OriginType] = {}

    # ------------------------------
    # Skip set: union of defaults, config and CLI, as `extern crate` names
    # ------------------------------
    skip: set[str] = set(DEFAULT_SKIP)
    skip.update(crate_name(n) for n in cfg.get("skip", []))
    skip.update(crate_name(n) for n in getattr(args, "skip", None) or [])

    # ------------------------------
    # Output
    # ------------------------------
    output, origin["output"] = _resolve_output(args, cfg, package_path)

    # ------------------------------
    # Formatting
    # ------------------------------
    fmt: Any = getattr(args, "format", None)
    if fmt is not None:
        origin["format"] = "cli"
    elif "format" in cfg:
        fmt = cfg["format"]
        origin["format"] = "config"
    else:
        fmt = DEFAULT_FORMAT
        origin["format"] = "default"

    if getattr(args, "rustfmt", None):
        rustfmt = args.rustfmt
        origin["rustfmt"] = "cli"
    elif cfg.get("rustfmt"):
        rustfmt = cfg["rustfmt"]
        origin["rustfmt"] = "config"
    else:
        rustfmt = rustfmt_command()
        origin["rustfmt"] = "default"

    # ------------------------------
    # Log level (sync runtime)
    # ------------------------------
    log_level = determine_log_level(args, cfg.get("log_level"))
    current_runtime["log_level"] = log_level

    resolved: BundleConfig = {
        "package_path": package_path,
        "skip": skip,
        "output": output,
        "format": bool(fmt),
        "rustfmt": rustfmt,
        "log_level": log_level,
        "__origin__": origin,
    }
    logger.trace("[CONFIG] resolved: %s", resolved)
    return resolved
