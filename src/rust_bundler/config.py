# src/rust_bundler/config.py
"""Finding, loading and validating `.rust-bundler.*` package configs."""

import argparse
import os
import traceback
from pathlib import Path
from typing import Any, cast

from .config_validate import ValidationSummary, validate_config
from .constants import CONFIG_SUFFIXES, DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .logs import get_logger
from .meta import PROGRAM_CONFIG, PROGRAM_ENV
from .runtime import current_runtime
from .types import BundleConfigInput
from .utils import load_jsonc, plural

RawConfig = dict[str, Any] | list[Any] | None


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    return (
        getattr(args, "log_level", None)
        or os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL")
        or os.getenv(DEFAULT_ENV_LOG_LEVEL)
        or config_log_level
        or DEFAULT_LOG_LEVEL
    )


def find_config(args: argparse.Namespace, package_dir: Path) -> Path | None:
    """Return the config for the package being bundled, if it has one.

    An explicit `--config` must exist. Otherwise `.rust-bundler.py`,
    `.rust-bundler.jsonc` and `.rust-bundler.json` next to Cargo.toml are
    tried in that order.
    """
    logger = get_logger()

    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    found = [
        path
        for suffix in CONFIG_SUFFIXES
        if (path := package_dir / f".{PROGRAM_CONFIG}{suffix}").is_file()
    ]
    if not found:
        logger.trace("[CONFIG] package %s has no config file", package_dir.name)
        return None
    if len(found) > 1:
        logger.warning(
            "Multiple config files detected in package %s (%s); using %s.",
            package_dir.name,
            ", ".join(p.name for p in found),
            found[0].name,
        )
    return found[0]


def _exec_python_config(config_path: Path) -> RawConfig:
    namespace: dict[str, Any] = {"__file__": str(config_path)}
    try:
        code = compile(config_path.read_text(encoding="utf-8"), str(config_path), "exec")
        exec(code, namespace)  # noqa: S102
    except Exception as e:
        xmsg = (
            f"Error while executing Python config: {config_path.name}\n"
            f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
        )
        raise RuntimeError(xmsg) from e

    if "config" not in namespace:
        xmsg = f"{config_path.name} did not define `config`"
        raise ValueError(xmsg)
    result = namespace["config"]
    if not isinstance(result, (dict, list, type(None))):
        xmsg = (
            f"config in {config_path.name} must be a dict, list, or None"
            f", not {type(result).__name__}"
        )
        raise TypeError(xmsg)
    return cast("RawConfig", result)


def load_config(config_path: Path) -> RawConfig:
    """Load the raw config object from a .py (exporting `config`) or JSONC file."""
    if config_path.suffix == ".py":
        return _exec_python_config(config_path)
    try:
        return load_jsonc(config_path)
    except ValueError as e:
        xmsg = f"Error while loading configuration file '{config_path.name}': {e}"
        raise ValueError(xmsg) from e


def parse_config(raw_config: RawConfig) -> dict[str, Any] | None:
    """Normalize a raw config into the BundleConfigInput shape.

    [] / {} / None       → no config
    ["serde", "rand"]    → {"skip": ["serde", "rand"]}
    {...}                → a copy, unknown keys kept for validation
    """
    if not raw_config:
        return None
    if isinstance(raw_config, list):
        if not all(isinstance(x, str) for x in raw_config):
            xmsg = "Invalid list config: a top-level list may only hold crate names."
            raise TypeError(xmsg)
        return {"skip": list(raw_config)}
    if not isinstance(raw_config, dict):  # pyright: ignore[reportUnnecessaryIsInstance]
        xmsg = (
            f"Invalid top-level value: {type(raw_config).__name__} "
            "(expected object or list of crate names)"
        )
        raise TypeError(xmsg)
    return dict(raw_config)


def _log_summary(summary: ValidationSummary, config_path: Path) -> None:
    logger = get_logger()
    name = config_path.name

    for msg in summary.errors:
        logger.error("%s: %s", name, msg)
    for msg in summary.strict_warnings:
        logger.error("%s: %s (fatal with strict_config)", name, msg)
    for msg in summary.warnings:
        logger.warning("%s: %s", name, msg)

    problems = len(summary.errors) + len(summary.strict_warnings)
    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s: %d problem%s.",
            name,
            problems,
            plural(problems),
        )
    else:
        logger.debug("Validated %s (strict=%s).", name, summary.strict)


def load_and_validate_config(
    args: argparse.Namespace,
    package_dir: Path,
) -> tuple[Path, BundleConfigInput] | None:
    """Find, load, parse and validate the package config.

    The log level is settled first from CLI/env and again once the config's
    own `log_level` is known, so validation messages honor it.
    Returns (config_path, config), or None when the package has no config.
    """
    current_runtime["log_level"] = determine_log_level(args)

    config_path = find_config(args, package_dir)
    if config_path is None:
        return None
    raw_config = load_config(config_path)

    if isinstance(raw_config, dict) and isinstance(raw_config.get("log_level"), str):
        current_runtime["log_level"] = determine_log_level(
            args, raw_config["log_level"]
        )

    try:
        parsed_cfg = parse_config(raw_config)
    except TypeError as e:
        xmsg = f"Could not parse config {config_path.name}: {e}"
        raise TypeError(xmsg) from e
    if parsed_cfg is None:
        return None

    summary = validate_config(parsed_cfg)
    _log_summary(summary, config_path)
    if not summary.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = summary  # type: ignore[attr-defined]
        raise exception

    return config_path, cast("BundleConfigInput", parsed_cfg)
