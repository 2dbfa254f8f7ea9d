# src/rust_bundler/config_validate.py

from __future__ import annotations

import re
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import PurePath
from typing import Any, get_args, get_origin, get_type_hints

from .constants import (
    DEFAULT_HINT_CUTOFF,
    DEFAULT_SKIP,
    DEFAULT_STRICT_CONFIG,
    SOURCE_SUFFIX,
)
from .logs import LEVEL_ORDER
from .metadata import crate_name
from .types import BundleConfigInput
from .utils import plural

# --- constants ------------------------------------------------------

CLI_ONLY_KEYS = {"dry-run", "dry_run", "selftest", "version", "config"}
CLI_ONLY_MSG = (
    "Ignored config key(s) {keys} {ctx}: this tool has no config option for it. "
    "Use the command-line flag instead."
)

CRATE_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# --- dataclasses ------------------------------------------------------


@dataclass
class ValidationSummary:
    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool  # strictness somewhere in our config?


# --- helpers --------------------------------------------------------


def schema_from_typeddict(td: type[Any]) -> dict[str, Any]:
    """Return {field: type} for a TypedDict class."""
    return get_type_hints(td)


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,  # modified in function, not returned
    *,
    is_error: bool = False,
) -> None:
    """
    Route a message to the appropriate bucket.
    Errors are always fatal.
    Warnings may escalate to strict_warnings in strict mode.
    """
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _infer_type_label(expected_type: Any) -> str:
    """Return a readable label for logging (e.g. 'list[str]', 'bool')."""
    origin = get_origin(expected_type)
    args = get_args(expected_type)
    if origin is list and args:
        return f"list[{getattr(args[0], '__name__', repr(args[0]))}]"
    if isinstance(expected_type, type):
        return expected_type.__name__
    return str(expected_type)


def _matches(val: Any, expected_type: Any) -> bool:
    origin = get_origin(expected_type)
    if origin is list:
        (subtype,) = get_args(expected_type) or (Any,)
        return isinstance(val, list) and all(
            subtype is Any or _matches(v, subtype) for v in val
        )
    if expected_type is bool:
        return isinstance(val, bool)
    if expected_type in (int, float):
        # bool is an int subclass, never accept it for numbers
        return isinstance(val, (int, float)) and not isinstance(val, bool)
    return isinstance(val, expected_type)


def _check_skip(skip: list[str], summary: ValidationSummary) -> None:
    """Skip entries must be crate names as written in `extern crate`."""
    for name in skip:
        if not CRATE_IDENT.match(crate_name(name)):
            collect_msg(
                summary.strict,
                f"`skip` entry {name!r} is not a crate name",
                summary,
                is_error=True,
            )
        elif crate_name(name) in DEFAULT_SKIP:
            # never fatal, even in strict mode
            summary.warnings.append(
                f"`skip` entry {name!r} is always skipped and can be removed"
            )


def _check_output(output: str, summary: ValidationSummary) -> None:
    """The output file is written inside the package directory."""
    path = PurePath(output)
    if not output.strip() or output.endswith(("/", "\\")):
        collect_msg(
            summary.strict,
            f"`output` must name a file, got {output!r}",
            summary,
            is_error=True,
        )
    elif path.is_absolute() or ".." in path.parts:
        collect_msg(
            summary.strict,
            f"`output` must be relative to the package directory, got {output!r}",
            summary,
            is_error=True,
        )
    elif path.suffix != SOURCE_SUFFIX:
        collect_msg(
            summary.strict,
            f"`output` {output!r} does not end in {SOURCE_SUFFIX}",
            summary,
        )


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate a normalized config mapping.

    strict=True  →  warnings (unknown keys, CLI-only keys) become fatal
    strict=False →  warnings remain non-fatal

    When `strict` is None, the `strict_config` key of the config decides,
    then DEFAULT_STRICT_CONFIG.
    """
    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=DEFAULT_STRICT_CONFIG,
    )

    strict_from_cfg: Any = parsed_cfg.get("strict_config")
    if strict is not None:
        summary.strict = strict
    elif isinstance(strict_from_cfg, bool):
        summary.strict = strict_from_cfg
    strict_config = summary.strict

    schema = schema_from_typeddict(BundleConfigInput)
    context = "in configuration"

    # --- keys that belong on the command line ---
    cli_only = sorted(k for k in parsed_cfg if k.lower() in CLI_ONLY_KEYS)
    if cli_only:
        collect_msg(
            strict_config,
            CLI_ONLY_MSG.format(keys=", ".join(cli_only), ctx=context),
            summary,
        )

    # --- known keys: types ---
    for key, expected_type in schema.items():
        if key not in parsed_cfg:
            continue
        val = parsed_cfg[key]
        if not _matches(val, expected_type):
            collect_msg(
                strict_config,
                f"{context}: key `{key}` expected {_infer_type_label(expected_type)}"
                f", got {type(val).__name__}",
                summary,
                is_error=True,
            )

    skip = parsed_cfg.get("skip")
    if _matches(skip, list[str]):
        _check_skip(skip, summary)

    output = parsed_cfg.get("output")
    if isinstance(output, str):
        _check_output(output, summary)

    rustfmt = parsed_cfg.get("rustfmt")
    if isinstance(rustfmt, str) and not rustfmt.strip():
        collect_msg(
            strict_config,
            "`rustfmt` must be a command, got an empty string",
            summary,
            is_error=True,
        )

    log_level = parsed_cfg.get("log_level")
    if isinstance(log_level, str) and log_level.lower() not in LEVEL_ORDER:
        collect_msg(
            strict_config,
            f"{context}: key `log_level` must be one of {', '.join(LEVEL_ORDER)}"
            f", got {log_level!r}",
            summary,
            is_error=True,
        )

    # --- unknown keys ---
    unknown = [k for k in parsed_cfg if k not in schema and k not in cli_only]
    if unknown:
        joined = ", ".join(f"`{u}`" for u in unknown)
        msg = f"Unknown key{plural(unknown)} {joined} {context}."

        hints: list[str] = []
        for k in unknown:
            close = get_close_matches(k, schema.keys(), n=1, cutoff=DEFAULT_HINT_CUTOFF)
            if close:
                hints.append(f"'{k}' → '{close[0]}'")
        if hints:
            msg += "\nHint: did you mean " + ", ".join(hints) + "?"

        collect_msg(strict_config, msg, summary)

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
