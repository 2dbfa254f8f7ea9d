# src/rust_bundler/__init__.py

"""Rust Bundler: creates a single-source-file version of a Cargo package.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use or custom integrations.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - bundle()            → Bundle the package at a path into one source text
    - bundle_graph()      → Bundle from an already resolved package graph
    - Expander            → The recursive expansion engine
    - get_metadata()      → Retrieve version / commit info
"""

from .actions import (
    get_metadata,
    run_selftest,
)
from .bundler import (
    bundle,
    bundle_graph,
    make_skip_set,
)
from .cli import (
    main,
)
from .config import (
    determine_log_level,
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
)
from .config_resolve import resolve_config
from .config_validate import ValidationSummary, validate_config
from .constants import (
    DEFAULT_EDITION,
    DEFAULT_ENV_CARGO,
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_RUSTFMT,
    DEFAULT_FORMAT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SKIP,
    DEFAULT_STRICT_CONFIG,
)
from .expand import (
    CircularReferenceError,
    ExpansionContext,
    Expander,
    MissingModuleError,
    find_module,
    load_source,
)
from .finalizer import (
    Formatter,
    finalize,
    prettify,
    rustfmt_formatter,
)
from .logs import (
    LEVEL_ORDER,
    RESET,
    LoggerWithTrace,
    get_logger,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .metadata import (
    PackageGraph,
    crate_name,
    query_metadata,
    resolve,
)
from .runtime import current_runtime
from .syntax import (
    RustParseError,
    RustPath,
    SourceFile,
    parse,
    render,
)
from .types import (
    BundleConfig,
    BundleConfigInput,
    CargoMetadata,
    CargoNode,
    CargoPackage,
    CargoTarget,
    OriginType,
    Runtime,
)
from .utils import (
    load_jsonc,
    should_use_color,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",  # version info
    "main",
    "run_selftest",
    #
    # --- Bundling ---
    "bundle",
    "bundle_graph",
    "make_skip_set",
    "CircularReferenceError",
    "ExpansionContext",
    "Expander",
    "MissingModuleError",
    "find_module",
    "load_source",
    "Formatter",
    "finalize",
    "prettify",
    "rustfmt_formatter",
    #
    # --- Cargo metadata ---
    "PackageGraph",
    "crate_name",
    "query_metadata",
    "resolve",
    #
    # --- Syntax ---
    "RustParseError",
    "RustPath",
    "SourceFile",
    "parse",
    "render",
    #
    # --- Config Handling ---
    "determine_log_level",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    "resolve_config",
    "validate_config",
    "ValidationSummary",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_EDITION",
    "DEFAULT_ENV_CARGO",
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_ENV_RUSTFMT",
    "DEFAULT_FORMAT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SKIP",
    "DEFAULT_STRICT_CONFIG",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "RESET",
    "LoggerWithTrace",
    "get_logger",
    "load_jsonc",
    "should_use_color",
    #
    # --- Types ---
    "BundleConfig",
    "BundleConfigInput",
    "CargoMetadata",
    "CargoNode",
    "CargoPackage",
    "CargoTarget",
    "OriginType",
    "Runtime",
]
