# src/rust_bundler/meta.py

"""Centralized program identity constants for Rust Bundler."""

from typing import NamedTuple

_BASE = "rust-bundler"

# CLI script name (the console entrypoint)
PROGRAM_SCRIPT = "bundle"

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for RUST_BUNDLER_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Config file stem, looked up as .rust-bundler.{py,jsonc,json}
PROGRAM_CONFIG = _BASE

# Short tagline or description for help screens and metadata
DESCRIPTION = "Creates a single-source-file version of a Cargo package."


class Metadata(NamedTuple):
    version: str
    commit: str
