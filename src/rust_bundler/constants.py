# src/rust_bundler/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_CARGO: str = "CARGO"
DEFAULT_ENV_RUSTFMT: str = "RUSTFMT"

# --- cargo layout ---
MANIFEST_NAME: str = "Cargo.toml"
SOURCE_SUFFIX: str = ".rs"
MODULE_ENTRY_FILE: str = "mod.rs"
TARGET_KIND_BIN: str = "bin"
TARGET_KIND_LIB: str = "lib"

# Crates that are always available and never expanded
DEFAULT_SKIP: tuple[str, ...] = ("std", "core", "alloc", "proc_macro", "test")

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_FORMAT: bool = True
DEFAULT_CARGO: str = "cargo"
DEFAULT_RUSTFMT: str = "rustfmt"
DEFAULT_EDITION: str = "2018"
DEFAULT_RUSTFMT_TIMEOUT: float = 60.0  # seconds
DEFAULT_HINT_CUTOFF: float = 0.6

# --- config files, in lookup order ---
CONFIG_SUFFIXES: tuple[str, ...] = (".py", ".jsonc", ".json")
