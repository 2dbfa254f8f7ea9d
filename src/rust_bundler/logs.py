# src/rust_bundler/logs.py
"""Package logger.

Stdout carries the bundled source, so every record goes to stderr.
Records logged with `extra={"depth": n}` (the expansion depth of a crate
or module) are indented, so nested expansions read as a tree.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime
from .utils import safe_log

# --- ANSI Colors -------------------------------------------------------------


RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"
GRAY = "\033[90m"


# --- Levels ------------------------------------------------------------------


TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

LEVELS: dict[str, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,  # disables all logging
}
LEVEL_ORDER = list(LEVELS)

TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": (YELLOW, "⚠️ "),
    "ERROR": (RED, "❌ "),
    "CRITICAL": (RED, "💥 "),
}

DEPTH_INDENT = "  "


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.getEffectiveLevel()).lower()

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error, with the traceback only when debugging."""
        self.error(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log a critical error, with the traceback only when debugging."""
        self.critical(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))


# --- Formatting ----------------------------------------------------------------


class DiagnosticFormatter(logging.Formatter):
    """Prefix level tags (colored when enabled) and indent by expansion depth."""

    def format(self, record: logging.LogRecord) -> str:
        msg = DEPTH_INDENT * getattr(record, "depth", 0) + super().format(record)
        tag_color, tag_text = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag_text:
            return msg
        if current_runtime.get("use_color", False):
            tag_text = f"{tag_color}{tag_text}{RESET}"
        return f"{tag_text} {msg}"


class DiagnosticHandler(logging.StreamHandler[TextIO]):
    def __init__(self) -> None:
        super().__init__(stream=sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        # stderr may be replaced after setup (capture, redirection)
        self.stream = sys.stderr
        super().emit(record)


# --- Logger ------------------------------------------------------------------


logging.setLoggerClass(LoggerWithTrace)
_logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
_handler = DiagnosticHandler()
_handler.setFormatter(DiagnosticFormatter("%(message)s"))
_logger.addHandler(_handler)
_logger.propagate = False


def get_logger() -> LoggerWithTrace:
    """Return the package logger, its level synced with current_runtime."""
    level_name = current_runtime.get("log_level")
    if not level_name:
        safe_log("[LOGGER ERROR] ❌ Runtime does not specify log_level")
        level_name = "error"
    _logger.setLevel(LEVELS.get(str(level_name).lower(), logging.INFO))
    return _logger
