# src/rust_bundler/finalizer.py

import os
import shlex
import subprocess
from collections.abc import Callable

from .constants import (
    DEFAULT_EDITION,
    DEFAULT_ENV_RUSTFMT,
    DEFAULT_RUSTFMT,
    DEFAULT_RUSTFMT_TIMEOUT,
)
from .logs import LoggerWithTrace, get_logger
from .syntax import SourceFile, render

Formatter = Callable[[str], str]


def rustfmt_command() -> str:
    return os.getenv(DEFAULT_ENV_RUSTFMT) or DEFAULT_RUSTFMT


def rustfmt_formatter(
    command: str | None = None,
    edition: str = DEFAULT_EDITION,
    *,
    timeout: float = DEFAULT_RUSTFMT_TIMEOUT,
) -> Formatter:
    """Return a formatter piping code through rustfmt."""
    argv = [*shlex.split(command or rustfmt_command()), "--edition", edition]

    def _format(code: str) -> str:
        result = subprocess.run(  # noqa: S603
            argv,
            input=code,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
        if not result.stdout.strip():
            xmsg = "rustfmt produced no output"
            raise RuntimeError(xmsg)
        return result.stdout

    return _format


def prettify(
    code: str,
    formatter: Formatter | None,
    *,
    logger: LoggerWithTrace | None = None,
) -> str:
    """Format `code`, falling back to it unchanged if formatting fails."""
    if formatter is None:
        return code
    logger = logger or get_logger()
    try:
        return formatter(code)
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip().splitlines()
        logger.warning(
            "rustfmt failed (exit status %d), output left unformatted%s",
            e.returncode,
            f": {detail[0]}" if detail else "",
        )
    except Exception as e:  # noqa: BLE001
        # formatting is optional, whatever went wrong
        logger.warning("formatting failed, output left unformatted: %s", e)
    return code


def finalize(
    file: SourceFile,
    formatter: Formatter | None,
    *,
    logger: LoggerWithTrace | None = None,
) -> str:
    """Serialize a closed tree and format it."""
    return prettify(render(file), formatter, logger=logger)
