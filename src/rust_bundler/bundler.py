# src/rust_bundler/bundler.py

from collections.abc import Iterable
from pathlib import Path

from .constants import DEFAULT_EDITION, DEFAULT_SKIP, MANIFEST_NAME
from .expand import Expander
from .finalizer import Formatter, finalize, rustfmt_formatter
from .logs import LoggerWithTrace, get_logger
from .metadata import PackageGraph, resolve


def make_skip_set(names: Iterable[str] = ()) -> frozenset[str]:
    """Return the skip set: the always-available crates plus `names`."""
    return frozenset(DEFAULT_SKIP) | frozenset(names)


def bundle_graph(
    graph: PackageGraph,
    skip: Iterable[str] = (),
    *,
    formatter: Formatter | None = None,
    logger: LoggerWithTrace | None = None,
) -> str:
    """Bundle the root package of an already resolved graph."""
    logger = logger or get_logger()
    package = graph.root_package
    target = graph.primary_target(package)

    logger.info("expanding target %s", target["src_path"])
    file = Expander.expand_target(
        graph,
        package,
        target,
        skip=make_skip_set(skip),
        logger=logger,
    )
    return finalize(file, formatter, logger=logger)


def bundle(
    package_path: Path | str,
    skip: Iterable[str] = (),
    *,
    format_code: bool = True,
    rustfmt: str | None = None,
    logger: LoggerWithTrace | None = None,
) -> str:
    """Create a single-source-file version of a Cargo package.

    `skip` names crates whose `extern crate` declarations are kept as-is
    (on top of std, core, alloc, proc_macro and test). The result is
    formatted with rustfmt when available, unformatted otherwise.
    """
    manifest_path = Path(package_path) / MANIFEST_NAME
    graph = resolve(manifest_path)

    formatter: Formatter | None = None
    if format_code:
        edition = graph.root_package.get("edition") or DEFAULT_EDITION
        formatter = rustfmt_formatter(rustfmt, edition)

    return bundle_graph(graph, skip, formatter=formatter, logger=logger)
