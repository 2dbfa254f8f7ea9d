# src/rust_bundler/expand.py

"""The recursive expansion engine.

An Expander walks one parsed file depth-first and closes it:

  1. every top-level `extern crate name;` (unless skipped) is replaced by the
     dependency's library, itself fully expanded, wrapped in `pub mod name`.
     The root binary's own library is spliced in flat instead.
  2. in the root package, top-level `use rootlib::...;` imports are dropped,
     they point at what is now the surrounding scope.
  3. every `mod name;` is loaded from `name.rs` or `name/mod.rs` and expanded
     in place, and every `rootlib::a::b` path in the root package loses its
     first segment.

Each nested expansion gets a fresh ExpansionContext; nothing is shared
between calls except the package graph, the skip set and the logger.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from .constants import (
    MODULE_ENTRY_FILE,
    SOURCE_SUFFIX,
    TARGET_KIND_BIN,
    TARGET_KIND_LIB,
)
from .logs import LoggerWithTrace, get_logger
from .metadata import PackageGraph, source_dir, target_is
from .syntax import (
    ExternCrateItem,
    Item,
    ModItem,
    RustPath,
    SourceFile,
    UseItem,
    make_module,
    parse,
)
from .types import CargoNode, CargoPackage, CargoTarget
from .utils import read_source

AncestryKey = tuple[str, ...]


class MissingModuleError(FileNotFoundError):
    """Raised when neither `name.rs` nor `name/mod.rs` exists."""


class CircularReferenceError(RuntimeError):
    """Raised when a crate or module file (indirectly) includes itself."""


@dataclass(frozen=True)
class ExpansionContext:
    """Per-call state of the engine; a child context is derived per recursion."""

    base_path: Path  # directory relative module files are looked up in
    package: CargoPackage
    target: CargoTarget
    node: CargoNode
    skip: frozenset[str]
    depth: int = 0  # diagnostics only
    ancestry: tuple[AncestryKey, ...] = ()

    def enter(self, key: AncestryKey) -> ExpansionContext:
        """Return a copy that records `key` as being expanded."""
        if key in self.ancestry:
            chain = " -> ".join(":".join(k[1:]) for k in (*self.ancestry, key))
            xmsg = f"circular reference: {chain}"
            raise CircularReferenceError(xmsg)
        return replace(self, ancestry=(*self.ancestry, key))


def _crate_key(package: CargoPackage, target: CargoTarget) -> AncestryKey:
    # bin and lib share a name by default, their entry files differ
    return ("crate", package["id"], str(Path(target["src_path"]).resolve()))


def _module_key(path: Path) -> AncestryKey:
    return ("mod", str(path.resolve()))


def load_source(path: Path) -> SourceFile:
    """Read and parse one source file. Both failures are fatal."""
    code = read_source(path)
    if code is None:
        xmsg = f"failed to read source file {path}"
        raise FileNotFoundError(xmsg)
    return parse(code, origin=str(path))


def find_module(base_path: Path, name: str) -> tuple[Path, Path, str]:
    """Locate the file backing `mod name;`.

    Returns (base path for the module's own children, file, source).
    `name.rs` beside the declaring file wins over `name/mod.rs`.
    """
    candidates = [
        (base_path, base_path / f"{name}{SOURCE_SUFFIX}"),
        (base_path / name, base_path / name / MODULE_ENTRY_FILE),
    ]
    for child_base, path in candidates:
        code = read_source(path)
        if code is not None:
            return child_base, path, code
    looked = ", ".join(str(path) for _, path in candidates)
    xmsg = f"mod {name} not found (looked for {looked})"
    raise MissingModuleError(xmsg)


class Expander:
    """Closes one parsed file under its ExpansionContext."""

    def __init__(
        self,
        graph: PackageGraph,
        ctx: ExpansionContext,
        *,
        logger: LoggerWithTrace | None = None,
    ) -> None:
        self.graph = graph
        self.ctx = ctx
        self.logger = logger or get_logger()

        self.is_root = graph.is_root(ctx.package)
        self.root_lib_name = graph.root_lib_name()

    # --- entry points ---

    @classmethod
    def expand_target(
        cls,
        graph: PackageGraph,
        package: CargoPackage,
        target: CargoTarget,
        *,
        skip: frozenset[str],
        logger: LoggerWithTrace | None = None,
        parent: ExpansionContext | None = None,
    ) -> SourceFile:
        """Parse a target's entry file and expand it completely."""
        ctx = ExpansionContext(
            base_path=source_dir(target),
            package=package,
            target=target,
            node=graph.node_by_id(package["id"]),
            skip=skip,
            depth=parent.depth + 1 if parent else 0,
            ancestry=parent.ancestry if parent else (),
        ).enter(_crate_key(package, target))

        file = load_source(Path(target["src_path"]))
        cls(graph, ctx, logger=logger).visit_file(file)
        return file

    def visit_file(self, file: SourceFile) -> None:
        for attr in file.attrs:
            self.visit_item(attr)
        closed = {id(item) for item in self.expand_items(file.items)}
        for item in file.items:
            if id(item) not in closed:
                self.visit_item(item)

    # --- top-level rewrite passes ---

    def expand_items(self, items: list[Item]) -> list[Item]:
        """Run the top-level passes; return the spliced items, already closed."""
        spliced = self.expand_extern_crates(items)
        self.prune_root_imports(items)
        return spliced

    def expand_extern_crates(self, items: list[Item]) -> list[Item]:
        new_items: list[Item] = []
        spliced: list[Item] = []
        for item in items:
            if not isinstance(item, ExternCrateItem) or item.name in self.ctx.skip:
                new_items.append(item)
                continue
            expanded = self.expand_extern_crate(item)
            new_items.extend(expanded)
            spliced.extend(expanded)
        items[:] = new_items
        return spliced

    def expand_extern_crate(self, item: ExternCrateItem) -> list[Item]:
        """Return the items replacing one `extern crate` declaration."""
        name = item.name
        self.logger.info(
            "expanding crate %s in %s at depth %d",
            name,
            self.ctx.base_path,
            self.ctx.depth,
            extra={"depth": self.ctx.depth},
        )

        is_root_lib = self._is_root_lib(name)
        if is_root_lib:
            package_id: str | None = self.graph.root_id
        else:
            package_id = self.graph.dependency_package(
                self.ctx.node, name, logger=self.logger
            )
            if package_id is None:
                # unresolvable: the declaration is dropped
                return []

        package = self.graph.package_by_id(package_id)
        target = self.graph.package_target(package, TARGET_KIND_LIB)
        lib = self.expand_target(
            self.graph,
            package,
            target,
            skip=self.ctx.skip,
            logger=self.logger,
            parent=self.ctx,
        )

        if is_root_lib:
            if lib.attrs:
                self.logger.debug(
                    "dropping %d inner attribute(s) of %s merged into the binary",
                    len(lib.attrs),
                    name,
                )
            return lib.items
        return [make_module(name, lib.items)]

    def prune_root_imports(self, items: list[Item]) -> None:
        if not self.is_root:
            return
        name = self.root_lib_name
        kept = [
            item
            for item in items
            if not (isinstance(item, UseItem) and item.is_rooted_at(name))
        ]
        if len(kept) != len(items):
            self.logger.trace(
                "[PRUNE] removed %d `use %s::` import(s)", len(items) - len(kept), name
            )
        items[:] = kept

    def _is_root_lib(self, name: str) -> bool:
        return (
            self.is_root
            and target_is(self.ctx.target, TARGET_KIND_BIN)
            and name == self.root_lib_name
        )

    # --- recursive walk ---

    def visit_item(self, item: Item) -> None:
        if isinstance(item, ModItem):
            self.visit_mod(item)
        else:
            self.visit_paths(item)

    def visit_mod(self, item: ModItem) -> None:
        self.visit_paths(item)
        self.expand_mod(item)
        for child in item.content or []:
            self.visit_item(child)

    def expand_mod(self, item: ModItem) -> None:
        if item.content is not None:
            return
        base_path, path, code = find_module(self.ctx.base_path, item.name)
        self.logger.info(
            "expanding mod %s in %s at depth %d",
            item.name,
            base_path,
            self.ctx.depth,
            extra={"depth": self.ctx.depth},
        )
        ctx = replace(self.ctx, base_path=base_path).enter(_module_key(path))

        file = parse(code, origin=str(path))
        Expander(self.graph, ctx, logger=self.logger).visit_file(file)
        item.content = file.items

    def visit_paths(self, item: Item) -> None:
        for path in item.fragment.paths():
            self.expand_crate_path(path)

    def expand_crate_path(self, path: RustPath) -> None:
        if self.is_root and path.starts_with(self.root_lib_name):
            path.drop_first()
