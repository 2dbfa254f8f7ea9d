# src/rust_bundler/syntax.py

"""Item-level syntax tree for Rust sources.

Only the structure the bundler acts on is modelled:

  - ``mod name;`` / ``mod name { ... }``   → ModItem
  - ``extern crate name [as alias];``      → ExternCrateItem
  - ``use ...;``                           → UseItem
  - anything else                          → OtherItem

Every item keeps its original text as a Fragment: verbatim chunks with the
rewritable paths (``a::b::c``) cut out as RustPath objects. Rendering a tree
concatenates the fragments back, so code the bundler does not touch comes
out exactly as it went in.

Parsing is done with tree-sitter and the tree-sitter-rust grammar.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import tree_sitter_rust
from tree_sitter import Language, Node, Parser


RUST_LANGUAGE = Language(tree_sitter_rust.language())

# Nodes that may stand as a single path segment
_SEGMENT_NODES = {
    "identifier",
    "type_identifier",
    "crate",
    "self",
    "super",
    "metavariable",
}
_SCOPED_NODES = {"scoped_identifier", "scoped_type_identifier"}
_PREFIXED_NODES = {"scoped_use_list", "use_wildcard"}

# Siblings that attach to the item following them
_PREFIX_NODES = {"attribute_item", "line_comment", "block_comment"}
_INNER_PREFIXES = ("//!", "/*!")


class RustParseError(ValueError):
    """Raised when a source file is not valid Rust."""


# --- tree model --------------------------------------------------------------


@dataclass
class RustPath:
    """A `::`-separated path such as `mylib::util::gcd`.

    `trailing_colon` marks the prefix of a use group or glob
    (`mylib::{a, b}`, `mylib::*`): the separator before the group
    belongs to the path.
    """

    segments: list[str]
    leading_colon: bool = False
    trailing_colon: bool = False

    @property
    def first(self) -> str:
        return self.segments[0]

    def starts_with(self, name: str) -> bool:
        return bool(self.segments) and self.segments[0] == name

    def drop_first(self) -> None:
        """Remove the leading segment, keeping a usable path."""
        # dropping the only segment of `a` would leave nothing behind
        if len(self.segments) < 2 and not self.trailing_colon:  # noqa: PLR2004
            return
        self.segments = self.segments[1:]
        self.leading_colon = False

    def render(self) -> str:
        text = "::".join(self.segments)
        if self.leading_colon:
            text = "::" + text
        if self.trailing_colon and self.segments:
            text += "::"
        return text


@dataclass
class Fragment:
    """Verbatim source text with embedded rewritable paths."""

    parts: list[str | RustPath] = field(default_factory=list)

    def paths(self) -> Iterator[RustPath]:
        for part in self.parts:
            if isinstance(part, RustPath):
                yield part

    def render(self) -> str:
        return "".join(
            part if isinstance(part, str) else part.render() for part in self.parts
        )


@dataclass
class Item:
    fragment: Fragment

    def render(self) -> str:
        return self.fragment.render()


@dataclass
class ModItem(Item):
    """A module. `content` is None while the module is still on disk.

    `fragment` holds everything before the body: attributes, visibility
    and `mod name`.
    """

    name: str = ""
    content: list[Item] | None = None

    def render(self) -> str:
        head = self.fragment.render().rstrip()
        if self.content is None:
            return f"{head};"
        body = "\n".join(item.render() for item in self.content)
        if not body:
            return f"{head} {{}}"
        return f"{head} {{\n{body}\n}}"


@dataclass
class ExternCrateItem(Item):
    name: str = ""
    alias: str | None = None


@dataclass
class UseItem(Item):
    path: RustPath | None = None

    def is_rooted_at(self, name: str) -> bool:
        """True for `use name::...`, but not for `use name;`/`use name as x;`."""
        if self.path is None or not self.path.starts_with(name):
            return False
        return len(self.path.segments) > 1 or self.path.trailing_colon


@dataclass
class OtherItem(Item):
    pass


@dataclass
class SourceFile:
    """A parsed file: inner attributes/doc comments, then items."""

    attrs: list[Item] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)


def make_module(name: str, items: list[Item]) -> ModItem:
    """Build a `pub mod name { ... }` wrapping `items`."""
    return ModItem(Fragment([f"pub mod {name}"]), name=name, content=items)


# --- parsing -----------------------------------------------------------------


class _Builder:
    """Turns a tree-sitter CST into the item model."""

    def __init__(self, source: bytes) -> None:
        self.source = source

    def text(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def node_text(self, node: Node) -> str:
        return self.text(node.start_byte, node.end_byte)

    # --- paths ---

    def segments(self, node: Node) -> tuple[list[str], bool] | None:
        """Return (segments, leading_colon) for a plain path, None otherwise."""
        if node.type in _SEGMENT_NODES:
            return [self.node_text(node)], False
        if node.type not in _SCOPED_NODES:
            return None
        name = node.child_by_field_name("name")
        prefix = node.child_by_field_name("path")
        if name is None:
            return None
        if prefix is None:
            return [self.node_text(name)], True
        inner = self.segments(prefix)
        if inner is None:
            return None
        return [*inner[0], self.node_text(name)], inner[1]

    def collect_paths(
        self, node: Node, out: list[tuple[int, int, RustPath]]
    ) -> None:
        if node.type in _SCOPED_NODES:
            found = self.segments(node)
            if found is not None:
                segs, leading = found
                out.append(
                    (node.start_byte, node.end_byte, RustPath(segs, leading))
                )
                return

        elif node.type in _PREFIXED_NODES:
            prefix, separator = _group_prefix(node)
            found = self.segments(prefix) if prefix is not None else None
            if found is not None and separator is not None:
                segs, leading = found
                out.append(
                    (
                        prefix.start_byte,  # type: ignore[union-attr]
                        separator.end_byte,
                        RustPath(segs, leading, trailing_colon=True),
                    )
                )
                # members of a group are relative to the prefix
                return

        for child in node.children:
            self.collect_paths(child, out)

    def fragment(self, start: int, end: int, nodes: list[Node]) -> Fragment:
        return self.fragment_with_sites(start, end, nodes)[0]

    def fragment_with_sites(
        self, start: int, end: int, nodes: list[Node]
    ) -> tuple[Fragment, list[tuple[int, int, RustPath]]]:
        sites: list[tuple[int, int, RustPath]] = []
        for node in nodes:
            self.collect_paths(node, sites)
        sites.sort(key=lambda site: site[0])

        parts: list[str | RustPath] = []
        pos = start
        for site_start, site_end, path in sites:
            if site_start > pos:
                parts.append(self.text(pos, site_start))
            parts.append(path)
            pos = site_end
        if end > pos:
            parts.append(self.text(pos, end))
        return Fragment(parts), sites

    # --- items ---

    def item(self, prefix: list[Node], node: Node) -> Item:
        start = prefix[0].start_byte if prefix else node.start_byte

        if node.type == "mod_item":
            name = self.node_text(_field(node, "name"))
            body = node.child_by_field_name("body")
            if body is None:
                # `mod name;`: the head stops before the semicolon
                semi = node.children[-1]
                head_end = semi.start_byte if semi.type == ";" else node.end_byte
                head_nodes = [*prefix, *node.children[:-1]]
                return ModItem(
                    self.fragment(start, head_end, head_nodes), name=name
                )
            head_nodes = [*prefix, *(c for c in node.children if c != body)]
            return ModItem(
                self.fragment(start, body.start_byte, head_nodes),
                name=name,
                content=self.items(body.children, top_level=False)[1],
            )

        fragment, sites = self.fragment_with_sites(
            start, node.end_byte, [*prefix, node]
        )

        if node.type == "extern_crate_declaration":
            alias = node.child_by_field_name("alias")
            return ExternCrateItem(
                fragment,
                name=self.node_text(_field(node, "name")),
                alias=self.node_text(alias) if alias is not None else None,
            )

        if node.type == "use_declaration":
            return UseItem(fragment, path=self.use_path(node, sites))

        return OtherItem(fragment)

    def use_path(
        self, node: Node, sites: list[tuple[int, int, RustPath]]
    ) -> RustPath | None:
        """The path a use declaration starts with, if it has one."""
        argument = node.child_by_field_name("argument")
        if argument is None:
            return None
        if argument.type == "use_as_clause":
            argument = argument.child_by_field_name("path") or argument
        if argument.type in _SEGMENT_NODES:
            return RustPath([self.node_text(argument)])
        # share the object held by the fragment so rewrites stay visible
        return next(
            (path for start, _end, path in sites if start == argument.start_byte),
            None,
        )

    def items(
        self, children: list[Node], *, top_level: bool
    ) -> tuple[list[Item], list[Item]]:
        """Split sibling nodes into (inner attributes, items)."""
        attrs: list[Item] = []
        items: list[Item] = []
        prefix: list[Node] = []

        for child in children:
            if not child.is_named:
                # braces of a declaration list, stray punctuation
                continue
            if _is_inner(child, self.node_text(child)):
                # inner attributes must stay ahead of every item
                target = attrs if top_level and not items else items
                nodes = [*prefix, child]
                target.append(
                    OtherItem(
                        self.fragment(nodes[0].start_byte, child.end_byte, nodes)
                    )
                )
                prefix = []
                continue
            if child.type in _PREFIX_NODES:
                prefix.append(child)
                continue
            items.append(self.item(prefix, child))
            prefix = []

        if prefix:
            # trailing comments with nothing after them
            items.append(
                OtherItem(
                    self.fragment(prefix[0].start_byte, prefix[-1].end_byte, prefix)
                )
            )
        return attrs, items


def _field(node: Node, name: str) -> Node:
    child = node.child_by_field_name(name)
    if child is None:
        xmsg = f"{node.type} without {name} at line {node.start_point[0] + 1}"
        raise RustParseError(xmsg)
    return child


def _group_prefix(node: Node) -> tuple[Node | None, Node | None]:
    """Return (path, `::` token) of `path::{...}` / `path::*`."""
    if node.type == "scoped_use_list":
        prefix = node.child_by_field_name("path")
    else:
        named = [c for c in node.children if c.is_named]
        prefix = named[0] if named else None
    separator = next((c for c in node.children if c.type == "::"), None)
    if prefix is None or separator is None or separator.start_byte < prefix.end_byte:
        return None, None
    return prefix, separator


def _is_inner(node: Node, text: str) -> bool:
    if node.type == "inner_attribute_item":
        return True
    return node.type in {"line_comment", "block_comment"} and text.startswith(
        _INNER_PREFIXES
    )


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def parse(text: str, *, origin: str = "<source>") -> SourceFile:
    """Parse Rust source text into a SourceFile.

    Raises RustParseError on malformed input.
    """
    source = text.encode("utf-8")
    tree = Parser(RUST_LANGUAGE).parse(source)
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        line, column = bad.start_point
        what = f"missing {bad.type}" if bad.is_missing else "unexpected syntax"
        xmsg = f"failed to parse {origin}: {what} at line {line + 1}, column {column + 1}"
        raise RustParseError(xmsg)

    attrs, items = _Builder(source).items(root.children, top_level=True)
    return SourceFile(attrs=attrs, items=items)


def render(file: SourceFile) -> str:
    """Serialize a SourceFile back to Rust source text."""
    return "\n".join(item.render() for item in [*file.attrs, *file.items]) + "\n"
