# src/rust_bundler/types.py
from __future__ import annotations

from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired

OriginType = Literal["cli", "config", "default", "code", "test"]


# --- cargo metadata (format-version 1) --------------------------------------


class CargoTarget(TypedDict):
    name: str
    kind: list[str]
    src_path: str

    crate_types: NotRequired[list[str]]
    edition: NotRequired[str]


class CargoPackage(TypedDict):
    id: str
    name: str
    version: str
    manifest_path: str
    targets: list[CargoTarget]

    edition: NotRequired[str]


class CargoNodeDep(TypedDict):
    name: str  # the name used in source, after renames
    pkg: str

    dep_kinds: NotRequired[list[dict[str, str | None]]]


class CargoNode(TypedDict):
    id: str
    deps: list[CargoNodeDep]

    dependencies: NotRequired[list[str]]
    features: NotRequired[list[str]]


class CargoResolve(TypedDict):
    nodes: list[CargoNode]
    root: str | None


class CargoMetadata(TypedDict):
    packages: list[CargoPackage]
    resolve: CargoResolve | None

    workspace_root: NotRequired[str]
    version: NotRequired[int]


# --- configuration ----------------------------------------------------------


class BundleConfigInput(TypedDict, total=False):
    skip: list[str]
    output: str
    format: bool
    rustfmt: str
    log_level: str

    # runtime behavior
    strict_config: bool


class BundleConfig(TypedDict):
    package_path: Path
    skip: set[str]
    output: Path | None
    format: bool
    rustfmt: str
    log_level: str

    # provenance of the output setting (optional, for audit/debug)
    __origin__: NotRequired[dict[str, OriginType]]


class Runtime(TypedDict):
    log_level: str
    use_color: bool
