# src/rust_bundler/metadata.py

"""Query layer over `cargo metadata`.

The package graph is fetched once per run and treated as immutable:
packages by id, resolve nodes by id, and the dependency edges
(name used in source → package id) of each node.
"""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_CARGO,
    DEFAULT_ENV_CARGO,
    TARGET_KIND_BIN,
    TARGET_KIND_LIB,
)
from .logs import LoggerWithTrace, get_logger
from .types import CargoMetadata, CargoNode, CargoPackage, CargoTarget


def target_is(target: CargoTarget, kind: str) -> bool:
    return kind in target["kind"]


def crate_name(name: str) -> str:
    """Return the identifier form of a package or target name."""
    return name.replace("-", "_")


def source_dir(target: CargoTarget) -> Path:
    """Directory the target's entry file lives in."""
    return Path(target["src_path"]).parent


class PackageGraph:
    """Read-only view of a cargo metadata document."""

    def __init__(self, metadata: CargoMetadata) -> None:
        resolve = metadata.get("resolve")
        if not resolve:
            xmsg = "cargo metadata has no dependency resolution"
            raise ValueError(xmsg)
        root_id = resolve.get("root")
        if not root_id:
            xmsg = "cargo metadata has no root package (virtual workspace manifest?)"
            raise ValueError(xmsg)

        self.metadata = metadata
        self.root_id: str = root_id
        self._packages: dict[str, CargoPackage] = {
            p["id"]: p for p in metadata["packages"]
        }
        self._nodes: dict[str, CargoNode] = {n["id"]: n for n in resolve["nodes"]}

        if root_id not in self._packages:
            xmsg = f"Could not find root package {root_id}"
            raise ValueError(xmsg)

    @classmethod
    def from_metadata(cls, data: dict[str, Any]) -> PackageGraph:
        """Build a graph from an already decoded metadata document."""
        for key in ("packages", "resolve"):
            if key not in data:
                xmsg = f"cargo metadata is missing `{key}`"
                raise ValueError(xmsg)
        return cls(data)  # type: ignore[arg-type]

    # --- packages and nodes ---

    @property
    def root_package(self) -> CargoPackage:
        return self._packages[self.root_id]

    def package_by_id(self, package_id: str) -> CargoPackage:
        try:
            return self._packages[package_id]
        except KeyError:
            xmsg = f"Could not find package by id {package_id}"
            raise ValueError(xmsg) from None

    def node_by_id(self, package_id: str) -> CargoNode:
        try:
            return self._nodes[package_id]
        except KeyError:
            xmsg = f"Could not find resolve node for {package_id}"
            raise ValueError(xmsg) from None

    def is_root(self, package: CargoPackage) -> bool:
        return package["id"] == self.root_id

    # --- targets ---

    def primary_target(self, package: CargoPackage) -> CargoTarget:
        """Pick the package's binary target, else its library target."""
        for kind in (TARGET_KIND_BIN, TARGET_KIND_LIB):
            for target in package["targets"]:
                if target_is(target, kind):
                    return target
        xmsg = f"Could not find a usable target (bin or lib) in package {package['name']}"
        raise ValueError(xmsg)

    def package_target(self, package: CargoPackage, kind: str) -> CargoTarget:
        for target in package["targets"]:
            if target_is(target, kind):
                return target
        xmsg = f"Could not find target of type {kind} in package {package['name']}"
        raise ValueError(xmsg)

    def root_lib_name(self) -> str:
        """Name the root package's library is referred to by in source."""
        package = self.root_package
        for target in package["targets"]:
            if target_is(target, TARGET_KIND_LIB):
                return crate_name(target["name"])
        return crate_name(package["name"])

    # --- dependency edges ---

    def dependency_package(
        self,
        node: CargoNode,
        name: str,
        *,
        logger: LoggerWithTrace | None = None,
    ) -> str | None:
        """Return the package id `name` refers to from `node`.

        Missing edges are not fatal: a warning is logged and None returned.
        """
        for dep in node.get("deps", []):
            if dep["name"] == name:
                return dep["pkg"]
        package = self._packages.get(node["id"])
        owner = package["name"] if package else node["id"]
        (logger or get_logger()).warning(
            "Could not find dep %s in crate %s", name, owner
        )
        return None


def _cargo_command() -> str:
    return os.getenv(DEFAULT_ENV_CARGO) or DEFAULT_CARGO


def query_metadata(manifest_path: Path) -> dict[str, Any]:
    """Run `cargo metadata` for `manifest_path` and decode its output."""
    logger = get_logger()
    cmd = [
        _cargo_command(),
        "metadata",
        "--format-version",
        "1",
        "--manifest-path",
        str(manifest_path),
    ]
    logger.trace("[METADATA] running %s", " ".join(cmd))

    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        xmsg = f"failed to obtain cargo metadata: {cmd[0]!r} not found"
        raise RuntimeError(xmsg) from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
        xmsg = f"failed to obtain cargo metadata: {detail}"
        raise RuntimeError(xmsg) from e

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        xmsg = f"cargo metadata returned invalid JSON: {e.msg} (line {e.lineno})"
        raise ValueError(xmsg) from e

    if not isinstance(data, dict):
        xmsg = f"cargo metadata returned {type(data).__name__}, expected an object"
        raise ValueError(xmsg)  # noqa: TRY004
    return data


def resolve(manifest_path: Path) -> PackageGraph:
    """Obtain the package graph for a manifest. Failures are fatal."""
    if not manifest_path.is_file():
        xmsg = f"Cargo manifest not found: {manifest_path}"
        raise FileNotFoundError(xmsg)
    return PackageGraph.from_metadata(query_metadata(manifest_path))
