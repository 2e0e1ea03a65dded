# src/spago_build/graph.py
"""Read-only view over the module graph emitted by the compiler."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .errors import GraphError
from .globs import CompiledGlob, compile_glob, matches, matches_any
from .types import ModuleGraphNode


class ModuleGraph(Mapping[str, ModuleGraphNode]):
    """Immutable mapping of module name → {path, depends}."""

    def __init__(self, nodes: Mapping[str, ModuleGraphNode]) -> None:
        self._nodes: dict[str, ModuleGraphNode] = {
            name: {"path": node["path"], "depends": list(node["depends"])}
            for name, node in nodes.items()
        }

    @classmethod
    def from_json(cls, payload: str | Mapping[str, Any]) -> ModuleGraph:
        """Build a graph from `purs graph` output, validating its shape."""
        data: Any = json.loads(payload) if isinstance(payload, str) else payload
        if not isinstance(data, Mapping):
            xmsg = f"Module graph must be an object, got {type(data).__name__}"
            raise GraphError(xmsg)

        nodes: dict[str, ModuleGraphNode] = {}
        for name, raw in data.items():
            if not isinstance(raw, Mapping):
                xmsg = f"Module graph entry {name!r} must be an object"
                raise GraphError(xmsg)
            path = raw.get("path")
            depends = raw.get("depends", [])
            if not isinstance(path, str):
                xmsg = f"Module graph entry {name!r} has no `path`"
                raise GraphError(xmsg)
            if not isinstance(depends, list) or not all(
                isinstance(d, str) for d in depends
            ):
                xmsg = f"Module graph entry {name!r}: `depends` must be a list of names"
                raise GraphError(xmsg)
            nodes[str(name)] = {"path": path, "depends": list(depends)}
        return cls(nodes)

    # --- Mapping protocol ---

    def __getitem__(self, name: str) -> ModuleGraphNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"ModuleGraph({len(self._nodes)} modules)"

    # --- queries ---

    def imports_of(self, module: str) -> frozenset[str]:
        """Declared imports of a module; unknown modules import nothing."""
        node = self._nodes.get(module)
        if node is None:
            return frozenset()
        return frozenset(node["depends"])

    def path_of(self, module: str) -> str | None:
        node = self._nodes.get(module)
        return node["path"] if node is not None else None


def is_project_file(path: str, project_globs: Iterable[CompiledGlob]) -> bool:
    return matches_any(project_globs, path)


def owner_package(
    path: str, package_globs: Mapping[str, Iterable[CompiledGlob]]
) -> str | None:
    """Return the first package (in declaration order) whose glob matches."""
    for package, globs in package_globs.items():
        if any(matches(g, path) for g in globs):
            return package
    return None


def compile_package_globs(
    packages: Mapping[str, Iterable[str]],
) -> dict[str, list[CompiledGlob]]:
    """Compile each package's source globs, keeping declaration order."""
    return {name: [compile_glob(g) for g in globs] for name, globs in packages.items()}
