"""Explicit resource graph declared to Pulumi in dependency order."""

from __future__ import annotations

import graphlib
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .errors import GraphError


@dataclass(frozen=True)
class Ref:
    """An output attribute of another node, e.g. ``Ref("bucket", "arn")``."""

    node: str
    attribute: str

    def __str__(self) -> str:
        return f"${{{self.node}.{self.attribute}}}"


@dataclass
class ResourceNode:
    """A resource to declare.

    ``kind`` selects the resource type, ``inputs`` are its constructor
    arguments and may hold ``Ref`` values anywhere inside dicts, lists or
    objects exposing ``to_dict()``.
    """

    name: str
    kind: str
    inputs: dict[str, Any] = field(default_factory=dict)
    depends_on: tuple[str, ...] = ()
    provider: Optional[str] = None


def iter_refs(value: Any) -> Iterator[Ref]:
    """Yield every Ref nested inside ``value``."""
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_refs(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_refs(item)
    elif hasattr(value, "to_dict"):
        yield from iter_refs(value.to_dict())


class ResourceGraph:
    """Directed acyclic graph of ResourceNodes keyed by name."""

    def __init__(self) -> None:
        self._nodes: dict[str, ResourceNode] = {}

    def add(self, node: ResourceNode) -> ResourceNode:
        if node.name in self._nodes:
            raise GraphError(f"duplicate resource name {node.name!r}")
        self._nodes[node.name] = node
        return node

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def __getitem__(self, name: str) -> ResourceNode:
        return self._nodes[name]

    def __len__(self) -> int:
        return len(self._nodes)

    def nodes(self, kind: Optional[str] = None) -> list[ResourceNode]:
        return [n for n in self._nodes.values() if kind is None or n.kind == kind]

    def dependencies(self, name: str) -> set[str]:
        """Explicit depends_on plus every node referenced from the inputs."""
        node = self._nodes[name]
        deps = set(node.depends_on)
        if node.provider:
            deps.add(node.provider)
        deps.update(ref.node for ref in iter_refs(node.inputs))
        return deps

    def topological_order(self) -> list[str]:
        """Node names ordered so that every dependency comes first."""
        sorter: graphlib.TopologicalSorter = graphlib.TopologicalSorter()
        for name in self._nodes:
            deps = self.dependencies(name)
            missing = deps - self._nodes.keys()
            if missing:
                raise GraphError(f"{name!r} depends on unknown node(s): {', '.join(sorted(missing))}")
            sorter.add(name, *sorted(deps))
        try:
            return list(sorter.static_order())
        except graphlib.CycleError as exc:
            raise GraphError(f"dependency cycle: {' -> '.join(exc.args[1])}") from exc
