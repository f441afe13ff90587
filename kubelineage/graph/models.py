"""Result structures returned by lineage graph queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kubelineage.models.resources import EdgeType


@dataclass(frozen=True)
class NodeView:
    """Everything a tree view needs to render one node."""

    key: str
    kind: str
    name: str
    namespace: str | None
    parent_key: str | None
    children_keys: list[str] = field(default_factory=list)  # outgoing Owns, sorted
    leaf_keys: list[str] = field(default_factory=list)  # outgoing References, sorted
    is_orphan: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "kind": self.kind,
            "name": self.name,
            "ns": self.namespace,
            "parent_key": self.parent_key,
            "children_keys": list(self.children_keys),
            "leaf_keys": list(self.leaf_keys),
            "is_orphan": self.is_orphan,
        }


@dataclass(frozen=True)
class ImpactEntry:
    """One resource affected by a change to the analysed resource."""

    key: str
    reason: str  # IMPACT_REFERENCES or IMPACT_OWNED


IMPACT_REFERENCES = "references"
IMPACT_OWNED = "owned by affected"


@dataclass
class Subgraph:
    """Node and edge set around one resource, used for focused exports.

    Nodes are graph indices; edges are ``(source, target, edge_type)``
    triples over those indices, in insertion order.
    """

    nodes: set[int] = field(default_factory=set)
    edges: list[tuple[int, int, EdgeType]] = field(default_factory=list)


@dataclass(frozen=True)
class MissingReference:
    """A declared reference whose target is not part of the batch."""

    source_key: str
    kind: str
    name: str
    namespace: str | None = None

    @property
    def target(self) -> str:
        """``ns/name`` for namespaced targets, ``name`` otherwise."""
        return f"{self.namespace}/{self.name}" if self.namespace else self.name
