"""Resource and relation-reference data structures for the lineage graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class EdgeType(StrEnum):
    """Types of relationships between resources in the lineage graph."""

    OWNS = "Owns"  # parent -> child, from ownerReferences
    REFERENCES = "References"  # non-owning dependency, selector or explicit


def resource_key(kind: str, namespace: str | None, name: str) -> str:
    """Return the canonical, case-insensitive key of a resource.

    ``"{kind}/{namespace}/{name}"`` for namespaced resources and
    ``"{kind}/{name}"`` for cluster-scoped ones, always lowercased.
    An empty namespace is treated the same as an absent one.
    """
    if namespace:
        return f"{kind}/{namespace}/{name}".lower()
    return f"{kind}/{name}".lower()


@dataclass(frozen=True)
class RelationRef:
    """A typed pointer to another resource.

    Used both for declared owners and for explicit references. Only
    ``kind``, ``namespace`` and ``name`` identify the target; ``api_version``
    and ``uid`` are carried for display.
    """

    kind: str
    name: str
    namespace: str | None = None
    api_version: str | None = None
    uid: str | None = None

    @property
    def key(self) -> str:
        return resource_key(self.kind, self.namespace, self.name)

    def same_target(self, other: RelationRef) -> bool:
        return self.key == other.key


@dataclass
class Resource:
    """A node of the lineage graph.

    The identity fields (kind, name, namespace, labels, selectors, owners,
    relations) are never changed after construction. ``is_orphan`` and
    ``missing_refs`` are written exactly once by ``LineageGraph.link_nodes``.
    """

    kind: str
    name: str
    namespace: str | None = None
    api_version: str | None = None
    uid: str | None = None
    labels: dict[str, str] | None = None
    selectors: dict[str, str] | None = None
    owners: list[RelationRef] = field(default_factory=list)
    relations: list[RelationRef] = field(default_factory=list)
    resource_type: str | None = None  # e.g. a Secret's "type"
    is_orphan: bool = False
    # canonical target kind -> unresolved targets, each "namespace/name" or
    # "name" for cluster-scoped targets
    missing_refs: dict[str, list[str]] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Return the unique key for this resource."""
        return resource_key(self.kind, self.namespace, self.name)

    @property
    def is_sensitive(self) -> bool:
        """ConfigMaps and Secrets are styled apart and never selector targets."""
        return self.kind.lower() in ("configmap", "secret")
