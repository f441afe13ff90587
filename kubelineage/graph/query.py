"""Chainable traversals over a linked lineage graph.

A ``GraphQuery`` starts from one resource and accumulates a node set;
each step returns a new query over the enlarged set, so later steps see
what earlier ones added::

    GraphQuery.from_key(graph, "replicaset/default/web-7d4b9").ancestors().descendants().collect_keys()

The cluster root is never added by a step and never returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

from kubelineage.models.resources import EdgeType, Resource

if TYPE_CHECKING:
    from kubelineage.graph.lineage_graph import LineageGraph


class GraphQuery:
    """Immutable node selection over a ``LineageGraph``."""

    def __init__(self, graph: LineageGraph, selected: frozenset[int]) -> None:
        self._graph = graph
        self._selected = selected

    @classmethod
    def from_key(cls, graph: LineageGraph, key: str) -> GraphQuery | None:
        """Start a traversal at *key*, or None if the graph has no such node."""
        idx = graph.index_of(key)
        if idx is None:
            return None
        return cls(graph, frozenset({idx}))

    def _with(self, added: set[int]) -> GraphQuery:
        added.discard(self._graph.root_index)
        return GraphQuery(self._graph, self._selected | added)

    def ancestors(self) -> GraphQuery:
        """Add every transitive Owns-parent of the selection."""
        root = self._graph.root_index
        added: set[int] = set()
        for idx in self._selected:
            chain = {idx}
            parents = self._graph.predecessors(idx, EdgeType.OWNS)
            while parents and parents[0] != root and parents[0] not in chain:
                parent = parents[0]
                chain.add(parent)
                added.add(parent)
                parents = self._graph.predecessors(parent, EdgeType.OWNS)
        return self._with(added)

    def descendants(self) -> GraphQuery:
        """Add everything reachable from the selection over Owns edges."""
        owns = self._graph.owns_view()
        added: set[int] = set()
        for idx in self._selected:
            added.update(nx.dfs_preorder_nodes(owns, idx))
        return self._with(added)

    def with_references(self) -> GraphQuery:
        """Add every node one outgoing References edge away from the selection."""
        added: set[int] = set()
        for idx in self._selected:
            added.update(self._graph.successors(idx, EdgeType.REFERENCES))
        return self._with(added)

    @property
    def selected(self) -> frozenset[int]:
        """Selected node indices, root excluded."""
        return self._selected - {self._graph.root_index}

    def collect_keys(self) -> list[str]:
        return sorted(self._graph.key_of(idx) for idx in self.selected)

    def collect_nodes(self) -> list[Resource]:
        return sorted((self._graph.resource_at(idx) for idx in self.selected), key=lambda r: r.key)

    def __len__(self) -> int:
        return len(self.selected)
