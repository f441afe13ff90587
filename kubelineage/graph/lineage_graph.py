"""In-memory lineage graph of Kubernetes resources.

Nodes live in a ``networkx.MultiDiGraph`` addressed by stable integer
indices, with a ``key -> index`` map for lookup. Every edge carries an
``edge_type`` attribute: ``Owns`` (parent -> child, from ownerReferences)
or ``References`` (non-owning dependency, always added in both directions).

A synthetic root node stands for the cluster. It is the parent of every
resource without a resolvable owner and is excluded from traversal results
and orphan evaluation.

Typical use::

    graph = LineageGraph(Resource(kind="cluster", name="prod"))
    for resource in resources:
        graph.add_node(resource)
    graph.link_nodes()
    graph.get_related_items("deployment/default/web")
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import networkx as nx

from kubelineage.extractors.registry import metric_kind, normalize_kind
from kubelineage.graph.errors import GraphAlreadyLinkedError, OwnershipCycleError
from kubelineage.graph.models import (
    IMPACT_OWNED,
    IMPACT_REFERENCES,
    ImpactEntry,
    MissingReference,
    NodeView,
    Subgraph,
)
from kubelineage.graph.query import GraphQuery
from kubelineage.models.resources import EdgeType, Resource
from kubelineage.observability.logging import get_logger
from kubelineage.observability.metrics import (
    graph_build_duration_seconds,
    graph_builds_total,
    missing_references_total,
    orphans_detected_total,
    ownership_cycles_total,
)
from kubelineage.rules.conditions import OrphanContext
from kubelineage.rules.orphan_rules import is_resource_orphan

_logger = get_logger("graph.lineage")


def selectors_match(selectors: Mapping[str, str], labels: Mapping[str, str]) -> bool:
    """True iff *labels* contain every key/value pair of *selectors*."""
    return all(labels.get(key) == value for key, value in selectors.items())


class LineageGraph:
    """Directed multigraph of resources, built once and then queried."""

    def __init__(self, root: Resource) -> None:
        self._graph = nx.MultiDiGraph()
        self._key_to_index: dict[str, int] = {}
        self._missing: list[MissingReference] = []
        self._linked = False
        self._root_index = self._insert(root)
        self.root_key = root.key

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _insert(self, resource: Resource) -> int:
        idx = self._graph.number_of_nodes()
        self._graph.add_node(idx, resource=resource)
        self._key_to_index[resource.key] = idx
        return idx

    def add_node(self, resource: Resource) -> bool:
        """Insert *resource*. Returns False if its key is already present.

        Raises:
            GraphAlreadyLinkedError: the graph has already been linked.
        """
        if self._linked:
            raise GraphAlreadyLinkedError("cannot add nodes to a linked graph")
        if resource.key in self._key_to_index:
            _logger.debug("duplicate_resource_ignored", key=resource.key)
            return False
        self._insert(resource)
        return True

    def link_nodes(self, validate: bool = True) -> None:
        """Wire every edge and compute orphan status.

        Runs the ownership, selector and explicit-reference passes, then the
        orphan pass. With *validate*, the ownership edges are checked for
        cycles last.

        Raises:
            GraphAlreadyLinkedError: called a second time.
            OwnershipCycleError: *validate* is set and ownership edges form a
                cycle. The graph must be discarded.
        """
        if self._linked:
            raise GraphAlreadyLinkedError("link_nodes() may only run once")
        self._linked = True

        t_start = time.monotonic()
        self._link_owners()
        self._link_selectors()
        self._link_relations()
        orphan_count = self._compute_orphans()

        if validate:
            try:
                self._check_ownership_acyclic()
            except OwnershipCycleError:
                graph_builds_total.labels(outcome="cycle").inc()
                raise

        duration = time.monotonic() - t_start
        graph_build_duration_seconds.observe(duration)
        graph_builds_total.labels(outcome="ok").inc()
        _logger.info(
            "lineage_graph_linked",
            root=self.root_key,
            nodes=self._graph.number_of_nodes(),
            edges=self._graph.number_of_edges(),
            orphans=orphan_count,
            missing_references=len(self._missing),
            duration_ms=round(duration * 1000.0, 3),
        )

    def _link_owners(self) -> None:
        # Only the first owner counts; everything else hangs off the root.
        for idx, resource in self._iter_non_root():
            parent = self._root_index
            if resource.owners:
                owner_idx = self._key_to_index.get(resource.owners[0].key)
                if owner_idx is not None:
                    parent = owner_idx
            self._graph.add_edge(parent, idx, edge_type=EdgeType.OWNS)

    def _link_selectors(self) -> None:
        labeled = [
            (idx, resource.labels)
            for idx, resource in self._iter_non_root()
            if resource.labels and not resource.is_sensitive
        ]
        for idx, resource in self._iter_non_root():
            if not resource.selectors:
                continue
            for target_idx, labels in labeled:
                if target_idx != idx and selectors_match(resource.selectors, labels):
                    self._add_reference(idx, target_idx)

    def _link_relations(self) -> None:
        for idx, resource in self._iter_non_root():
            missing: dict[str, list[str]] = {}
            for relation in resource.relations:
                target_idx = self._key_to_index.get(relation.key)
                if target_idx is not None:
                    self._add_reference(idx, target_idx)
                    continue
                kind = normalize_kind(relation.kind)
                entry = MissingReference(resource.key, kind, relation.name, relation.namespace)
                self._missing.append(entry)
                missing.setdefault(kind, []).append(entry.target)
                missing_references_total.labels(kind=metric_kind(kind)).inc()
            if missing:
                resource.missing_refs = missing

    def _add_reference(self, a: int, b: int) -> None:
        self._graph.add_edge(a, b, edge_type=EdgeType.REFERENCES)
        self._graph.add_edge(b, a, edge_type=EdgeType.REFERENCES)

    def _compute_orphans(self) -> int:
        count = 0
        for idx, resource in self._iter_non_root():
            incoming = [
                (data["edge_type"], self.resource_at(source).kind)
                for source, _, data in self._graph.in_edges(idx, data=True)
                if source != self._root_index
            ]
            ctx = OrphanContext(
                incoming=incoming,
                labels=resource.labels,
                resource_type=resource.resource_type,
                missing_refs=resource.missing_refs,
            )
            resource.is_orphan = is_resource_orphan(resource.kind, resource.name, resource.namespace, ctx)
            if resource.is_orphan:
                count += 1
                orphans_detected_total.labels(kind=metric_kind(resource.kind)).inc()
        return count

    def _check_ownership_acyclic(self) -> None:
        try:
            cycle = nx.find_cycle(self.owns_view())
        except nx.NetworkXNoCycle:
            return
        keys = [self.key_of(edge[0]) for edge in cycle]
        ownership_cycles_total.inc()
        _logger.error("ownership_cycle_detected", cycle=keys)
        raise OwnershipCycleError(keys)

    # ------------------------------------------------------------------
    # Structure access
    # ------------------------------------------------------------------

    @property
    def root_index(self) -> int:
        return self._root_index

    @property
    def root(self) -> Resource:
        return self.resource_at(self._root_index)

    @property
    def is_linked(self) -> bool:
        return self._linked

    @property
    def missing_references(self) -> tuple[MissingReference, ...]:
        """Every unresolved explicit reference, in discovery order."""
        return tuple(self._missing)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._key_to_index

    def index_of(self, key: str) -> int | None:
        """Index of the node with *key*; keys compare case-insensitively."""
        return self._key_to_index.get(key.lower())

    def key_of(self, idx: int) -> str:
        return self.resource_at(idx).key

    def resource_at(self, idx: int) -> Resource:
        resource: Resource = self._graph.nodes[idx]["resource"]
        return resource

    def get(self, key: str) -> Resource | None:
        idx = self.index_of(key)
        return None if idx is None else self.resource_at(idx)

    def keys(self) -> list[str]:
        """All node keys (root included), sorted."""
        return sorted(self._key_to_index)

    def iter_nodes(self) -> Iterator[tuple[int, Resource]]:
        """``(index, resource)`` for every node, root first, in insertion order."""
        for idx in sorted(self._graph.nodes):
            yield idx, self.resource_at(idx)

    def _iter_non_root(self) -> Iterator[tuple[int, Resource]]:
        for idx, resource in self.iter_nodes():
            if idx != self._root_index:
                yield idx, resource

    def iter_edges(self) -> Iterator[tuple[int, int, EdgeType]]:
        """``(source, target, edge_type)`` for every edge."""
        for source, target, data in self._graph.edges(data=True):
            yield source, target, data["edge_type"]

    def successors(self, idx: int, edge_type: EdgeType) -> list[int]:
        """Targets of *idx*'s outgoing edges of *edge_type* (deduplicated, ordered)."""
        edges = self._graph.out_edges(idx, data=True)
        return _unique(target for _, target, data in edges if data["edge_type"] == edge_type)

    def predecessors(self, idx: int, edge_type: EdgeType) -> list[int]:
        """Sources of *idx*'s incoming edges of *edge_type* (deduplicated, ordered)."""
        edges = self._graph.in_edges(idx, data=True)
        return _unique(source for source, _, data in edges if data["edge_type"] == edge_type)

    def owns_view(self) -> Any:
        """Read-only view of the graph restricted to ``Owns`` edges."""
        graph = self._graph

        def _is_owns(source: int, target: int, key: int) -> bool:
            return bool(graph.edges[source, target, key]["edge_type"] == EdgeType.OWNS)

        return nx.subgraph_view(graph, filter_edge=_is_owns)

    # ------------------------------------------------------------------
    # Per-node views
    # ------------------------------------------------------------------

    def get_parent_key(self, key: str) -> str | None:
        """Key of the owning node (possibly the root), or None."""
        idx = self.index_of(key)
        if idx is None:
            return None
        parents = self.predecessors(idx, EdgeType.OWNS)
        return self.key_of(parents[0]) if parents else None

    def get_children_keys(self, key: str) -> list[str]:
        idx = self.index_of(key)
        if idx is None:
            return []
        return sorted(self.key_of(child) for child in self.successors(idx, EdgeType.OWNS))

    def get_leaf_keys(self, key: str) -> list[str]:
        idx = self.index_of(key)
        if idx is None:
            return []
        return sorted(self.key_of(leaf) for leaf in self.successors(idx, EdgeType.REFERENCES))

    def node_view(self, key: str) -> NodeView | None:
        resource = self.get(key)
        if resource is None:
            return None
        return NodeView(
            key=resource.key,
            kind=resource.kind,
            name=resource.name,
            namespace=resource.namespace,
            parent_key=self.get_parent_key(key),
            children_keys=self.get_children_keys(key),
            leaf_keys=self.get_leaf_keys(key),
            is_orphan=resource.is_orphan,
        )

    def to_tree_result(self, tree_id: str | None = None) -> dict[str, Any]:
        """Serializable snapshot of the whole graph, nodes sorted by key.

        *tree_id* defaults to the root's name.
        """
        nodes = []
        for key in self.keys():
            view = self.node_view(key)
            if view is not None:
                nodes.append(view.to_dict())
        return {
            "tree_id": tree_id if tree_id is not None else self.root.name,
            "root_key": self.root_key,
            "nodes": nodes,
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query(self, key: str) -> GraphQuery | None:
        return GraphQuery.from_key(self, key)

    def get_related_items(self, key: str) -> list[str]:
        """Everything connected to *key*: its ancestors, their descendants
        and whatever those reference. Always includes *key* itself."""
        query = GraphQuery.from_key(self, key)
        if query is None:
            return []
        return query.ancestors().descendants().with_references().collect_keys()

    def compute_impact(self, key: str) -> list[ImpactEntry]:
        """Resources affected if *key* changes.

        Direct referencers are tagged ``"references"``; everything they own,
        transitively, is tagged ``"owned by affected"``. Sorted by key.
        """
        idx = self.index_of(key)
        if idx is None:
            return []

        visited = {idx, self._root_index}
        impacted: list[ImpactEntry] = []
        direct: list[int] = []
        for source in self.predecessors(idx, EdgeType.REFERENCES):
            if source in visited:
                continue
            visited.add(source)
            direct.append(source)
            impacted.append(ImpactEntry(self.key_of(source), IMPACT_REFERENCES))

        owns = self.owns_view()
        for referencer in direct:
            for child in nx.dfs_preorder_nodes(owns, referencer):
                if child in visited:
                    continue
                visited.add(child)
                impacted.append(ImpactEntry(self.key_of(child), IMPACT_OWNED))

        impacted.sort(key=lambda entry: entry.key)
        return impacted

    def extract_subgraph(self, key: str) -> Subgraph:
        """Related-items node set of *key* plus every edge inside it."""
        query = GraphQuery.from_key(self, key)
        if query is None:
            return Subgraph()
        nodes = set(query.ancestors().descendants().with_references().selected)
        edges = [
            (source, target, edge_type)
            for source, target, edge_type in self.iter_edges()
            if source in nodes and target in nodes
        ]
        return Subgraph(nodes=nodes, edges=edges)

    def find_orphans(self) -> list[str]:
        """Sorted keys of every orphaned resource."""
        return sorted(resource.key for _, resource in self._iter_non_root() if resource.is_orphan)


def _unique(indices: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(indices))
