"""Resource lineage graph.

Builds an in-memory graph from declared configuration (ownerReferences,
label selectors, and the explicit references each kind's extractor reads)
and answers traversal, impact and orphan questions against it.
"""

from kubelineage.graph.builder import build_lineage_graph, descriptor_from_manifest, load_descriptors, parse_resource
from kubelineage.graph.diagnostics import format_missing_report, missing_reference_report
from kubelineage.graph.errors import GraphAlreadyLinkedError, LineageError, OwnershipCycleError
from kubelineage.graph.export import (
    export_dot,
    export_graph,
    export_mermaid,
    export_subgraph_dot,
    export_subgraph_mermaid,
)
from kubelineage.graph.lineage_graph import LineageGraph, selectors_match
from kubelineage.graph.models import ImpactEntry, MissingReference, NodeView, Subgraph
from kubelineage.graph.query import GraphQuery
from kubelineage.models.resources import EdgeType

__all__ = [
    "EdgeType",
    "GraphAlreadyLinkedError",
    "GraphQuery",
    "ImpactEntry",
    "LineageError",
    "LineageGraph",
    "MissingReference",
    "NodeView",
    "OwnershipCycleError",
    "Subgraph",
    "build_lineage_graph",
    "descriptor_from_manifest",
    "export_dot",
    "export_graph",
    "export_mermaid",
    "export_subgraph_dot",
    "export_subgraph_mermaid",
    "format_missing_report",
    "load_descriptors",
    "missing_reference_report",
    "parse_resource",
    "selectors_match",
]
