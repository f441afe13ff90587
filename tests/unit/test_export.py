"""Tests for DOT and Mermaid rendering."""

from __future__ import annotations

import pytest

from kubelineage.graph import LineageGraph, export_dot, export_graph, export_mermaid
from kubelineage.graph.export import export_subgraph_dot, export_subgraph_mermaid, node_label
from kubelineage.models.resources import RelationRef, Resource


def _make_graph() -> LineageGraph:
    """Root (N0), Deployment (N1) owning Pod (N2), Pod referencing ConfigMap (N3), lone Service (N4)."""
    graph = LineageGraph(Resource(kind="cluster", name="prod"))
    graph.add_node(Resource(kind="Deployment", name="web", namespace="shop"))
    graph.add_node(
        Resource(
            kind="Pod",
            name="web-0",
            namespace="shop",
            owners=[RelationRef(kind="Deployment", name="web", namespace="shop")],
            relations=[RelationRef(kind="ConfigMap", name="cfg", namespace="shop")],
        )
    )
    graph.add_node(Resource(kind="ConfigMap", name="cfg", namespace="shop"))
    graph.add_node(Resource(kind="StorageClass", name="fast"))
    graph.link_nodes()
    return graph


class TestNodeLabel:
    def test_namespaced(self) -> None:
        assert node_label(Resource(kind="Pod", name="web-0", namespace="shop")) == "Pod\\nweb-0\\n(shop)"

    def test_cluster_scoped(self) -> None:
        assert node_label(Resource(kind="Node", name="worker-1")) == "Node\\nworker-1"

    def test_escape_applies_to_fields_only(self) -> None:
        resource = Resource(kind="Pod", name="web-0", namespace="shop")
        assert node_label(resource, str.upper) == "POD\\nWEB-0\\n(SHOP)"


class TestDot:
    def test_header_and_footer(self) -> None:
        dot = export_dot(_make_graph())
        assert dot.startswith('digraph lineage {\n    rankdir=TB;\n    node [fontname="Arial"];\n')
        assert dot.endswith("}\n")

    def test_node_styles(self) -> None:
        dot = export_dot(_make_graph())
        assert 'N0 [label="cluster\\nprod" shape=box style=filled fillcolor=lightgray];' in dot
        assert 'N1 [label="Deployment\\nweb\\n(shop)" shape=ellipse];' in dot
        assert 'N3 [label="ConfigMap\\ncfg\\n(shop)" shape=note style=filled fillcolor=lightyellow];' in dot
        assert 'N4 [label="StorageClass\\nfast" shape=ellipse];' in dot

    def test_edge_styles(self) -> None:
        dot = export_dot(_make_graph())
        assert "N1 -> N2 [color=blue style=solid];" in dot
        assert "N2 -> N3 [color=green style=dashed];" in dot
        assert "N3 -> N2 [color=green style=dashed];" in dot
        assert "N0 -> N1 [color=blue style=solid];" in dot

    def test_subgraph(self) -> None:
        dot = export_subgraph_dot(_make_graph(), "pod/shop/web-0")
        assert dot.startswith("digraph lineage_subgraph {")
        assert "N0 " not in dot
        assert "N4 " not in dot
        assert "N1 -> N2 [color=blue style=solid];" in dot
        assert "N2 -> N3 [color=green style=dashed];" in dot

    def test_subgraph_of_unknown_key_is_empty(self) -> None:
        dot = export_subgraph_dot(_make_graph(), "pod/shop/nope")
        assert "label=" not in dot
        assert "->" not in dot


class TestMermaid:
    def test_full_graph(self) -> None:
        mermaid = export_mermaid(_make_graph())
        assert mermaid.startswith("graph TD\n")
        assert '    N0[["cluster\\nprod"]]\n' in mermaid
        assert '    N3["ConfigMap\\ncfg\\n(shop)"]:::config\n' in mermaid
        assert '    N1["Deployment\\nweb\\n(shop)"]\n' in mermaid
        assert "    N1 --> N2\n" in mermaid
        assert "    N2 -.-> N3\n" in mermaid
        assert mermaid.endswith("    classDef config fill:#ffffcc,stroke:#333,stroke-width:2px\n")

    def test_subgraph(self) -> None:
        mermaid = export_subgraph_mermaid(_make_graph(), "configmap/shop/cfg")
        assert "N0[[" not in mermaid
        assert "N4[" not in mermaid
        # ConfigMap's only relation is the pod; the pod's owner is not pulled in
        assert "N1[" not in mermaid
        assert "    N3 -.-> N2\n" in mermaid


class TestExportGraph:
    def test_dispatch(self) -> None:
        graph = _make_graph()
        assert export_graph(graph, "dot") == export_dot(graph)
        assert export_graph(graph, "mermaid") == export_mermaid(graph)
        assert export_graph(graph, "mermaid", "pod/shop/web-0") == export_subgraph_mermaid(graph, "pod/shop/web-0")

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="unknown export format"):
            export_graph(_make_graph(), "svg")


class TestLabelQuoting:
    """Quotes inside kinds, names or namespaces must not end the label string."""

    @staticmethod
    def _make_quoted_graph() -> LineageGraph:
        graph = LineageGraph(Resource(kind="cluster", name="prod"))
        graph.add_node(Resource(kind='We"ird', name="x", namespace="a"))
        graph.link_nodes()
        return graph

    def test_dot_escapes_quotes(self) -> None:
        dot = export_dot(self._make_quoted_graph())
        assert 'N1 [label="We\\"ird\\nx\\n(a)" shape=ellipse];' in dot

    def test_dot_escapes_backslashes(self) -> None:
        graph = LineageGraph(Resource(kind="cluster", name="prod"))
        graph.add_node(Resource(kind="Odd", name="a\\b"))
        graph.link_nodes()
        assert 'N1 [label="Odd\\na\\\\b" shape=ellipse];' in export_dot(graph)

    def test_mermaid_uses_entity(self) -> None:
        mermaid = export_mermaid(self._make_quoted_graph())
        assert '    N1["We#quot;ird\\nx\\n(a)"]\n' in mermaid
