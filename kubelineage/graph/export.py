"""DOT and Mermaid renderings of a lineage graph.

The root is drawn as a box (``[[...]]`` in Mermaid), ConfigMaps and
Secrets as yellow notes (``:::config``), ``Owns`` edges solid and
``References`` edges dashed. Node ids are ``N{index}``, so the same
resource keeps its id between a full export and a subgraph export.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from kubelineage.graph.lineage_graph import LineageGraph
from kubelineage.models.resources import EdgeType, Resource

_DOT_HEADER = '    rankdir=TB;\n    node [fontname="Arial"];\n    edge [fontname="Arial"];\n'

_DOT_ROOT_STYLE = "shape=box style=filled fillcolor=lightgray"
_DOT_CONFIG_STYLE = "shape=note style=filled fillcolor=lightyellow"
_DOT_DEFAULT_STYLE = "shape=ellipse"

_DOT_EDGE_STYLES = {
    EdgeType.OWNS: "color=blue style=solid",
    EdgeType.REFERENCES: "color=green style=dashed",
}

_MERMAID_ARROWS = {
    EdgeType.OWNS: "-->",
    EdgeType.REFERENCES: "-.->",
}

_MERMAID_CLASSDEF = "    classDef config fill:#ffffcc,stroke:#333,stroke-width:2px\n"

EXPORT_FORMATS = ("dot", "mermaid")


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _mermaid_escape(text: str) -> str:
    return text.replace('"', "#quot;")


def node_label(resource: Resource, escape: Callable[[str], str] = str) -> str:
    r"""``Kind\nname\n(namespace)``, with literal ``\n`` separators.

    *escape* is applied to each field, never to the separators.
    """
    kind, name = escape(resource.kind), escape(resource.name)
    if resource.namespace:
        return f"{kind}\\n{name}\\n({escape(resource.namespace)})"
    return f"{kind}\\n{name}"


def _dot(
    graph: LineageGraph,
    name: str,
    nodes: Iterable[int],
    edges: Iterable[tuple[int, int, EdgeType]],
) -> str:
    lines = [f"digraph {name} {{\n", _DOT_HEADER, "\n"]
    for idx in nodes:
        resource = graph.resource_at(idx)
        if idx == graph.root_index:
            style = _DOT_ROOT_STYLE
        elif resource.is_sensitive:
            style = _DOT_CONFIG_STYLE
        else:
            style = _DOT_DEFAULT_STYLE
        lines.append(f'    N{idx} [label="{node_label(resource, _dot_escape)}" {style}];\n')
    lines.append("\n")
    for source, target, edge_type in edges:
        lines.append(f"    N{source} -> N{target} [{_DOT_EDGE_STYLES[edge_type]}];\n")
    lines.append("}\n")
    return "".join(lines)


def _mermaid(
    graph: LineageGraph,
    nodes: Iterable[int],
    edges: Iterable[tuple[int, int, EdgeType]],
) -> str:
    lines = ["graph TD\n"]
    for idx in nodes:
        resource = graph.resource_at(idx)
        label = node_label(resource, _mermaid_escape)
        if idx == graph.root_index:
            lines.append(f'    N{idx}[["{label}"]]\n')
        elif resource.is_sensitive:
            lines.append(f'    N{idx}["{label}"]:::config\n')
        else:
            lines.append(f'    N{idx}["{label}"]\n')
    lines.append("\n")
    for source, target, edge_type in edges:
        lines.append(f"    N{source} {_MERMAID_ARROWS[edge_type]} N{target}\n")
    lines.append("\n")
    lines.append(_MERMAID_CLASSDEF)
    return "".join(lines)


def export_dot(graph: LineageGraph) -> str:
    """Render the whole graph, root included, as Graphviz DOT."""
    return _dot(graph, "lineage", (idx for idx, _ in graph.iter_nodes()), graph.iter_edges())


def export_mermaid(graph: LineageGraph) -> str:
    """Render the whole graph, root included, as a Mermaid flowchart."""
    return _mermaid(graph, (idx for idx, _ in graph.iter_nodes()), graph.iter_edges())


def export_subgraph_dot(graph: LineageGraph, key: str) -> str:
    """DOT for the subgraph around *key*; an empty digraph for unknown keys."""
    subgraph = graph.extract_subgraph(key)
    return _dot(graph, "lineage_subgraph", sorted(subgraph.nodes), subgraph.edges)


def export_subgraph_mermaid(graph: LineageGraph, key: str) -> str:
    subgraph = graph.extract_subgraph(key)
    return _mermaid(graph, sorted(subgraph.nodes), subgraph.edges)


def export_graph(graph: LineageGraph, fmt: str = "dot", key: str | None = None) -> str:
    """Dispatch on *fmt* (``dot`` or ``mermaid``); *key* selects a subgraph.

    Raises:
        ValueError: unknown format.
    """
    if fmt == "dot":
        return export_dot(graph) if key is None else export_subgraph_dot(graph, key)
    if fmt == "mermaid":
        return export_mermaid(graph) if key is None else export_subgraph_mermaid(graph, key)
    raise ValueError(f"unknown export format {fmt!r}, expected one of {', '.join(EXPORT_FORMATS)}")
