"""Unresolved-reference diagnostics."""

from __future__ import annotations

from collections import defaultdict

from kubelineage.graph.lineage_graph import LineageGraph
from kubelineage.graph.models import MissingReference


def missing_reference_report(graph: LineageGraph) -> dict[str, list[MissingReference]]:
    """Group the graph's unresolved references by target kind.

    Kinds are sorted; within a kind, entries are ordered by target then
    by the referencing resource's key.
    """
    grouped: dict[str, list[MissingReference]] = defaultdict(list)
    for entry in graph.missing_references:
        grouped[entry.kind].append(entry)
    return {
        kind: sorted(grouped[kind], key=lambda e: (e.target, e.source_key))
        for kind in sorted(grouped)
    }


def format_missing_report(report: dict[str, list[MissingReference]]) -> list[str]:
    """One human-readable line per unresolved reference."""
    lines = []
    for kind, entries in report.items():
        for entry in entries:
            lines.append(f"{kind} {entry.target} (referenced by {entry.source_key})")
    return lines
