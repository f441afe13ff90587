"""Prometheus metrics for lineage graph construction.

All collectors register on the default registry at import time, so the
module must only be imported once per process (the usual Python module
caching guarantees this).
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

graph_builds_total = Counter(
    "kubelineage_graph_builds_total",
    "Lineage graphs built, by outcome.",
    ["outcome"],
)

graph_build_duration_seconds = Histogram(
    "kubelineage_graph_build_duration_seconds",
    "Wall-clock time spent linking a lineage graph.",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

orphans_detected_total = Counter(
    "kubelineage_orphans_detected_total",
    "Resources flagged as orphans during graph construction.",
    ["kind"],
)

missing_references_total = Counter(
    "kubelineage_missing_references_total",
    "Declared references whose target was not present in the batch.",
    ["kind"],
)

ownership_cycles_total = Counter(
    "kubelineage_ownership_cycles_total",
    "Graph builds rejected because ownership edges formed a cycle.",
)
