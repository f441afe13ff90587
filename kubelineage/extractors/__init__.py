"""Per-kind relationship extraction.

Exposes:
    extract_relationships -- References a raw object declares, by kind.
    get_handler           -- ResourceHandler (extractor + orphan rule) lookup.
    normalize_kind        -- Canonical kind spelling ("configmap" -> "ConfigMap").
    metric_kind           -- Bounded kind label for Prometheus counters.
"""

from kubelineage.extractors.registry import (
    RESOURCE_REGISTRY,
    ResourceHandler,
    extract_relationships,
    get_handler,
    metric_kind,
    normalize_kind,
)

__all__ = [
    "RESOURCE_REGISTRY",
    "ResourceHandler",
    "extract_relationships",
    "get_handler",
    "metric_kind",
    "normalize_kind",
]
