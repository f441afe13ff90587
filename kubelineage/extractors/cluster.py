"""Autoscalers and events."""

from __future__ import annotations

from typing import Any

from kubelineage.extractors.fields import as_str, compact, get_path, namespace_of, object_ref_to_relation, ref
from kubelineage.models.resources import RelationRef


def extract_hpa_relations(raw: dict[str, Any]) -> list[RelationRef]:
    target = get_path(raw, "spec", "scaleTargetRef")
    kind = as_str(get_path(target, "kind"))
    if kind is None:
        return []
    return compact([ref(kind, target.get("name"), namespace_of(raw), target.get("apiVersion"))])


def extract_event_relations(raw: dict[str, Any]) -> list[RelationRef]:
    return compact(
        [
            object_ref_to_relation(raw.get("involvedObject")),
            object_ref_to_relation(raw.get("related")),
        ]
    )
