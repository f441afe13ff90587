"""Tolerant accessors for raw Kubernetes JSON.

Extractors read whatever the API server (or a test fixture) handed us.
Every accessor returns ``None`` or an empty list instead of raising when a
field is absent or has an unexpected type.
"""

from __future__ import annotations

from typing import Any

from kubelineage.models.resources import RelationRef


def get_path(obj: Any, *path: str) -> Any:
    """Follow *path* through nested mappings; ``None`` on any miss."""
    current = obj
    for part in path:
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def as_str(value: Any) -> str | None:
    """Return *value* if it is a non-empty string."""
    if isinstance(value, str) and value:
        return value
    return None


def as_dicts(value: Any) -> list[dict[str, Any]]:
    """Return the mapping elements of a list field."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def namespace_of(raw: dict[str, Any]) -> str | None:
    """Namespace of a raw object or descriptor."""
    return as_str(get_path(raw, "metadata", "namespace")) or as_str(raw.get("ns")) or as_str(raw.get("namespace"))


def ref(kind: str, name: Any, namespace: str | None = None, api_version: Any = None) -> RelationRef | None:
    """Build a RelationRef, or ``None`` when *name* is not a usable string."""
    target = as_str(name)
    if target is None:
        return None
    return RelationRef(kind=kind, name=target, namespace=namespace, api_version=as_str(api_version))


def object_ref_to_relation(obj_ref: Any, default_kind: str | None = None) -> RelationRef | None:
    """Convert a core/v1 ObjectReference mapping to a RelationRef."""
    if not isinstance(obj_ref, dict):
        return None
    kind = as_str(obj_ref.get("kind")) or default_kind
    name = as_str(obj_ref.get("name"))
    if kind is None or name is None:
        return None
    return RelationRef(
        kind=kind,
        name=name,
        namespace=as_str(obj_ref.get("namespace")),
        api_version=as_str(obj_ref.get("apiVersion")),
        uid=as_str(obj_ref.get("uid")),
    )


def compact(refs: list[RelationRef | None]) -> list[RelationRef]:
    return [r for r in refs if r is not None]
