"""Turn raw descriptor batches into a linked ``LineageGraph``.

A descriptor is the flat mapping a resource-discovery collaborator hands
over for each object::

    {"kind": "Pod", "name": "web-0", "ns": "default", "apiVersion": "v1",
     "labels": {...}, "selectors": {...}, "metadata": {...}, "spec": {...},
     ...any other top-level fields of the raw object}

``descriptor_from_manifest`` produces one from a raw Kubernetes object as
returned by ``kubectl get -o json``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from kubelineage.extractors.fields import as_dicts, as_str, get_path, namespace_of
from kubelineage.extractors.registry import extract_relationships, normalize_kind
from kubelineage.graph.lineage_graph import LineageGraph
from kubelineage.models.resources import RelationRef, Resource
from kubelineage.observability.logging import get_logger

_logger = get_logger("graph.builder")

ROOT_KIND = "cluster"

# Kinds whose spec.selector is a matchLabels/matchExpressions LabelSelector.
_LABEL_SELECTOR_KINDS = frozenset(
    {"Deployment", "ReplicaSet", "StatefulSet", "DaemonSet", "Job", "PodDisruptionBudget"}
)


def _string_map(value: Any) -> dict[str, str] | None:
    if not isinstance(value, Mapping) or not value:
        return None
    return {str(k): str(v) for k, v in value.items() if v is not None}


def _owners(raw: Mapping[str, Any], namespace: str | None) -> list[RelationRef]:
    owners = []
    for owner in as_dicts(get_path(raw, "metadata", "ownerReferences")):
        kind = as_str(owner.get("kind"))
        name = as_str(owner.get("name"))
        if kind is None or name is None:
            continue
        owners.append(
            RelationRef(
                kind=kind,
                name=name,
                namespace=as_str(owner.get("namespace")) or namespace,
                api_version=as_str(owner.get("apiVersion")),
                uid=as_str(owner.get("uid")),
            )
        )
    return owners


def parse_resource(descriptor: Mapping[str, Any]) -> Resource | None:
    """Build a node from one descriptor.

    Returns None (and logs) when the descriptor is not a mapping or has no
    usable kind or name.
    """
    if not isinstance(descriptor, Mapping):
        _logger.warning("descriptor_skipped", reason="not_a_mapping", type=type(descriptor).__name__)
        return None
    raw = dict(descriptor)
    kind = as_str(raw.get("kind"))
    name = as_str(raw.get("name")) or as_str(get_path(raw, "metadata", "name"))
    if kind is None or name is None:
        _logger.warning("descriptor_skipped", reason="missing_kind_or_name", kind=kind, name=name)
        return None

    namespace = namespace_of(raw)
    resource_type = raw.get("type")

    return Resource(
        kind=kind,
        name=name,
        namespace=namespace,
        api_version=as_str(raw.get("apiVersion")),
        uid=as_str(get_path(raw, "metadata", "uid")),
        labels=_string_map(raw.get("labels")),
        selectors=_string_map(raw.get("selectors")),
        owners=_owners(raw, namespace),
        relations=extract_relationships(kind, raw),
        resource_type=resource_type if isinstance(resource_type, str) else None,
    )


def _manifest_selectors(kind: str, spec: Any) -> Any:
    if kind == "Service":
        return get_path(spec, "selector")
    if kind in _LABEL_SELECTOR_KINDS:
        return get_path(spec, "selector", "matchLabels")
    if kind == "NetworkPolicy":
        return get_path(spec, "podSelector", "matchLabels")
    return None


def descriptor_from_manifest(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a raw Kubernetes object into a descriptor.

    All top-level fields are kept so the kind's extractor can read them;
    name, namespace and labels are lifted out of metadata and selectors are
    taken from wherever the kind declares them.
    """
    descriptor = dict(obj)
    metadata = obj.get("metadata")
    kind = normalize_kind(as_str(obj.get("kind")) or "")
    descriptor["name"] = as_str(get_path(metadata, "name"))
    descriptor["ns"] = as_str(get_path(metadata, "namespace"))
    labels = get_path(metadata, "labels")
    if labels:
        descriptor["labels"] = labels
    selectors = _manifest_selectors(kind, obj.get("spec"))
    if isinstance(selectors, Mapping) and selectors:
        descriptor["selectors"] = selectors
    return descriptor


def load_descriptors(payload: Any) -> tuple[list[Any], str | None]:
    """Accept the batch shapes kubelineage understands.

    * a list of descriptors,
    * a Kubernetes ``List`` (``{"items": [...]}``) of raw manifests,
    * ``{"resources": [...], "root_name": "..."}``.

    Returns the descriptors and the root name embedded in the payload, if any.

    Raises:
        ValueError: the payload has none of these shapes.
    """
    if isinstance(payload, list):
        return payload, None
    if isinstance(payload, Mapping):
        if isinstance(payload.get("resources"), list):
            return payload["resources"], as_str(payload.get("root_name"))
        if isinstance(payload.get("items"), list):
            return [
                descriptor_from_manifest(item) if isinstance(item, Mapping) else item
                for item in payload["items"]
            ], None
    raise ValueError("expected a list of descriptors, a Kubernetes List, or an object with 'resources'")


def build_lineage_graph(
    descriptors: Iterable[Any],
    root_name: str,
    *,
    validate: bool = True,
) -> LineageGraph:
    """Parse *descriptors* in order, insert them, and link the graph.

    Raises:
        OwnershipCycleError: *validate* is set and owner references form a cycle.
    """
    graph = LineageGraph(Resource(kind=ROOT_KIND, name=root_name))
    skipped = 0
    for descriptor in descriptors:
        resource = parse_resource(descriptor)
        if resource is None:
            skipped += 1
            continue
        graph.add_node(resource)
    if skipped:
        _logger.info("descriptors_skipped", count=skipped)
    graph.link_nodes(validate=validate)
    return graph
