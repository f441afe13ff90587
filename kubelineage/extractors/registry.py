"""Resource handler registry.

Maps a (case-insensitively normalized) kind to a ``ResourceHandler``: a
pure function reading a raw object's declared references, plus the kind's
optional orphan rule. Kinds absent from the table have no extracted
references and are never orphans.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kubelineage.extractors.cluster import extract_event_relations, extract_hpa_relations
from kubelineage.extractors.network import (
    extract_apiservice_relations,
    extract_ingress_relations,
    extract_ingressclass_relations,
    extract_webhook_relations,
)
from kubelineage.extractors.rbac import (
    extract_clusterrolebinding_relations,
    extract_rolebinding_relations,
    extract_serviceaccount_relations,
)
from kubelineage.extractors.storage import extract_pv_relations, extract_pvc_relations
from kubelineage.extractors.workloads import (
    extract_cronjob_relations,
    extract_pod_relations,
    extract_statefulset_relations,
    extract_template_relations,
)
from kubelineage.models.resources import RelationRef
from kubelineage.observability.logging import get_logger
from kubelineage.rules.orphan_rules import OrphanRule, get_orphan_rule

_logger = get_logger("extractors.registry")

ExtractFn = Callable[[dict[str, Any]], list[RelationRef]]


def empty_relations(_raw: dict[str, Any]) -> list[RelationRef]:
    """Kinds whose incoming edges come from selectors or other objects."""
    return []


@dataclass(frozen=True)
class ResourceHandler:
    """Extraction strategy and orphan rule for one kind."""

    kind: str
    extract_relations: ExtractFn
    orphan_rule: OrphanRule | None = None


_EXTRACTORS: dict[str, ExtractFn] = {
    # Workloads
    "Pod": extract_pod_relations,
    "Deployment": extract_template_relations,
    "ReplicaSet": extract_template_relations,
    "StatefulSet": extract_statefulset_relations,
    "DaemonSet": extract_template_relations,
    "Job": extract_template_relations,
    "CronJob": extract_cronjob_relations,
    # Network
    "Service": empty_relations,
    "Ingress": extract_ingress_relations,
    "IngressClass": extract_ingressclass_relations,
    "NetworkPolicy": empty_relations,
    "EndpointSlice": empty_relations,
    # Config and storage
    "ConfigMap": empty_relations,
    "Secret": empty_relations,
    "PersistentVolumeClaim": extract_pvc_relations,
    "PersistentVolume": extract_pv_relations,
    "StorageClass": empty_relations,
    # RBAC
    "ServiceAccount": extract_serviceaccount_relations,
    "Role": empty_relations,
    "RoleBinding": extract_rolebinding_relations,
    "ClusterRole": empty_relations,
    "ClusterRoleBinding": extract_clusterrolebinding_relations,
    # Webhooks and aggregated APIs
    "ValidatingWebhookConfiguration": extract_webhook_relations,
    "MutatingWebhookConfiguration": extract_webhook_relations,
    "APIService": extract_apiservice_relations,
    # Other
    "HorizontalPodAutoscaler": extract_hpa_relations,
    "PodDisruptionBudget": empty_relations,
    "Namespace": empty_relations,
    "Node": empty_relations,
    "Event": extract_event_relations,
}

RESOURCE_REGISTRY: dict[str, ResourceHandler] = {
    kind: ResourceHandler(kind=kind, extract_relations=fn, orphan_rule=get_orphan_rule(kind))
    for kind, fn in _EXTRACTORS.items()
}

# Kinds that only ever appear as reference targets.
_TARGET_ONLY_KINDS = ("PriorityClass", "RuntimeClass", "CSIDriver")

_CANONICAL_KINDS = {kind.lower(): kind for kind in (*RESOURCE_REGISTRY, *_TARGET_ONLY_KINDS)}


def normalize_kind(kind: str) -> str:
    """Return the canonical spelling of *kind* ("configmap" -> "ConfigMap").

    Unknown kinds are returned unchanged.
    """
    return _CANONICAL_KINDS.get(kind.lower(), kind)


def metric_kind(kind: str) -> str:
    """Canonical *kind* for use as a metric label; unregistered kinds collapse to ``"other"``."""
    return _CANONICAL_KINDS.get(kind.lower(), "other")


def get_handler(kind: str) -> ResourceHandler | None:
    """Return the handler for *kind* (case-insensitive), if registered."""
    return RESOURCE_REGISTRY.get(normalize_kind(kind))


def extract_relationships(kind: str, raw: dict[str, Any]) -> list[RelationRef]:
    """Return the references *raw* declares, according to its kind's handler."""
    handler = get_handler(kind)
    if handler is None:
        return []
    relations = handler.extract_relations(raw)
    if relations:
        _logger.debug("relations_extracted", kind=handler.kind, count=len(relations))
    return relations
