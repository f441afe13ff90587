"""Pods and workload controllers."""

from __future__ import annotations

from typing import Any

from kubelineage.extractors.fields import as_dicts, compact, get_path, namespace_of, ref
from kubelineage.extractors.pod_spec import extract_pod_spec_relations
from kubelineage.models.resources import RelationRef


def extract_pod_relations(raw: dict[str, Any]) -> list[RelationRef]:
    spec = raw.get("spec")
    if not isinstance(spec, dict):
        return []

    # Cluster-scoped targets first, then the shared PodSpec references.
    relations = compact(
        [
            ref("Node", spec.get("nodeName")),
            ref("PriorityClass", spec.get("priorityClassName")),
            ref("RuntimeClass", spec.get("runtimeClassName")),
        ]
    )
    relations.extend(extract_pod_spec_relations(spec, namespace_of(raw)))
    return relations


def extract_template_relations(raw: dict[str, Any]) -> list[RelationRef]:
    """Deployment, ReplicaSet, DaemonSet and Job: ``spec.template.spec``."""
    return extract_pod_spec_relations(get_path(raw, "spec", "template", "spec"), namespace_of(raw))


def extract_cronjob_relations(raw: dict[str, Any]) -> list[RelationRef]:
    pod_spec = get_path(raw, "spec", "jobTemplate", "spec", "template", "spec")
    return extract_pod_spec_relations(pod_spec, namespace_of(raw))


def extract_statefulset_relations(raw: dict[str, Any]) -> list[RelationRef]:
    spec = raw.get("spec")
    if not isinstance(spec, dict):
        return []
    namespace = namespace_of(raw)

    relations = compact(
        [
            ref("PersistentVolumeClaim", get_path(template, "metadata", "name"), namespace)
            for template in as_dicts(spec.get("volumeClaimTemplates"))
        ]
    )
    relations.extend(compact([ref("Service", spec.get("serviceName"), namespace)]))
    relations.extend(extract_pod_spec_relations(get_path(spec, "template", "spec"), namespace))
    return relations
