"""ServiceAccounts and role bindings.

Roles and ClusterRoles reference nothing themselves; they are reached from
the bindings below.
"""

from __future__ import annotations

from typing import Any

from kubelineage.extractors.fields import as_dicts, as_str, compact, get_path, namespace_of, ref
from kubelineage.models.resources import RelationRef


def extract_serviceaccount_relations(raw: dict[str, Any]) -> list[RelationRef]:
    namespace = namespace_of(raw)
    refs = [ref("Secret", secret.get("name"), namespace) for secret in as_dicts(raw.get("secrets"))]
    refs.extend(ref("Secret", secret.get("name"), namespace) for secret in as_dicts(raw.get("imagePullSecrets")))
    return compact(refs)


def _service_account_subjects(raw: dict[str, Any], default_namespace: str | None) -> list[RelationRef | None]:
    return [
        ref("ServiceAccount", subject.get("name"), as_str(subject.get("namespace")) or default_namespace)
        for subject in as_dicts(raw.get("subjects"))
        if subject.get("kind") == "ServiceAccount"
    ]


def extract_rolebinding_relations(raw: dict[str, Any]) -> list[RelationRef]:
    namespace = namespace_of(raw)
    role_ref = raw.get("roleRef")
    kind = as_str(get_path(role_ref, "kind"))

    refs: list[RelationRef | None] = []
    if kind is not None:
        # A Role lives next to its binding; a ClusterRole is cluster-scoped.
        role_namespace = namespace if kind == "Role" else None
        refs.append(ref(kind, role_ref.get("name"), role_namespace, role_ref.get("apiGroup")))
    refs.extend(_service_account_subjects(raw, namespace))
    return compact(refs)


def extract_clusterrolebinding_relations(raw: dict[str, Any]) -> list[RelationRef]:
    role_ref = raw.get("roleRef")
    refs: list[RelationRef | None] = []
    if get_path(role_ref, "kind") == "ClusterRole":
        refs.append(ref("ClusterRole", role_ref.get("name"), None, role_ref.get("apiGroup")))
    refs.extend(_service_account_subjects(raw, None))
    return compact(refs)
