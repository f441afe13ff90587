"""Per-kind orphan rules.

A resource is an orphan when its kind is expected to have consumers, none
of the expected consumers points at it, and it is not one of the well-known
system objects listed in ``kubelineage.rules.exceptions``.
"""

from __future__ import annotations

from dataclasses import dataclass

from kubelineage.rules.conditions import (
    And,
    Condition,
    HasMissingRef,
    IsServiceAccountToken,
    NoIncomingFrom,
    NoIncomingRefs,
    NoOwner,
    Or,
    OrphanContext,
    evaluate,
)
from kubelineage.rules.exceptions import (
    CLUSTER_ROLE_BINDING_EXCEPTIONS,
    CLUSTER_ROLE_EXCEPTIONS,
    CONFIG_MAP_EXCEPTIONS,
    PLATFORM_POLICY_EXCEPTIONS,
    SECRET_EXCEPTIONS,
    SERVICE_ACCOUNT_EXCEPTIONS,
    SERVICE_EXCEPTIONS,
    ExceptionSpec,
    exception_matches,
    is_system_role,
    is_system_role_binding,
)

_WORKLOAD_KINDS = ("Deployment", "StatefulSet", "DaemonSet", "ReplicaSet", "Job", "CronJob")


@dataclass(frozen=True)
class OrphanRule:
    """Orphan condition for one kind, with an optional exception."""

    condition: Condition
    exception: ExceptionSpec | None = None

    def is_exempt(self, name: str, namespace: str | None) -> bool:
        return self.exception is not None and exception_matches(self.exception, name, namespace)


ORPHAN_RULES: dict[str, OrphanRule] = {
    "ConfigMap": OrphanRule(NoIncomingRefs(), CONFIG_MAP_EXCEPTIONS),
    # Only token secrets are checked; opaque secrets are often consumed
    # out-of-cluster and cannot be judged from the graph.
    "Secret": OrphanRule(And((IsServiceAccountToken(), NoIncomingRefs())), SECRET_EXCEPTIONS),
    "Service": OrphanRule(
        NoIncomingFrom(
            (
                "Pod",
                "Ingress",
                "StatefulSet",
                "APIService",
                "ValidatingWebhookConfiguration",
                "MutatingWebhookConfiguration",
            )
        ),
        SERVICE_EXCEPTIONS,
    ),
    "ServiceAccount": OrphanRule(
        NoIncomingFrom(("Pod", *_WORKLOAD_KINDS, "RoleBinding", "ClusterRoleBinding")),
        SERVICE_ACCOUNT_EXCEPTIONS,
    ),
    "PersistentVolumeClaim": OrphanRule(NoIncomingFrom(("Pod", *_WORKLOAD_KINDS))),
    "PersistentVolume": OrphanRule(NoIncomingFrom(("PersistentVolumeClaim",))),
    "StorageClass": OrphanRule(NoIncomingFrom(("PersistentVolumeClaim", "PersistentVolume"))),
    "ClusterRole": OrphanRule(NoIncomingFrom(("ClusterRoleBinding", "RoleBinding")), CLUSTER_ROLE_EXCEPTIONS),
    "Role": OrphanRule(NoIncomingFrom(("RoleBinding",)), is_system_role),
    "RoleBinding": OrphanRule(
        Or((NoIncomingFrom(("Role", "ClusterRole")), HasMissingRef("ServiceAccount"))),
        is_system_role_binding,
    ),
    "ClusterRoleBinding": OrphanRule(
        Or((NoIncomingFrom(("ClusterRole",)), HasMissingRef("ServiceAccount"))),
        CLUSTER_ROLE_BINDING_EXCEPTIONS,
    ),
    "HorizontalPodAutoscaler": OrphanRule(NoIncomingFrom(("Deployment", "StatefulSet", "ReplicaSet"))),
    "NetworkPolicy": OrphanRule(NoIncomingFrom(("Pod",)), PLATFORM_POLICY_EXCEPTIONS),
    "PodDisruptionBudget": OrphanRule(NoIncomingFrom(("Pod",)), PLATFORM_POLICY_EXCEPTIONS),
    "IngressClass": OrphanRule(NoIncomingFrom(("Ingress",))),
    "Ingress": OrphanRule(NoIncomingFrom(("Service",))),
    "ReplicaSet": OrphanRule(And((NoOwner(), NoIncomingFrom(("Pod",))))),
}

_RULES_BY_LOWER_KIND = {kind.lower(): rule for kind, rule in ORPHAN_RULES.items()}


def get_orphan_rule(kind: str) -> OrphanRule | None:
    """Return the orphan rule for *kind* (case-insensitive), if one exists."""
    return _RULES_BY_LOWER_KIND.get(kind.lower())


def is_resource_orphan(kind: str, name: str, namespace: str | None, ctx: OrphanContext) -> bool:
    """Decide whether one resource is an orphan.

    Kinds without a rule are never orphans. An exception match wins over
    the condition.
    """
    rule = get_orphan_rule(kind)
    if rule is None:
        return False
    if rule.is_exempt(name, namespace):
        return False
    return evaluate(rule.condition, ctx)
