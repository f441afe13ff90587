"""Well-known system objects that are never reported as orphans.

These are static data: exact names, name prefixes/suffixes, namespace
prefixes and per-namespace name lists for objects that Kubernetes
distributions create and that legitimately have no in-cluster consumers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExceptionPattern:
    """Declarative match over a resource's name and namespace."""

    exact_names: frozenset[str] = frozenset()
    name_prefixes: tuple[str, ...] = ()
    name_suffixes: tuple[str, ...] = ()
    namespace_prefixes: tuple[str, ...] = ()
    namespace_names: dict[str, frozenset[str]] = field(default_factory=dict)

    def matches(self, name: str, namespace: str | None) -> bool:
        if name in self.exact_names:
            return True
        if self.name_prefixes and name.startswith(self.name_prefixes):
            return True
        if self.name_suffixes and name.endswith(self.name_suffixes):
            return True
        if not namespace:
            return False
        if self.namespace_prefixes and namespace.startswith(self.namespace_prefixes):
            return True
        return name in self.namespace_names.get(namespace, frozenset())


ExceptionPredicate = Callable[[str, str | None], bool]
ExceptionSpec = ExceptionPattern | ExceptionPredicate


def exception_matches(spec: ExceptionSpec, name: str, namespace: str | None) -> bool:
    if isinstance(spec, ExceptionPattern):
        return spec.matches(name, namespace)
    return spec(name, namespace)


def is_system_role_binding(name: str, namespace: str | None) -> bool:
    """Bindings installed by kubeadm, the controller manager and GKE."""
    if namespace == "kube-system":
        return name.startswith(("system::", "system:controller:")) or name in {
            "kube-proxy",
            "kubeadm:kubelet-config",
            "kubeadm:nodes-kubeadm-config",
            "gce:podsecuritypolicy:pdcsi-node-sa",
        }
    if namespace == "kube-public":
        return name in {"kubeadm:bootstrap-signer-clusterinfo", "system:controller:bootstrap-signer"}
    if namespace == "gmp-public":
        return name == "operator"
    return False


def is_system_role(name: str, namespace: str | None) -> bool:
    """Roles the control plane creates in its own namespaces."""
    if namespace not in ("kube-system", "kube-public"):
        return False
    return name.startswith(("system:", "system::", "kubeadm:")) or name == "extension-apiserver-authentication-reader"


CLUSTER_ROLE_EXCEPTIONS = ExceptionPattern(
    exact_names=frozenset(
        {
            "admin",
            "alert-routing-edit",
            "cloud-provider",
            "cluster-admin",
            "cluster-debugger",
            "edit",
            "eks:extension-metrics-apiserver",
            "global-operators-admin",
            "global-operators-edit",
            "global-operators-view",
            "monitoring-edit",
            "monitoring-rules-edit",
            "monitoring-rules-view",
            "olm-operators-admin",
            "olm-operators-edit",
            "olm-operators-view",
            "openshift-cluster-monitoring-admin",
            "openshift-cluster-monitoring-edit",
            "openshift-cluster-monitoring-view",
            "openshift-csi-main-attacher-role",
            "openshift-csi-main-provisioner-role",
            "openshift-csi-main-resizer-role",
            "openshift-csi-main-snapshotter-role",
            "openshift-csi-provisioner-configmap-and-secret-reader-role",
            "openshift-csi-provisioner-volumeattachment-reader-role",
            "openshift-csi-provisioner-volumesnapshot-reader-role",
            "openshift-csi-resizer-infrastructure-reader-role",
            "openshift-csi-resizer-storageclass-reader-role",
            "resource-metrics-server-resources",
            "storage-admin",
            "sudoer",
            "system:aggregate-to-admin",
            "system:aggregate-to-edit",
            "system:aggregate-to-view",
            "system:aggregated-metrics-reader",
            "system:auth-delegator",
            "system:build-strategy-custom",
            "system:certificates.k8s.io:certificatesigningrequests:nodeclient",
            "system:certificates.k8s.io:certificatesigningrequests:selfnodeclient",
            "system:certificates.k8s.io:kube-apiserver-client-approver",
            "system:certificates.k8s.io:kube-apiserver-client-kubelet-approver",
            "system:certificates.k8s.io:kubelet-serving-approver",
            "system:certificates.k8s.io:legacy-unknown-approver",
            "system:controller:cloud-node-controller",
            "system:controller:glbc",
            "system:heapster",
            "system:image-auditor",
            "system:image-pusher",
            "system:image-signer",
            "system:kube-aggregator",
            "system:kubelet-api-admin",
            "system:metrics-server-aggregated-reader",
            "system:node",
            "system:node-bootstrapper",
            "system:node-problem-detector",
            "system:node-reader",
            "system:openshift:aggregate-snapshots-to-storage-admin",
            "system:openshift:aggregate-to-storage-admin",
            "system:openshift:scc:hostaccess",
            "system:openshift:scc:hostmount",
            "system:openshift:scc:hostnetwork",
            "system:openshift:scc:nonroot",
            "system:openshift:scc:nonroot-v2",
            "system:openshift:scc:privileged",
            "system:openshift:scc:restricted",
            "system:openshift:templateservicebroker-client",
            "system:persistent-volume-provisioner",
            "system:router",
            "system:sdn-manager",
            "view",
        }
    ),
)

CLUSTER_ROLE_BINDING_EXCEPTIONS = ExceptionPattern(
    exact_names=frozenset(
        {
            "event-exporter-rb",
            "kubeadm:kubelet-bootstrap",
            "kubeadm:node-autoapprove-bootstrap",
            "kubeadm:node-autoapprove-certificate-rotation",
            "kubelet-bootstrap",
            "kubelet-bootstrap-node-bootstrapper",
            "kubelet-cluster-admin",
            "kubelet-nodepool-bootstrapper",
            "kubelet-user-npd-binding",
            "metrics-server-nanny:system:auth-delegator",
            "metrics-server:system:auth-delegator",
            "npd-binding",
            "system:controller:horizontal-pod-autoscaler",
            "system:controller:route-controller",
            "system:controller:selinux-warning-controller",
            "system:konnectivity-server",
            "system:kube-dns",
            "system:node",
        }
    ),
)

CONFIG_MAP_EXCEPTIONS = ExceptionPattern(
    exact_names=frozenset({"kube-root-ca.crt", "openshift-service-ca.crt"}),
    namespace_prefixes=("openshift-",),
    namespace_names={
        "kube-system": frozenset(
            {
                "amazon-vpc-cni",
                "aws-auth",
                "bootstrap",
                "cluster-autoscaler-status",
                "cluster-config-v1",
                "cluster-dns",
                "cluster-kubestore",
                "clustermetrics",
                "coredns-autoscaler",
                "efficiency-daemon-config",
                "extension-apiserver-authentication",
                "gke-common-webhook-heartbeat",
                "ingress-uid",
                "konnectivity-agent-autoscaler-config",
                "kube-apiserver-legacy-service-account-token-tracking",
                "kube-dns-autoscaler",
                "kube-proxy",
                "kube-proxy-config",
                "kubeadm-config",
                "kubedns-config-images",
                "kubelet-config",
                "metrics-agent-linux-config-images",
                "metrics-agent-windows-config-images",
                "nvidia-metrics-collector-config-map",
                "overlay-upgrade-data",
                "root-ca",
            }
        ),
        "kube-public": frozenset({"cluster-info"}),
        "gmp-system": frozenset({"config-images", "webhook-ca", "rule-evaluator", "rules-generated"}),
        "kubernetes-dashboard": frozenset({"kubernetes-dashboard-settings"}),
        "gke-managed-system": frozenset({"dcgm-exporter-metrics"}),
    },
)

SECRET_EXCEPTIONS = ExceptionPattern(
    name_prefixes=("bootstrap-token-",),
    name_suffixes=(".node-password.k3s",),
    namespace_prefixes=("openshift-",),
    namespace_names={
        "kube-system": frozenset({"k3s-serving", "kube-cloud-cfg", "kubeadmin"}),
        "kubernetes-dashboard": frozenset(
            {
                "kubernetes-dashboard-certs",
                "kubernetes-dashboard-csrf",
                "kubernetes-dashboard-key-holder",
            }
        ),
        "gmp-system": frozenset({"alertmanager", "rules", "webhook-tls"}),
    },
)

SERVICE_ACCOUNT_EXCEPTIONS = ExceptionPattern(exact_names=frozenset({"default"}))

SERVICE_EXCEPTIONS = ExceptionPattern(namespace_names={"default": frozenset({"kubernetes"})})

# Policy objects shipped by managed control planes.
PLATFORM_POLICY_EXCEPTIONS = ExceptionPattern(
    namespace_prefixes=("openshift-", "gke-managed-", "gmp-"),
    namespace_names={"kube-system": frozenset({"coredns-pdb", "konnectivity-agent", "kube-dns", "metrics-server"})},
)
