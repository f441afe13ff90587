"""Shared fixtures for kubelineage integration tests.

Provides a realistic ``kubectl get -o json`` style batch for one small
application namespace, plus the cluster-scoped objects it depends on, so
integration tests can exercise the full load -> build -> query pipeline
without touching a real Kubernetes cluster.
"""

from __future__ import annotations

from typing import Any

import pytest

from kubelineage.graph import LineageGraph, build_lineage_graph, load_descriptors

# ---------------------------------------------------------------------------
# Manifest factory helpers
# ---------------------------------------------------------------------------


def make_manifest(
    kind: str,
    name: str,
    namespace: str | None = "shop",
    api_version: str = "v1",
    labels: dict[str, str] | None = None,
    owner: tuple[str, str] | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Create a raw Kubernetes object with sensible metadata."""
    metadata: dict[str, Any] = {"name": name, "uid": f"uid-{kind.lower()}-{name}"}
    if namespace:
        metadata["namespace"] = namespace
    if labels:
        metadata["labels"] = labels
    if owner:
        metadata["ownerReferences"] = [
            {
                "apiVersion": "apps/v1",
                "kind": owner[0],
                "name": owner[1],
                "uid": f"uid-{owner[0].lower()}-{owner[1]}",
                "controller": True,
                "blockOwnerDeletion": True,
            }
        ]
    manifest: dict[str, Any] = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    manifest.update(fields)
    return manifest


def make_pod_spec(**overrides: Any) -> dict[str, Any]:
    """Pod spec of the web application: config, credentials and a data volume."""
    spec: dict[str, Any] = {
        "serviceAccountName": "web-sa",
        "containers": [
            {
                "name": "web",
                "image": "registry.example.com/shop/web:1.4.2",
                "envFrom": [{"secretRef": {"name": "web-creds"}}],
                "volumeMounts": [{"name": "config", "mountPath": "/etc/web"}],
            }
        ],
        "volumes": [
            {"name": "config", "configMap": {"name": "web-config"}},
            {"name": "data", "persistentVolumeClaim": {"claimName": "web-data"}},
        ],
    }
    spec.update(overrides)
    return spec


_WEB_LABELS = {"app": "web"}


def make_shop_manifests() -> list[dict[str, Any]]:
    """The web application, its dependencies and a handful of leftovers."""
    return [
        # Workload chain
        make_manifest(
            "Deployment",
            "web",
            api_version="apps/v1",
            labels=_WEB_LABELS,
            spec={
                "replicas": 1,
                "selector": {"matchLabels": _WEB_LABELS},
                "template": {"metadata": {"labels": _WEB_LABELS}, "spec": make_pod_spec()},
            },
        ),
        make_manifest(
            "ReplicaSet",
            "web-5d9f7c",
            api_version="apps/v1",
            labels=_WEB_LABELS,
            owner=("Deployment", "web"),
            spec={
                "replicas": 1,
                "selector": {"matchLabels": _WEB_LABELS},
                "template": {"metadata": {"labels": _WEB_LABELS}, "spec": make_pod_spec()},
            },
        ),
        make_manifest(
            "Pod",
            "web-5d9f7c-x2kj4",
            labels=_WEB_LABELS,
            owner=("ReplicaSet", "web-5d9f7c"),
            spec=make_pod_spec(nodeName="worker-1"),
        ),
        # Networking
        make_manifest("Service", "web", spec={"selector": _WEB_LABELS, "ports": [{"port": 80}]}),
        make_manifest("Service", "old-api", spec={"selector": {"app": "old-api"}, "ports": [{"port": 8080}]}),
        make_manifest(
            "Ingress",
            "web",
            api_version="networking.k8s.io/v1",
            spec={
                "ingressClassName": "nginx",
                "tls": [{"hosts": ["shop.example.com"], "secretName": "web-tls"}],
                "rules": [
                    {
                        "host": "shop.example.com",
                        "http": {
                            "paths": [
                                {
                                    "path": "/",
                                    "pathType": "Prefix",
                                    "backend": {"service": {"name": "web", "port": {"number": 80}}},
                                }
                            ]
                        },
                    }
                ],
            },
        ),
        make_manifest(
            "IngressClass",
            "nginx",
            namespace=None,
            api_version="networking.k8s.io/v1",
            spec={"controller": "k8s.io/ingress-nginx"},
        ),
        make_manifest(
            "HorizontalPodAutoscaler",
            "web",
            api_version="autoscaling/v2",
            spec={
                "scaleTargetRef": {"apiVersion": "apps/v1", "kind": "Deployment", "name": "web"},
                "minReplicas": 1,
                "maxReplicas": 5,
            },
        ),
        # Configuration
        make_manifest("ConfigMap", "web-config", data={"LOG_LEVEL": "info"}),
        make_manifest("ConfigMap", "legacy-flags", data={"NEW_CHECKOUT": "false"}),
        make_manifest("ConfigMap", "kube-root-ca.crt", data={"ca.crt": "..."}),
        make_manifest("Secret", "web-creds", type="Opaque", data={"DB_PASSWORD": "c2VjcmV0"}),
        make_manifest("Secret", "web-tls", type="kubernetes.io/tls", data={"tls.crt": "...", "tls.key": "..."}),
        make_manifest("Secret", "web-sa-token", type="kubernetes.io/service-account-token"),
        make_manifest("Secret", "old-sa-token", type="kubernetes.io/service-account-token"),
        # Identity
        make_manifest("ServiceAccount", "web-sa", secrets=[{"name": "web-sa-token"}]),
        make_manifest("ServiceAccount", "default"),
        make_manifest("ServiceAccount", "unused-sa"),
        make_manifest(
            "Role",
            "web-reader",
            api_version="rbac.authorization.k8s.io/v1",
            rules=[{"apiGroups": [""], "resources": ["configmaps"], "verbs": ["get", "list"]}],
        ),
        make_manifest(
            "RoleBinding",
            "web-reader",
            api_version="rbac.authorization.k8s.io/v1",
            roleRef={"apiGroup": "rbac.authorization.k8s.io", "kind": "Role", "name": "web-reader"},
            subjects=[{"kind": "ServiceAccount", "name": "web-sa"}],
        ),
        make_manifest(
            "RoleBinding",
            "stale-binding",
            api_version="rbac.authorization.k8s.io/v1",
            roleRef={"apiGroup": "rbac.authorization.k8s.io", "kind": "Role", "name": "ghost-role"},
            subjects=[{"kind": "ServiceAccount", "name": "ghost-sa"}],
        ),
        # Storage
        make_manifest(
            "PersistentVolumeClaim",
            "web-data",
            spec={"volumeName": "pv-web-data", "storageClassName": "fast"},
        ),
        make_manifest(
            "PersistentVolume",
            "pv-web-data",
            namespace=None,
            spec={
                "claimRef": {"kind": "PersistentVolumeClaim", "name": "web-data", "namespace": "shop"},
                "storageClassName": "fast",
            },
        ),
        make_manifest("StorageClass", "fast", namespace=None, api_version="storage.k8s.io/v1"),
        make_manifest("StorageClass", "slow", namespace=None, api_version="storage.k8s.io/v1"),
        # Cluster
        make_manifest("Node", "worker-1", namespace=None),
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def shop_payload() -> dict[str, Any]:
    """The shop namespace as a Kubernetes List."""
    return {"apiVersion": "v1", "kind": "List", "items": make_shop_manifests()}


@pytest.fixture
def shop_graph(shop_payload: dict[str, Any]) -> LineageGraph:
    """A linked graph built from ``shop_payload`` under the root ``prod``."""
    descriptors, _ = load_descriptors(shop_payload)
    return build_lineage_graph(descriptors, "prod")
