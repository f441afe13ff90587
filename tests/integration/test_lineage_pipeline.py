"""Integration tests for the full lineage pipeline.

Each test exercises: Kubernetes List -> descriptors -> parsed resources ->
linked graph -> one of the query, orphan, export or diagnostics views.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kubelineage.cli import cli
from kubelineage.graph import (
    LineageGraph,
    OwnershipCycleError,
    build_lineage_graph,
    export_dot,
    export_mermaid,
    format_missing_report,
    load_descriptors,
    missing_reference_report,
)

from .conftest import make_manifest, make_shop_manifests

pytestmark = pytest.mark.integration

_WEB_POD = "pod/shop/web-5d9f7c-x2kj4"
_WEB_RS = "replicaset/shop/web-5d9f7c"
_WEB_DEPLOYMENT = "deployment/shop/web"


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


class TestGraphStructure:
    """Ownership chain and reference edges of a linked namespace."""

    def test_every_manifest_becomes_a_node(self, shop_graph: LineageGraph) -> None:
        assert len(shop_graph) == len(make_shop_manifests()) + 1
        assert "cluster/prod" in shop_graph

    def test_ownership_chain(self, shop_graph: LineageGraph) -> None:
        assert shop_graph.get_parent_key(_WEB_POD) == _WEB_RS
        assert shop_graph.get_parent_key(_WEB_RS) == _WEB_DEPLOYMENT
        assert shop_graph.get_parent_key(_WEB_DEPLOYMENT) == "cluster/prod"
        assert shop_graph.get_children_keys(_WEB_DEPLOYMENT) == [_WEB_RS]

    def test_pod_references(self, shop_graph: LineageGraph) -> None:
        assert shop_graph.get_leaf_keys(_WEB_POD) == [
            "configmap/shop/web-config",
            _WEB_DEPLOYMENT,
            "node/worker-1",
            "persistentvolumeclaim/shop/web-data",
            _WEB_RS,
            "secret/shop/web-creds",
            "service/shop/web",
            "serviceaccount/shop/web-sa",
        ]

    def test_tree_result_is_serializable(self, shop_graph: LineageGraph) -> None:
        tree = json.loads(json.dumps(shop_graph.to_tree_result()))
        assert tree["tree_id"] == "prod"
        assert [node["key"] for node in tree["nodes"]] == shop_graph.keys()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_related_items_of_pod(self, shop_graph: LineageGraph) -> None:
        assert shop_graph.get_related_items(_WEB_POD) == [
            "configmap/shop/web-config",
            _WEB_DEPLOYMENT,
            "horizontalpodautoscaler/shop/web",
            "node/worker-1",
            "persistentvolumeclaim/shop/web-data",
            _WEB_POD,
            _WEB_RS,
            "secret/shop/web-creds",
            "service/shop/web",
            "serviceaccount/shop/web-sa",
        ]

    def test_config_change_hits_the_whole_workload(self, shop_graph: LineageGraph) -> None:
        impact = shop_graph.compute_impact("configmap/shop/web-config")
        assert [(entry.key, entry.reason) for entry in impact] == [
            (_WEB_DEPLOYMENT, "references"),
            (_WEB_POD, "references"),
            (_WEB_RS, "references"),
        ]

    def test_autoscaler_change_reaches_owned_resources(self, shop_graph: LineageGraph) -> None:
        impact = shop_graph.compute_impact("horizontalpodautoscaler/shop/web")
        assert [(entry.key, entry.reason) for entry in impact] == [
            (_WEB_DEPLOYMENT, "references"),
            (_WEB_POD, "owned by affected"),
            (_WEB_RS, "owned by affected"),
        ]

    def test_storage_chain(self, shop_graph: LineageGraph) -> None:
        query = shop_graph.query("storageclass/fast")
        assert query is not None
        assert query.with_references().collect_keys() == [
            "persistentvolume/pv-web-data",
            "persistentvolumeclaim/shop/web-data",
            "storageclass/fast",
        ]


# ---------------------------------------------------------------------------
# Orphans and diagnostics
# ---------------------------------------------------------------------------


class TestOrphansAndDiagnostics:
    def test_orphans(self, shop_graph: LineageGraph) -> None:
        assert shop_graph.find_orphans() == [
            "configmap/shop/legacy-flags",
            "rolebinding/shop/stale-binding",
            "secret/shop/old-sa-token",
            "service/shop/old-api",
            "serviceaccount/shop/unused-sa",
            "storageclass/slow",
        ]

    def test_system_objects_are_not_orphans(self, shop_graph: LineageGraph) -> None:
        orphans = set(shop_graph.find_orphans())
        assert "configmap/shop/kube-root-ca.crt" not in orphans
        assert "serviceaccount/shop/default" not in orphans
        assert "secret/shop/web-creds" not in orphans

    def test_missing_references(self, shop_graph: LineageGraph) -> None:
        report = missing_reference_report(shop_graph)
        assert list(report) == ["Role", "ServiceAccount"]
        assert format_missing_report(report) == [
            "Role shop/ghost-role (referenced by rolebinding/shop/stale-binding)",
            "ServiceAccount shop/ghost-sa (referenced by rolebinding/shop/stale-binding)",
        ]
        binding = shop_graph.get("rolebinding/shop/stale-binding")
        assert binding is not None
        assert binding.missing_refs == {"Role": ["shop/ghost-role"], "ServiceAccount": ["shop/ghost-sa"]}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    def test_dot_lists_every_node(self, shop_graph: LineageGraph) -> None:
        dot = export_dot(shop_graph)
        assert dot.count(" [label=") == len(shop_graph)
        assert "shape=note style=filled fillcolor=lightyellow" in dot

    def test_mermaid_lists_every_node(self, shop_graph: LineageGraph) -> None:
        mermaid = export_mermaid(shop_graph)
        assert mermaid.startswith("graph TD\n")
        assert mermaid.count(":::config") == 7


# ---------------------------------------------------------------------------
# Failure modes and the command line
# ---------------------------------------------------------------------------


class TestPipelineEdges:
    def test_ownership_cycle_aborts_the_build(self) -> None:
        manifests = [
            make_manifest("ReplicaSet", "a", owner=("ReplicaSet", "b")),
            make_manifest("ReplicaSet", "b", owner=("ReplicaSet", "a")),
        ]
        descriptors, _ = load_descriptors({"kind": "List", "items": manifests})
        with pytest.raises(OwnershipCycleError) as excinfo:
            build_lineage_graph(descriptors, "prod")
        assert set(excinfo.value.cycle_keys) == {"replicaset/shop/a", "replicaset/shop/b"}

    def test_cli_reads_file(
        self,
        tmp_path: Path,
        shop_payload: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("kubelineage.cli.main.setup_logging", lambda *args, **kwargs: None)
        batch = tmp_path / "shop.json"
        batch.write_text(json.dumps(shop_payload))
        result = CliRunner().invoke(cli, ["--file", str(batch), "--root-name", "prod", "orphans"])
        assert result.exit_code == 0, result.output
        assert "storageclass/slow" in result.output.splitlines()
