"""PersistentVolumeClaims and PersistentVolumes."""

from __future__ import annotations

from typing import Any

from kubelineage.extractors.fields import compact, get_path, object_ref_to_relation, ref
from kubelineage.models.resources import RelationRef


def extract_pvc_relations(raw: dict[str, Any]) -> list[RelationRef]:
    return compact(
        [
            ref("PersistentVolume", get_path(raw, "spec", "volumeName")),
            ref("StorageClass", get_path(raw, "spec", "storageClassName")),
        ]
    )


def extract_pv_relations(raw: dict[str, Any]) -> list[RelationRef]:
    return compact(
        [
            object_ref_to_relation(get_path(raw, "spec", "claimRef"), default_kind="PersistentVolumeClaim"),
            ref("StorageClass", get_path(raw, "spec", "storageClassName")),
        ]
    )
