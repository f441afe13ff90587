"""Ingress, IngressClass, admission webhooks and aggregated APIs.

Services, NetworkPolicies and EndpointSlices declare nothing by name: their
edges come from label selectors or from the objects listed here.
"""

from __future__ import annotations

from typing import Any

from kubelineage.extractors.fields import as_dicts, as_str, compact, get_path, namespace_of, ref
from kubelineage.models.resources import RelationRef


def _backend_relations(backend: Any, namespace: str | None) -> list[RelationRef | None]:
    if not isinstance(backend, dict):
        return []
    refs: list[RelationRef | None] = [ref("Service", get_path(backend, "service", "name"), namespace)]
    resource = backend.get("resource")
    kind = as_str(get_path(resource, "kind"))
    if kind is not None:
        refs.append(ref(kind, get_path(resource, "name"), namespace, get_path(resource, "apiGroup")))
    return refs


def extract_ingress_relations(raw: dict[str, Any]) -> list[RelationRef]:
    spec = raw.get("spec")
    if not isinstance(spec, dict):
        return []
    namespace = namespace_of(raw)

    refs: list[RelationRef | None] = [ref("IngressClass", spec.get("ingressClassName"))]
    refs.extend(_backend_relations(spec.get("defaultBackend"), namespace))

    for rule in as_dicts(spec.get("rules")):
        for path in as_dicts(get_path(rule, "http", "paths")):
            refs.extend(_backend_relations(path.get("backend"), namespace))

    for tls in as_dicts(spec.get("tls")):
        refs.append(ref("Secret", tls.get("secretName"), namespace))

    return compact(refs)


def extract_ingressclass_relations(raw: dict[str, Any]) -> list[RelationRef]:
    parameters = get_path(raw, "spec", "parameters")
    kind = as_str(get_path(parameters, "kind"))
    if kind is None:
        return []
    return compact(
        [
            ref(
                kind,
                parameters.get("name"),
                as_str(parameters.get("namespace")),
                parameters.get("apiGroup"),
            )
        ]
    )


def extract_webhook_relations(raw: dict[str, Any]) -> list[RelationRef]:
    """Validating and mutating webhook configurations."""
    refs: list[RelationRef | None] = []
    for webhook in as_dicts(raw.get("webhooks")):
        service = get_path(webhook, "clientConfig", "service")
        refs.append(ref("Service", get_path(service, "name"), as_str(get_path(service, "namespace"))))
    return compact(refs)


def extract_apiservice_relations(raw: dict[str, Any]) -> list[RelationRef]:
    service = get_path(raw, "spec", "service")
    return compact([ref("Service", get_path(service, "name"), as_str(get_path(service, "namespace")))])
