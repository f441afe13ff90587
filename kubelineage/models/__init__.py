"""Core data structures for kubelineage."""

from kubelineage.models.config import LineageConfig
from kubelineage.models.resources import RelationRef, Resource, resource_key

__all__ = [
    "LineageConfig",
    "RelationRef",
    "Resource",
    "resource_key",
]
