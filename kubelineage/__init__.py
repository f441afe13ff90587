"""kubelineage -- resource lineage graph and orphan detection for Kubernetes.

Builds a directed relationship graph (ownership + references) from a flat
batch of resource descriptors and answers traversal, impact and orphan
queries against it.
"""

__version__ = "0.1.0"
