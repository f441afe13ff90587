"""Errors raised by lineage graph construction."""

from __future__ import annotations


class LineageError(Exception):
    """Base class for every error raised by kubelineage."""


class OwnershipCycleError(LineageError):
    """Ownership edges formed a cycle.

    Owner references must describe a forest rooted at the cluster. A cycle
    means the input owner references are malformed, and every orphan or
    impact answer computed from the graph would be wrong.
    """

    def __init__(self, cycle_keys: list[str]) -> None:
        self.cycle_keys = cycle_keys
        super().__init__(f"ownership cycle detected, offending keys: {', '.join(cycle_keys)}")


class GraphAlreadyLinkedError(LineageError):
    """``link_nodes`` was called on a graph that is already linked."""
