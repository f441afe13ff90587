"""Declarative orphan conditions and their evaluator.

A condition is a small recursive tagged union. Leaves inspect the incoming
edges, labels, resource type and unresolved references of one node;
``And``/``Or`` combine them. ``evaluate`` is the only interpreter.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import assert_never

from kubelineage.models.resources import EdgeType

SERVICE_ACCOUNT_TOKEN_TYPE = "kubernetes.io/service-account-token"
SERVICE_ACCOUNT_NAME_LABEL = "kubernetes.io/service-account.name"


@dataclass(frozen=True)
class NoIncomingRefs:
    """True iff no incoming References edge exists."""


@dataclass(frozen=True)
class NoIncomingFrom:
    """True iff no incoming References edge originates from one of ``kinds``."""

    kinds: tuple[str, ...]


@dataclass(frozen=True)
class HasMissingRef:
    """True iff the node declared a reference of ``kind`` that did not resolve."""

    kind: str


@dataclass(frozen=True)
class NoOwner:
    """True iff no incoming Owns edge exists."""


@dataclass(frozen=True)
class IsServiceAccountToken:
    """True iff the node is a service-account token secret."""


@dataclass(frozen=True)
class And:
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True)
class Or:
    conditions: tuple[Condition, ...] = ()


Condition = NoIncomingRefs | NoIncomingFrom | HasMissingRef | NoOwner | IsServiceAccountToken | And | Or


@dataclass(frozen=True)
class OrphanContext:
    """Everything a condition may look at for one node.

    ``incoming`` holds ``(edge_type, source_kind)`` pairs for every incoming
    edge whose source is not the cluster root.
    """

    incoming: Sequence[tuple[EdgeType, str]] = ()
    labels: Mapping[str, str] | None = None
    resource_type: str | None = None
    missing_refs: Mapping[str, Sequence[str]] = field(default_factory=dict)


def evaluate(condition: Condition, ctx: OrphanContext) -> bool:
    """Evaluate *condition* against *ctx*."""
    match condition:
        case NoIncomingRefs():
            return not any(edge_type == EdgeType.REFERENCES for edge_type, _ in ctx.incoming)
        case NoIncomingFrom(kinds=kinds):
            wanted = {k.lower() for k in kinds}
            return not any(
                edge_type == EdgeType.REFERENCES and source_kind.lower() in wanted
                for edge_type, source_kind in ctx.incoming
            )
        case HasMissingRef(kind=kind):
            return any(k.lower() == kind.lower() for k in ctx.missing_refs)
        case NoOwner():
            return not any(edge_type == EdgeType.OWNS for edge_type, _ in ctx.incoming)
        case IsServiceAccountToken():
            if ctx.resource_type == SERVICE_ACCOUNT_TOKEN_TYPE:
                return True
            return ctx.labels is not None and SERVICE_ACCOUNT_NAME_LABEL in ctx.labels
        case And(conditions=conditions):
            return all(evaluate(c, ctx) for c in conditions)
        case Or(conditions=conditions):
            return any(evaluate(c, ctx) for c in conditions)
        case _:
            assert_never(condition)
