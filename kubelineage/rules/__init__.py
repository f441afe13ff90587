"""Orphan detection rules.

Submodules:
    conditions   -- Condition union (NoIncomingRefs, NoIncomingFrom, ...) and evaluate().
    exceptions   -- Well-known system objects that are never orphans.
    orphan_rules -- Per-kind rule table and is_resource_orphan().
"""

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
from kubelineage.rules.orphan_rules import ORPHAN_RULES, OrphanRule, get_orphan_rule, is_resource_orphan

__all__ = [
    "ORPHAN_RULES",
    "And",
    "Condition",
    "HasMissingRef",
    "IsServiceAccountToken",
    "NoIncomingFrom",
    "NoIncomingRefs",
    "NoOwner",
    "Or",
    "OrphanContext",
    "OrphanRule",
    "evaluate",
    "get_orphan_rule",
    "is_resource_orphan",
]
