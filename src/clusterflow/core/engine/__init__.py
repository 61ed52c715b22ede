# src/clusterflow/core/engine/__init__.py
"""Diff, planejamento e aplicação do grafo de objetos contra o object store."""

from .diff import OWNED_FIELDS, changed_fields, compute_action, merge_for_update
from .executor import CANCELLED, ApplyResult, Executor
from .planner import ApplyPlan, plan_apply

__all__ = [
    "OWNED_FIELDS",
    "changed_fields",
    "compute_action",
    "merge_for_update",
    "CANCELLED",
    "ApplyResult",
    "Executor",
    "ApplyPlan",
    "plan_apply",
]
