# src/clusterflow/core/engine/planner.py
"""
Planejador de aplicação do grafo de objetos.

Este módulo resolve a ação de cada nó do DAG contra o estado observado e
produz a ordem determinística de emissão das mutações.

Decisões arquiteturais:
    - Fase de aplicação primeiro (CREATE/UPDATE/NOOP em ordem topológica)
    - Fase de remoção depois (DELETE em ordem topológica reversa)
    - A ordem topológica é a do DAG (Kahn com desempate por inserção)
    - Ciclos são tratados como falha fatal (CycleError)

Invariantes:
    - Todo nó do DAG recebe exatamente uma ação
    - Nenhum nó aparece em mais de uma fase
    - A mesma entrada sempre produz o mesmo plano

Limites explícitos:
    - Não emite mutações
    - Não decide políticas de falha
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from clusterflow.core.graph.dag import DAG
from clusterflow.core.graph.types import Action, ObjectKey

from .diff import compute_action


class _Observed(Protocol):
    def get(self, key: ObjectKey) -> Optional[Dict[str, Any]]:
        ...


@dataclass(frozen=True)
class ApplyPlan:
    """Plano de aplicação: fases ordenadas de identidades."""

    apply_order: List[ObjectKey] = field(default_factory=list)
    delete_order: List[ObjectKey] = field(default_factory=list)

    def __iter__(self):
        yield from self.apply_order
        yield from self.delete_order

    def __len__(self) -> int:
        return len(self.apply_order) + len(self.delete_order)


def plan_apply(dag: DAG, observed: _Observed) -> ApplyPlan:
    """Resolve a ação de cada nó (escrevendo `node.action`) e ordena as fases."""
    order = list(dag.topological_order())

    apply_order: List[ObjectKey] = []
    delete_keys = set()
    for key in order:
        node = dag.get(key)
        node.action = compute_action(node.desired, observed.get(key))
        if node.action is Action.DELETE:
            delete_keys.add(key)
        else:
            apply_order.append(key)

    delete_order = [key for key in reversed(order) if key in delete_keys]
    return ApplyPlan(apply_order=apply_order, delete_order=delete_order)
