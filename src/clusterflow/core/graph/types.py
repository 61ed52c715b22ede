# src/clusterflow/core/graph/types.py
"""
Tipos canônicos do grafo de objetos do ClusterFlow.

Componentes principais:
    - ObjectKey → identidade estável de um objeto alvo (kind, namespace, name)
    - Action    → enum de ações resolvidas pelo Executor
    - GraphNode → registro de nó (identidade, representação desejada, ação, meta)

Invariantes:
    - A identidade de um nó nunca muda após inserção
    - `desired is None` significa "garantir ausência"
    - `action` é `None` até o Executor resolvê-la; Transformers nunca a escrevem

Limites explícitos:
    - Não conhece Transformers, Executor ou a plataforma
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Identidade de um objeto da plataforma: (kind, namespace, name)."""

    kind: str
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.namespace}/{self.name}"


class Action(str, Enum):
    """
    Ação resolvida pelo Executor para um nó do grafo.

    Os valores são strings para facilitar serialização em eventos e payloads.
    """
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


@dataclass
class GraphNode:
    """Registro de um nó do grafo (armazenado na arena do DAG)."""

    key: ObjectKey
    desired: Optional[Dict[str, Any]]
    meta: Dict[str, Any] = field(default_factory=dict)
    action: Optional[Action] = field(default=None, init=False)

    @property
    def absent(self) -> bool:
        return self.desired is None
