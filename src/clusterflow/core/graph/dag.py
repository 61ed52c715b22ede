# src/clusterflow/core/graph/dag.py
"""
Grafo de dependências (DAG) de objetos alvo de um ciclo de reconciliação.

Este módulo define o `DAG`, a estrutura mutável na qual os Transformers
constroem incrementalmente o estado desejado de um Cluster e sobre a qual o
Executor resolve ações e ordem de aplicação.

Armazenamento (estilo arena):
    - `_nodes`: identidade → GraphNode (ordem de inserção preservada)
    - `_index`: identidade → posição estável de inserção (desempate)
    - `_out` / `_in`: adjacência por identidade, nunca por referência a nó

Semântica das arestas:
    - `add_edge(a, b)` registra "a deve ser aplicado antes de b"
    - Para remoções a ordem efetiva é invertida pelo Executor
      (dependentes são removidos antes de suas dependências)

Decisões arquiteturais:
    - Ciclos são detectados incrementalmente em `add_edge` (busca de alcançabilidade)
    - A ordenação é determinística (Kahn com desempate por ordem de inserção)
    - `topological_order` revalida o grafo inteiro no momento da chamada

Invariantes:
    - O conjunto de arestas é sempre acíclico
    - Uma aresta rejeitada não altera o grafo
    - A ação de um nó nunca é escrita pelo grafo
    - `restore(snapshot)` devolve a arena exatamente ao estado capturado

Limites explícitos:
    - Não conhece Transformers, Executor ou a plataforma
    - Não resolve ações nem aplica mutações
"""

from __future__ import annotations

import heapq
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from clusterflow.core.exceptions import CycleError, UnknownNodeError

from .types import GraphNode, ObjectKey


class DAG:
    """Grafo mutável de nós (objetos alvo) e arestas de ordenação."""

    def __init__(self) -> None:
        self._nodes: Dict[ObjectKey, GraphNode] = {}
        self._index: Dict[ObjectKey, int] = {}
        self._out: Dict[ObjectKey, Dict[ObjectKey, None]] = {}
        self._in: Dict[ObjectKey, Dict[ObjectKey, None]] = {}
        self._seq = 0

    # -----------------------------
    # Nós
    # -----------------------------
    def add_or_update_node(
        self,
        key: ObjectKey,
        desired: Optional[Dict[str, Any]],
        **meta: Any,
    ) -> GraphNode:
        """Insere o nó ou substitui sua representação desejada (last-writer-wins)."""
        node = self._nodes.get(key)
        if node is None:
            node = GraphNode(key=key, desired=desired, meta=dict(meta))
            self._nodes[key] = node
            self._index[key] = self._seq
            self._seq += 1
            self._out[key] = {}
            self._in[key] = {}
            return node

        node.desired = desired
        node.meta.update(meta)
        return node

    def remove_node(self, key: ObjectKey, **meta: Any) -> GraphNode:
        """Marca o nó como ausente (`desired = None`); arestas são preservadas."""
        return self.add_or_update_node(key, None, **meta)

    def get(self, key: ObjectKey) -> Optional[GraphNode]:
        return self._nodes.get(key)

    def nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    def keys(self) -> List[ObjectKey]:
        return list(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # -----------------------------
    # Arestas
    # -----------------------------
    def add_edge(self, src: ObjectKey, dst: ObjectKey) -> None:
        """
        Registra "src deve ser aplicado antes de dst".

        Raises:
            UnknownNodeError: Se alguma das identidades não estiver no grafo.
            CycleError: Se a aresta fechar um ciclo (inclui auto-aresta).
        """
        for key in (src, dst):
            if key not in self._nodes:
                raise UnknownNodeError(
                    message=f"Edge references unknown node: {key}",
                    details={"from": str(src), "to": str(dst), "missing": str(key)},
                    hint="Insira o nó com add_or_update_node antes de declarar a aresta",
                )

        if dst in self._out[src]:
            return

        if src == dst or self._reachable(dst, src):
            raise CycleError(
                message=f"Edge {src} -> {dst} would close a cycle",
                details={"from": str(src), "to": str(dst)},
                hint="Regras de ordenação de Transformers conflitantes",
            )

        self._out[src][dst] = None
        self._in[dst][src] = None

    def edges(self) -> List[Tuple[ObjectKey, ObjectKey]]:
        return [(src, dst) for src, outs in self._out.items() for dst in outs]

    def predecessors(self, key: ObjectKey) -> List[ObjectKey]:
        return list(self._in.get(key, {}))

    def successors(self, key: ObjectKey) -> List[ObjectKey]:
        return list(self._out.get(key, {}))

    def descendants(self, key: ObjectKey) -> Set[ObjectKey]:
        return self._walk(key, self._out)

    def ancestors(self, key: ObjectKey) -> Set[ObjectKey]:
        return self._walk(key, self._in)

    def _walk(self, start: ObjectKey, adjacency: Dict[ObjectKey, Dict[ObjectKey, None]]) -> Set[ObjectKey]:
        seen: Set[ObjectKey] = set()
        stack = list(adjacency.get(start, {}))
        while stack:
            key = stack.pop()
            if key in seen:
                continue
            seen.add(key)
            stack.extend(adjacency[key])
        return seen

    def _reachable(self, start: ObjectKey, target: ObjectKey) -> bool:
        return start == target or target in self._walk(start, self._out)

    # -----------------------------
    # Snapshot
    # -----------------------------
    def snapshot(self) -> "DAGSnapshot":
        """Cópia independente da arena, restaurável com `restore`."""
        return DAGSnapshot(
            nodes={key: _copy_node(node) for key, node in self._nodes.items()},
            index=dict(self._index),
            out={key: dict(v) for key, v in self._out.items()},
            inn={key: dict(v) for key, v in self._in.items()},
            seq=self._seq,
        )

    def restore(self, snapshot: "DAGSnapshot") -> None:
        """Descarta toda mutação posterior ao `snapshot`."""
        self._nodes = {key: _copy_node(node) for key, node in snapshot.nodes.items()}
        self._index = dict(snapshot.index)
        self._out = {key: dict(v) for key, v in snapshot.out.items()}
        self._in = {key: dict(v) for key, v in snapshot.inn.items()}
        self._seq = snapshot.seq

    # -----------------------------
    # Ordenação
    # -----------------------------
    def topological_order(self) -> Iterator[ObjectKey]:
        """
        Produz as identidades em ordem topológica determinística.

        Quando múltiplos nós estão prontos, vence o de menor posição de
        inserção. O grafo inteiro é validado no momento da chamada.

        Raises:
            CycleError: Se as arestas estiverem inconsistentes.
        """
        incoming: Dict[ObjectKey, int] = {key: len(self._in[key]) for key in self._nodes}
        ready: List[Tuple[int, ObjectKey]] = [
            (self._index[key], key) for key, count in incoming.items() if count == 0
        ]
        heapq.heapify(ready)

        order: List[ObjectKey] = []
        while ready:
            _, key = heapq.heappop(ready)
            order.append(key)
            for child in self._out[key]:
                incoming[child] -= 1
                if incoming[child] == 0:
                    heapq.heappush(ready, (self._index[child], child))

        if len(order) != len(self._nodes):
            stuck = sorted(str(key) for key, count in incoming.items() if count > 0)
            raise CycleError(
                message="Cycle detected in object dependency graph",
                details={"nodes": stuck},
            )

        return iter(order)

    def reverse_topological_order(self) -> Iterator[ObjectKey]:
        return reversed(list(self.topological_order()))


@dataclass(frozen=True)
class DAGSnapshot:
    nodes: Dict[ObjectKey, GraphNode]
    index: Dict[ObjectKey, int]
    out: Dict[ObjectKey, Dict[ObjectKey, None]]
    inn: Dict[ObjectKey, Dict[ObjectKey, None]]
    seq: int


def _copy_node(node: GraphNode) -> GraphNode:
    copied = GraphNode(key=node.key, desired=deepcopy(node.desired), meta=dict(node.meta))
    copied.action = node.action
    return copied
