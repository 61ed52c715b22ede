# src/clusterflow/core/graph/__init__.py
"""
Grafo de objetos alvo do ClusterFlow.

Um ciclo de reconciliação constrói um DAG no qual:
- cada nó representa exatamente um objeto da plataforma (ObjectKey)
- cada aresta expressa "deve ser aplicado antes de"
- a ação de cada nó é resolvida apenas pelo Executor

Componentes:
- types → ObjectKey, Action, GraphNode
- dag   → DAG (inserção, arestas com detecção de ciclo, ordenação topológica, snapshot)
"""

from .dag import DAG, DAGSnapshot
from .types import Action, GraphNode, ObjectKey

__all__ = ["DAG", "DAGSnapshot", "Action", "GraphNode", "ObjectKey"]
