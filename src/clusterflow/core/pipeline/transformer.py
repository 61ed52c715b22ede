# src/clusterflow/core/pipeline/transformer.py
"""
Contrato canônico de Transformer do ClusterFlow.

Um Transformer é a menor unidade de composição do pipeline de reconciliação:
lê o TransformContext e muta o DAG compartilhado (ou os metadados/status do
Cluster no contexto), sem emitir chamadas ao object store.

Princípios fundamentais:
    - Transformers não conhecem o Executor nem o Driver
    - Transformers não controlam ordem de execução (o pipeline é fixo)
    - Falhas são sinalizadas levantando ClusterFlowException
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `id` é único dentro de um pipeline
    - Mesmas entradas ⇒ mesmas mutações de grafo (idempotência)
    - `transform` nunca escreve a ação de um nó

Limites explícitos:
    - Não realiza I/O
    - Não decide políticas de retry
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from clusterflow.core.graph.dag import DAG

if TYPE_CHECKING:
    from .context import TransformContext


@runtime_checkable
class Transformer(Protocol):
    """
    Interface mínima de um Transformer.

    Atributos obrigatórios:
        - id: identificador único e estável do Transformer

    O retorno de `transform` é sempre `None`; o efeito é a mutação do DAG
    e, quando permitido, do Cluster em `ctx.cluster`.
    """
    id: str

    def transform(self, ctx: "TransformContext", dag: DAG) -> None:
        """Aplica a contribuição do Transformer ao grafo do ciclo corrente."""
        ...
