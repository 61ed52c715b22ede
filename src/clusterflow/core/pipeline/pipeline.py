# src/clusterflow/core/pipeline/pipeline.py
"""
Composição ordenada e fixa de Transformers.

Este módulo define o `TransformerPipeline`, responsável por validar a
integridade estrutural da composição (unicidade de `id`) e por executar os
Transformers estritamente na ordem declarada sobre um DAG compartilhado.

Decisões arquiteturais:
    - A composição é validada na construção, antes de qualquer ciclo
    - A ordem de declaração é a ordem de execução (sem planejamento)
    - Fail-fast: a primeira falha aborta o restante do pipeline
    - Não há retry; a cadência de retry pertence ao Driver

Invariantes:
    - Cada Transformer registrado possui `id` único e não vazio
    - Falhas são re-levantadas com `details["transformer"]` preenchido
    - Um Transformer que falha não deixa mutações no grafo: o DAG volta ao
      estado deixado pelos Transformers anteriores
    - Exceções não tipadas são tratadas como defeito de programação

Limites explícitos:
    - Não aplica o grafo (isso é papel do Executor)
    - Não realiza I/O
"""

from __future__ import annotations

from typing import Iterable, Tuple

from clusterflow.core.errors import unexpected_transform_error
from clusterflow.core.exceptions import (
    ClusterFlowException,
    DuplicateTransformerIdError,
    ValidationError,
)
from clusterflow.core.graph.dag import DAG

from .context import TransformContext
from .transformer import Transformer


class TransformerPipeline:
    """Tupla imutável de Transformers executada em ordem."""

    def __init__(self, transformers: Iterable[Transformer]):
        seen = set()
        ordered = []
        for transformer in transformers:
            tid = getattr(transformer, "id", None)
            if not isinstance(tid, str) or not tid.strip():
                raise ValidationError(
                    message="transformer.id must be a non-empty string",
                    details={"transformer_class": transformer.__class__.__name__},
                )
            if tid in seen:
                raise DuplicateTransformerIdError(
                    message=f"Duplicate transformer id: {tid}",
                    details={"transformer": tid},
                )
            seen.add(tid)
            ordered.append(transformer)
        self._transformers: Tuple[Transformer, ...] = tuple(ordered)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self._transformers)

    def __iter__(self):
        return iter(self._transformers)

    def __len__(self) -> int:
        return len(self._transformers)

    def run(self, ctx: TransformContext, dag: DAG) -> Tuple[str, ...]:
        """Executa todos os Transformers; retorna os ids executados."""
        executed = []
        for transformer in self._transformers:
            tid = transformer.id
            ctx.cancel.raise_if_cancelled(source=tid)
            ctx.log(source=tid, level="info", message="transformer started")

            checkpoint = dag.snapshot()
            try:
                transformer.transform(ctx, dag)
            except ClusterFlowException as e:
                dag.restore(checkpoint)
                ctx.log(
                    source=tid,
                    level="error",
                    message="transformer failed",
                    error={"type": e.code, "message": e.message, "retryable": e.retryable},
                )
                raise e.with_details(transformer=tid) from e
            except Exception as e:
                dag.restore(checkpoint)
                payload = unexpected_transform_error(transformer=tid, exc=e)
                ctx.log(source=tid, level="error", message="transformer failed", error=payload.to_dict())
                raise ValidationError(
                    message=payload.message,
                    details=payload.details,
                    hint=payload.hint,
                ) from e

            executed.append(tid)
            ctx.log(source=tid, level="info", message="transformer finished", nodes=len(dag))

        return tuple(executed)
