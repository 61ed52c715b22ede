# src/clusterflow/core/pipeline/__init__.py
"""
# Pipeline Core — ClusterFlow

Este pacote define os **contratos canônicos** do pipeline de reconciliação.

Um ciclo de reconciliação é modelado como uma **sequência fixa de
Transformers** que mutam um único DAG de objetos alvo, onde:
- cada Transformer declara identidade (`id`) e uma única operação
- a ordem é a ordem de composição, nunca decidida pelos Transformers
- o estado do ciclo é mediado pelo `TransformContext`

## Componentes

- **transformer**
  - `Transformer` (Protocol): contrato mínimo de um Transformer

- **context**
  - `TransformContext`: contexto do ciclo (Cluster, templates, observado, logs)
  - `ObservedState`: snapshot somente-leitura do estado observado
  - `CancellationToken`: deadline e cancelamento cooperativo
  - `build_transform_context`: montagem do contexto a partir do object store

- **pipeline**
  - `TransformerPipeline`: composição validada e execução fail-fast

## Limites Explícitos

- Não aplica mutações na plataforma (isso é papel do Executor)
- Não decide cadência de retry (isso é papel do Driver)
"""

from .context import CancellationToken, ObservedState, TransformContext, build_transform_context
from .pipeline import TransformerPipeline
from .transformer import Transformer

__all__ = [
    "CancellationToken",
    "ObservedState",
    "TransformContext",
    "build_transform_context",
    "TransformerPipeline",
    "Transformer",
]
