# src/clusterflow/transformers/__init__.py
"""
Transformers canônicos do ciclo de reconciliação de um Cluster.

A ordem do pipeline é um invariante testado:

    assure-meta → config-maps → workloads → services → deletion → status

    - metadados do Cluster antes dos Transformers estruturais
    - ConfigMaps antes dos workloads que os montam (arestas ConfigMap → workload)
    - workloads antes dos Services (arestas workload → Service)
    - status por último, lendo o estado observado do ciclo

Apenas `status` pode ser desabilitado por configuração; a ordem nunca é
configurável.
"""

from __future__ import annotations

from typing import List, Optional

from clusterflow.core.config.settings import OperatorSettings
from clusterflow.core.pipeline.pipeline import TransformerPipeline
from clusterflow.core.pipeline.transformer import Transformer

from .assure_meta import AssureMetaTransformer
from .config_map import ConfigMapTransformer
from .deletion import DeletionTransformer
from .service import ServiceTransformer
from .status import StatusTransformer, aggregate_cluster_phase
from .workload import WorkloadTransformer


def build_cluster_pipeline(settings: Optional[OperatorSettings] = None) -> TransformerPipeline:
    transformers: List[Transformer] = [
        AssureMetaTransformer(),
        ConfigMapTransformer(),
        WorkloadTransformer(),
        ServiceTransformer(),
        DeletionTransformer(),
    ]
    if settings is None or settings.status_enabled:
        transformers.append(StatusTransformer())
    return TransformerPipeline(transformers)


__all__ = [
    "AssureMetaTransformer",
    "ConfigMapTransformer",
    "WorkloadTransformer",
    "ServiceTransformer",
    "DeletionTransformer",
    "StatusTransformer",
    "aggregate_cluster_phase",
    "build_cluster_pipeline",
]
