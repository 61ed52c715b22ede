# src/clusterflow/transformers/deletion.py
"""
Remoção dos objetos de um Cluster marcado para deleção.

Política de término:
    - DoNotTerminate → TransformError (retryable) até a política mudar
    - Retain         → remove objetos de computação; PVCs ficam intocados
    - WipeOut        → remove também PersistentVolumeClaims

Arestas de ordem de criação entre nós removidos de um mesmo componente
(ConfigMap / PVC / Service headless → workload → Service cliente) fazem o
Executor remover dependentes antes de suas dependências.

O finalizer do Cluster só é retirado quando nenhum objeto que seria
removido continua observado.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from clusterflow.constant import (
    COMPONENT_NAME_LABEL_KEY,
    COMPUTE_KINDS,
    CONFIGMAP_KIND,
    DB_CLUSTER_FINALIZER,
    PVC_KIND,
    SERVICE_KIND,
    STORAGE_KINDS,
    WORKLOAD_KINDS,
)
from clusterflow.core.exceptions import TransformError
from clusterflow.core.graph.dag import DAG
from clusterflow.core.graph.types import ObjectKey
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.cluster import TerminationPolicy
from clusterflow.model.objects import get_labels, get_path, object_key


class DeletionTransformer:
    id = "deletion"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        if not cluster.deletion_requested:
            return

        policy = cluster.spec.termination_policy
        if policy is TerminationPolicy.DO_NOT_TERMINATE:
            raise TransformError(
                message=f"Cluster {cluster.namespace}/{cluster.name} has terminationPolicy DoNotTerminate",
                details={"terminationPolicy": policy.value},
                hint="Altere spec.terminationPolicy para Retain ou WipeOut para permitir a remoção",
            )

        kinds = COMPUTE_KINDS + STORAGE_KINDS if policy is TerminationPolicy.WIPE_OUT else COMPUTE_KINDS

        by_component: Dict[str, List[dict]] = defaultdict(list)
        owned = []
        for kind in kinds:
            for obj in ctx.observed.list(kind):
                key = object_key(obj)
                component = get_labels(obj).get(COMPONENT_NAME_LABEL_KEY, "")
                dag.remove_node(key, component=component, source=self.id)
                by_component[component].append(obj)
                owned.append(key)

        for objs in by_component.values():
            self._add_creation_order(dag, objs)

        ctx.log(
            source=self.id,
            level="info",
            message="owned objects marked for removal",
            policy=policy.value,
            count=len(owned),
        )

        if not owned and cluster.contains_finalizer(DB_CLUSTER_FINALIZER):
            cluster.remove_finalizer(DB_CLUSTER_FINALIZER)
            ctx.log(source=self.id, level="info", message="cluster finalizer removed")

    @staticmethod
    def _add_creation_order(dag: DAG, objs: List[dict]) -> None:
        before: List[ObjectKey] = []
        workloads: List[ObjectKey] = []
        after: List[ObjectKey] = []
        for obj in objs:
            key = object_key(obj)
            if key.kind in WORKLOAD_KINDS:
                workloads.append(key)
            elif key.kind in (CONFIGMAP_KIND, PVC_KIND):
                before.append(key)
            elif key.kind == SERVICE_KIND:
                if get_path(obj, "spec.clusterIP") == "None":
                    before.append(key)
                else:
                    after.append(key)

        for workload in workloads:
            for key in before:
                dag.add_edge(key, workload)
            for key in after:
                dag.add_edge(workload, key)
