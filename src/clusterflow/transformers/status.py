# src/clusterflow/transformers/status.py
"""
Agregação de status observado no Cluster.

Regras por componente (na ordem):
    - Cluster em remoção                                   → Deleting
    - workload ausente                                     → Creating
    - container de pod em espera com motivo de falha       → Failed (nenhuma réplica pronta)
                                                             ou Abnormal
    - readyReplicas == replicas e generation observada     → Running
    - antes Running/Updating/Abnormal, ou nova generation  → Updating
    - caso contrário                                       → Creating

Fase do Cluster (precedência):
    Deleting > Failed (todos falhos) > Abnormal (algum falho/anormal)
    > Creating > Updating > Running
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from clusterflow.constant import POD_KIND, WORKLOAD_KINDS
from clusterflow.core.graph.dag import DAG
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.cluster import ComponentSpec, ComponentStatus, Phase
from clusterflow.model.objects import get_path

from .common import component_object_name, key_for

FAILURE_REASONS = frozenset({
    "ImagePullBackOff",
    "ErrImagePull",
    "CrashLoopBackOff",
    "CreateContainerConfigError",
    "InvalidImageName",
})

_IN_SERVICE = (Phase.RUNNING, Phase.UPDATING, Phase.ABNORMAL)


def _failing_containers(pod: Dict[str, Any]) -> List[str]:
    messages = []
    for status in get_path(pod, "status.containerStatuses") or []:
        waiting = (status.get("state") or {}).get("waiting") or {}
        reason = waiting.get("reason")
        if reason in FAILURE_REASONS:
            messages.append(waiting.get("message") or reason)
    return messages


def aggregate_cluster_phase(phases: List[Phase]) -> Optional[Phase]:
    if not phases:
        return None
    if Phase.DELETING in phases:
        return Phase.DELETING
    if all(p is Phase.FAILED for p in phases):
        return Phase.FAILED
    if any(p in (Phase.FAILED, Phase.ABNORMAL) for p in phases):
        return Phase.ABNORMAL
    if Phase.CREATING in phases:
        return Phase.CREATING
    if Phase.UPDATING in phases:
        return Phase.UPDATING
    return Phase.RUNNING


class StatusTransformer:
    id = "status"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        status = cluster.status
        status.observed_generation = cluster.generation

        components: Dict[str, ComponentStatus] = {}
        for comp in cluster.spec.components:
            previous = status.components.get(comp.name)
            if cluster.deletion_requested:
                components[comp.name] = ComponentStatus(phase=Phase.DELETING)
            else:
                components[comp.name] = self._component_status(ctx, comp, previous)

        status.components = components
        phase = Phase.DELETING if cluster.deletion_requested else aggregate_cluster_phase(
            [c.phase for c in components.values()]
        )
        if phase is None:
            phase = Phase.RUNNING
        status.phase = phase
        status.message = "" if phase is Phase.RUNNING else f"cluster is {phase.value}"

        ctx.log(
            source=self.id,
            level="info",
            message="status aggregated",
            phase=phase.value,
            components={name: c.phase.value for name, c in components.items()},
        )

    def _component_status(
        self,
        ctx: TransformContext,
        comp: ComponentSpec,
        previous: Optional[ComponentStatus],
    ) -> ComponentStatus:
        result = ComponentStatus()
        workload = self._observed_workload(ctx, comp)
        if workload is None:
            result.phase = Phase.CREATING
            return result

        replicas = get_path(workload, "spec.replicas")
        replicas = 1 if replicas is None else int(replicas)
        ready = int(get_path(workload, "status.readyReplicas") or 0)
        generation = int(get_path(workload, "metadata.generation") or 1)
        observed_generation = int(get_path(workload, "status.observedGeneration") or 0)

        failing = False
        for pod in ctx.observed.list(POD_KIND, component=comp.name):
            for message in _failing_containers(pod):
                failing = True
                result.set_object_message(POD_KIND, pod["metadata"]["name"], message)

        was_in_service = previous is not None and previous.phase in _IN_SERVICE
        if failing:
            result.phase = Phase.FAILED if ready == 0 else Phase.ABNORMAL
        elif ready == replicas and observed_generation >= generation:
            result.phase = Phase.RUNNING
        elif was_in_service or (generation > 1 and observed_generation < generation):
            result.phase = Phase.UPDATING
        else:
            result.phase = Phase.CREATING
        return result

    @staticmethod
    def _observed_workload(ctx: TransformContext, comp: ComponentSpec) -> Optional[Dict[str, Any]]:
        name = component_object_name(ctx.cluster, comp)
        for kind in WORKLOAD_KINDS:
            obj = ctx.observed.get(key_for(kind, ctx.cluster, name))
            if obj is not None:
                return obj
        return None
