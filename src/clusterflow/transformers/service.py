# src/clusterflow/transformers/service.py
"""
Deriva os Services de cada componente.

    - Service cliente `<cluster>-<component>` (quando o template declara portas),
      com aresta workload → Service
    - Service headless `<cluster>-<component>-headless` para componentes com
      StatefulSet, com aresta headless → StatefulSet
"""

from __future__ import annotations

from typing import Any, Dict, List

from clusterflow.constant import DEPLOYMENT_KIND, SERVICE_KIND, STATEFULSET_KIND
from clusterflow.core.graph.dag import DAG
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.objects import new_object
from clusterflow.model.templates import ComponentDefinition

from .common import (
    component_labels,
    component_object_name,
    headless_service_name,
    key_for,
    prune_orphans,
    require_component_definition,
    require_templates,
    selector_labels,
)


def _service_ports(comp_def: ComponentDefinition) -> List[Dict[str, Any]]:
    ports = []
    for port in comp_def.ports:
        number = port.get("containerPort")
        entry: Dict[str, Any] = {"port": number, "targetPort": number}
        if port.get("name"):
            entry["name"] = port["name"]
        if port.get("protocol"):
            entry["protocol"] = port["protocol"]
        ports.append(entry)
    return ports


class ServiceTransformer:
    id = "services"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        if cluster.deletion_requested:
            return

        definition, _ = require_templates(ctx, source=self.id)
        desired = set()
        for comp in cluster.spec.components:
            comp_def = require_component_definition(definition, comp)
            stateful = comp_def.workload_type.uses_statefulset
            workload_key = key_for(
                STATEFULSET_KIND if stateful else DEPLOYMENT_KIND,
                cluster,
                component_object_name(cluster, comp),
            )
            labels = component_labels(cluster, comp)
            selector = selector_labels(cluster, comp)
            ports = _service_ports(comp_def)

            if ports:
                name = component_object_name(cluster, comp)
                key = key_for(SERVICE_KIND, cluster, name)
                obj = new_object(
                    SERVICE_KIND,
                    name,
                    cluster.namespace,
                    labels=labels,
                    spec={"type": "ClusterIP", "selector": selector, "ports": ports},
                )
                dag.add_or_update_node(key, obj, component=comp.name, source=self.id)
                desired.add(key)
                if workload_key in dag:
                    dag.add_edge(workload_key, key)

            if stateful:
                name = headless_service_name(cluster, comp)
                key = key_for(SERVICE_KIND, cluster, name)
                spec: Dict[str, Any] = {"clusterIP": "None", "selector": selector}
                if ports:
                    spec["ports"] = ports
                obj = new_object(SERVICE_KIND, name, cluster.namespace, labels=labels, spec=spec)
                dag.add_or_update_node(key, obj, component=comp.name, source=self.id)
                desired.add(key)
                if workload_key in dag:
                    dag.add_edge(key, workload_key)

        prune_orphans(ctx, dag, (SERVICE_KIND,), desired, source=self.id)
