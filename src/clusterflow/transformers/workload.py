# src/clusterflow/transformers/workload.py
"""
Deriva o workload de cada componente.

    - Stateless                          → Deployment
    - Stateful / Consensus / Replication → StatefulSet (com volumeClaimTemplates)

Arestas:
    - ConfigMap → workload (a configuração existe antes do workload que a monta)
"""

from __future__ import annotations

from typing import Any, Dict

from clusterflow.constant import (
    CONFIGMAP_KIND,
    DEPLOYMENT_KIND,
    PROMETHEUS_PORT_ANNOTATION,
    PROMETHEUS_SCRAPE_ANNOTATION,
    STATEFULSET_KIND,
    WORKLOAD_KINDS,
)
from clusterflow.core.graph.dag import DAG
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.cluster import Cluster, ComponentSpec
from clusterflow.model.objects import new_object
from clusterflow.model.templates import ComponentDefinition

from .common import (
    CONFIG_MOUNT_PATH,
    CONFIG_VOLUME_NAME,
    component_labels,
    component_object_name,
    config_map_name,
    headless_service_name,
    key_for,
    merged_affinity,
    merged_tolerations,
    prune_orphans,
    require_component_definition,
    require_templates,
    selector_labels,
)


class WorkloadTransformer:
    id = "workloads"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        if cluster.deletion_requested:
            return

        definition, version = require_templates(ctx, source=self.id)
        desired = set()
        for comp in cluster.spec.components:
            comp_def = require_component_definition(definition, comp)
            image = version.image_for(comp.type)
            if not image:
                ctx.add_warning(self.id, f"no image for component type {comp.type!r} in {version.name}")

            kind = STATEFULSET_KIND if comp_def.workload_type.uses_statefulset else DEPLOYMENT_KIND
            name = component_object_name(cluster, comp)
            key = key_for(kind, cluster, name)
            obj = new_object(
                kind,
                name,
                cluster.namespace,
                labels=component_labels(cluster, comp),
                spec=self._workload_spec(ctx, cluster, comp, comp_def, image or ""),
            )
            dag.add_or_update_node(key, obj, component=comp.name, source=self.id)
            desired.add(key)

            cm_key = key_for(CONFIGMAP_KIND, cluster, config_map_name(cluster, comp))
            node = dag.get(cm_key)
            if node is not None and not node.absent:
                dag.add_edge(cm_key, key)

        prune_orphans(ctx, dag, WORKLOAD_KINDS, desired, source=self.id)

    def _workload_spec(
        self,
        ctx: TransformContext,
        cluster: Cluster,
        comp: ComponentSpec,
        comp_def: ComponentDefinition,
        image: str,
    ) -> Dict[str, Any]:
        container: Dict[str, Any] = {"name": comp.type, "image": image}
        if comp_def.ports:
            container["ports"] = [dict(p) for p in comp_def.ports]
        if comp.resources:
            container["resources"] = dict(comp.resources)

        pod_spec: Dict[str, Any] = {"containers": [container]}
        if comp_def.config_templates:
            container["volumeMounts"] = [{"name": CONFIG_VOLUME_NAME, "mountPath": CONFIG_MOUNT_PATH}]
            pod_spec["volumes"] = [
                {"name": CONFIG_VOLUME_NAME, "configMap": {"name": config_map_name(cluster, comp)}}
            ]
        affinity = merged_affinity(cluster, comp)
        if affinity:
            pod_spec["affinity"] = affinity
        tolerations = merged_tolerations(cluster, comp)
        if tolerations:
            pod_spec["tolerations"] = tolerations

        template_meta: Dict[str, Any] = {"labels": component_labels(cluster, comp)}
        if comp.monitor:
            if comp_def.monitor_port:
                template_meta["annotations"] = {
                    PROMETHEUS_SCRAPE_ANNOTATION: "true",
                    PROMETHEUS_PORT_ANNOTATION: str(comp_def.monitor_port),
                }
            else:
                ctx.add_warning(self.id, f"component {comp.name!r} has monitor enabled but no monitorPort")

        replicas = comp.replicas if comp.replicas is not None else comp_def.default_replicas
        spec: Dict[str, Any] = {
            "replicas": replicas,
            "selector": {"matchLabels": selector_labels(cluster, comp)},
            "template": {"metadata": template_meta, "spec": pod_spec},
        }
        if comp_def.workload_type.uses_statefulset:
            spec["serviceName"] = headless_service_name(cluster, comp)
            spec["volumeClaimTemplates"] = [
                {"metadata": {"name": vct.name}, "spec": dict(vct.spec)}
                for vct in comp.volume_claim_templates
            ]
        return spec
