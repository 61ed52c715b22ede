# src/clusterflow/transformers/config_map.py
"""Deriva um ConfigMap por componente com templates de configuração."""

from __future__ import annotations

from clusterflow.constant import CONFIGMAP_KIND
from clusterflow.core.graph.dag import DAG
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.model.objects import new_object

from .common import (
    component_labels,
    config_map_name,
    key_for,
    prune_orphans,
    require_component_definition,
    require_templates,
)


class ConfigMapTransformer:
    id = "config-maps"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        if cluster.deletion_requested:
            return

        definition, _ = require_templates(ctx, source=self.id)
        desired = set()
        for comp in cluster.spec.components:
            comp_def = require_component_definition(definition, comp)
            if not comp_def.config_templates:
                continue

            name = config_map_name(cluster, comp)
            key = key_for(CONFIGMAP_KIND, cluster, name)
            obj = new_object(
                CONFIGMAP_KIND,
                name,
                cluster.namespace,
                labels=component_labels(cluster, comp),
                data=dict(comp_def.config_templates),
            )
            dag.add_or_update_node(key, obj, component=comp.name, source=self.id)
            desired.add(key)

        prune_orphans(ctx, dag, (CONFIGMAP_KIND,), desired, source=self.id)
