# src/clusterflow/transformers/assure_meta.py
"""Garante finalizer e labels de identidade no próprio Cluster."""

from __future__ import annotations

from clusterflow.constant import CLUSTER_DEF_LABEL_KEY, CLUSTER_VER_LABEL_KEY, DB_CLUSTER_FINALIZER
from clusterflow.core.graph.dag import DAG
from clusterflow.core.pipeline.context import TransformContext


class AssureMetaTransformer:
    """
    Transformer de metadados do Cluster.

    Muta apenas `ctx.cluster` (nunca o DAG). Quando finalizer e labels já
    estão corretos, não realiza nenhuma mutação.
    """

    id = "assure-meta"

    def transform(self, ctx: TransformContext, dag: DAG) -> None:
        cluster = ctx.cluster
        changed = []

        if not cluster.deletion_requested and not cluster.contains_finalizer(DB_CLUSTER_FINALIZER):
            cluster.add_finalizer(DB_CLUSTER_FINALIZER)
            changed.append("finalizer")

        wanted = {
            CLUSTER_DEF_LABEL_KEY: cluster.spec.cluster_definition_ref,
            CLUSTER_VER_LABEL_KEY: cluster.spec.cluster_version_ref,
        }
        for label, value in wanted.items():
            if value and cluster.labels.get(label) != value:
                cluster.labels[label] = value
                changed.append(label)

        if changed:
            ctx.log(source=self.id, level="info", message="cluster metadata updated", changed=changed)
