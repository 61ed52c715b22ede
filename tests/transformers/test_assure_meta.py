# tests/transformers/test_assure_meta.py
"""
Testes do AssureMetaTransformer.

Cenário de idempotência de metadados: um Cluster já rotulado com os refs
corretos e já portando o finalizer não sofre nenhuma mutação.
"""

from copy import deepcopy

from clusterflow.constant import CLUSTER_DEF_LABEL_KEY, CLUSTER_VER_LABEL_KEY, DB_CLUSTER_FINALIZER
from clusterflow.core.graph import DAG
from clusterflow.core.pipeline import TransformContext
from clusterflow.transformers import AssureMetaTransformer


def _ctx(cluster):
    return TransformContext(cycle_id="c", cluster=cluster)


def test_adds_finalizer_and_identity_labels(cluster_factory):
    cluster = cluster_factory.add_component("proxy", "nginx").build()
    dag = DAG()

    AssureMetaTransformer().transform(_ctx(cluster), dag)

    assert cluster.finalizers == [DB_CLUSTER_FINALIZER]
    assert cluster.labels[CLUSTER_DEF_LABEL_KEY] == "mysql-def"
    assert cluster.labels[CLUSTER_VER_LABEL_KEY] == "mysql-ver"
    assert len(dag) == 0


def test_already_correct_cluster_is_not_mutated(cluster_factory):
    cluster = cluster_factory.build()
    cluster.add_finalizer(DB_CLUSTER_FINALIZER)
    cluster.labels.update({CLUSTER_DEF_LABEL_KEY: "mysql-def", CLUSTER_VER_LABEL_KEY: "mysql-ver"})
    before = deepcopy(cluster)
    ctx = _ctx(cluster)
    dag = DAG()

    AssureMetaTransformer().transform(ctx, dag)

    assert cluster == before
    assert len(dag) == 0
    assert ctx.events == []


def test_stale_label_is_corrected(cluster_factory):
    cluster = cluster_factory.build()
    cluster.labels[CLUSTER_VER_LABEL_KEY] = "mysql-ver-old"

    AssureMetaTransformer().transform(_ctx(cluster), DAG())

    assert cluster.labels[CLUSTER_VER_LABEL_KEY] == "mysql-ver"


def test_deleting_cluster_does_not_get_finalizer_back(cluster_factory):
    cluster = cluster_factory.build()
    cluster.deletion_requested = True

    AssureMetaTransformer().transform(_ctx(cluster), DAG())

    assert cluster.finalizers == []
