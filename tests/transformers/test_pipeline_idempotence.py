# tests/transformers/test_pipeline_idempotence.py
"""
Convergência: reexecutar o pipeline completo contra o estado que ele mesmo
produziu não emite nenhuma mutação.
"""

from clusterflow.core.engine import Executor
from clusterflow.core.graph import DAG, Action
from clusterflow.transformers import build_cluster_pipeline


def _cycle(make_ctx, cluster):
    ctx = make_ctx(cluster)
    dag = DAG()
    build_cluster_pipeline().run(ctx, dag)
    return ctx, dag


def test_second_cycle_is_all_noop(store, make_ctx, cluster_factory):
    cluster = (
        cluster_factory
        .add_component("proxy", "nginx").set_replicas(3)
        .add_component("data", "mysql").add_volume_claim("data").set_monitor(True)
        .build()
    )

    ctx, dag = _cycle(make_ctx, cluster)
    first = Executor(store=store, ctx=ctx).apply(dag)
    assert first.ok
    assert first.mutated
    assert {action for _, action in first.issued} == {Action.CREATE}

    ctx, dag = _cycle(make_ctx, cluster)
    second = Executor(store=store, ctx=ctx).apply(dag)

    assert second.ok
    assert not second.mutated
    assert set(second.applied.values()) == {Action.NOOP}
    assert set(second.applied) == set(first.applied)


def test_changed_replicas_updates_only_the_workload(store, make_ctx, cluster_factory):
    cluster = cluster_factory.add_component("proxy", "nginx").build()
    ctx, dag = _cycle(make_ctx, cluster)
    Executor(store=store, ctx=ctx).apply(dag)

    cluster.spec.components[0].replicas = 5
    ctx, dag = _cycle(make_ctx, cluster)
    result = Executor(store=store, ctx=ctx).apply(dag)

    assert [(key.kind, action) for key, action in result.issued] == [("Deployment", Action.UPDATE)]
    stored = store.get(result.issued[0][0])
    assert stored["spec"]["replicas"] == 5
    assert stored["metadata"]["generation"] == 2
