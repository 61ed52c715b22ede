# tests/e2e/test_cluster_lifecycle.py
"""
Ciclo de vida completo de um Cluster contra o object store em memória.

Fluxo:
    criação → objetos filhos criados (Creating)
    workloads prontos → Running, requeue de resync
    remoção → objetos filhos removidos (Deleting)
    nada mais observado → finalizer retirado, Cluster some do store

Os controladores da plataforma são simulados por `tests.fixtures.platform`.
"""

import pytest

from clusterflow.constant import DB_CLUSTER_FINALIZER
from clusterflow.controller import ReconcileDriver
from clusterflow.core.graph import Action, ObjectKey
from clusterflow.model.cluster import Phase, TerminationPolicy

from tests.fixtures.platform import create_pvc, mark_workload_ready

CLUSTER_KEY = ObjectKey("Cluster", "default", "mycluster")
PROXY = ObjectKey("Deployment", "default", "mycluster-proxy")
DATA = ObjectKey("StatefulSet", "default", "mycluster-data")
PVC = ObjectKey("PersistentVolumeClaim", "default", "data-mycluster-data-0")


@pytest.fixture
def driver(store, resolver, config):
    return ReconcileDriver(store=store, resolver=resolver, config=config)


def _children(store):
    return sorted(
        ObjectKey(o["kind"], "default", o["metadata"]["name"])
        for kind in ("Deployment", "StatefulSet", "Service", "ConfigMap", "PersistentVolumeClaim")
        for o in store.list("default", kind=kind)
    )


@pytest.mark.parametrize("policy, pvc_survives", [
    (TerminationPolicy.WIPE_OUT, False),
    (TerminationPolicy.RETAIN, True),
])
def test_create_run_delete_finalize(store, driver, cluster_factory, policy, pvc_survives):
    manifest = (
        cluster_factory
        .set_termination_policy(policy)
        .add_component("proxy", "nginx")
        .add_component("data", "mysql").set_replicas(1).add_volume_claim("data")
        .manifest()
    )
    store.create(manifest)

    # criação
    created = driver.reconcile(CLUSTER_KEY)
    assert created.ok
    assert created.phase is Phase.CREATING
    assert created.requeue_after == 5.0
    assert set(created.apply.issued) == {(k, Action.CREATE) for k in _children(store)}
    assert len(_children(store)) == 6
    create_pvc(store, namespace="default", cluster="mycluster", component="data", name=PVC.name)

    # convergência
    mark_workload_ready(store, PROXY)
    mark_workload_ready(store, DATA)
    running = driver.reconcile(CLUSTER_KEY)
    assert running.phase is Phase.RUNNING
    assert running.requeue_after == 300.0
    assert not running.apply.mutated

    # remoção pedida: o finalizer segura o Cluster
    store.delete(CLUSTER_KEY)
    assert store.get(CLUSTER_KEY)["metadata"]["deletionTimestamp"]

    deleting = driver.reconcile(CLUSTER_KEY)
    assert deleting.ok
    assert deleting.phase is Phase.DELETING
    assert {action for _, action in deleting.apply.issued} == {Action.DELETE}
    assert DB_CLUSTER_FINALIZER in store.get(CLUSTER_KEY)["metadata"]["finalizers"]
    assert _children(store) == ([PVC] if pvc_survives else [])

    # finalização
    finalized = driver.reconcile(CLUSTER_KEY)
    assert finalized.ok
    assert finalized.requeue_after is None
    assert store.get(CLUSTER_KEY) is None
    assert _children(store) == ([PVC] if pvc_survives else [])

    gone = driver.reconcile(CLUSTER_KEY)
    assert gone.ok and gone.requeue_after is None


def test_do_not_terminate_holds_the_cluster(store, driver, cluster_factory):
    manifest = (
        cluster_factory
        .set_termination_policy(TerminationPolicy.DO_NOT_TERMINATE)
        .add_component("proxy", "nginx")
        .manifest()
    )
    store.create(manifest)
    driver.reconcile(CLUSTER_KEY)
    store.delete(CLUSTER_KEY)

    outcome = driver.reconcile(CLUSTER_KEY)

    assert outcome.error.type == "TRANSFORM_ERROR"
    assert outcome.error.details["transformer"] == "deletion"
    assert outcome.requeue_after == 1.0
    assert store.get(CLUSTER_KEY) is not None
    assert store.get(PROXY) is not None


def test_scale_out_updates_workload_and_reports_updating(store, driver, cluster_factory):
    store.create(cluster_factory.add_component("proxy", "nginx").manifest())
    driver.reconcile(CLUSTER_KEY)
    mark_workload_ready(store, PROXY)
    assert driver.reconcile(CLUSTER_KEY).phase is Phase.RUNNING

    current = store.get(CLUSTER_KEY)
    current["spec"]["components"][0]["replicas"] = 4
    store.update(current)

    outcome = driver.reconcile(CLUSTER_KEY)

    assert [(k, a) for k, a in outcome.apply.issued] == [(PROXY, Action.UPDATE)]
    assert outcome.requeue_after == 5.0
    assert store.get(PROXY)["spec"]["replicas"] == 4

    # o status lê o estado observado no início do ciclo seguinte
    assert driver.reconcile(CLUSTER_KEY).phase is Phase.UPDATING
    assert store.get(CLUSTER_KEY)["status"]["observedGeneration"] == 2
