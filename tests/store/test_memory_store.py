# tests/store/test_memory_store.py
"""
Testes do InMemoryObjectStore: concorrência otimista, generation,
preservação de status, finalizers e listeners de mudança.
"""

import pytest

from clusterflow.core.exceptions import ConflictError, ValidationError
from clusterflow.core.graph import ObjectKey
from clusterflow.model.objects import new_object
from clusterflow.store import InMemoryObjectStore, ObjectStore

CM = ObjectKey("ConfigMap", "default", "settings")


def _cm(data=None, **labels):
    return new_object("ConfigMap", "settings", "default", labels=labels or None, data=data or {"a": "1"})


def test_implements_protocol(store):
    assert isinstance(store, ObjectStore)


def test_create_assigns_platform_metadata(store):
    created = store.create(_cm())
    meta = created["metadata"]
    assert meta["uid"]
    assert meta["creationTimestamp"]
    assert meta["generation"] == 1
    assert meta["resourceVersion"] == "1"
    assert store.get(CM) == created


def test_create_rejects_duplicates_and_anonymous_objects(store):
    store.create(_cm())
    with pytest.raises(ConflictError) as exc:
        store.create(_cm())
    assert exc.value.details["reason"] == "AlreadyExists"

    with pytest.raises(ValidationError):
        store.create({"kind": "ConfigMap", "metadata": {"namespace": "default"}})


def test_returned_objects_are_copies(store):
    store.create(_cm())
    fetched = store.get(CM)
    fetched["data"]["a"] = "changed"
    assert store.get(CM)["data"]["a"] == "1"


def test_stale_resource_version_conflicts(store):
    created = store.create(_cm())
    store.update(created)
    with pytest.raises(ConflictError) as exc:
        store.update(created)
    assert exc.value.retryable
    assert exc.value.details["expected"] == "1"


def test_update_of_missing_object_conflicts(store):
    with pytest.raises(ConflictError) as exc:
        store.update(_cm())
    assert exc.value.details["reason"] == "NotFound"


def test_generation_only_moves_with_spec_or_data(store):
    created = store.create(_cm())
    created["metadata"]["labels"] = {"x": "y"}
    relabeled = store.update(created)
    assert relabeled["metadata"]["generation"] == 1

    relabeled["data"] = {"a": "2"}
    assert store.update(relabeled)["metadata"]["generation"] == 2


def test_update_preserves_status_and_uid(store):
    created = store.create(_cm())
    created["status"] = {"ready": True}
    with_status = store.update_status(created)

    with_status["status"] = {"ready": False}
    with_status["metadata"]["uid"] = "forged"
    updated = store.update(with_status)

    assert updated["status"] == {"ready": True}
    assert updated["metadata"]["uid"] == created["metadata"]["uid"]


def test_list_filters_by_namespace_kind_and_labels(store):
    store.create(_cm(**{"app.kubernetes.io/instance": "a"}))
    store.create(new_object("ConfigMap", "other", "default", labels={"app.kubernetes.io/instance": "b"}))
    store.create(new_object("Service", "svc", "default", labels={"app.kubernetes.io/instance": "a"}, spec={}))
    store.create(new_object("ConfigMap", "settings", "elsewhere"))

    names = [o["metadata"]["name"] for o in store.list("default", kind="ConfigMap", labels={"app.kubernetes.io/instance": "a"})]
    assert names == ["settings"]
    assert len(store.list("default")) == 3


def test_delete_is_idempotent(store):
    store.create(_cm())
    store.delete(CM)
    store.delete(CM)
    assert store.get(CM) is None
    assert len(store) == 0


def test_finalizers_defer_removal(store):
    obj = _cm()
    obj["metadata"]["finalizers"] = ["keep"]
    store.create(obj)

    store.delete(CM)
    marked = store.get(CM)
    assert marked["metadata"]["deletionTimestamp"]

    marked["metadata"]["finalizers"] = []
    store.update(marked)
    assert store.get(CM) is None


def test_listeners_receive_every_change():
    store = InMemoryObjectStore()
    seen = []
    store.add_listener(lambda key, obj: seen.append((key, obj["metadata"]["resourceVersion"])))

    created = store.create(_cm())
    store.update(created)
    store.delete(CM)

    assert [key for key, _ in seen] == [CM, CM, CM]
    assert [rv for _, rv in seen] == ["1", "2", "2"]
