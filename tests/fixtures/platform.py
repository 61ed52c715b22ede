# tests/fixtures/platform.py
"""Simulação mínima dos controladores da plataforma sobre o InMemoryObjectStore."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from clusterflow.constant import (
    APP_INSTANCE_LABEL_KEY,
    COMPONENT_NAME_LABEL_KEY,
    POD_KIND,
    PVC_KIND,
)
from clusterflow.core.exceptions import PlatformError
from clusterflow.core.graph.types import ObjectKey
from clusterflow.model.objects import new_object
from clusterflow.store.memory import InMemoryObjectStore


def mark_workload_ready(store: InMemoryObjectStore, key: ObjectKey, ready: Optional[int] = None) -> Dict[str, Any]:
    obj = store.get(key)
    replicas = obj["spec"].get("replicas", 1)
    obj["status"] = {
        "replicas": replicas,
        "readyReplicas": replicas if ready is None else ready,
        "availableReplicas": replicas if ready is None else ready,
        "observedGeneration": obj["metadata"]["generation"],
    }
    return store.update_status(obj)


def create_pod(
    store: InMemoryObjectStore,
    *,
    namespace: str,
    cluster: str,
    component: str,
    name: str,
    waiting_reason: Optional[str] = None,
    waiting_message: str = "",
) -> Dict[str, Any]:
    pod = new_object(
        POD_KIND,
        name,
        namespace,
        labels={APP_INSTANCE_LABEL_KEY: cluster, COMPONENT_NAME_LABEL_KEY: component},
        spec={"containers": [{"name": component}]},
    )
    created = store.create(pod)
    if waiting_reason:
        created["status"] = {
            "containerStatuses": [
                {"state": {"waiting": {"reason": waiting_reason, "message": waiting_message}}}
            ]
        }
        created = store.update_status(created)
    return created


def create_pvc(store: InMemoryObjectStore, *, namespace: str, cluster: str, component: str, name: str) -> Dict[str, Any]:
    pvc = new_object(
        PVC_KIND,
        name,
        namespace,
        labels={APP_INSTANCE_LABEL_KEY: cluster, COMPONENT_NAME_LABEL_KEY: component},
        spec={"accessModes": ["ReadWriteOnce"], "resources": {"requests": {"storage": "1Gi"}}},
    )
    return store.create(pvc)


class FlakyStore(InMemoryObjectStore):
    """Store que falha mutações para identidades escolhidas."""

    def __init__(self, failing: Iterable[ObjectKey] = (), *, error: Optional[Exception] = None):
        super().__init__()
        self.failing = set(failing)
        self.error = error
        self.calls = []

    def _maybe_fail(self, key: ObjectKey) -> None:
        if key in self.failing:
            raise self.error or PlatformError(message=f"injected failure for {key}", details={"key": str(key)})

    def create(self, obj):
        key = ObjectKey(obj["kind"], obj["metadata"]["namespace"], obj["metadata"]["name"])
        self.calls.append(("create", key))
        self._maybe_fail(key)
        return super().create(obj)

    def update(self, obj):
        key = ObjectKey(obj["kind"], obj["metadata"]["namespace"], obj["metadata"]["name"])
        self.calls.append(("update", key))
        self._maybe_fail(key)
        return super().update(obj)

    def delete(self, key):
        self.calls.append(("delete", key))
        self._maybe_fail(key)
        return super().delete(key)
