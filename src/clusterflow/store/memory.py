"""
Object store em memória com semântica de concorrência otimista.

Implementação de referência do `ObjectStore`, usada pelos testes e por
execuções locais do Driver. Reproduz o comportamento da plataforma que o
core assume:

    - `metadata.uid`, `metadata.resourceVersion`, `metadata.generation` e
      `metadata.creationTimestamp` são atribuídos pelo store
    - `update` com resourceVersion divergente levanta ConflictError
    - `update` preserva `status`; apenas `update_status` o substitui
    - `generation` avança somente quando `spec` ou `data` mudam
    - `delete` de objeto com finalizers apenas marca `deletionTimestamp`;
      o objeto some quando o último finalizer é removido

Thread-safety:
    - Todas as operações são serializadas por um lock interno
    - Listeners de mudança são chamados fora do lock
"""

from __future__ import annotations

import threading
import uuid
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from clusterflow.core.exceptions import ConflictError, ValidationError
from clusterflow.core.graph.types import ObjectKey
from clusterflow.model.objects import matches_labels, object_key

from .base import ChangeListener

_PLATFORM_META = ("uid", "creationTimestamp", "deletionTimestamp")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryObjectStore:
    """Object store thread-safe em memória."""

    def __init__(self, *, clock: Optional[Callable[[], str]] = None):
        self._lock = threading.Lock()
        self._objects: Dict[ObjectKey, Dict[str, Any]] = {}
        self._rv = 0
        self._clock = clock or _utcnow
        self._listeners: List[ChangeListener] = []

    # -----------------------------
    # Listeners
    # -----------------------------
    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self, events: List[Tuple[ObjectKey, Dict[str, Any]]]) -> None:
        for key, obj in events:
            for listener in list(self._listeners):
                listener(key, deepcopy(obj))

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, key: ObjectKey) -> Optional[Dict[str, Any]]:
        with self._lock:
            obj = self._objects.get(key)
            return deepcopy(obj) if obj is not None else None

    def list(
        self,
        namespace: str,
        *,
        kind: Optional[str] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            found = [
                deepcopy(obj)
                for key, obj in sorted(self._objects.items())
                if key.namespace == namespace
                and (kind is None or key.kind == kind)
                and (not labels or matches_labels(obj, labels))
            ]
        return found

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)

    # -----------------------------
    # Mutação
    # -----------------------------
    def _next_rv(self) -> str:
        self._rv += 1
        return str(self._rv)

    def create(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        key = object_key(obj)
        if not key.kind or not key.name:
            raise ValidationError(
                message="Object must declare kind and metadata.name",
                details={"key": str(key)},
            )

        with self._lock:
            if key in self._objects:
                raise ConflictError(
                    message=f"{key} already exists",
                    details={"key": str(key), "reason": "AlreadyExists"},
                )
            stored = deepcopy(obj)
            meta = stored.setdefault("metadata", {})
            meta.pop("deletionTimestamp", None)
            meta["uid"] = str(uuid.uuid4())
            meta["creationTimestamp"] = self._clock()
            meta["generation"] = 1
            meta["resourceVersion"] = self._next_rv()
            self._objects[key] = stored
            result = deepcopy(stored)

        self._notify([(key, result)])
        return result

    def _current_for_write(self, obj: Dict[str, Any]) -> Tuple[ObjectKey, Dict[str, Any]]:
        key = object_key(obj)
        current = self._objects.get(key)
        if current is None:
            raise ConflictError(
                message=f"{key} no longer exists",
                details={"key": str(key), "reason": "NotFound"},
            )
        rv = (obj.get("metadata") or {}).get("resourceVersion")
        current_rv = current["metadata"]["resourceVersion"]
        if rv is not None and str(rv) != current_rv:
            raise ConflictError(
                message=f"{key} was modified concurrently",
                details={"key": str(key), "expected": str(rv), "actual": current_rv},
                hint="Releia o objeto e reexecute o ciclo",
            )
        return key, current

    def update(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            key, current = self._current_for_write(obj)
            stored = deepcopy(obj)
            meta = stored.setdefault("metadata", {})
            for field_name in _PLATFORM_META:
                if field_name in current["metadata"]:
                    meta[field_name] = current["metadata"][field_name]
                else:
                    meta.pop(field_name, None)

            generation = int(current["metadata"].get("generation", 1))
            if stored.get("spec") != current.get("spec") or stored.get("data") != current.get("data"):
                generation += 1
            meta["generation"] = generation
            meta["resourceVersion"] = self._next_rv()

            if "status" in current:
                stored["status"] = deepcopy(current["status"])
            else:
                stored.pop("status", None)

            if meta.get("deletionTimestamp") and not meta.get("finalizers"):
                del self._objects[key]
            else:
                self._objects[key] = stored
            result = deepcopy(stored)

        self._notify([(key, result)])
        return result

    def update_status(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            key, current = self._current_for_write(obj)
            current["status"] = deepcopy(obj.get("status") or {})
            current["metadata"]["resourceVersion"] = self._next_rv()
            result = deepcopy(current)

        self._notify([(key, result)])
        return result

    def delete(self, key: ObjectKey) -> None:
        with self._lock:
            current = self._objects.get(key)
            if current is None:
                return
            meta = current["metadata"]
            if meta.get("finalizers"):
                if meta.get("deletionTimestamp"):
                    return
                meta["deletionTimestamp"] = self._clock()
                meta["resourceVersion"] = self._next_rv()
                result = deepcopy(current)
            else:
                del self._objects[key]
                result = deepcopy(current)

        self._notify([(key, result)])
