# src/clusterflow/core/pipeline/context.py
"""
Contexto de um ciclo de reconciliação.

Este módulo define o `TransformContext`, a estrutura canônica passada a
todos os Transformers e ao Executor durante um ciclo de reconciliação de um
Cluster, além dos seus colaboradores:

    - ObservedState      → snapshot somente-leitura dos objetos do Cluster
    - CancellationToken  → deadline e cancelamento cooperativo do ciclo

O TransformContext atua como o único meio permitido de:
    - acesso ao Cluster e aos templates resolvidos
    - leitura do estado observado da plataforma
    - registro de eventos de log estruturados do ciclo
    - coleta de warnings não fatais por origem

Invariantes:
    - Cada ciclo possui um contexto próprio (nunca compartilhado)
    - Eventos sempre incluem `cycle_id`, `source`, `level` e `timestamp`
    - O snapshot observado é imutável do ponto de vista dos Transformers

Limites explícitos:
    - Não executa Transformers
    - Não emite mutações contra o object store
"""

from __future__ import annotations

import threading
import time
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from clusterflow.constant import APP_INSTANCE_LABEL_KEY, COMPONENT_NAME_LABEL_KEY, OBSERVED_KINDS
from clusterflow.core.exceptions import ReconcileCancelled
from clusterflow.core.graph.types import ObjectKey
from clusterflow.model.cluster import Cluster
from clusterflow.model.objects import get_labels, object_key
from clusterflow.model.templates import ClusterDefinition, ClusterVersion, TemplateResolver


class ObservedState:
    """Snapshot somente-leitura dos objetos observados de um Cluster."""

    def __init__(self, objects: Iterable[Dict[str, Any]] = ()):
        self._objects: Dict[ObjectKey, Dict[str, Any]] = {}
        for obj in objects:
            self._objects[object_key(obj)] = deepcopy(obj)

    def get(self, key: ObjectKey) -> Optional[Dict[str, Any]]:
        obj = self._objects.get(key)
        return deepcopy(obj) if obj is not None else None

    def list(self, kind: Optional[str] = None, *, component: Optional[str] = None) -> List[Dict[str, Any]]:
        found = []
        for key in sorted(self._objects):
            obj = self._objects[key]
            if kind is not None and key.kind != kind:
                continue
            if component is not None and get_labels(obj).get(COMPONENT_NAME_LABEL_KEY) != component:
                continue
            found.append(deepcopy(obj))
        return found

    def keys(self) -> List[ObjectKey]:
        return sorted(self._objects)

    def __contains__(self, key: object) -> bool:
        return key in self._objects

    def __iter__(self) -> Iterator[ObjectKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._objects)


class CancellationToken:
    """
    Token de cancelamento cooperativo com deadline opcional.

    O Driver cancela explicitamente (shutdown) ou via deadline do ciclo;
    pipeline e Executor consultam o token entre unidades de trabalho.
    """

    def __init__(
        self,
        *,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._event = threading.Event()
        self._clock = clock
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float, *, clock: Callable[[], float] = time.monotonic) -> "CancellationToken":
        return cls(deadline=clock() + seconds, clock=clock)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and self._clock() >= self.deadline

    def raise_if_cancelled(self, *, source: str) -> None:
        if not self.cancelled:
            return
        reason = "cancelled" if self._event.is_set() else "deadline exceeded"
        raise ReconcileCancelled(
            message=f"Reconcile cycle {reason}",
            details={"source": source, "reason": reason},
        )


@dataclass
class TransformContext:
    """
    Contexto compartilhado de um ciclo de reconciliação.

    Consolida:
        - identidade do ciclo (cycle_id, created_at)
        - Cluster alvo (metadados e status são os únicos campos mutáveis)
        - templates resolvidos (None quando ausentes)
        - snapshot observado somente-leitura
        - configuração efetiva e token de cancelamento
        - eventos de log estruturados e warnings por origem
    """
    cycle_id: str
    cluster: Cluster
    cluster_definition: Optional[ClusterDefinition] = None
    cluster_version: Optional[ClusterVersion] = None
    observed: ObservedState = field(default_factory=ObservedState)
    config: Dict[str, Any] = field(default_factory=dict)
    cancel: CancellationToken = field(default_factory=CancellationToken)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, source: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "cycle_id": self.cycle_id,
            "source": source,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, source: str, message: str) -> None:
        if source not in self.warnings:
            self.warnings[source] = []
        self.warnings[source].append(message)


def build_transform_context(
    *,
    store: Any,
    cluster: Cluster,
    resolver: TemplateResolver,
    config: Optional[Dict[str, Any]] = None,
    cancel: Optional[CancellationToken] = None,
    cycle_id: Optional[str] = None,
) -> TransformContext:
    """Resolve templates e lista o estado observado do Cluster (único ponto de leitura)."""
    definition = resolver.get_cluster_definition(cluster.spec.cluster_definition_ref)
    version = None
    if cluster.spec.cluster_version_ref:
        version = resolver.get_cluster_version(cluster.spec.cluster_version_ref)

    selector = {APP_INSTANCE_LABEL_KEY: cluster.name}
    objects: List[Dict[str, Any]] = []
    for kind in OBSERVED_KINDS:
        objects.extend(store.list(cluster.namespace, kind=kind, labels=selector))

    return TransformContext(
        cycle_id=cycle_id or uuid.uuid4().hex,
        cluster=cluster,
        cluster_definition=definition,
        cluster_version=version,
        observed=ObservedState(objects),
        config=dict(config or {}),
        cancel=cancel or CancellationToken(),
    )
