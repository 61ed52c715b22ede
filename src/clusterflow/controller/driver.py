# src/clusterflow/controller/driver.py
"""
Driver de reconciliação: o laço de controle em torno do core.

Um ciclo por identidade de Cluster (WorkQueue + KeyedMutex):

    1. lê o Cluster e monta o TransformContext (templates + observado)
    2. executa o pipeline sobre um DAG novo
    3. persiste metadados do Cluster (finalizer/labels) se mudaram
    4. executa o Executor
    5. persiste o status do Cluster se mudou
    6. decide o requeue

Política de requeue (única camada que decide cadência):
    - erro retryable       → backoff exponencial por chave
    - erro não retryable   → sem requeue (aguarda próxima mudança observada)
    - convergência pendente → `reconcile.pending_requeue_seconds`
    - estado estável       → `reconcile.resync_seconds`
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from clusterflow.constant import APP_INSTANCE_LABEL_KEY, CLUSTER_KIND
from clusterflow.core.config.loader import load_config
from clusterflow.core.config.settings import OperatorSettings
from clusterflow.core.engine.executor import ApplyResult, Executor
from clusterflow.core.errors import ErrorPayload, error_payload
from clusterflow.core.exceptions import ClusterFlowException
from clusterflow.core.graph.dag import DAG
from clusterflow.core.graph.types import ObjectKey
from clusterflow.core.pipeline.context import CancellationToken, build_transform_context
from clusterflow.core.pipeline.pipeline import TransformerPipeline
from clusterflow.model.cluster import Cluster, Phase
from clusterflow.model.objects import get_labels
from clusterflow.model.templates import TemplateResolver
from clusterflow.store.base import ObjectStore
from clusterflow.transformers import build_cluster_pipeline

from .backoff import ExponentialBackoff
from .keyed_lock import KeyedMutex
from .workqueue import WorkQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileOutcome:
    """Resultado de um ciclo, consumido pelo laço de workers e pelos testes."""

    key: ObjectKey
    requeue_after: Optional[float] = None
    phase: Optional[Phase] = None
    executed: Tuple[str, ...] = ()
    apply: Optional[ApplyResult] = None
    error: Optional[ErrorPayload] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class ReconcileDriver:
    def __init__(
        self,
        *,
        store: ObjectStore,
        resolver: TemplateResolver,
        config: Optional[Dict[str, Any]] = None,
        pipeline: Optional[TransformerPipeline] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.resolver = resolver
        self.config = config if config is not None else load_config()
        self.settings = OperatorSettings.from_config(self.config)
        self.pipeline = pipeline or build_cluster_pipeline(self.settings)
        self.queue = WorkQueue(clock=clock)
        self.locks = KeyedMutex()
        self.backoff = ExponentialBackoff(
            base_seconds=self.settings.backoff_base_seconds,
            max_seconds=self.settings.backoff_max_seconds,
        )
        self._clock = clock
        self._threads: List[threading.Thread] = []
        self._inflight: Set[CancellationToken] = set()
        self._inflight_lock = threading.Lock()

    # -----------------------------
    # Entrada de trabalho
    # -----------------------------
    def enqueue(self, key: ObjectKey) -> None:
        self.queue.add(key)

    def watch(self) -> None:
        """Assina mudanças do store, mapeando objetos filhos para o Cluster dono."""
        add_listener = getattr(self.store, "add_listener", None)
        if add_listener is None:
            logger.warning("object store does not publish changes; relying on resync only")
            return
        add_listener(self._on_change)

    def _on_change(self, key: ObjectKey, obj: Dict[str, Any]) -> None:
        if key.kind == CLUSTER_KIND:
            self.enqueue(key)
            return
        instance = get_labels(obj).get(APP_INSTANCE_LABEL_KEY)
        if instance:
            self.enqueue(ObjectKey(CLUSTER_KIND, key.namespace, instance))

    # -----------------------------
    # Ciclo
    # -----------------------------
    def reconcile(self, key: ObjectKey) -> ReconcileOutcome:
        with self.locks.hold(key):
            token = CancellationToken.with_timeout(self.settings.cycle_timeout_seconds, clock=self._clock)
            with self._inflight_lock:
                self._inflight.add(token)
            try:
                return self._reconcile_locked(key, token)
            finally:
                with self._inflight_lock:
                    self._inflight.discard(token)

    def _reconcile_locked(self, key: ObjectKey, token: CancellationToken) -> ReconcileOutcome:
        manifest = self.store.get(key)
        if manifest is None:
            self.backoff.reset(key)
            logger.debug("cluster %s not found; nothing to reconcile", key)
            return ReconcileOutcome(key=key)

        cluster: Optional[Cluster] = None
        ctx = None
        executed: Tuple[str, ...] = ()
        result: Optional[ApplyResult] = None
        try:
            cluster = Cluster.from_manifest(manifest)
            cluster.validate()
            ctx = build_transform_context(
                store=self.store,
                cluster=cluster,
                resolver=self.resolver,
                config=self.config,
                cancel=token,
            )
            dag = DAG()
            executed = self.pipeline.run(ctx, dag)

            if not self._persist_metadata(cluster, manifest):
                self.backoff.reset(key)
                logger.info("cluster %s finalized", key)
                return ReconcileOutcome(key=key, executed=executed, events=list(ctx.events))

            result = Executor(store=self.store, ctx=ctx).apply(dag)
            self._persist_status(cluster, manifest)
            error = result.to_error()
        except ClusterFlowException as e:
            error = e

        events = list(ctx.events) if ctx is not None else []
        if error is not None:
            retryable = result.retryable if result is not None else error.retryable
            payload = replace(error_payload(error), retryable=retryable)
            if retryable:
                delay = self.backoff.next_delay(key)
                logger.warning("reconcile of %s failed (%s); retrying in %.1fs", key, payload.type, delay)
            else:
                delay = None
                self.backoff.reset(key)
                logger.error("reconcile of %s failed permanently (%s): %s", key, payload.type, payload.message)
            return ReconcileOutcome(
                key=key,
                requeue_after=delay,
                phase=cluster.status.phase if cluster is not None else None,
                executed=executed,
                apply=result,
                error=payload,
                events=events,
            )

        self.backoff.reset(key)
        pending = result.mutated or (
            self.settings.status_enabled and cluster.status.phase is not Phase.RUNNING
        )
        delay = self.settings.pending_requeue_seconds if pending else self.settings.resync_seconds
        logger.debug("reconcile of %s finished; requeue in %.1fs", key, delay)
        return ReconcileOutcome(
            key=key,
            requeue_after=delay,
            phase=cluster.status.phase,
            executed=executed,
            apply=result,
            events=events,
        )

    def _persist_metadata(self, cluster: Cluster, manifest: Dict[str, Any]) -> bool:
        """Grava finalizer/labels se mudaram; retorna False se o Cluster foi finalizado."""
        meta = manifest.get("metadata") or {}
        if (
            list(meta.get("finalizers") or []) == cluster.finalizers
            and dict(meta.get("labels") or {}) == cluster.labels
        ):
            return True

        updated = cluster.to_manifest()
        updated["spec"] = manifest.get("spec") or {}
        self.store.update(updated)
        latest = self.store.get(cluster.key)
        if latest is None:
            return False
        cluster.resource_version = latest["metadata"].get("resourceVersion")
        manifest["metadata"] = latest["metadata"]
        return True

    def _persist_status(self, cluster: Cluster, manifest: Dict[str, Any]) -> None:
        status = cluster.status.to_dict()
        if status == (manifest.get("status") or {}):
            return
        self.store.update_status({
            "apiVersion": manifest.get("apiVersion"),
            "kind": CLUSTER_KIND,
            "metadata": {
                "name": cluster.name,
                "namespace": cluster.namespace,
                "resourceVersion": cluster.resource_version,
            },
            "status": status,
        })

    # -----------------------------
    # Workers
    # -----------------------------
    def start(self, workers: Optional[int] = None) -> None:
        count = workers or self.settings.workers
        for index in range(count):
            thread = threading.Thread(target=self._worker, name=f"reconcile-worker-{index}", daemon=True)
            thread.start()
            self._threads.append(thread)
        logger.info("reconcile driver started with %d workers", count)

    def _worker(self) -> None:
        while True:
            key = self.queue.get()
            if key is None:
                return
            try:
                outcome = self.reconcile(key)
            except Exception:
                logger.exception("unexpected failure reconciling %s", key)
                delay: Optional[float] = self.backoff.next_delay(key)
            else:
                delay = outcome.requeue_after
            finally:
                self.queue.done(key)
            if delay is not None:
                self.queue.add_after(key, delay)

    def stop(self, timeout: Optional[float] = None) -> None:
        self.queue.shutdown()
        with self._inflight_lock:
            for token in self._inflight:
                token.cancel()
        for thread in self._threads:
            thread.join(timeout)
        self._threads.clear()
        logger.info("reconcile driver stopped")
