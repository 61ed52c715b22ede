# src/clusterflow/core/engine/executor.py
"""
Executor de aplicação do grafo de objetos contra o object store.

Fluxo:
    1. `plan_apply` resolve a ação de cada nó e ordena as fases
    2. mutações são emitidas uma a uma, na ordem do plano
    3. o resultado agregado (`ApplyResult`) é devolvido ao Driver

Contenção de falhas:
    - Falha em CREATE/UPDATE bloqueia os sucessores (dependentes) do nó
    - Falha em DELETE bloqueia os predecessores (removidos depois dele)
    - Nós bloqueados são reportados como pulados, com o ancestral falho atribuído
    - Ramos independentes continuam sendo aplicados

Cancelamento:
    - Verificado entre nós; ao ser observado, nenhuma nova mutação é emitida
    - Nós restantes são reportados como pulados (`cancelled`)
    - Mutações já emitidas não são revertidas

Exceções não tipadas do object store são convertidas em PlatformError,
sem stack trace nos resultados.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from clusterflow.core.errors import error_payload
from clusterflow.core.exceptions import (
    ClusterFlowException,
    PartialApplyError,
    PlatformError,
    ReconcileCancelled,
)
from clusterflow.core.graph.dag import DAG
from clusterflow.core.graph.types import Action, ObjectKey
from clusterflow.core.pipeline.context import TransformContext
from clusterflow.store.base import ObjectStore

from .diff import merge_for_update
from .planner import plan_apply

CANCELLED = "cancelled"

SOURCE = "executor"


@dataclass
class ApplyResult:
    """Resultado agregado de um apply."""

    applied: Dict[ObjectKey, Action] = field(default_factory=dict)
    skipped: Dict[ObjectKey, Union[ObjectKey, str]] = field(default_factory=dict)
    failed: Dict[ObjectKey, ClusterFlowException] = field(default_factory=dict)
    issued: List[Tuple[ObjectKey, Action]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.skipped

    @property
    def cancelled(self) -> bool:
        return any(reason == CANCELLED for reason in self.skipped.values())

    @property
    def retryable(self) -> bool:
        return all(exc.retryable for exc in self.failed.values())

    @property
    def mutated(self) -> bool:
        return any(action is not Action.NOOP for _, action in self.issued)

    def to_error(self) -> Optional[ClusterFlowException]:
        if self.ok:
            return None

        details = {
            "failed": {str(k): error_payload(e).to_dict() for k, e in self.failed.items()},
            "skipped": {str(k): str(v) for k, v in self.skipped.items()},
            "retryable": self.retryable,
        }
        if not self.failed:
            return ReconcileCancelled(message="Apply interrupted by cancellation", details=details)
        return PartialApplyError(
            message=f"Apply finished with {len(self.failed)} failed and {len(self.skipped)} skipped nodes",
            details=details,
        )


class Executor:
    """Aplica um DAG planejado contra o object store."""

    def __init__(self, *, store: ObjectStore, ctx: TransformContext):
        self.store = store
        self.ctx = ctx

    def apply(self, dag: DAG) -> ApplyResult:
        plan = plan_apply(dag, self.ctx.observed)
        result = ApplyResult()
        blocked: Dict[ObjectKey, ObjectKey] = {}

        self.ctx.log(
            source=SOURCE,
            level="info",
            message="apply planned",
            apply=len(plan.apply_order),
            delete=len(plan.delete_order),
        )

        apply_phase = set(plan.apply_order)
        delete_phase = set(plan.delete_order)
        remaining = list(plan)

        for position, key in enumerate(remaining):
            if self.ctx.cancel.cancelled:
                for pending in remaining[position:]:
                    result.skipped[pending] = CANCELLED
                self.ctx.log(source=SOURCE, level="warning", message="apply cancelled", skipped=len(remaining) - position)
                break

            if key in blocked:
                result.skipped[key] = blocked[key]
                self.ctx.log(source=SOURCE, level="warning", message="node skipped", key=str(key), blocked_by=str(blocked[key]))
                continue

            node = dag.get(key)
            try:
                self._issue(node.key, node.action, node.desired, result)
            except ClusterFlowException as e:
                self._record_failure(key, e, result)
            except Exception as e:
                wrapped = PlatformError(
                    message=str(e) or "Unexpected object store failure",
                    details={"key": str(key), "exception_class": e.__class__.__name__},
                )
                self._record_failure(key, wrapped, result)
            else:
                result.applied[key] = node.action
                continue

            if node.action is Action.DELETE:
                dependents: Iterable[ObjectKey] = (k for k in dag.ancestors(key) if k in delete_phase)
            else:
                dependents = (k for k in dag.descendants(key) if k in apply_phase)
            for dependent in dependents:
                blocked.setdefault(dependent, key)

        self.ctx.log(
            source=SOURCE,
            level="info" if result.ok else "error",
            message="apply finished",
            applied=len(result.applied),
            skipped=len(result.skipped),
            failed=len(result.failed),
        )
        return result

    def _issue(self, key: ObjectKey, action: Action, desired, result: ApplyResult) -> None:
        if action is Action.NOOP:
            return

        result.issued.append((key, action))
        self.ctx.log(source=SOURCE, level="info", message="mutation issued", key=str(key), action=action.value)

        if action is Action.CREATE:
            self.store.create(desired)
        elif action is Action.UPDATE:
            self.store.update(merge_for_update(desired, self.ctx.observed.get(key)))
        elif action is Action.DELETE:
            self.store.delete(key)

    def _record_failure(self, key: ObjectKey, exc: ClusterFlowException, result: ApplyResult) -> None:
        exc = exc.with_details(key=str(key))
        result.failed[key] = exc
        self.ctx.log(
            source=SOURCE,
            level="error",
            message="mutation failed",
            key=str(key),
            error=error_payload(exc).to_dict(),
        )
