# src/clusterflow/core/engine/diff.py
"""
Diff entre representação desejada e objeto observado.

Regras de ação (por nó):
    - ausente/ausente   → NOOP
    - ausente/presente  → DELETE (objeto já em remoção conta como ausente)
    - presente/ausente  → CREATE
    - presente/presente → UPDATE se algum campo possuído diverge, senão NOOP

Campos possuídos (`OWNED_FIELDS`) são enumerados por kind. Apenas eles
participam da comparação; `status`, `metadata.resourceVersion`,
`metadata.uid` e demais campos atribuídos pela plataforma nunca participam.

Semântica de comparação:
    - mapeamentos: subconjunto (chaves não declaradas no desejado são ignoradas)
    - listas: mesmo tamanho e elementos comparados posição a posição com a
      mesma regra (itens que são mapeamentos aceitam defaults da plataforma)
    - escalares: igualdade exata
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Mapping, Optional, Tuple

from clusterflow.constant import (
    CONFIGMAP_KIND,
    DEPLOYMENT_KIND,
    PVC_KIND,
    SERVICE_KIND,
    STATEFULSET_KIND,
)
from clusterflow.core.graph.types import Action
from clusterflow.model.objects import get_path, has_path, is_deleting, set_path

_META_FIELDS = ("metadata.labels", "metadata.annotations")

OWNED_FIELDS: Dict[str, Tuple[str, ...]] = {
    DEPLOYMENT_KIND: _META_FIELDS + (
        "spec.replicas",
        "spec.selector",
        "spec.template",
    ),
    STATEFULSET_KIND: _META_FIELDS + (
        "spec.replicas",
        "spec.selector",
        "spec.serviceName",
        "spec.template",
        "spec.volumeClaimTemplates",
    ),
    SERVICE_KIND: _META_FIELDS + (
        "spec.type",
        "spec.clusterIP",
        "spec.selector",
        "spec.ports",
    ),
    CONFIGMAP_KIND: _META_FIELDS + ("data",),
    PVC_KIND: _META_FIELDS,
}

DEFAULT_OWNED_FIELDS: Tuple[str, ...] = _META_FIELDS + ("spec", "data")


def owned_fields(kind: str) -> Tuple[str, ...]:
    return OWNED_FIELDS.get(kind, DEFAULT_OWNED_FIELDS)


def _matches(desired: Any, observed: Any) -> bool:
    if isinstance(desired, Mapping):
        if not isinstance(observed, Mapping):
            return False
        return all(k in observed and _matches(v, observed[k]) for k, v in desired.items())
    if isinstance(desired, list):
        if not isinstance(observed, list) or len(observed) != len(desired):
            return False
        return all(_matches(d, o) for d, o in zip(desired, observed))
    return desired == observed


def changed_fields(desired: Mapping[str, Any], observed: Mapping[str, Any]) -> List[str]:
    """Lista os campos possuídos cujo valor desejado não está refletido no observado."""
    changed = []
    for path in owned_fields(str(desired.get("kind", ""))):
        if not has_path(desired, path):
            continue
        if not _matches(get_path(desired, path), get_path(observed, path)):
            changed.append(path)
    return changed


def compute_action(desired: Optional[Mapping[str, Any]], observed: Optional[Mapping[str, Any]]) -> Action:
    if desired is None:
        if observed is None or is_deleting(observed):
            return Action.NOOP
        return Action.DELETE
    if observed is None:
        return Action.CREATE
    return Action.UPDATE if changed_fields(desired, observed) else Action.NOOP


def _overlay(base: Any, desired: Any) -> Any:
    if isinstance(desired, Mapping) and isinstance(base, dict):
        merged = dict(base)
        for k, v in desired.items():
            merged[k] = _overlay(base.get(k), v)
        return merged
    if isinstance(desired, list) and isinstance(base, list) and len(base) == len(desired):
        return [_overlay(b, d) for b, d in zip(base, desired)]
    return deepcopy(desired)


def merge_for_update(desired: Mapping[str, Any], observed: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Objeto enviado no UPDATE: o observado com os campos possuídos sobrescritos.

    O `metadata.resourceVersion` observado é preservado, permitindo que o
    object store detecte escrita sobre estado obsoleto (ConflictError).
    """
    merged = deepcopy(dict(observed))
    for path in owned_fields(str(desired.get("kind", ""))):
        if has_path(desired, path):
            set_path(merged, path, _overlay(get_path(observed, path), get_path(desired, path)))
    return merged
