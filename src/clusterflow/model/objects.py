"""Manifests da plataforma como dicionários (formato Kubernetes).

Objetos alvo e observados são dicionários puros:
`{"apiVersion", "kind", "metadata": {...}, "spec": {...}, "data": {...}, "status": {...}}`.
Este módulo concentra os acessores usados por Transformers, Executor e store.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from clusterflow.core.graph.types import ObjectKey

_DEFAULT_API_VERSIONS = {
    "Deployment": "apps/v1",
    "StatefulSet": "apps/v1",
    "Service": "v1",
    "ConfigMap": "v1",
    "PersistentVolumeClaim": "v1",
    "Pod": "v1",
}


def object_key(obj: Mapping[str, Any]) -> ObjectKey:
    meta = obj.get("metadata") or {}
    return ObjectKey(
        kind=str(obj.get("kind", "")),
        namespace=str(meta.get("namespace", "")),
        name=str(meta.get("name", "")),
    )


def new_object(
    kind: str,
    name: str,
    namespace: str,
    *,
    labels: Optional[Dict[str, str]] = None,
    annotations: Optional[Dict[str, str]] = None,
    spec: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, str]] = None,
    api_version: Optional[str] = None,
) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = dict(labels)
    if annotations:
        metadata["annotations"] = dict(annotations)

    obj: Dict[str, Any] = {
        "apiVersion": api_version or _DEFAULT_API_VERSIONS.get(kind, "v1"),
        "kind": kind,
        "metadata": metadata,
    }
    if spec is not None:
        obj["spec"] = spec
    if data is not None:
        obj["data"] = data
    return obj


def get_labels(obj: Mapping[str, Any]) -> Dict[str, str]:
    return dict((obj.get("metadata") or {}).get("labels") or {})


def matches_labels(obj: Mapping[str, Any], selector: Mapping[str, str]) -> bool:
    labels = (obj.get("metadata") or {}).get("labels") or {}
    return all(labels.get(k) == v for k, v in selector.items())


def is_deleting(obj: Mapping[str, Any]) -> bool:
    return bool((obj.get("metadata") or {}).get("deletionTimestamp"))


def get_path(obj: Mapping[str, Any], path: str) -> Any:
    """Lê um caminho pontuado (`spec.template`); retorna None se ausente."""
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def has_path(obj: Mapping[str, Any], path: str) -> bool:
    current: Any = obj
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False
        current = current[part]
    return True


def set_path(obj: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = obj
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value
