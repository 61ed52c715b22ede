# src/clusterflow/core/config/settings.py
"""
Visão tipada da configuração efetiva do operador.

A configuração resolvida por `load_config` é um dicionário puro; este
módulo o converte em `OperatorSettings`, validando tipos e faixas uma
única vez no bootstrap.

Invariantes:
    - Todos os intervalos são positivos
    - `backoff.max_seconds >= backoff.base_seconds`
    - `workers >= 1`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .errors import InvalidSettingError


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidSettingError(f"'{name}' must be a mapping")
    return section


def _positive(section: Dict[str, Any], key: str, path: str) -> float:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidSettingError(f"{path}.{key} must be a positive number, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class OperatorSettings:
    """Configuração tipada consumida pelo Driver e pelo pipeline."""

    resync_seconds: float
    pending_requeue_seconds: float
    cycle_timeout_seconds: float
    backoff_base_seconds: float
    backoff_max_seconds: float
    workers: int
    status_enabled: bool = True

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OperatorSettings":
        if not isinstance(config, dict):
            raise InvalidSettingError("config root must be a mapping")

        reconcile = _section(config, "reconcile")
        backoff = _section(config, "backoff")
        transformers = _section(config, "transformers")

        workers = config.get("workers")
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise InvalidSettingError(f"workers must be an integer >= 1, got {workers!r}")

        base = _positive(backoff, "base_seconds", "backoff")
        cap = _positive(backoff, "max_seconds", "backoff")
        if cap < base:
            raise InvalidSettingError("backoff.max_seconds must be >= backoff.base_seconds")

        status_cfg = transformers.get("status") or {}
        status_enabled = status_cfg.get("enabled", True)
        if not isinstance(status_enabled, bool):
            raise InvalidSettingError("transformers.status.enabled must be a bool")

        return cls(
            resync_seconds=_positive(reconcile, "resync_seconds", "reconcile"),
            pending_requeue_seconds=_positive(reconcile, "pending_requeue_seconds", "reconcile"),
            cycle_timeout_seconds=_positive(reconcile, "cycle_timeout_seconds", "reconcile"),
            backoff_base_seconds=base,
            backoff_max_seconds=cap,
            workers=workers,
            status_enabled=status_enabled,
        )
