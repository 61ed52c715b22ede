# src/clusterflow/controller/__init__.py
"""Laço de controle: fila por identidade, lock por chave, backoff e Driver."""

from .backoff import ExponentialBackoff
from .driver import ReconcileDriver, ReconcileOutcome
from .keyed_lock import KeyedMutex
from .workqueue import WorkQueue

__all__ = [
    "ExponentialBackoff",
    "ReconcileDriver",
    "ReconcileOutcome",
    "KeyedMutex",
    "WorkQueue",
]
