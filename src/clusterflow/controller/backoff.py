# src/clusterflow/controller/backoff.py
"""Backoff exponencial por chave: `base * 2^falhas`, limitado a `cap`."""

from __future__ import annotations

import threading
from typing import Dict, Hashable


class ExponentialBackoff:
    def __init__(self, *, base_seconds: float, max_seconds: float):
        self.base_seconds = base_seconds
        self.max_seconds = max_seconds
        self._failures: Dict[Hashable, int] = {}
        self._lock = threading.Lock()

    def next_delay(self, key: Hashable) -> float:
        """Registra uma falha e retorna o atraso do próximo retry."""
        with self._lock:
            failures = self._failures.get(key, 0)
            self._failures[key] = failures + 1
        return min(self.max_seconds, self.base_seconds * (2 ** failures))

    def failures(self, key: Hashable) -> int:
        with self._lock:
            return self._failures.get(key, 0)

    def reset(self, key: Hashable) -> None:
        with self._lock:
            self._failures.pop(key, None)
