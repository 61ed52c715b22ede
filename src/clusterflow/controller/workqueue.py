# src/clusterflow/controller/workqueue.py
"""
Fila de trabalho por identidade, com de-duplicação.

Semântica:
    - uma chave aparece no máximo uma vez na fila (`dirty`)
    - uma chave em processamento nunca é entregue a outro worker; se for
      adicionada nesse intervalo, volta à fila no `done`
    - `add_after` agenda a chave; vale o menor prazo pendente por chave

O relógio é injetável para testes determinísticos.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Hashable, Optional, Set

logger = logging.getLogger(__name__)


class WorkQueue:
    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: Deque[Hashable] = deque()
        self._dirty: Set[Hashable] = set()
        self._processing: Set[Hashable] = set()
        self._delayed: Dict[Hashable, float] = {}
        self._shutting_down = False

    # -----------------------------
    # Produção
    # -----------------------------
    def add(self, key: Hashable) -> None:
        with self._cond:
            self._add_locked(key)

    def _add_locked(self, key: Hashable) -> None:
        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        self._delayed.pop(key, None)
        if key not in self._processing:
            self._queue.append(key)
            self._cond.notify()

    def add_after(self, key: Hashable, delay: float) -> None:
        if delay <= 0:
            self.add(key)
            return
        with self._cond:
            if self._shutting_down or key in self._dirty:
                return
            ready_at = self._clock() + delay
            current = self._delayed.get(key)
            if current is None or ready_at < current:
                self._delayed[key] = ready_at
            self._cond.notify()

    def _promote_due_locked(self) -> Optional[float]:
        """Move chaves vencidas para a fila; retorna o próximo prazo pendente."""
        now = self._clock()
        upcoming = None
        for key, ready_at in list(self._delayed.items()):
            if ready_at <= now:
                self._add_locked(key)
            elif upcoming is None or ready_at < upcoming:
                upcoming = ready_at
        return upcoming

    # -----------------------------
    # Consumo
    # -----------------------------
    def get(self, timeout: Optional[float] = None) -> Optional[Hashable]:
        """
        Retorna a próxima chave (marcando-a em processamento).

        Retorna None em shutdown ou se `timeout` expirar sem trabalho.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                upcoming = self._promote_due_locked()
                if self._queue:
                    key = self._queue.popleft()
                    self._dirty.discard(key)
                    self._processing.add(key)
                    return key
                if self._shutting_down:
                    return None

                wait = None
                if upcoming is not None:
                    wait = max(0.0, upcoming - self._clock())
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    wait = remaining if wait is None else min(wait, remaining)
                self._cond.wait(wait)

    def done(self, key: Hashable) -> None:
        with self._cond:
            self._processing.discard(key)
            if key in self._dirty and not self._shutting_down:
                self._queue.append(key)
                self._cond.notify()

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def shutdown(self) -> None:
        with self._cond:
            self._shutting_down = True
            self._delayed.clear()
            self._cond.notify_all()
        logger.debug("work queue shut down")

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    def scheduled(self, key: Hashable) -> Optional[float]:
        """Prazo agendado de uma chave (ou None)."""
        with self._cond:
            return self._delayed.get(key)

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)
