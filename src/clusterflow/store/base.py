"""
Contrato do object store da plataforma de orquestração.

O object store é o único recurso realmente compartilhado do sistema. O core
o trata como append/overwrite-only através das chamadas de mutação do
Executor e do Driver, sem manter cópia mutável além de um ciclo.

Erros esperados das implementações:
    - ConflictError  → resourceVersion divergente, objeto já existente ou removido
    - PlatformError  → falha transitória de I/O

Invariantes:
    - `delete` de objeto inexistente é sucesso (idempotente)
    - `get`/`list` retornam cópias; mutá-las não altera o store
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from clusterflow.core.graph.types import ObjectKey

ChangeListener = Callable[[ObjectKey, Dict[str, Any]], None]


@runtime_checkable
class ObjectStore(Protocol):
    def get(self, key: ObjectKey) -> Optional[Dict[str, Any]]:
        ...

    def list(
        self,
        namespace: str,
        *,
        kind: Optional[str] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        ...

    def create(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_status(self, obj: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete(self, key: ObjectKey) -> None:
        ...
