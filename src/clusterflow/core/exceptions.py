"""
ClusterFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do ClusterFlow.

Objetivo:
- Permitir que Transformers, Executor e Driver levantem exceções semânticas tipadas
- Classificar cada falha como transitória (retryable) ou estrutural
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Taxonomia (v1):
- ValidationError     → defeito de programação/configuração (não retryable)
- TransformError      → pré-condição de Transformer não satisfeita (retryable)
- ConflictError       → conflito de concorrência otimista no apply (retryable)
- PlatformError       → falha transitória de I/O no object store (retryable)
- PartialApplyError   → resultado agregado com nós falhos/pulados (retryable)
- ReconcileCancelled  → deadline/cancelamento observado no ciclo (retryable)

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Nenhuma camada do core decide cadência de retry; apenas o Driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Optional


@dataclass(frozen=True, eq=False)
class ClusterFlowException(Exception):
    """Base class para exceções internas do ClusterFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    - `code` e `retryable` são atributos de classe, não de instância
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    code: ClassVar[str] = "CLUSTERFLOW_ERROR"
    retryable: ClassVar[bool] = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def with_details(self, **extra: Any) -> "ClusterFlowException":
        """Retorna uma NOVA instância do mesmo tipo com `details` enriquecido."""
        merged = dict(self.details)
        merged.update(extra)
        return replace(self, details=merged)


# ---------------------------------------------------------------------------
# Estruturais (não retryable)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ValidationError(ClusterFlowException):
    """Defeito estrutural: não deve ser reexecutado com os mesmos inputs."""

    code: ClassVar[str] = "VALIDATION_ERROR"


@dataclass(frozen=True, eq=False)
class CycleError(ValidationError):
    """Aresta que fecharia um ciclo no grafo de objetos."""

    code: ClassVar[str] = "GRAPH_CYCLE"


@dataclass(frozen=True, eq=False)
class UnknownNodeError(ValidationError):
    """Aresta referencia uma identidade que não existe no grafo."""

    code: ClassVar[str] = "GRAPH_UNKNOWN_NODE"


@dataclass(frozen=True, eq=False)
class DuplicateTransformerIdError(ValidationError):
    """Dois Transformers com o mesmo `id` no mesmo pipeline."""

    code: ClassVar[str] = "PIPELINE_DUPLICATE_TRANSFORMER"


# ---------------------------------------------------------------------------
# Transitórias (retryable)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class TransformError(ClusterFlowException):
    """Pré-condição de Transformer não satisfeita (ex.: template ausente)."""

    code: ClassVar[str] = "TRANSFORM_ERROR"
    retryable: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class ConflictError(ClusterFlowException):
    """resourceVersion divergente ou objeto já existente no object store."""

    code: ClassVar[str] = "APPLY_CONFLICT"
    retryable: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class PlatformError(ClusterFlowException):
    """Falha transitória de I/O contra o object store."""

    code: ClassVar[str] = "PLATFORM_ERROR"
    retryable: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class PartialApplyError(ClusterFlowException):
    """Apply terminou com nós falhos e/ou pulados por falha de ancestral."""

    code: ClassVar[str] = "PARTIAL_APPLY"
    retryable: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class ReconcileCancelled(ClusterFlowException):
    """Deadline ou cancelamento observado durante o ciclo."""

    code: ClassVar[str] = "RECONCILE_CANCELLED"
    retryable: ClassVar[bool] = True
