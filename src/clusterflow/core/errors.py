"""
ClusterFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de payloads de erro do ClusterFlow.
Erros são artefatos do ciclo de reconciliação e fazem parte do contrato
operacional do sistema, devendo ser:

- explícitos
- serializáveis
- atribuídos a um nó do grafo ou a um Transformer
- acionáveis

Nenhuma decisão implícita é permitida.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import ClusterFlowException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do ClusterFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - retryable: se o Driver deve reenfileirar com backoff
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    retryable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1) fora da hierarquia tipada
# ---------------------------------------------------------------------------

UNEXPECTED_TRANSFORM_ERROR = "UNEXPECTED_TRANSFORM_ERROR"
UNEXPECTED_APPLY_ERROR = "UNEXPECTED_APPLY_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def error_payload(exc: BaseException) -> ErrorPayload:
    """Converte qualquer exceção em ErrorPayload (sem stack trace).

    Regras:
    - ClusterFlowException: código, details, hint e retryable vêm do tipo.
    - Outras exceções: encapsuladas como UNEXPECTED_APPLY_ERROR, não retryable.
    """
    if isinstance(exc, ClusterFlowException):
        return ErrorPayload(
            type=exc.code,
            message=exc.message or "Erro de reconciliação",
            details=dict(exc.details or {}),
            hint=exc.hint,
            retryable=exc.retryable,
        )

    return ErrorPayload(
        type=UNEXPECTED_APPLY_ERROR,
        message=str(exc) or "Erro inesperado durante reconciliação",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico do ciclo e o estado do object store",
        retryable=False,
    )


def unexpected_transform_error(
    *,
    transformer: str,
    exc: BaseException,
    hint: str = "Falha inesperada em Transformer indica defeito de programação; corrija antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=UNEXPECTED_TRANSFORM_ERROR,
        message=str(exc) or "Falha inesperada em Transformer",
        details={
            "transformer": transformer,
            "exception_class": exc.__class__.__name__,
        },
        hint=hint,
        retryable=False,
    )
