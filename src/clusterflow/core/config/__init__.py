# src/clusterflow/core/config/__init__.py
"""
Camada de configuração do ClusterFlow.

Responsabilidades do pacote:
    - Carregamento de documentos YAML/JSON (config do operador e manifests)
    - Resolução de configuração final via deep-merge determinístico
    - Visão tipada e validada da configuração (`OperatorSettings`)

Limites explícitos:
    - Não valida semântica de domínio de Clusters ou templates
    - Não executa pipeline
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .loader import DEFAULTS_PATH, load_config, load_document, load_documents
from .merge import deep_merge
from .settings import OperatorSettings

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "UnsupportedConfigFormatError",
    "DEFAULTS_PATH",
    "load_config",
    "load_document",
    "load_documents",
    "deep_merge",
    "OperatorSettings",
]
