# src/clusterflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do ClusterFlow.

Este módulo define a hierarquia de exceções levantadas durante o
carregamento de documentos (configuração do operador e manifests de
templates/clusters), a validação estrutural e a resolução por deep-merge.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros de configuração são falhas de bootstrap, não de ciclo
    - Mensagens apontam o arquivo ou a chave problemática

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção daqui atravessa um ciclo de reconciliação

Limites explícitos:
    - Não executa pipeline nem Executor
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do ClusterFlow.

    Permite ao processo do operador abortar o bootstrap de forma explícita
    quando a configuração efetiva não pode ser resolvida.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo obrigatório (defaults ou manifest) não encontrado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Sem defaults o Driver não tem intervalos de requeue nem backoff
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Conteúdo raiz do documento não é um dicionário (`dict`).

    Invariantes:
        - Configuração e manifests são sempre mapas chave-valor no root
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"backoff": {"base_seconds": 1.0}}
        - override: {"backoff": "fast"}

    Limites explícitos:
        - Não realiza coerção de tipos
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingError(ConfigError):
    """
    Valor de configuração com tipo ou faixa inválida.

    Exemplo:
        - workers: 0
        - backoff.max_seconds menor que backoff.base_seconds
    """
