# tests/conftest.py
"""
Fixtures compartilhados para testes do ClusterFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração efetiva determinística (defaults empacotados)
- templates de teste (topologia `mysql-def`, versão `mysql-ver`)
- object store em memória e resolver estático
- builder fluente de Cluster (`ClusterFactory`)
- fábrica de TransformContext a partir do store

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Nenhuma fixture executa o Driver em threads
    - Dados retornados são determinísticos e isolados por teste

Limites explícitos:
    - Não substituir testes de integração do Driver
    - Não conter lógica de domínio além de montagem de objetos
"""

from copy import deepcopy

import pytest

from clusterflow.core.config.loader import load_config
from clusterflow.core.pipeline.context import build_transform_context
from clusterflow.model.templates import StaticTemplateResolver
from clusterflow.store.memory import InMemoryObjectStore

from tests.fixtures.cluster_factory import (
    ClusterFactory,
    mysql_cluster_definition,
    mysql_cluster_version,
)

NAMESPACE = "default"
CLUSTER_NAME = "mycluster"


# =====================================================
# Config
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """YAML de defaults semelhante ao empacotado, fornecido como string (sem I/O)."""
    return """
reconcile:
  resync_seconds: 300.0
  pending_requeue_seconds: 5.0
  cycle_timeout_seconds: 60.0
backoff:
  base_seconds: 1.0
  max_seconds: 300.0
workers: 4
transformers:
  status:
    enabled: true
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """Override local parcial: apenas alguns intervalos mudam."""
    return """
reconcile:
  resync_seconds: 60
backoff:
  max_seconds: 30.0
workers: 2
"""


@pytest.fixture
def config():
    return deepcopy(load_config())


# =====================================================
# Plataforma e templates
# =====================================================

@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def resolver():
    return StaticTemplateResolver(
        definitions=[mysql_cluster_definition()],
        versions=[mysql_cluster_version()],
    )


@pytest.fixture
def cluster_factory():
    """Builder com os refs de templates padrão dos testes."""
    return ClusterFactory(NAMESPACE, CLUSTER_NAME, "mysql-def", "mysql-ver")


@pytest.fixture
def make_ctx(store, resolver, config):
    """Fábrica de TransformContext: lê o estado observado atual do `store`."""

    def _make(cluster, **kwargs):
        return build_transform_context(
            store=kwargs.pop("store", store),
            cluster=cluster,
            resolver=kwargs.pop("resolver", resolver),
            config=kwargs.pop("config", config),
            **kwargs,
        )

    return _make
