# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Os testes asseguram que:
- valores escalares são sobrescritos
- dicionários são mesclados de forma recursiva
- listas são sobrescritas integralmente
- conflitos de tipo são rejeitados explicitamente
- objetos de entrada não são mutados
"""

import pytest

from clusterflow.core.config.errors import ConfigTypeConflictError
from clusterflow.core.config.merge import deep_merge


def test_merge_simple_override():
    base = {"workers": 4, "reconcile": {"resync_seconds": 300.0}}
    override = {"workers": 2}
    out = deep_merge(base, override)
    assert out == {"workers": 2, "reconcile": {"resync_seconds": 300.0}}
    assert base == {"workers": 4, "reconcile": {"resync_seconds": 300.0}}
    assert override == {"workers": 2}


def test_merge_nested_dict():
    """
    Verifica que dicionários aninhados são mesclados recursivamente.

    Invariantes:
        - Chaves não sobrescritas permanecem inalteradas
        - O resultado é um novo dicionário (a base não é mutada)
    """
    base = {"backoff": {"base_seconds": 1.0, "max_seconds": 300.0}}
    override = {"backoff": {"max_seconds": 30.0}}
    out = deep_merge(base, override)
    assert out == {"backoff": {"base_seconds": 1.0, "max_seconds": 30.0}}
    out["backoff"]["base_seconds"] = 9.0
    assert base["backoff"]["base_seconds"] == 1.0


def test_merge_list_override_total():
    base = {"kinds": ["Deployment", "Service"]}
    override = {"kinds": ["ConfigMap"]}
    assert deep_merge(base, override) == {"kinds": ["ConfigMap"]}


def test_merge_int_over_float_is_accepted():
    assert deep_merge({"resync_seconds": 300.0}, {"resync_seconds": 60}) == {"resync_seconds": 60}


def test_merge_new_keys_and_null_base():
    out = deep_merge({"transformers": None}, {"transformers": {"status": {"enabled": False}}, "extra": 1})
    assert out == {"transformers": {"status": {"enabled": False}}, "extra": 1}


@pytest.mark.parametrize(
    "base, override",
    [
        ({"backoff": {"base_seconds": 1.0}}, {"backoff": "fast"}),
        ({"enabled": True}, {"enabled": 1}),
        ({"workers": 4}, {"workers": "4"}),
    ],
)
def test_merge_type_conflict_raises(base, override):
    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_merge_requires_dict_roots():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["a"])
