# tests/core/config/test_settings.py
"""
Testes da visão tipada da configuração (OperatorSettings).
"""

from copy import deepcopy

import pytest

from clusterflow.core.config.errors import InvalidSettingError
from clusterflow.core.config.settings import OperatorSettings


def test_from_packaged_defaults(config):
    settings = OperatorSettings.from_config(config)
    assert settings.resync_seconds == 300.0
    assert settings.pending_requeue_seconds == 5.0
    assert settings.cycle_timeout_seconds == 60.0
    assert settings.backoff_base_seconds == 1.0
    assert settings.backoff_max_seconds == 300.0
    assert settings.workers == 4
    assert settings.status_enabled is True


def test_integers_are_coerced_to_float(config):
    config["reconcile"]["resync_seconds"] = 60
    settings = OperatorSettings.from_config(config)
    assert settings.resync_seconds == 60.0
    assert isinstance(settings.resync_seconds, float)


def test_status_can_be_disabled(config):
    config["transformers"]["status"]["enabled"] = False
    assert OperatorSettings.from_config(config).status_enabled is False


def test_missing_transformers_section_keeps_status(config):
    del config["transformers"]
    assert OperatorSettings.from_config(config).status_enabled is True


@pytest.mark.parametrize(
    "path, value",
    [
        (("workers",), 0),
        (("workers",), True),
        (("workers",), 1.5),
        (("reconcile", "resync_seconds"), 0),
        (("reconcile", "pending_requeue_seconds"), -1.0),
        (("reconcile", "cycle_timeout_seconds"), "60"),
        (("backoff", "base_seconds"), None),
        (("transformers", "status", "enabled"), "yes"),
    ],
)
def test_invalid_values_raise(config, path, value):
    broken = deepcopy(config)
    target = broken
    for part in path[:-1]:
        target = target[part]
    target[path[-1]] = value
    with pytest.raises(InvalidSettingError):
        OperatorSettings.from_config(broken)


def test_backoff_cap_below_base_raises(config):
    config["backoff"] = {"base_seconds": 10.0, "max_seconds": 1.0}
    with pytest.raises(InvalidSettingError):
        OperatorSettings.from_config(config)


def test_non_mapping_section_raises(config):
    config["reconcile"] = [1, 2]
    with pytest.raises(InvalidSettingError):
        OperatorSettings.from_config(config)
