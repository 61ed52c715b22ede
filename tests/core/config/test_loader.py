# tests/core/config/test_loader.py
"""
Testes do carregador de configuração e de manifests (load_config, load_documents).

Os testes asseguram que:
- o arquivo defaults é obrigatório
- o arquivo local é opcional e tem precedência quando presente
- formatos não suportados são rejeitados
- estruturas com raiz não-dict são detectadas precocemente
- arquivos YAML multi-documento são lidos como lista de manifests

Limites explícitos:
    - Não valida a visão tipada (`OperatorSettings`)
    - Não valida semântica de domínio dos manifests
"""

import json
from pathlib import Path

import pytest

from clusterflow.core.config.errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from clusterflow.core.config.loader import DEFAULTS_PATH, load_config, load_documents


def test_missing_defaults_raises(tmp_path: Path):
    """
    Verifica que a ausência do arquivo de defaults é tratada como erro fatal.

    Invariantes:
        - A exceção utilizada é específica (`DefaultsNotFoundError`)
        - Nenhuma configuração parcial é retornada
    """
    missing = tmp_path / "defaults.yaml"
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(missing), local_path=None)


def test_packaged_defaults_are_loaded_by_default():
    assert DEFAULTS_PATH.exists()
    out = load_config()
    assert out["reconcile"]["resync_seconds"] == 300.0
    assert out["backoff"]["base_seconds"] == 1.0
    assert out["transformers"]["status"]["enabled"] is True


def test_missing_local_is_ok(tmp_path: Path, project_like_config_defaults_yaml):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))
    assert out["reconcile"]["resync_seconds"] == 300.0
    assert out["workers"] == 4


def test_load_defaults_and_local(tmp_path: Path, project_like_config_defaults_yaml, project_like_config_local_yaml):
    """
    Verifica o merge defaults + local.

    O resultado reflete os valores sobrescritos pelo arquivo local e
    preserva os demais valores dos defaults.
    """
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")
    local.write_text(project_like_config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))
    assert out["reconcile"]["resync_seconds"] == 60
    assert out["reconcile"]["pending_requeue_seconds"] == 5.0
    assert out["backoff"] == {"base_seconds": 1.0, "max_seconds": 30.0}
    assert out["workers"] == 2


def test_json_defaults_are_supported(tmp_path: Path):
    defaults = tmp_path / "defaults.json"
    defaults.write_text(json.dumps({"workers": 1}), encoding="utf-8")
    assert load_config(defaults_path=defaults) == {"workers": 1}


def test_empty_local_file_is_empty_override(tmp_path: Path, project_like_config_defaults_yaml):
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(project_like_config_defaults_yaml, encoding="utf-8")
    local.write_text("", encoding="utf-8")

    assert load_config(defaults_path=defaults, local_path=local) == load_config(defaults_path=defaults)


def test_invalid_root_type_raises(tmp_path: Path):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_unsupported_extension_raises(tmp_path: Path):
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("workers = 4\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_multi_document_manifests(tmp_path: Path):
    """
    Manifests declarativos podem vir num único arquivo com separadores `---`.

    Documentos vazios entre separadores são descartados.
    """
    manifests = tmp_path / "templates.yaml"
    manifests.write_text(
        "kind: ClusterDefinition\nmetadata: {name: a}\n---\n---\nkind: ClusterVersion\nmetadata: {name: b}\n",
        encoding="utf-8",
    )
    docs = load_documents(manifests)
    assert [d["kind"] for d in docs] == ["ClusterDefinition", "ClusterVersion"]


def test_multi_document_rejects_non_mapping(tmp_path: Path):
    manifests = tmp_path / "templates.yaml"
    manifests.write_text("kind: Cluster\n---\n- nope\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_documents(manifests)
