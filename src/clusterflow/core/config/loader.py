# src/clusterflow/core/config/loader.py
"""
Loader canônico de documentos e configuração do ClusterFlow.

Este módulo carrega, valida estruturalmente e resolve:
    - a configuração efetiva do operador (defaults empacotados + override local)
    - manifests declarativos (Cluster, ClusterDefinition, ClusterVersion)

Responsabilidades do módulo:
    - Ler arquivos YAML ou JSON
    - Validar que o conteúdo raiz é um dicionário
    - Suportar arquivos YAML com múltiplos documentos (`---`)
    - Garantir precedência explícita do override local sobre os defaults

Invariantes:
    - Os defaults são obrigatórios
    - O resultado é sempre um dicionário puro (`dict`) ou lista de dicts
    - Overrides nunca mutam os defaults

Limites explícitos:
    - Não valida semântica de domínio (isso é papel do modelo)
    - Não interage com Pipeline, Executor ou Driver
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

_YAML_SUFFIXES = {".yaml", ".yml"}

PathLike = Union[str, Path]


def _check_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in _YAML_SUFFIXES and suffix != ".json":
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")
    return suffix


def _check_root(data: Any, path: Path) -> Dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Documento root deve ser dict em {path}, recebido: {type(data).__name__}"
        )
    return data


def load_document(path: PathLike) -> Dict[str, Any]:
    """
    Carrega um único documento YAML/JSON e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    file = Path(path)
    if not file.exists():
        raise DefaultsNotFoundError(f"Arquivo não encontrado: {file}")

    suffix = _check_suffix(file)
    with file.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) if suffix in _YAML_SUFFIXES else json.load(f)

    return _check_root(data, file)


def load_documents(path: PathLike) -> List[Dict[str, Any]]:
    """
    Carrega todos os documentos de um arquivo (YAML multi-documento ou JSON).

    Documentos vazios entre separadores `---` são descartados.
    """
    file = Path(path)
    if not file.exists():
        raise DefaultsNotFoundError(f"Arquivo não encontrado: {file}")

    suffix = _check_suffix(file)
    with file.open("r", encoding="utf-8") as f:
        if suffix in _YAML_SUFFIXES:
            raw = [doc for doc in yaml.safe_load_all(f) if doc is not None]
        else:
            loaded = json.load(f)
            raw = loaded if isinstance(loaded, list) else [loaded]

    return [_check_root(doc, file) for doc in raw]


def load_config(
    *,
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do operador.

    Política de resolução:
        - defaults: obrigatório (por padrão, o `defaults.yaml` empacotado)
        - local: opcional; ignorado quando o arquivo não existe
        - quando presente, o local sempre tem prioridade (deep-merge)

    Args:
        defaults_path (Optional[PathLike]): Caminho dos defaults.
        local_path (Optional[PathLike]): Caminho opcional de overrides locais.

    Returns:
        Dict[str, Any]: Configuração efetiva resolvida.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    defaults = load_document(defaults_path if defaults_path is not None else DEFAULTS_PATH)

    if local_path is None or not Path(local_path).exists():
        return defaults

    return deep_merge(defaults, load_document(local_path))
