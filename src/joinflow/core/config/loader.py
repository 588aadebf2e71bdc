# src/joinflow/core/config/loader.py
"""
Loader de configuração do JoinFlow.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (por padrão, o `defaults.yaml` empacotado)
    - um arquivo local de overrides (opcional; ignorado se não existir)
    - overrides programáticos (opcional, ex.: vindos de um chamador/API)

Precedência: overrides programáticos > arquivo local > defaults.

Invariantes:
    - O resultado é sempre um dicionário puro
    - Defaults nunca são mutados
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo YAML/JSON e valida que a raiz é um dicionário.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Args:
        defaults_path: Caminho do arquivo de defaults. Quando omitido,
            usa o `defaults.yaml` do pacote.
        local_path: Caminho opcional de overrides locais.
        overrides: Overrides programáticos aplicados por último.

    Returns:
        Configuração final resolvida.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    defaults_file = Path(defaults_path) if defaults_path is not None else DEFAULTS_PATH
    effective = _load_file(defaults_file)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective


def config_section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Retorna `config[name]` quando for um dict; caso contrário, `{}`."""
    if not isinstance(config, dict):
        return {}
    section = config.get(name)
    return section if isinstance(section, dict) else {}
