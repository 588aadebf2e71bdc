# src/joinflow/core/config/__init__.py
"""
Camada de configuração do JoinFlow.

A configuração é resolvida a partir de um arquivo de defaults
(empacotado em `defaults.yaml`) e de um override local opcional,
mesclados por deep-merge determinístico.

Responsabilidades do pacote:
    - Carregamento de arquivos YAML/JSON
    - Resolução via deep-merge (defaults + override)
    - Hash canônico da configuração efetiva (rastreabilidade de runs)
    - Acesso tipado às seções usadas pelo engine e pela análise

Limites explícitos:
    - Não executa pipeline
    - Não valida config de nós individuais (responsabilidade dos executores)
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULTS_PATH, config_section, load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "DEFAULTS_PATH",
    "config_section",
    "load_config",
    "deep_merge",
]
