# src/joinflow/core/config/hashing.py
"""
Hash canônico da configuração efetiva.

Cada RunResult carrega o hash da configuração sob a qual executou,
permitindo comparar runs sem armazenar a configuração completa.
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    SHA-256 hexadecimal da configuração em JSON canônico.

    Política (v1): chaves ordenadas, separadores compactos, UTF-8.
    Configurações estruturalmente equivalentes produzem o mesmo hash.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
