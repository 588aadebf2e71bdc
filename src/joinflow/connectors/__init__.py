# src/joinflow/connectors/__init__.py
"""
Conectores do JoinFlow.

    - base     → `Connector` (Protocol): fetch/write
    - registry → `ConnectorRegistry`: conectores nomeados injetados no engine
    - memory   → `MemoryConnector`: implementação de referência em memória
"""

from .base import Connector
from .memory import MemoryConnector
from .registry import ConnectorRegistry

__all__ = ["Connector", "ConnectorRegistry", "MemoryConnector"]
