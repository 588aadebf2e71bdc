# src/joinflow/connectors/registry.py
"""
Registro nomeado de conectores.

O `ConnectorRegistry` é injetado no `PipelineEngine`; nós `source` e
`output` referenciam conectores pelo nome (`config.connector`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from joinflow.core.exceptions import ConfigurationError, UnknownConnectorError

from .base import Connector


@dataclass
class ConnectorRegistry:
    _connectors: Dict[str, Connector] = field(default_factory=dict, init=False, repr=False)

    def register(self, name: str, connector: Connector) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(message="connector name must be a non-empty string")
        if name in self._connectors:
            raise ConfigurationError(
                message=f"Duplicate connector name: {name}",
                details={"connector": name},
            )
        self._connectors[name] = connector

    def has(self, name: str) -> bool:
        return name in self._connectors

    def get(self, name: str) -> Connector:
        if name not in self._connectors:
            raise UnknownConnectorError(
                message=f"Unknown connector: {name}",
                details={"connector": name, "available": self.names()},
                hint="Registre o conector no ConnectorRegistry antes da run",
            )
        return self._connectors[name]

    def names(self) -> List[str]:
        return list(self._connectors)
