# src/joinflow/connectors/base.py
"""
Contrato de conector (fronteira com colaboradores externos).

Conectores concretos (arquivos, bancos, APIs) ficam fora do JoinFlow;
o engine só precisa de duas capacidades:

    - fetch(config) -> Dataset
    - write(config, dataset) -> {"rows_written": n}

Ambas podem levantar qualquer exceção; o executor do nó a encapsula
como `ConnectorError` e o Engine a registra no resultado do nó.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Protocol, runtime_checkable

from joinflow.core.records import Dataset


@runtime_checkable
class Connector(Protocol):
    def fetch(self, config: Mapping[str, Any]) -> Dataset:
        ...

    def write(self, config: Mapping[str, Any], dataset: Dataset) -> Dict[str, Any]:
        ...
