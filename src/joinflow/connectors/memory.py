# src/joinflow/connectors/memory.py
"""
Conector em memória.

Serve Datasets nomeados e captura escritas. Usado em demonstrações e
testes para exercitar o contrato de conector sem I/O externo.

Config de fetch:
    - source_id: nome do Dataset servido

Config de write:
    - target: nome do destino (default: "default")
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from joinflow.core.records import Dataset, copy_dataset


class MemoryConnector:
    def __init__(self, datasets: Optional[Mapping[str, Dataset]] = None):
        self.datasets: Dict[str, Dataset] = {k: copy_dataset([v]) for k, v in (datasets or {}).items()}
        self.written: Dict[str, List[Dataset]] = {}

    def fetch(self, config: Mapping[str, Any]) -> Dataset:
        source_id = config.get("source_id")
        if source_id not in self.datasets:
            raise KeyError(f"Unknown in-memory dataset: {source_id}")
        return copy_dataset([self.datasets[source_id]])

    def write(self, config: Mapping[str, Any], dataset: Dataset) -> Dict[str, Any]:
        target = str(config.get("target") or "default")
        self.written.setdefault(target, []).append(copy_dataset([dataset]))
        return {"rows_written": len(dataset)}

    def last_written(self, target: str = "default") -> Dataset:
        batches = self.written.get(target) or []
        return batches[-1] if batches else []
