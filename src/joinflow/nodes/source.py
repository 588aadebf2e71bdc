# src/joinflow/nodes/source.py
"""
Executor de nó `source`.

Busca um Dataset no conector nomeado em `config.connector`, repassando
a config inteira do nó como config de fetch.

Config esperada (exemplo):
    {"connector": "memory", "source_id": "customers"}

Falhas do conector são encapsuladas como `ConnectorError`, assim como
um fetch que devolve itens que não são Records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

from joinflow.connectors.registry import ConnectorRegistry
from joinflow.core.exceptions import ConnectorError
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.types import ExecutionResult, NodeType, PipelineNode
from joinflow.core.records import Dataset

from .base import build_result, require_str


@dataclass
class SourceNodeExecutor:
    connectors: ConnectorRegistry
    node_type: NodeType = NodeType.SOURCE

    def validate(self, node: PipelineNode) -> None:
        self.connectors.get(require_str(node, "connector"))

    def execute(self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext) -> ExecutionResult:
        name = node.config["connector"]
        connector = self.connectors.get(name)
        try:
            fetched = connector.fetch(node.config)
        except Exception as exc:
            raise ConnectorError(
                message=f"Connector '{name}' failed to fetch: {exc}",
                details={"connector": name, "exception_class": exc.__class__.__name__},
                hint="Verifique a disponibilidade da fonte e a config do conector",
            ) from exc

        fetched = list(fetched or [])
        invalid = [i for i, record in enumerate(fetched) if not isinstance(record, Mapping)]
        if invalid:
            raise ConnectorError(
                message=f"Connector '{name}' returned {len(invalid)} record(s) that are not key-value mappings",
                details={"connector": name, "invalid_count": len(invalid), "first_invalid_index": invalid[0]},
                hint="O conector deve devolver uma sequência de Records (dicts)",
            )

        data = [dict(record) for record in fetched]
        ctx.log(node_id=node.id, level="info", message="source fetched", connector=name, rows=len(data))
        return build_result(node, data)
