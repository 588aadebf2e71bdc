# src/joinflow/nodes/output.py
"""
Executor de nó `output`.

Concatena todos os Datasets recebidos e os entrega ao conector nomeado
em `config.connector` (tabela, arquivo, API ou visualização; opaco ao
engine). Reporta sempre o número de linhas escritas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

from joinflow.connectors.registry import ConnectorRegistry
from joinflow.core.exceptions import ConnectorError
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.types import ExecutionResult, NodeType, PipelineNode
from joinflow.core.records import Dataset

from .base import build_result, concat_inputs, require_str


@dataclass
class OutputNodeExecutor:
    connectors: ConnectorRegistry
    node_type: NodeType = NodeType.OUTPUT

    def validate(self, node: PipelineNode) -> None:
        self.connectors.get(require_str(node, "connector"))

    def execute(self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext) -> ExecutionResult:
        name = node.config["connector"]
        connector = self.connectors.get(name)
        data = concat_inputs(inputs)

        try:
            receipt = connector.write(node.config, data)
        except Exception as exc:
            raise ConnectorError(
                message=f"Connector '{name}' failed to write: {exc}",
                details={"connector": name, "exception_class": exc.__class__.__name__},
                hint="Verifique o destino e a config do conector",
            ) from exc

        rows_written = len(data)
        if isinstance(receipt, Mapping) and receipt.get("rows_written") is not None:
            rows_written = int(receipt["rows_written"])

        ctx.log(node_id=node.id, level="info", message="output written", connector=name, rows_written=rows_written)
        return build_result(node, data, rows_processed=rows_written)
