# src/joinflow/nodes/base.py
"""
Helpers compartilhados pelos executores de nó.

    - concat_inputs: concatenação dos Datasets recebidos (cópias novas)
    - build_result: ExecutionResult de sucesso com schema inferido
    - require_*: validação de config obrigatória (InvalidNodeConfigError)
"""

from __future__ import annotations

from typing import Any, Collection, Dict, Iterable, Mapping, Optional

from joinflow.core.exceptions import InvalidNodeConfigError
from joinflow.core.pipeline.types import ExecutionResult, NodeStatus, PipelineNode
from joinflow.core.records import Dataset, copy_dataset, infer_schema


def concat_inputs(inputs: Mapping[str, Dataset]) -> Dataset:
    return copy_dataset(inputs.values())


def build_result(
    node: PipelineNode,
    data: Dataset,
    *,
    rows_processed: Optional[int] = None,
    output_schema: Optional[Dict[str, Any]] = None,
    warnings: Iterable[str] = (),
) -> ExecutionResult:
    return ExecutionResult(
        node_id=node.id,
        node_type=node.type,
        status=NodeStatus.SUCCESS,
        data=data,
        rows_processed=len(data) if rows_processed is None else int(rows_processed),
        output_schema=output_schema if output_schema is not None else infer_schema(data),
        warnings=tuple(warnings),
    )


def invalid_config(node: PipelineNode, message: str, **details: Any) -> InvalidNodeConfigError:
    return InvalidNodeConfigError(
        message=f"Node '{node.id}' ({node.type.value}): {message}",
        details={"node_id": node.id, "node_type": node.type.value, **details},
        hint="Corrija a config do nó antes de executar a run",
    )


def require_str(node: PipelineNode, key: str) -> str:
    value = node.config.get(key)
    if not isinstance(value, str) or not value.strip():
        raise invalid_config(node, f"config '{key}' must be a non-empty string", key=key)
    return value


def require_choice(node: PipelineNode, key: str, value: Any, allowed: Collection[str]) -> str:
    if value not in allowed:
        raise invalid_config(
            node,
            f"config '{key}' must be one of {sorted(allowed)}, got {value!r}",
            key=key,
            allowed=sorted(allowed),
        )
    return value
