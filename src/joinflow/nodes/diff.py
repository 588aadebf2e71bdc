# src/joinflow/nodes/diff.py
"""Executor de nó `diff` (v1).

Compara exatamente dois Datasets pela coluna `compare_key`.

Entradas do resultado (uma por chave com diferença):
  - deleted: chave presente apenas no dataset 1
  - added: chave presente apenas no dataset 2
  - modified: chave em ambos com ao menos um campo não-chave diferente,
    com os pares old/new por campo em `field_changes`

Regras (v1):
  - cada lado é indexado pela primeira linha de cada chave; chaves nulas
    são ignoradas
  - ordem das entradas: chaves do dataset 1, depois chaves só do dataset 2
  - campos comparados: união dos campos dos dois registros (ausente = nulo)
  - nenhuma diferença é sucesso com warning, não erro
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from joinflow.core.exceptions import ExecutionError
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.types import ExecutionResult, NodeType, PipelineNode
from joinflow.core.records import Dataset, Record, get_value

from .base import build_result, require_str
from .joins import index_by_key


DIFF_SCHEMA: Dict[str, str] = {
    "type": "string",
    "key": "unknown",
    "old_record": "record",
    "new_record": "record",
    "field_changes": "list",
}

NO_DIFFERENCES = "No differences found"


def _field_union(old: Mapping[str, Any], new: Mapping[str, Any]) -> List[str]:
    fields = list(old.keys())
    fields.extend(k for k in new.keys() if k not in old)
    return fields


def field_changes(old: Mapping[str, Any], new: Mapping[str, Any], compare_key: str) -> List[Dict[str, Any]]:
    changes: List[Dict[str, Any]] = []
    for name in _field_union(old, new):
        if name == compare_key:
            continue
        old_value = get_value(old, name)
        new_value = get_value(new, name)
        if old_value != new_value:
            changes.append({"field": name, "old_value": old_value, "new_value": new_value})
    return changes


def _entry(kind: str, key: Any, old: Optional[Record], new: Optional[Record], changes: List[Dict[str, Any]]) -> Record:
    return {
        "type": kind,
        "key": key,
        "old_record": dict(old) if old is not None else None,
        "new_record": dict(new) if new is not None else None,
        "field_changes": changes,
    }


def diff_datasets(first: Dataset, second: Dataset, compare_key: str) -> Dataset:
    old_index = index_by_key(first, compare_key)
    new_index = index_by_key(second, compare_key)
    entries: Dataset = []

    for key, old in old_index.items():
        new = new_index.get(key)
        if new is None:
            entries.append(_entry("deleted", key, old, None, []))
            continue
        changes = field_changes(old, new, compare_key)
        if changes:
            entries.append(_entry("modified", key, old, new, changes))

    for key, new in new_index.items():
        if key not in old_index:
            entries.append(_entry("added", key, None, new, []))

    return entries


@dataclass
class DiffNodeExecutor:
    node_type: NodeType = NodeType.DIFF

    def validate(self, node: PipelineNode) -> None:
        require_str(node, "compare_key")

    def execute(self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext) -> ExecutionResult:
        if len(inputs) != 2:
            raise ExecutionError(
                message="Diff requires exactly 2 input datasets",
                details={"node_id": node.id, "inputs": len(inputs)},
                hint="Conecte exatamente duas arestas de entrada ao nó diff",
            )

        first, second = list(inputs.values())
        entries = diff_datasets(first, second, node.config["compare_key"])

        counts = {kind: sum(1 for e in entries if e["type"] == kind) for kind in ("added", "deleted", "modified")}
        ctx.log(node_id=node.id, level="info", message="datasets compared", **counts)

        warnings = [] if entries else [NO_DIFFERENCES]
        return build_result(node, entries, output_schema=dict(DIFF_SCHEMA), warnings=warnings)
