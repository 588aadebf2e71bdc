# src/joinflow/nodes/transform.py
"""Executor de nó `transform` (v1).

Aplica, nesta ordem:
  1. filtros por campo (linha mantida sse todos os predicados forem verdadeiros)
  2. mapeamentos de campo (`source_field` → `target_field`, com transformação
     escalar opcional)
  3. uma única ordenação estável por campo

Config esperada (exemplo):
    {
        "filters": [{"field": "age", "operator": "greater_than", "value": 25}],
        "mappings": [
            {"source_field": "name", "target_field": "name_upper", "transform": "uppercase"}
        ],
        "sort_by": {"field": "age", "direction": "desc"}
    }

Regras (v1):
  - campo ausente ou NaN é lido como nulo
  - comparações entre valores incomparáveis (ou nulos) são falsas
  - `contains` é case-insensitive sobre a representação textual
  - transformações de texto preservam nulos; `round` arredonda metade
    para longe de zero
  - ordenação: nulos por último em ambas as direções; tipos mistos
    ordenados como números < datas < strings < demais

Limites explícitos (v1):
  - NÃO agrega nem agrupa
  - NÃO converte tipos
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Tuple

from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.types import ExecutionResult, NodeType, PipelineNode
from joinflow.core.records import Dataset, Record, get_value

from .base import build_result, concat_inputs, invalid_config, require_choice


FILTER_OPERATORS = ("equals", "not_equals", "greater_than", "less_than", "contains")
MAPPING_TRANSFORMS = ("uppercase", "lowercase", "trim", "round")
SORT_DIRECTIONS = ("asc", "desc")


# -----------------------------
# Helpers: filtros
# -----------------------------

def _safe_compare(op: Callable[[Any, Any], bool], left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    try:
        return bool(op(left, right))
    except TypeError:
        return False


def _contains(value: Any, needle: Any) -> bool:
    if value is None or needle is None:
        return False
    return str(needle).lower() in str(value).lower()


def matches_filter(record: Mapping[str, Any], flt: Mapping[str, Any]) -> bool:
    value = get_value(record, flt["field"])
    expected = flt.get("value")
    operator = flt["operator"]

    if operator == "equals":
        return value == expected
    if operator == "not_equals":
        return value != expected
    if operator == "greater_than":
        return _safe_compare(lambda a, b: a > b, value, expected)
    if operator == "less_than":
        return _safe_compare(lambda a, b: a < b, value, expected)
    if operator == "contains":
        return _contains(value, expected)
    raise ValueError(f"Unsupported filter operator: {operator}")


# -----------------------------
# Helpers: mapeamentos
# -----------------------------

def _round_half_away(value: Any, decimals: int) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, int) and decimals <= 0:
        return value
    try:
        quantum = Decimal(1).scaleb(-decimals)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return value
    return int(rounded) if decimals <= 0 else float(rounded)


def apply_transform(value: Any, transform: Any, *, decimals: int = 0) -> Any:
    if value is None or transform is None:
        return value
    if transform == "round":
        return _round_half_away(value, decimals)
    if not isinstance(value, str):
        return value
    if transform == "uppercase":
        return value.upper()
    if transform == "lowercase":
        return value.lower()
    if transform == "trim":
        return value.strip()
    raise ValueError(f"Unsupported mapping transform: {transform}")


def apply_mappings(record: Record, mappings: List[Mapping[str, Any]]) -> Record:
    out = dict(record)
    for mapping in mappings:
        value = get_value(out, mapping["source_field"])
        out[mapping["target_field"]] = apply_transform(
            value,
            mapping.get("transform"),
            decimals=int(mapping.get("decimals", 0) or 0),
        )
    return out


# -----------------------------
# Helpers: ordenação
# -----------------------------

def _sort_key(value: Any) -> Tuple[int, Any]:
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, datetime):
        return (1, value.replace(tzinfo=None))
    if isinstance(value, date):
        return (1, datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        return (2, value)
    return (3, str(value))


def sort_records(records: Dataset, field: str, direction: str = "asc") -> Dataset:
    """Ordenação estável; nulos sempre por último."""
    present = [r for r in records if get_value(r, field) is not None]
    missing = [r for r in records if get_value(r, field) is None]
    present.sort(key=lambda r: _sort_key(get_value(r, field)), reverse=(direction == "desc"))
    return present + missing


# -----------------------------
# Executor
# -----------------------------

@dataclass
class TransformNodeExecutor:
    node_type: NodeType = NodeType.TRANSFORM

    def validate(self, node: PipelineNode) -> None:
        cfg = node.config

        filters = cfg.get("filters") or []
        if not isinstance(filters, list):
            raise invalid_config(node, "config 'filters' must be a list", key="filters")
        for flt in filters:
            if not isinstance(flt, Mapping) or not isinstance(flt.get("field"), str):
                raise invalid_config(node, "each filter requires a 'field'", key="filters")
            require_choice(node, "filters.operator", flt.get("operator"), FILTER_OPERATORS)

        mappings = cfg.get("mappings") or []
        if not isinstance(mappings, list):
            raise invalid_config(node, "config 'mappings' must be a list", key="mappings")
        for mapping in mappings:
            if not isinstance(mapping, Mapping):
                raise invalid_config(node, "each mapping must be a mapping", key="mappings")
            for key in ("source_field", "target_field"):
                if not isinstance(mapping.get(key), str) or not mapping[key]:
                    raise invalid_config(node, f"each mapping requires '{key}'", key="mappings")
            if mapping.get("transform") is not None:
                require_choice(node, "mappings.transform", mapping["transform"], MAPPING_TRANSFORMS)

        sort_by = cfg.get("sort_by")
        if sort_by is not None:
            if not isinstance(sort_by, Mapping) or not isinstance(sort_by.get("field"), str):
                raise invalid_config(node, "config 'sort_by' requires a 'field'", key="sort_by")
            require_choice(node, "sort_by.direction", sort_by.get("direction", "asc"), SORT_DIRECTIONS)

    def execute(self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext) -> ExecutionResult:
        cfg = node.config
        records = concat_inputs(inputs)
        rows_in = len(records)

        filters = cfg.get("filters") or []
        if filters:
            records = [r for r in records if all(matches_filter(r, f) for f in filters)]

        mappings = cfg.get("mappings") or []
        if mappings:
            records = [apply_mappings(r, mappings) for r in records]

        sort_by = cfg.get("sort_by")
        if sort_by:
            records = sort_records(records, sort_by["field"], sort_by.get("direction", "asc"))

        ctx.log(
            node_id=node.id,
            level="info",
            message="transform applied",
            rows_in=rows_in,
            rows_out=len(records),
            filters=len(filters),
            mappings=len(mappings),
        )
        return build_result(node, records)
