# src/joinflow/nodes/merge.py
"""Executor de nó `merge` (v1).

Join N-way por left-fold binário sobre os Datasets recebidos.

Modos:
  - join_key: todos os inputs são unidos pela mesma coluna, na ordem das
    arestas de entrada
  - join_plan: cada passo de um JoinPlan (ou do seu `to_dict()`) une o
    acumulador ao próximo dataset pela coluna da relação escolhida; os
    predecessores são mapeados para dataset ids por `dataset_ids`
    (`{node_id: dataset_id}`, default: o próprio node id)

Config esperada (exemplo):
    {"join_key": "customer_id", "join_type": "left"}

Regras (v1):
  - exige ao menos 2 inputs (falha do nó, não da run)
  - `join_type` ∈ {inner, left, outer}; default em
    `join_planner.default_join_type` da config efetiva
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, NamedTuple

from joinflow.analysis.types import JoinPlan, JoinType
from joinflow.core.config import config_section
from joinflow.core.exceptions import ExecutionError
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.types import ExecutionResult, NodeType, PipelineNode
from joinflow.core.records import Dataset

from .base import build_result, invalid_config, require_choice
from .joins import join_records


JOIN_TYPES = tuple(t.value for t in JoinType)


class _PlannedJoin(NamedTuple):
    left_dataset_id: str
    right_dataset_id: str
    left_column: str
    right_column: str
    join_type: str


def _planned_joins(plan: Any) -> List[_PlannedJoin]:
    if isinstance(plan, JoinPlan):
        return [
            _PlannedJoin(s.left_dataset_id, s.right_dataset_id, s.left_column, s.right_column, s.join_type.value)
            for s in plan.steps
        ]
    steps = plan.get("steps") or []
    return [
        _PlannedJoin(
            str(s["left_dataset_id"]),
            str(s["right_dataset_id"]),
            str(s["left_column"]),
            str(s["right_column"]),
            str(s.get("join_type") or JoinType.INNER.value),
        )
        for s in steps
    ]


def _plan_is_valid(plan: Any) -> bool:
    if isinstance(plan, JoinPlan):
        return plan.is_valid
    return bool(plan.get("is_valid", True))


@dataclass
class MergeNodeExecutor:
    node_type: NodeType = NodeType.MERGE

    def validate(self, node: PipelineNode) -> None:
        cfg = node.config
        join_key = cfg.get("join_key")
        join_plan = cfg.get("join_plan")

        if join_plan is None:
            if not isinstance(join_key, str) or not join_key.strip():
                raise invalid_config(node, "config 'join_key' or 'join_plan' is required", key="join_key")
        else:
            if not isinstance(join_plan, (JoinPlan, Mapping)):
                raise invalid_config(node, "config 'join_plan' must be a JoinPlan", key="join_plan")
            if not _plan_is_valid(join_plan):
                raise invalid_config(node, "config 'join_plan' is not a valid plan", key="join_plan")
            try:
                steps = _planned_joins(join_plan)
            except KeyError as exc:
                raise invalid_config(node, f"join plan step is missing {exc}", key="join_plan")
            for step in steps:
                require_choice(node, "join_plan.join_type", step.join_type, JOIN_TYPES)

        if cfg.get("join_type") is not None:
            require_choice(node, "join_type", cfg["join_type"], JOIN_TYPES)

    def _default_join_type(self, ctx: RunContext) -> str:
        return str(config_section(ctx.config, "join_planner").get("default_join_type") or JoinType.INNER.value)

    def _merge_by_key(self, node: PipelineNode, datasets: List[Dataset], join_type: str) -> Dataset:
        key = node.config["join_key"]
        acc = datasets[0]
        for right in datasets[1:]:
            acc = join_records(acc, right, key, key, JoinType(join_type))
        return acc

    def _merge_by_plan(self, node: PipelineNode, inputs: Dict[str, Dataset]) -> Dataset:
        dataset_ids = node.config.get("dataset_ids") or {}
        by_dataset: Dict[str, Dataset] = {
            str(dataset_ids.get(node_id, node_id)): data for node_id, data in inputs.items()
        }

        steps = _planned_joins(node.config["join_plan"])
        if not steps:
            raise ExecutionError(
                message="Join plan has no steps",
                details={"node_id": node.id},
            )

        first = steps[0].left_dataset_id
        if first not in by_dataset:
            raise ExecutionError(
                message=f"Join plan references dataset '{first}' with no matching input",
                details={"node_id": node.id, "dataset_id": first, "inputs": list(by_dataset)},
                hint="Mapeie os predecessores para dataset ids via config 'dataset_ids'",
            )

        acc = by_dataset[first]
        for step in steps:
            if step.right_dataset_id not in by_dataset:
                raise ExecutionError(
                    message=f"Join plan references dataset '{step.right_dataset_id}' with no matching input",
                    details={"node_id": node.id, "dataset_id": step.right_dataset_id, "inputs": list(by_dataset)},
                    hint="Mapeie os predecessores para dataset ids via config 'dataset_ids'",
                )
            acc = join_records(
                acc,
                by_dataset[step.right_dataset_id],
                step.left_column,
                step.right_column,
                JoinType(step.join_type),
            )
        return acc

    def execute(self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext) -> ExecutionResult:
        if len(inputs) < 2:
            raise ExecutionError(
                message="Merge requires at least 2 input datasets",
                details={"node_id": node.id, "inputs": len(inputs)},
                hint="Conecte ao menos duas arestas de entrada ao nó merge",
            )

        if node.config.get("join_plan") is not None:
            merged = self._merge_by_plan(node, inputs)
            mode = "join_plan"
        else:
            join_type = node.config.get("join_type") or self._default_join_type(ctx)
            merged = self._merge_by_key(node, list(inputs.values()), join_type)
            mode = "join_key"

        ctx.log(
            node_id=node.id,
            level="info",
            message="datasets merged",
            mode=mode,
            inputs={k: len(v) for k, v in inputs.items()},
            rows_out=len(merged),
        )
        return build_result(node, merged)
