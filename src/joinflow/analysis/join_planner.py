# src/joinflow/analysis/join_planner.py
"""
Planejador de joins multi-estratégia.

Para cada estratégia configurada:
    1. ordena os datasets
         - left_heavy: por tamanho decrescente
         - balanced: por tamanho + 1000 × número de relações do dataset
         - relationship_optimal / minimal_joins: ordem de entrada
    2. conecta gulosamente cada próximo dataset ao acumulador pela relação
       de maior confidence entre qualquer dataset já acumulado e o novo
    3. estima linhas por passo pela cardinalidade da relação
       (one_to_one → min; one_to_many/many_to_one → max;
        many_to_many → produto × 0.1)

Se nenhum candidato conecta um dataset ao acumulador, o plano é marcado
inválido com um erro de validação e o preenchimento para ali: nunca há
join "sobre nada". Planos inválidos ficam fora do conjunto de planos
válidos devolvido por `rank_join_plans`.

A complexidade (soma das confidences) é uma preferência heurística,
não um custo real; o critério de ranking é configurável
(`join_planner.rank_by`: complexity | estimated_rows).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from joinflow.core.config import config_section
from joinflow.core.errors import (
    JOIN_PLAN_VALIDATION_ERROR,
    ErrorPayload,
    join_plan_validation_error,
)
from joinflow.core.exceptions import ValidationError
from joinflow.core.pipeline.context import RunContext

from .types import (
    Cardinality,
    DatasetProfile,
    JoinPlan,
    JoinStep,
    JoinStrategy,
    JoinType,
    Performance,
    RelationshipCandidate,
)


DEFAULT_STRATEGIES = tuple(s.value for s in JoinStrategy)

DEFAULT_PERFORMANCE = {
    "fast_rows": 10000,
    "fast_complexity": 2,
    "moderate_rows": 100000,
    "moderate_complexity": 4,
}

MANY_TO_MANY_OVERLAP = 0.1


# -----------------------------
# Estimativas
# -----------------------------

def estimate_join_rows(left_rows: int, right_rows: int, cardinality: Cardinality) -> int:
    cardinality = Cardinality(cardinality)
    if cardinality == Cardinality.ONE_TO_ONE:
        return min(left_rows, right_rows)
    if cardinality in (Cardinality.ONE_TO_MANY, Cardinality.MANY_TO_ONE):
        return max(left_rows, right_rows)
    return int(round(left_rows * right_rows * MANY_TO_MANY_OVERLAP))


def classify_performance(
    estimated_rows: int,
    complexity: float,
    *,
    config: Optional[Dict[str, Any]] = None,
) -> Performance:
    limits = {**DEFAULT_PERFORMANCE, **config_section(config, "performance")}
    if estimated_rows < limits["fast_rows"] and complexity < limits["fast_complexity"]:
        return Performance.FAST
    if estimated_rows < limits["moderate_rows"] and complexity < limits["moderate_complexity"]:
        return Performance.MODERATE
    return Performance.SLOW


# -----------------------------
# Ordenação por estratégia
# -----------------------------

def _relationship_count(dataset_id: str, relationships: Sequence[RelationshipCandidate]) -> int:
    return sum(1 for r in relationships if r.involves(dataset_id))


def order_datasets(
    strategy: JoinStrategy,
    profiles: Sequence[DatasetProfile],
    relationships: Sequence[RelationshipCandidate],
) -> List[DatasetProfile]:
    strategy = JoinStrategy(strategy)
    if strategy == JoinStrategy.LEFT_HEAVY:
        return sorted(profiles, key=lambda p: p.record_count, reverse=True)
    if strategy == JoinStrategy.BALANCED:
        return sorted(
            profiles,
            key=lambda p: p.record_count + _relationship_count(p.dataset_id, relationships) * 1000,
            reverse=True,
        )
    return list(profiles)


def find_best_relationship(
    accumulator: Sequence[str],
    dataset_id: str,
    relationships: Sequence[RelationshipCandidate],
) -> Optional[Tuple[str, RelationshipCandidate]]:
    """Relação de maior confidence entre o acumulador e o dataset (empate: primeira)."""
    best: Optional[Tuple[str, RelationshipCandidate]] = None
    for rel in relationships:
        if not rel.involves(dataset_id):
            continue
        other = rel.other(dataset_id)
        if other == dataset_id or other not in accumulator:
            continue
        if best is None or rel.confidence > best[1].confidence:
            best = (other, rel)
    return best


# -----------------------------
# Planos
# -----------------------------

def _connect(
    accumulator: Sequence[str],
    dataset_id: str,
    relationships: Sequence[RelationshipCandidate],
) -> Tuple[str, RelationshipCandidate]:
    found = find_best_relationship(accumulator, dataset_id, relationships)
    if found is None:
        raise ValidationError(
            message=f"No relationship connects '{dataset_id}' to {list(accumulator)}",
            details={"dataset_id": dataset_id, "accumulator": list(accumulator)},
        )
    return found


def _too_few_datasets(strategy: JoinStrategy, count: int) -> ErrorPayload:
    return ErrorPayload(
        type=JOIN_PLAN_VALIDATION_ERROR,
        message="At least two datasets are required to build a join plan",
        details={"strategy": strategy.value, "datasets": count},
        hint="Inclua ao menos dois datasets na análise",
        decision_required=False,
    )


def build_join_plan(
    strategy: JoinStrategy,
    profiles: Sequence[DatasetProfile],
    relationships: Sequence[RelationshipCandidate],
    *,
    join_type: Optional[JoinType] = None,
    config: Optional[Dict[str, Any]] = None,
) -> JoinPlan:
    strategy = JoinStrategy(strategy)
    if join_type is None:
        join_type = config_section(config, "join_planner").get("default_join_type") or JoinType.INNER
    join_type = JoinType(join_type)

    ordered = order_datasets(strategy, profiles, relationships)
    dataset_order = tuple(p.dataset_id for p in ordered)

    if len(ordered) < 2:
        rows = ordered[0].record_count if ordered else 0
        return JoinPlan(
            strategy=strategy,
            dataset_order=dataset_order,
            estimated_rows=rows,
            performance=classify_performance(rows, 0.0, config=config),
            is_valid=False,
            validation_errors=(_too_few_datasets(strategy, len(ordered)),),
        )

    accumulator: List[str] = [ordered[0].dataset_id]
    estimated_rows = ordered[0].record_count
    complexity = 0.0
    steps: List[JoinStep] = []
    errors: List[ErrorPayload] = []

    for position, profile in enumerate(ordered[1:], start=1):
        try:
            left_id, rel = _connect(accumulator, profile.dataset_id, relationships)
        except ValidationError:
            errors.append(
                join_plan_validation_error(
                    strategy=strategy.value,
                    dataset_id=profile.dataset_id,
                    accumulator=list(accumulator),
                )
            )
            break

        estimated_rows = estimate_join_rows(estimated_rows, profile.record_count, rel.inferred_cardinality)
        is_intermediate = position < len(ordered) - 1
        steps.append(
            JoinStep(
                left_dataset_id=left_id,
                right_dataset_id=profile.dataset_id,
                relationship=rel,
                join_type=join_type,
                estimated_rows=estimated_rows,
                is_intermediate=is_intermediate,
                output_name=f"intermediate_{position}" if is_intermediate else "final",
            )
        )
        complexity += rel.confidence
        accumulator.append(profile.dataset_id)

    complexity = round(complexity, 6)
    return JoinPlan(
        strategy=strategy,
        steps=tuple(steps),
        dataset_order=dataset_order,
        complexity=complexity,
        estimated_rows=estimated_rows,
        performance=classify_performance(estimated_rows, complexity, config=config),
        is_valid=not errors,
        validation_errors=tuple(errors),
    )


def generate_join_plans(
    profiles: Sequence[DatasetProfile],
    relationships: Sequence[RelationshipCandidate],
    *,
    config: Optional[Dict[str, Any]] = None,
    ctx: Optional[RunContext] = None,
) -> List[JoinPlan]:
    """Um plano por estratégia configurada (válidos e inválidos), na ordem das estratégias."""
    strategies = config_section(config, "join_planner").get("strategies") or DEFAULT_STRATEGIES
    plans = [build_join_plan(s, profiles, relationships, config=config) for s in strategies]

    if ctx is not None:
        for plan in plans:
            ctx.log(
                node_id="analysis",
                level="info" if plan.is_valid else "warning",
                message="join plan built" if plan.is_valid else "join plan invalid",
                strategy=plan.strategy.value,
                steps=len(plan.steps),
                complexity=plan.complexity,
                estimated_rows=plan.estimated_rows,
            )
            if not plan.is_valid:
                for error in plan.validation_errors:
                    ctx.add_warning(node_id="analysis", message=error.message)
    return plans


def rank_join_plans(
    plans: Sequence[JoinPlan],
    *,
    config: Optional[Dict[str, Any]] = None,
) -> List[JoinPlan]:
    """Apenas planos válidos, ordenados pelo critério configurado (estável)."""
    rank_by = config_section(config, "join_planner").get("rank_by") or "complexity"
    valid = [p for p in plans if p.is_valid]
    if rank_by == "estimated_rows":
        return sorted(valid, key=lambda p: p.estimated_rows)
    return sorted(valid, key=lambda p: p.complexity)
