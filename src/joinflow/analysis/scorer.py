# src/joinflow/analysis/scorer.py
"""
Pontuação de relacionamentos entre colunas de Datasets distintos.

Para cada par ordenado de datasets (i < j) e cada par de colunas, a
confidence é a soma (limitada a 1.0) de:

    - compatibilidade de tipo: idênticos 0.3; pares compatíveis 0.2
      ({integer, float}, {string, text}, {date, datetime}); demais 0
    - similaridade de nome × 0.4: exato 1.0; contido 0.8; igual sem
      underscores 0.7; senão razão entre o menor e o maior comprimento
    - +0.3 se alguma das colunas for coluna de id
    - +0.2 se alguma das colunas for foreign key
    - sobreposição (Jaccard) das amostras × 0.1

A cardinalidade é inferida da unicidade das colunas nos dois lados.
Resultados são ordenados por confidence decrescente (ordenação estável);
pares espelhados não são deduplicados.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from joinflow.core.config import config_section
from joinflow.core.pipeline.context import RunContext

from .types import (
    Cardinality,
    ColumnProfile,
    DatasetProfile,
    MatchType,
    RelationshipCandidate,
)


TYPE_WEIGHT_IDENTICAL = 0.3
TYPE_WEIGHT_COMPATIBLE = 0.2
NAME_WEIGHT = 0.4
ID_BONUS = 0.3
FOREIGN_KEY_BONUS = 0.2
OVERLAP_WEIGHT = 0.1

COMPATIBLE_TYPES = (
    frozenset({"integer", "float"}),
    frozenset({"string", "text"}),
    frozenset({"date", "datetime"}),
)

DEFAULT_THRESHOLDS = {
    "potential_threshold": 0.3,
    "suggested_threshold": 0.6,
    "auto_activate_threshold": 0.8,
}


def _type_name(value: Any) -> str:
    return getattr(value, "value", value)


def type_compatibility(type_a: Any, type_b: Any) -> float:
    a, b = _type_name(type_a), _type_name(type_b)
    if a == b:
        return TYPE_WEIGHT_IDENTICAL
    if frozenset({a, b}) in COMPATIBLE_TYPES:
        return TYPE_WEIGHT_COMPATIBLE
    return 0.0


def name_similarity(name_a: str, name_b: str) -> float:
    a, b = name_a.lower(), name_b.lower()
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.8
    if a.replace("_", "") == b.replace("_", ""):
        return 0.7
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return min(len(a), len(b)) / longest


def value_overlap(values_a: Iterable[Any], values_b: Iterable[Any]) -> float:
    set_a = {str(v) for v in values_a}
    set_b = {str(v) for v in values_b}
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def infer_cardinality(source: ColumnProfile, target: ColumnProfile) -> Cardinality:
    if source.is_unique and target.is_unique:
        return Cardinality.ONE_TO_ONE
    if source.is_unique:
        return Cardinality.ONE_TO_MANY
    if target.is_unique:
        return Cardinality.MANY_TO_ONE
    return Cardinality.MANY_TO_MANY


def _match_type(source: ColumnProfile, target: ColumnProfile, similarity: float) -> MatchType:
    if source.name.lower() == target.name.lower() and source.inferred_type == target.inferred_type:
        return MatchType.EXACT
    if similarity >= 0.7:
        return MatchType.SIMILAR
    return MatchType.COMPATIBLE


def _reasoning(
    source: ColumnProfile,
    target: ColumnProfile,
    match_type: MatchType,
    confidence: float,
    auto_activate: float,
) -> str:
    reasons: List[str] = []
    if match_type == MatchType.EXACT:
        reasons.append("exact column name match")
    if match_type == MatchType.SIMILAR:
        reasons.append("similar column names")
    if confidence > auto_activate:
        reasons.append("high confidence match")
    if source.is_id_column or target.is_id_column:
        reasons.append("ID column detected")
    return ", ".join(reasons) if reasons else "potential relationship based on column analysis"


def compare_columns(
    source_dataset_id: str,
    source: ColumnProfile,
    target_dataset_id: str,
    target: ColumnProfile,
    *,
    config: Optional[Dict[str, Any]] = None,
) -> RelationshipCandidate:
    thresholds = {**DEFAULT_THRESHOLDS, **config_section(config, "analysis")}
    similarity = name_similarity(source.name, target.name)

    confidence = type_compatibility(source.inferred_type, target.inferred_type)
    confidence += similarity * NAME_WEIGHT
    if source.is_id_column or target.is_id_column:
        confidence += ID_BONUS
    if source.is_foreign_key or target.is_foreign_key:
        confidence += FOREIGN_KEY_BONUS
    confidence += value_overlap(source.sample_values, target.sample_values) * OVERLAP_WEIGHT
    confidence = round(max(0.0, min(confidence, 1.0)), 6)

    match_type = _match_type(source, target, similarity)
    auto_activate = float(thresholds["auto_activate_threshold"])

    return RelationshipCandidate(
        source_dataset_id=source_dataset_id,
        target_dataset_id=target_dataset_id,
        source_column=source.name,
        target_column=target.name,
        match_type=match_type,
        confidence=confidence,
        inferred_cardinality=infer_cardinality(source, target),
        reasoning=_reasoning(source, target, match_type, confidence, auto_activate),
        source_samples=tuple(source.sample_values),
        target_samples=tuple(target.sample_values),
        is_suggested=confidence > float(thresholds["suggested_threshold"]),
        is_active=confidence > auto_activate,
    )


def score_relationships(
    profiles: Sequence[DatasetProfile],
    *,
    config: Optional[Dict[str, Any]] = None,
    ctx: Optional[RunContext] = None,
) -> List[RelationshipCandidate]:
    """Candidatos com confidence > potential_threshold, em ordem decrescente."""
    threshold = float(
        config_section(config, "analysis").get("potential_threshold", DEFAULT_THRESHOLDS["potential_threshold"])
    )

    candidates: List[RelationshipCandidate] = []
    for i, source in enumerate(profiles):
        for target in profiles[i + 1:]:
            for source_col in source.columns:
                for target_col in target.columns:
                    candidate = compare_columns(
                        source.dataset_id, source_col, target.dataset_id, target_col, config=config
                    )
                    if candidate.confidence > threshold:
                        candidates.append(candidate)

    candidates.sort(key=lambda c: c.confidence, reverse=True)

    if ctx is not None:
        ctx.log(
            node_id="analysis",
            level="info",
            message="relationships scored",
            datasets=len(profiles),
            candidates=len(candidates),
            threshold=threshold,
        )
    return candidates
