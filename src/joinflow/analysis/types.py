# src/joinflow/analysis/types.py
"""
Tipos canônicos da descoberta de relacionamentos e do planejamento de joins.

Componentes principais:
    - ColumnProfile / DatasetProfile → perfil por coluna derivado de um Dataset
    - RelationshipCandidate          → hipótese pontuada de que duas colunas são "joináveis"
    - JoinStep / JoinPlan            → sequência ordenada de joins binários por estratégia
    - AnalysisResult                 → agregado devolvido por `analyze_relationships`

Invariantes:
    - Todos os tipos são imutáveis (frozen) e serializáveis via `to_dict()`
    - `distinct_count <= record_count`
    - `confidence` ∈ [0, 1]
    - Um JoinPlan válido possui `len(steps) == número de datasets - 1`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from joinflow.core.errors import ErrorPayload
from joinflow.core.records import ColumnType
from joinflow.core.serialization import jsonable


class Cardinality(str, Enum):
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


class MatchType(str, Enum):
    EXACT = "exact"
    SIMILAR = "similar"
    COMPATIBLE = "compatible"


class JoinType(str, Enum):
    INNER = "inner"
    LEFT = "left"
    OUTER = "outer"


class JoinStrategy(str, Enum):
    LEFT_HEAVY = "left_heavy"
    RELATIONSHIP_OPTIMAL = "relationship_optimal"
    BALANCED = "balanced"
    MINIMAL_JOINS = "minimal_joins"


class Performance(str, Enum):
    FAST = "fast"
    MODERATE = "moderate"
    SLOW = "slow"


# ---------------------------------------------------------------------------
# Perfis
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnProfile:
    name: str
    inferred_type: ColumnType
    nullable: bool
    distinct_count: int
    sample_values: Tuple[Any, ...] = ()
    is_id_column: bool = False
    is_foreign_key: bool = False
    null_count: int = 0
    is_unique: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "inferred_type": self.inferred_type.value,
            "nullable": self.nullable,
            "distinct_count": self.distinct_count,
            "sample_values": jsonable(list(self.sample_values)),
            "is_id_column": self.is_id_column,
            "is_foreign_key": self.is_foreign_key,
            "null_count": self.null_count,
            "is_unique": self.is_unique,
        }


@dataclass(frozen=True)
class DatasetProfile:
    dataset_id: str
    record_count: int
    columns: Tuple[ColumnProfile, ...] = ()

    def column(self, name: str) -> ColumnProfile:
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset_id": self.dataset_id,
            "record_count": self.record_count,
            "columns": [c.to_dict() for c in self.columns],
        }


# ---------------------------------------------------------------------------
# Relacionamentos
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RelationshipCandidate:
    """
    Hipótese pontuada de relacionamento entre duas colunas.

    Campos suplementares:
        - reasoning: justificativa legível ("exact column name match", ...)
        - source_samples / target_samples: amostras usadas na pontuação
        - is_suggested: confidence acima do threshold de sugestão
        - is_active: confidence acima do threshold de ativação automática
    """

    source_dataset_id: str
    target_dataset_id: str
    source_column: str
    target_column: str
    match_type: MatchType
    confidence: float
    inferred_cardinality: Cardinality
    reasoning: str = ""
    source_samples: Tuple[Any, ...] = ()
    target_samples: Tuple[Any, ...] = ()
    is_suggested: bool = False
    is_active: bool = False

    @property
    def id(self) -> str:
        return (
            f"rel_{self.source_dataset_id}_{self.target_dataset_id}"
            f"_{self.source_column}_{self.target_column}"
        )

    def involves(self, dataset_id: str) -> bool:
        return dataset_id in (self.source_dataset_id, self.target_dataset_id)

    def column_for(self, dataset_id: str) -> str:
        if dataset_id == self.source_dataset_id:
            return self.source_column
        if dataset_id == self.target_dataset_id:
            return self.target_column
        raise KeyError(dataset_id)

    def other(self, dataset_id: str) -> str:
        if dataset_id == self.source_dataset_id:
            return self.target_dataset_id
        if dataset_id == self.target_dataset_id:
            return self.source_dataset_id
        raise KeyError(dataset_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source_dataset_id": self.source_dataset_id,
            "target_dataset_id": self.target_dataset_id,
            "source_column": self.source_column,
            "target_column": self.target_column,
            "match_type": self.match_type.value,
            "confidence": self.confidence,
            "inferred_cardinality": self.inferred_cardinality.value,
            "reasoning": self.reasoning,
            "source_samples": jsonable(list(self.source_samples)),
            "target_samples": jsonable(list(self.target_samples)),
            "is_suggested": self.is_suggested,
            "is_active": self.is_active,
        }


# ---------------------------------------------------------------------------
# Planos de join
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JoinStep:
    """
    Um join binário do plano.

    `left_dataset_id` é o dataset do acumulador ligado pela relação
    escolhida; `right_dataset_id` é o dataset que entra no acumulador.
    """

    left_dataset_id: str
    right_dataset_id: str
    relationship: RelationshipCandidate
    join_type: JoinType
    estimated_rows: int
    is_intermediate: bool
    output_name: str

    @property
    def left_column(self) -> str:
        return self.relationship.column_for(self.left_dataset_id)

    @property
    def right_column(self) -> str:
        return self.relationship.column_for(self.right_dataset_id)

    @property
    def join_condition(self) -> str:
        return (
            f"{self.left_dataset_id}.{self.left_column} = "
            f"{self.right_dataset_id}.{self.right_column}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "left_dataset_id": self.left_dataset_id,
            "right_dataset_id": self.right_dataset_id,
            "left_column": self.left_column,
            "right_column": self.right_column,
            "join_condition": self.join_condition,
            "join_type": self.join_type.value,
            "estimated_rows": self.estimated_rows,
            "is_intermediate": self.is_intermediate,
            "output_name": self.output_name,
            "relationship": self.relationship.to_dict(),
        }


@dataclass(frozen=True)
class JoinPlan:
    strategy: JoinStrategy
    steps: Tuple[JoinStep, ...] = ()
    dataset_order: Tuple[str, ...] = ()
    complexity: float = 0.0
    estimated_rows: int = 0
    performance: Performance = Performance.FAST
    is_valid: bool = True
    validation_errors: Tuple[ErrorPayload, ...] = ()

    @property
    def id(self) -> str:
        return f"plan_{self.strategy.value}"

    @property
    def name(self) -> str:
        return f"{self.strategy.value.capitalize()} Join Plan"

    @property
    def description(self) -> str:
        if not self.steps:
            return f"{self.name}: no joins"
        return f"{self.name}: " + " -> ".join(s.join_condition for s in self.steps)

    @property
    def execution_order(self) -> Tuple[JoinStep, ...]:
        return self.steps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "strategy": self.strategy.value,
            "dataset_order": list(self.dataset_order),
            "steps": [s.to_dict() for s in self.steps],
            "complexity": self.complexity,
            "estimated_rows": self.estimated_rows,
            "performance": self.performance.value,
            "is_valid": self.is_valid,
            "validation_errors": [e.to_dict() for e in self.validation_errors],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Agregado de uma passada de análise.

        - profiles: um DatasetProfile por dataset, na ordem de entrada
        - candidates: candidatos "potenciais" (confidence > potential_threshold)
        - relationships: candidatos sugeridos (confidence > suggested_threshold)
        - join_plans: planos válidos, ranqueados
        - invalid_plans: planos descartados, com seus erros de validação
    """

    profiles: List[DatasetProfile] = field(default_factory=list)
    candidates: List[RelationshipCandidate] = field(default_factory=list)
    relationships: List[RelationshipCandidate] = field(default_factory=list)
    join_plans: List[JoinPlan] = field(default_factory=list)
    invalid_plans: List[JoinPlan] = field(default_factory=list)

    def best_plan(self) -> Optional[JoinPlan]:
        return self.join_plans[0] if self.join_plans else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profiles": [p.to_dict() for p in self.profiles],
            "candidates": [c.to_dict() for c in self.candidates],
            "relationships": [r.to_dict() for r in self.relationships],
            "join_plans": [p.to_dict() for p in self.join_plans],
            "invalid_plans": [p.to_dict() for p in self.invalid_plans],
        }
