# src/joinflow/analysis/__init__.py
"""
Descoberta de relacionamentos e planejamento de joins.

    - profiler     → perfil de colunas por Dataset
    - scorer       → candidatos de relacionamento pontuados
    - join_planner → planos de join por estratégia
    - service      → `analyze_relationships` (passada completa)
"""

from .join_planner import (
    build_join_plan,
    classify_performance,
    estimate_join_rows,
    generate_join_plans,
    rank_join_plans,
)
from .profiler import profile_dataset
from .scorer import compare_columns, name_similarity, score_relationships, type_compatibility
from .service import analyze_relationships
from .types import (
    AnalysisResult,
    Cardinality,
    ColumnProfile,
    DatasetProfile,
    JoinPlan,
    JoinStep,
    JoinStrategy,
    JoinType,
    MatchType,
    Performance,
    RelationshipCandidate,
)

__all__ = [
    "build_join_plan",
    "classify_performance",
    "estimate_join_rows",
    "generate_join_plans",
    "rank_join_plans",
    "profile_dataset",
    "compare_columns",
    "name_similarity",
    "score_relationships",
    "type_compatibility",
    "analyze_relationships",
    "AnalysisResult",
    "Cardinality",
    "ColumnProfile",
    "DatasetProfile",
    "JoinPlan",
    "JoinStep",
    "JoinStrategy",
    "JoinType",
    "MatchType",
    "Performance",
    "RelationshipCandidate",
]
