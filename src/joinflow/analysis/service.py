# src/joinflow/analysis/service.py
"""
Ponto de entrada da análise de relacionamentos.

`analyze_relationships` executa, em uma passada:
    perfil de cada dataset → pontuação de pares de colunas → planos de join

Os planos são construídos a partir das relações sugeridas
(confidence > suggested_threshold). Planos inválidos são devolvidos à
parte, com seus erros de validação, para que o chamador decida.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from joinflow.core.config import config_section, load_config
from joinflow.core.pipeline.context import RunContext

from .join_planner import generate_join_plans, rank_join_plans
from .profiler import profile_dataset
from .scorer import DEFAULT_THRESHOLDS, score_relationships
from .types import AnalysisResult


def analyze_relationships(
    datasets: Mapping[str, Sequence[Mapping[str, Any]]],
    *,
    config: Optional[Dict[str, Any]] = None,
    ctx: Optional[RunContext] = None,
) -> AnalysisResult:
    """
    Analisa Datasets nomeados e devolve perfis, relações e planos de join.

    Args:
        datasets: `{dataset_id: records}`; a ordem de inserção é a ordem de entrada.
        config: Configuração efetiva; quando omitida, usa os defaults do pacote.
        ctx: Contexto opcional para logs estruturados (node_id "analysis").
    """
    if config is None:
        config = load_config()

    profiles = [profile_dataset(dataset_id, records, config=config) for dataset_id, records in datasets.items()]
    if ctx is not None:
        ctx.log(
            node_id="analysis",
            level="info",
            message="datasets profiled",
            datasets={p.dataset_id: p.record_count for p in profiles},
        )

    candidates = score_relationships(profiles, config=config, ctx=ctx)

    suggested = float(
        config_section(config, "analysis").get("suggested_threshold", DEFAULT_THRESHOLDS["suggested_threshold"])
    )
    relationships = [c for c in candidates if c.confidence > suggested]

    plans = generate_join_plans(profiles, relationships, config=config, ctx=ctx)
    valid = rank_join_plans(plans, config=config)

    return AnalysisResult(
        profiles=profiles,
        candidates=candidates,
        relationships=relationships,
        join_plans=valid,
        invalid_plans=[p for p in plans if not p.is_valid],
    )
