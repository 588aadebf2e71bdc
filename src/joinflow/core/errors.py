# src/joinflow/core/errors.py
"""
JoinFlow: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do JoinFlow.
Erros de nó e de plano fazem parte do resultado agregado de uma run
ou de uma análise, e por isso devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Exceções levantadas dentro de um nó nunca chegam ao chamador: são
convertidas em `ErrorPayload` e anexadas ao `ExecutionResult` do nó.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do JoinFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica se a execução aguarda decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Engine / Configuração
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"

# Execução de nós
NODE_EXECUTION_ERROR = "NODE_EXECUTION_ERROR"
NODE_TIMEOUT = "NODE_TIMEOUT"
CONNECTOR_ERROR = "CONNECTOR_ERROR"

# Run
RUN_CANCELLED = "RUN_CANCELLED"

# Planejamento de joins
JOIN_PLAN_VALIDATION_ERROR = "JOIN_PLAN_VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def node_execution_error(
    *,
    node_id: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique a configuração do nó e os dados recebidos dos predecessores. Nenhum retry é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=NODE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do nó",
        details={
            "node_id": node_id,
            "exception_class": exc_type,
        },
        hint=hint,
        decision_required=False,
    )


def node_timeout(
    *,
    node_id: str,
    timeout_seconds: float,
    hint: str = "Aumente engine.node_timeout_seconds (ou config.timeout_seconds do nó) ou investigue o conector.",
) -> ErrorPayload:
    return ErrorPayload(
        type=NODE_TIMEOUT,
        message=f"Node '{node_id}' exceeded its deadline of {timeout_seconds}s",
        details={
            "node_id": node_id,
            "timeout_seconds": timeout_seconds,
        },
        hint=hint,
        decision_required=False,
    )


def run_cancelled(
    *,
    run_id: str,
    completed_nodes: int,
    pending_nodes: List[str],
    hint: str = "A run foi interrompida pelo chamador; crie uma nova run para reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=RUN_CANCELLED,
        message="Run cancelled by caller",
        details={
            "run_id": run_id,
            "completed_nodes": completed_nodes,
            "pending_nodes": list(pending_nodes),
        },
        hint=hint,
        decision_required=False,
    )


def join_plan_validation_error(
    *,
    strategy: str,
    dataset_id: str,
    accumulator: List[str],
    hint: str = "Nenhuma relação conecta o dataset ao acumulador; declare uma chave de join explícita ou inclua um dataset intermediário.",
) -> ErrorPayload:
    return ErrorPayload(
        type=JOIN_PLAN_VALIDATION_ERROR,
        message=f"No relationship connects '{dataset_id}' to {accumulator}",
        details={
            "strategy": strategy,
            "dataset_id": dataset_id,
            "accumulator": list(accumulator),
        },
        hint=hint,
        decision_required=True,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise nós, arestas e configuração antes de reexecutar.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
        decision_required=False,
    )
