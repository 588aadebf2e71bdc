# src/joinflow/core/exceptions.py
"""
JoinFlow: Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do JoinFlow.

Taxonomia:
- ConfigurationError: grafo cíclico, nó/aresta inválidos, config obrigatória
  ausente. Fatal: aborta antes de qualquer nó executar.
- ExecutionError: falha na lógica de um nó ou no conector. Registrada no
  resultado do nó, não fatal para a run.
- NodeTimeoutError: nó excedeu seu deadline (subtipo de ExecutionError).
- ValidationError: um passo de JoinPlan não possui relação viável; o plano
  é excluído, os demais continuam.
- CancellationError: run interrompida pelo chamador.

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Mensagens são curtas e humanas; nenhum stack trace em payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class JoinflowException(Exception):
    """Base class para exceções internas do JoinFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    decision_required: bool = False

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuração (fatal)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ConfigurationError(JoinflowException):
    """Configuração de pipeline inválida; nenhuma RunResult é produzida."""


@dataclass(eq=False)
class CycleDetectedError(ConfigurationError):
    """O grafo de nós contém um ciclo."""


@dataclass(eq=False)
class UnknownNodeError(ConfigurationError):
    """Uma aresta referencia um nó inexistente."""


@dataclass(eq=False)
class DuplicateNodeIdError(ConfigurationError):
    """Dois nós declaram o mesmo id."""


@dataclass(eq=False)
class InvalidNodeConfigError(ConfigurationError):
    """Config obrigatória ausente ou com valor fora do domínio permitido."""


@dataclass(eq=False)
class UnknownExecutorError(ConfigurationError):
    """Nenhum executor registrado para o tipo do nó."""


@dataclass(eq=False)
class UnknownConnectorError(ConfigurationError):
    """O nó referencia um conector não registrado."""


# ---------------------------------------------------------------------------
# Execução (registrada por nó)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ExecutionError(JoinflowException):
    """Falha de lógica de um nó (inputs insuficientes, transformação inválida)."""


@dataclass(eq=False)
class NodeTimeoutError(ExecutionError):
    """Nó excedeu o deadline configurado."""


@dataclass(eq=False)
class ConnectorError(ExecutionError):
    """Falha do conector externo durante fetch/write."""


# ---------------------------------------------------------------------------
# Planejamento / Run
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ValidationError(JoinflowException):
    """Passo de JoinPlan sem relação que conecte o dataset ao acumulador."""


@dataclass(eq=False)
class CancellationError(JoinflowException):
    """Run interrompida pelo chamador."""
