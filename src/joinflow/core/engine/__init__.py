# src/joinflow/core/engine/__init__.py
"""
Engine do JoinFlow.

Este pacote contém a implementação responsável por **planejar** e
**executar** pipelines, respeitando a configuração resolvida e as
políticas explícitas de falha, deadline e cancelamento.

Componentes principais:
    - planner → ordenação topológica determinística (Kahn FIFO) e validação estrutural
    - engine  → coordenação da execução nó a nó e agregação em RunResult

Invariantes:
    - Nós só executam após todos os seus predecessores reportarem success|error
    - Cada nó executa no máximo uma vez por run
    - A ordem de execução é determinística para o mesmo grafo

Limites explícitos:
    - Não define executores de nó
    - Não persiste resultados
    - Não executa ramos independentes em paralelo
"""

from .engine import CancellationToken, Engine, RunCallbacks, RunResult
from .planner import topological_order

__all__ = [
    "CancellationToken",
    "Engine",
    "RunCallbacks",
    "RunResult",
    "topological_order",
]
