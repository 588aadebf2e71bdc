# src/joinflow/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica que acompanha
uma run do pipeline (ou uma passada de análise de relacionamentos).

O RunContext atua como o único meio permitido de:
    - registro de logs estruturados de execução
    - coleta de warnings não fatais associados a nós
    - acompanhamento do status vivo de cada nó (idle → running → success|error)
    - registro dos metadados vivos de cada aresta (linhas, schema, atividade)

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Nós e grafos declarativos nunca são mutados: o estado vivo fica aqui
    - Ausência de estado global compartilhado

Invariantes:
    - Logs sempre incluem `run_id` e `node_id`
    - Warnings são agrupados por `node_id`
    - O contexto é mutável apenas durante a execução

Limites explícitos:
    - Não executa nós
    - Não planeja nem coordena execução
    - Não persiste dados automaticamente
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from .types import EdgeState, NodeStatus


@dataclass
class RunContext:
    """
    Contexto de execução de uma run do pipeline.

    Campos canônicos:
        - run_id: identificador único da execução
        - created_at: timestamp UTC de criação do contexto
        - config: configuração efetiva (defaults + overrides via deep-merge)
        - meta: metadados livres do chamador (ex.: projeto, pipeline)
        - events: log estruturado de eventos
        - warnings: warnings por node_id
        - node_status: status vivo por node_id
        - edge_state: metadados vivos por edge_id

    Decisões arquiteturais:
        - Escritas são protegidas por lock: executores podem rodar em
          threads de um pool (deadline por nó)
        - Eventos são dicionários simples, prontos para serialização
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    node_status: Dict[str, NodeStatus] = field(default_factory=dict, init=False)
    edge_state: Dict[str, EdgeState] = field(default_factory=dict, init=False)

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, node_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "node_id": node_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, node_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(node_id, []).append(message)

    def warnings_for(self, node_id: str) -> List[str]:
        with self._lock:
            return list(self.warnings.get(node_id, []))

    def events_for(self, node_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [e for e in self.events if e.get("node_id") == node_id]

    # -----------------------------
    # Estado vivo de nós e arestas
    # -----------------------------
    def set_status(self, node_id: str, status: NodeStatus) -> None:
        with self._lock:
            self.node_status[node_id] = status

    def status_of(self, node_id: str) -> NodeStatus:
        with self._lock:
            return self.node_status.get(node_id, NodeStatus.IDLE)

    def set_edge_state(self, state: EdgeState) -> None:
        with self._lock:
            self.edge_state[state.edge_id] = state
