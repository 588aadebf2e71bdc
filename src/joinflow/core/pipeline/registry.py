# src/joinflow/core/pipeline/registry.py
"""
Registro de executores de nó.

O `ExecutorRegistry` associa cada `NodeType` ao executor responsável
por ele. O Engine consulta o registry antes da run para garantir que
todo nó do grafo possui um executor (falha fatal de configuração caso
contrário).

Invariantes:
    - No máximo um executor por NodeType
    - A ordem de registro é preservada

Limites explícitos:
    - Não executa nós
    - Não valida config de nós (responsabilidade do executor)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from joinflow.core.exceptions import ConfigurationError, UnknownExecutorError

from .executor import NodeExecutor
from .types import NodeType


@dataclass
class ExecutorRegistry:
    """
    Registro canônico de executores por tipo de nó.

    Decisões arquiteturais:
        - Registro duplicado é erro de configuração (sem sobrescrita silenciosa)
        - Tipos sem executor são detectados antes da run
    """

    _executors: Dict[NodeType, NodeExecutor] = field(default_factory=dict, init=False, repr=False)
    _order: List[NodeType] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, executors: Iterable[NodeExecutor]) -> "ExecutorRegistry":
        registry = cls()
        for executor in executors:
            registry.add(executor)
        return registry

    def add(self, executor: NodeExecutor) -> None:
        node_type = getattr(executor, "node_type", None)
        if node_type is None:
            raise ConfigurationError(
                message="executor.node_type must be defined",
                details={"executor": executor.__class__.__name__},
            )
        node_type = NodeType(node_type)

        if node_type in self._executors:
            raise ConfigurationError(
                message=f"Duplicate executor for node type: {node_type.value}",
                details={"node_type": node_type.value},
            )

        self._executors[node_type] = executor
        self._order.append(node_type)

    def has(self, node_type: NodeType) -> bool:
        return NodeType(node_type) in self._executors

    def find(self, node_type: NodeType) -> Optional[NodeExecutor]:
        return self._executors.get(NodeType(node_type))

    def get(self, node_type: NodeType) -> NodeExecutor:
        executor = self.find(node_type)
        if executor is None:
            raise UnknownExecutorError(
                message=f"No executor registered for node type: {NodeType(node_type).value}",
                details={"node_type": NodeType(node_type).value},
                hint="Registre um executor para o tipo de nó antes da run",
            )
        return executor

    def list(self) -> List[NodeExecutor]:
        return [self._executors[t] for t in self._order]
