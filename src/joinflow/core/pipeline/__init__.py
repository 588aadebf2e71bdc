# src/joinflow/core/pipeline/__init__.py
"""
# Pipeline Core (JoinFlow)

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
de um pipeline no JoinFlow.

Um pipeline é modelado como um **DAG explícito de nós**, onde:
- cada nó declara identidade, tipo e config específica do tipo
- arestas conectam nós e não carregam dados
- a execução é coordenada exclusivamente pelo Engine
- o estado vivo da run é mediado pelo `RunContext`

## Componentes

- **types**: `NodeType`, `NodeStatus`, `PipelineNode`, `PipelineEdge`,
  `ExecutionResult`, `EdgeState`
- **graph**: `PipelineGraph` (consultas estruturais)
- **context**: `RunContext` (logs, warnings, status vivo)
- **executor**: `NodeExecutor` (Protocol)
- **registry**: `ExecutorRegistry` (um executor por tipo de nó)

## Invariantes

- Cada nó possui um `node.id` único
- Nós e arestas nunca são mutados durante uma run
"""

from .context import RunContext
from .executor import NodeExecutor
from .graph import PipelineGraph
from .registry import ExecutorRegistry
from .types import (
    EdgeState,
    ExecutionResult,
    NodeStatus,
    NodeType,
    PipelineEdge,
    PipelineNode,
    bandwidth_for,
)

__all__ = [
    "RunContext",
    "NodeExecutor",
    "PipelineGraph",
    "ExecutorRegistry",
    "EdgeState",
    "ExecutionResult",
    "NodeStatus",
    "NodeType",
    "PipelineEdge",
    "PipelineNode",
    "bandwidth_for",
]
