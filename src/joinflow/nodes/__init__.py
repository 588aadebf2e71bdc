# src/joinflow/nodes/__init__.py
"""
Executores de nó do JoinFlow.

    - source    → busca em conector
    - transform → filtros, mapeamentos, ordenação
    - merge     → join N-way por chave ou JoinPlan
    - diff      → comparação de dois Datasets por chave
    - output    → entrega a um sink
"""

from typing import List

from joinflow.connectors.registry import ConnectorRegistry
from joinflow.core.pipeline.executor import NodeExecutor

from .diff import DiffNodeExecutor
from .merge import MergeNodeExecutor
from .output import OutputNodeExecutor
from .source import SourceNodeExecutor
from .transform import TransformNodeExecutor


def default_executors(connectors: ConnectorRegistry) -> List[NodeExecutor]:
    return [
        SourceNodeExecutor(connectors=connectors),
        TransformNodeExecutor(),
        MergeNodeExecutor(),
        DiffNodeExecutor(),
        OutputNodeExecutor(connectors=connectors),
    ]


__all__ = [
    "DiffNodeExecutor",
    "MergeNodeExecutor",
    "OutputNodeExecutor",
    "SourceNodeExecutor",
    "TransformNodeExecutor",
    "default_executors",
]
