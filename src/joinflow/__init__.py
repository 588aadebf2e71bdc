# src/joinflow/__init__.py
"""
JoinFlow: motor de pipelines de dados (DAG) com descoberta de
relacionamentos e planejamento de joins.
"""

from joinflow.analysis import AnalysisResult, JoinPlan, RelationshipCandidate, analyze_relationships
from joinflow.connectors import ConnectorRegistry, MemoryConnector
from joinflow.core.config import load_config
from joinflow.core.engine import CancellationToken, Engine, RunCallbacks, RunResult, topological_order
from joinflow.core.pipeline import (
    ExecutionResult,
    NodeStatus,
    NodeType,
    PipelineEdge,
    PipelineGraph,
    PipelineNode,
    RunContext,
)
from joinflow.engine import PipelineEngine

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "JoinPlan",
    "RelationshipCandidate",
    "analyze_relationships",
    "ConnectorRegistry",
    "MemoryConnector",
    "load_config",
    "CancellationToken",
    "Engine",
    "RunCallbacks",
    "RunResult",
    "topological_order",
    "ExecutionResult",
    "NodeStatus",
    "NodeType",
    "PipelineEdge",
    "PipelineGraph",
    "PipelineNode",
    "RunContext",
    "PipelineEngine",
]
