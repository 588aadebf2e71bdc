# src/joinflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do JoinFlow.

Componentes principais:
    - NodeType        → tipos de nó (source, transform, merge, diff, output)
    - NodeStatus      → estados de um nó durante a run (idle → running → success|error)
    - PipelineNode    → nó declarativo (id, tipo, config)
    - PipelineEdge    → conexão dirigida entre nós (não carrega dados)
    - ExecutionResult → resultado imutável da execução de um nó
    - EdgeState       → metadados vivos de uma aresta (linhas, schema, atividade)

Invariantes:
    - Enums possuem valores textuais canônicos
    - PipelineNode/PipelineEdge são entradas puras: a run nunca os muta
    - ExecutionResult nunca é alterado após criado
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from joinflow.core.errors import ErrorPayload
from joinflow.core.exceptions import InvalidNodeConfigError
from joinflow.core.records import Record
from joinflow.core.serialization import jsonable


class NodeType(str, Enum):
    """
    Tipos de nó suportados pelo engine.

        - SOURCE: busca um Dataset em um conector
        - TRANSFORM: filtros, mapeamentos de campos e ordenação
        - MERGE: join N-way por chave ou por JoinPlan
        - DIFF: comparação de dois Datasets por chave
        - OUTPUT: entrega do Dataset a um sink
    """
    SOURCE = "source"
    TRANSFORM = "transform"
    MERGE = "merge"
    DIFF = "diff"
    OUTPUT = "output"


class NodeStatus(str, Enum):
    """Estados de um nó: idle → running → {success, error}."""
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class PipelineNode:
    id: str
    type: NodeType
    config: Mapping[str, Any] = field(default_factory=dict)
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidNodeConfigError(
                message="node.id must be a non-empty string",
                details={"node_id": self.id},
            )
        try:
            node_type = NodeType(self.type)
        except ValueError:
            raise InvalidNodeConfigError(
                message=f"Unknown node type '{self.type}'",
                details={"node_id": self.id, "node_type": str(self.type)},
                hint="Tipos suportados: " + ", ".join(t.value for t in NodeType),
            ) from None
        object.__setattr__(self, "type", node_type)
        object.__setattr__(self, "config", dict(self.config or {}))


@dataclass(frozen=True)
class PipelineEdge:
    source: str
    target: str
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.id is None:
            object.__setattr__(self, "id", f"{self.source}->{self.target}")


@dataclass(frozen=True)
class ExecutionResult:
    """
    Resultado imutável da execução de um nó.

    Campos:
        - node_id / node_type: identidade do nó executado
        - status: SUCCESS ou ERROR
        - data: Dataset produzido (vazio em caso de falha)
        - rows_processed: linhas produzidas (ou escritas, em nós output)
        - output_schema: schema inferido do primeiro Record (ou schema fixo do diff)
        - error: ErrorPayload quando status == ERROR
        - warnings: avisos não fatais
        - started_at / finished_at / execution_time_ms: tempos da execução
    """

    node_id: str
    node_type: NodeType
    status: NodeStatus
    data: List[Record] = field(default_factory=list)
    rows_processed: int = 0
    output_schema: Optional[Dict[str, Any]] = None
    error: Optional[ErrorPayload] = None
    warnings: Tuple[str, ...] = ()
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    execution_time_ms: int = 0

    @property
    def success(self) -> bool:
        return self.status == NodeStatus.SUCCESS

    def to_dict(self, *, include_data: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "node_id": self.node_id,
            "node_type": self.node_type.value,
            "status": self.status.value,
            "success": self.success,
            "rows_processed": self.rows_processed,
            "output_schema": jsonable(self.output_schema),
            "error": self.error.to_dict() if self.error is not None else None,
            "warnings": list(self.warnings),
            "started_at": jsonable(self.started_at),
            "finished_at": jsonable(self.finished_at),
            "execution_time_ms": self.execution_time_ms,
        }
        if include_data:
            out["data"] = jsonable(self.data)
        return out


@dataclass(frozen=True)
class EdgeState:
    edge_id: str
    row_count: int
    schema: Optional[Dict[str, Any]]
    is_active: bool
    bandwidth: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "edge_id": self.edge_id,
            "row_count": self.row_count,
            "schema": jsonable(self.schema),
            "is_active": self.is_active,
            "bandwidth": self.bandwidth,
        }


def bandwidth_for(row_count: int) -> str:
    if row_count < 100:
        return "low"
    if row_count < 1000:
        return "medium"
    return "high"
