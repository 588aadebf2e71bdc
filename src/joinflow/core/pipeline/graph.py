# src/joinflow/core/pipeline/graph.py
"""
Grafo declarativo do pipeline.

O `PipelineGraph` agrupa os nós e arestas de uma definição de pipeline
e oferece consultas estruturais (predecessores, arestas de entrada e
de saída) usadas pelo Engine.

Invariantes:
    - A ordem de inserção dos nós é preservada (desempate do planner)
    - A ordem das arestas de entrada de um nó segue a ordem de declaração
    - O grafo é entrada pura: pode ser reutilizado entre runs concorrentes

Limites explícitos:
    - Não valida ciclos nem referências (responsabilidade do planner)
    - Não executa nós
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .types import PipelineEdge, PipelineNode


@dataclass(frozen=True)
class PipelineGraph:
    nodes: List[PipelineNode] = field(default_factory=list)
    edges: List[PipelineEdge] = field(default_factory=list)

    @classmethod
    def from_iterables(
        cls, nodes: Iterable[PipelineNode], edges: Iterable[PipelineEdge]
    ) -> "PipelineGraph":
        return cls(nodes=list(nodes), edges=list(edges))

    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def nodes_by_id(self) -> Dict[str, PipelineNode]:
        return {n.id: n for n in self.nodes}

    def incoming_edges(self, node_id: str) -> List[PipelineEdge]:
        return [e for e in self.edges if e.target == node_id]

    def outgoing_edges(self, node_id: str) -> List[PipelineEdge]:
        return [e for e in self.edges if e.source == node_id]

    def predecessors(self, node_id: str) -> List[str]:
        """Nós de origem das arestas de entrada, sem repetição, na ordem de declaração."""
        return list(dict.fromkeys(e.source for e in self.incoming_edges(node_id)))

    def execution_order(self) -> List[str]:
        """Ordem topológica determinística (Kahn FIFO)."""
        from joinflow.core.engine.planner import topological_order

        return topological_order(self.nodes, self.edges)
