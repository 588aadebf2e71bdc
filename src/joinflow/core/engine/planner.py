# src/joinflow/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Este módulo valida a estrutura do pipeline e produz uma ordem de
execução topológica determinística dos nós declarados.

O planner opera exclusivamente em nível estrutural, analisando:
    - identificadores de nós
    - arestas e os nós que elas referenciam
    - formação de ciclos

Decisões arquiteturais:
    - Algoritmo de Kahn com fila FIFO
    - Empates são resolvidos pela ordem de inserção dos nós
    - Erros estruturais são fatais (`ConfigurationError`) e nenhuma
      ordem parcial é produzida

Invariantes:
    - Para toda aresta (u, v), u aparece antes de v
    - Todos os nós aparecem exatamente uma vez
    - A mesma definição de grafo produz sempre a mesma ordem

Limites explícitos:
    - Não executa nós
    - Não interage com RunContext
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List

from joinflow.core.exceptions import (
    CycleDetectedError,
    DuplicateNodeIdError,
    UnknownNodeError,
)
from joinflow.core.pipeline.types import PipelineEdge, PipelineNode


def topological_order(
    nodes: Iterable[PipelineNode], edges: Iterable[PipelineEdge]
) -> List[str]:
    """
    Produz a ordem topológica determinística dos nós.

    Args:
        nodes: Nós do pipeline (a ordem define o desempate).
        edges: Arestas dirigidas entre nós.

    Returns:
        Lista de `node.id` em ordem de execução.

    Raises:
        DuplicateNodeIdError: Se dois nós declararem o mesmo id.
        UnknownNodeError: Se uma aresta referenciar um nó inexistente.
        CycleDetectedError: Se houver ciclo no grafo.
    """
    node_ids: List[str] = []
    seen = set()
    for node in nodes:
        if node.id in seen:
            raise DuplicateNodeIdError(
                message=f"Duplicate node id: {node.id}",
                details={"node_id": node.id},
            )
        seen.add(node.id)
        node_ids.append(node.id)

    in_degree: Dict[str, int] = {nid: 0 for nid in node_ids}
    adjacency: Dict[str, List[str]] = {nid: [] for nid in node_ids}

    for edge in edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in in_degree:
                raise UnknownNodeError(
                    message=f"Edge '{edge.id}' references unknown node '{endpoint}'",
                    details={"edge_id": edge.id, "node_id": endpoint},
                    hint="Declare o nó ou remova a aresta",
                )
        adjacency[edge.source].append(edge.target)
        in_degree[edge.target] += 1

    queue: Deque[str] = deque(nid for nid in node_ids if in_degree[nid] == 0)
    order: List[str] = []

    while queue:
        current = queue.popleft()
        order.append(current)
        for neighbor in adjacency[current]:
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(order) != len(node_ids):
        unresolved = [nid for nid in node_ids if in_degree[nid] > 0]
        raise CycleDetectedError(
            message="Pipeline contains cycles",
            details={"unresolved_nodes": unresolved},
            hint="Remova as arestas que fecham o ciclo; pipelines devem formar um DAG",
        )

    return order
