# src/joinflow/core/pipeline/executor.py
"""
Contrato canônico de executor de nó do JoinFlow.

Um executor implementa a semântica de um tipo de nó (source, transform,
merge, diff, output). O Engine escolhe o executor pelo `node.type`,
valida a config de todos os nós antes da run e chama `execute` com os
Datasets dos predecessores, indexados por node_id.

Princípios fundamentais:
    - Executores não conhecem o Engine nem o planner
    - Executores não controlam ordem de execução
    - Falhas são levantadas como exceções; o Engine as converte em
      `ErrorPayload` no `ExecutionResult` do nó
    - Cada execução produz um Dataset novo (sem mutar inputs)

Limites explícitos:
    - Não define retry
    - Não registra status vivo (responsabilidade do Engine)
"""

from __future__ import annotations

from typing import Dict, Protocol, runtime_checkable

from joinflow.core.records import Dataset

from .context import RunContext
from .types import ExecutionResult, NodeType, PipelineNode


@runtime_checkable
class NodeExecutor(Protocol):
    """
    Interface mínima de um executor de nó.

    Atributos obrigatórios:
        - node_type: tipo de nó atendido (`NodeType`)

    Métodos:
        - validate(node): levanta `InvalidNodeConfigError` para config
          obrigatória ausente ou fora do domínio; chamado antes da run
        - execute(node, inputs, ctx): executa o nó; `inputs` mapeia o id de
          cada predecessor ao Dataset recebido, na ordem das arestas de entrada
          (arestas repetidas entre o mesmo par de nós alimentam um único input)
    """

    node_type: NodeType

    def validate(self, node: PipelineNode) -> None:
        ...

    def execute(
        self, node: PipelineNode, inputs: Dict[str, Dataset], ctx: RunContext
    ) -> ExecutionResult:
        ...
