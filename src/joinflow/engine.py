# src/joinflow/engine.py
"""
Fachada pública do JoinFlow.

O `PipelineEngine` é construído com seus colaboradores injetados
(registry de conectores e configuração efetiva) e expõe as duas
superfícies de invocação:

    - run_pipeline(nodes, edges, callbacks) -> RunResult
    - analyze_relationships(datasets) -> AnalysisResult

Nenhum estado global: cada run recebe seu próprio RunContext e seu
próprio token de cancelamento. `stop()` sinaliza as runs ativas; a
checagem é cooperativa, antes de cada nó.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from joinflow.analysis.service import analyze_relationships
from joinflow.analysis.types import AnalysisResult
from joinflow.connectors.registry import ConnectorRegistry
from joinflow.core.config import load_config
from joinflow.core.engine.engine import CancellationToken, Engine, RunCallbacks, RunResult
from joinflow.core.exceptions import InvalidNodeConfigError
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.executor import NodeExecutor
from joinflow.core.pipeline.graph import PipelineGraph
from joinflow.core.pipeline.types import PipelineEdge, PipelineNode
from joinflow.nodes import default_executors


NodeLike = Union[PipelineNode, Mapping[str, Any]]
EdgeLike = Union[PipelineEdge, Mapping[str, Any]]


def as_node(node: NodeLike) -> PipelineNode:
    if isinstance(node, PipelineNode):
        return node
    missing = [key for key in ("id", "type") if key not in node]
    if missing:
        raise InvalidNodeConfigError(
            message=f"Node definition is missing required keys: {', '.join(missing)}",
            details={"node_id": node.get("id"), "missing_keys": missing},
        )
    return PipelineNode(
        id=node["id"],
        type=node["type"],
        config=node.get("config") or {},
        label=node.get("label"),
    )


def as_edge(edge: EdgeLike) -> PipelineEdge:
    if isinstance(edge, PipelineEdge):
        return edge
    return PipelineEdge(source=edge["source"], target=edge["target"], id=edge.get("id"))


def as_callbacks(callbacks: Union[RunCallbacks, Mapping[str, Any], None]) -> RunCallbacks:
    if callbacks is None:
        return RunCallbacks()
    if isinstance(callbacks, RunCallbacks):
        return callbacks
    return RunCallbacks(**dict(callbacks))


class PipelineEngine:
    def __init__(
        self,
        connectors: Optional[ConnectorRegistry] = None,
        config: Optional[Dict[str, Any]] = None,
        *,
        executors: Optional[Sequence[NodeExecutor]] = None,
    ):
        self.connectors = connectors if connectors is not None else ConnectorRegistry()
        self.config = config if config is not None else load_config()
        self._executors = list(executors) if executors is not None else None
        self._active: Dict[str, CancellationToken] = {}
        self._lock = threading.Lock()

    def _executors_for_run(self) -> List[NodeExecutor]:
        if self._executors is not None:
            return list(self._executors)
        return default_executors(self.connectors)

    def new_context(self, *, run_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None) -> RunContext:
        return RunContext(
            run_id=run_id or uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=self.config,
            meta=dict(meta or {}),
        )

    def run_pipeline(
        self,
        nodes: Iterable[NodeLike],
        edges: Iterable[EdgeLike],
        callbacks: Union[RunCallbacks, Mapping[str, Any], None] = None,
        *,
        node_timeout: Optional[float] = None,
        run_id: Optional[str] = None,
        ctx: Optional[RunContext] = None,
    ) -> RunResult:
        """
        Executa um pipeline e devolve o RunResult.

        Raises:
            ConfigurationError: grafo cíclico, referências inválidas ou
                config de nó inválida (nenhum nó executa).
        """
        graph = PipelineGraph(nodes=[as_node(n) for n in nodes], edges=[as_edge(e) for e in edges])
        ctx = ctx if ctx is not None else self.new_context(run_id=run_id)
        token = CancellationToken()

        with self._lock:
            self._active[ctx.run_id] = token
        try:
            engine = Engine(
                graph=graph,
                ctx=ctx,
                executors=self._executors_for_run(),
                callbacks=as_callbacks(callbacks),
                cancel_token=token,
                node_timeout=node_timeout,
            )
            return engine.run()
        finally:
            with self._lock:
                self._active.pop(ctx.run_id, None)

    def stop(self, run_id: Optional[str] = None) -> int:
        """Sinaliza cancelamento; devolve quantas runs ativas foram sinalizadas."""
        with self._lock:
            if run_id is None:
                targets = list(self._active.values())
            else:
                token = self._active.get(run_id)
                targets = [token] if token is not None else []
        for token in targets:
            token.cancel()
        return len(targets)

    def analyze_relationships(
        self,
        datasets: Mapping[str, Sequence[Mapping[str, Any]]],
        *,
        ctx: Optional[RunContext] = None,
    ) -> AnalysisResult:
        return analyze_relationships(datasets, config=self.config, ctx=ctx)
