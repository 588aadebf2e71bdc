# src/joinflow/core/engine/engine.py
"""
Coordenador de execução do pipeline do JoinFlow.

Fluxo de uma run:
    1. planejamento (ordem topológica) e validação da config de todos os
       nós; qualquer `ConfigurationError` é levantado aqui, antes de
       qualquer nó executar, e nenhum RunResult é produzido
    2. para cada nó, em ordem: checagem de cancelamento → running →
       execute (com deadline opcional) → success|error → metadados nas
       arestas de saída → progresso
    3. agregação em um `RunResult` imutável

Política de falhas:
    - Exceções de um nó são convertidas em `ErrorPayload` e registradas
      no `ExecutionResult` do nó; a run continua
    - Sucessores de um nó com falha recebem Dataset vazio daquela aresta
      (degradados, não pulados)
    - Nenhum retry automático
    - Exceções em callbacks do chamador são logadas e nunca abortam a run
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from joinflow.core.config import compute_config_hash, config_section
from joinflow.core.errors import (
    CONNECTOR_ERROR,
    NODE_EXECUTION_ERROR,
    RUN_CANCELLED,
    ErrorPayload,
    node_execution_error,
    node_timeout,
    run_cancelled,
)
from joinflow.core.exceptions import (
    CancellationError,
    ConnectorError,
    JoinflowException,
    NodeTimeoutError,
)
from joinflow.core.pipeline.context import RunContext
from joinflow.core.pipeline.executor import NodeExecutor
from joinflow.core.pipeline.graph import PipelineGraph
from joinflow.core.pipeline.registry import ExecutorRegistry
from joinflow.core.pipeline.types import (
    EdgeState,
    ExecutionResult,
    NodeStatus,
    PipelineNode,
    bandwidth_for,
)
from joinflow.core.records import Dataset, copy_dataset

from .planner import topological_order


@dataclass
class RunCallbacks:
    """Callbacks opcionais de observação de uma run."""

    on_node_start: Optional[Callable[[str], None]] = None
    on_node_complete: Optional[Callable[[str, ExecutionResult], None]] = None
    on_edge_update: Optional[Callable[[str, Dict[str, Any]], None]] = None
    on_progress: Optional[Callable[[int, str], None]] = None


class CancellationToken:
    """Sinal cooperativo de parada, checado antes de cada nó."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class RunResult:
    """
    Registro terminal e imutável de uma execução do pipeline.

    Campos:
        - success: True sse nenhum nó falhou e a run não foi cancelada
        - cancelled: run interrompida pelo chamador
        - total_rows: soma de rows_processed dos nós executados
        - completed_nodes / failed_nodes: contagens por status final
        - results: ExecutionResult por node_id (nós não iniciados ficam ausentes)
        - execution_order: ordem topológica planejada
        - edges: metadados finais por edge_id
        - config_hash: hash da configuração efetiva da run
        - cancellation: ErrorPayload RUN_CANCELLED quando cancelada
    """

    run_id: str
    success: bool
    cancelled: bool
    total_rows: int
    completed_nodes: int
    failed_nodes: int
    results: Dict[str, ExecutionResult] = field(default_factory=dict)
    execution_order: List[str] = field(default_factory=list)
    edges: Dict[str, EdgeState] = field(default_factory=dict)
    config_hash: str = ""
    execution_time_ms: int = 0
    cancellation: Optional[ErrorPayload] = None

    def to_dict(self, *, include_data: bool = False) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "success": self.success,
            "cancelled": self.cancelled,
            "total_rows": self.total_rows,
            "completed_nodes": self.completed_nodes,
            "failed_nodes": self.failed_nodes,
            "results": {
                nid: r.to_dict(include_data=include_data) for nid, r in self.results.items()
            },
            "execution_order": list(self.execution_order),
            "edges": {eid: e.to_dict() for eid, e in self.edges.items()},
            "config_hash": self.config_hash,
            "execution_time_ms": self.execution_time_ms,
            "cancellation": self.cancellation.to_dict() if self.cancellation else None,
        }


def _elapsed_ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000))


def _cancellation_to_error(exc: CancellationError) -> ErrorPayload:
    return ErrorPayload(
        type=RUN_CANCELLED,
        message=str(exc),
        details=dict(exc.details),
        hint=exc.hint,
        decision_required=bool(exc.decision_required),
    )


class Engine:
    """Engine canônico do JoinFlow (planner + coordenador de execução)."""

    def __init__(
        self,
        *,
        graph: PipelineGraph,
        ctx: RunContext,
        executors: Union[ExecutorRegistry, Iterable[NodeExecutor]],
        callbacks: Optional[RunCallbacks] = None,
        cancel_token: Optional[CancellationToken] = None,
        node_timeout: Optional[float] = None,
    ):
        self.graph = graph
        self.ctx = ctx
        self.executors = (
            executors if isinstance(executors, ExecutorRegistry) else ExecutorRegistry.of(executors)
        )
        self.callbacks = callbacks or RunCallbacks()
        self.cancel_token = cancel_token or CancellationToken()
        self.node_timeout = node_timeout

    # ------------------------------------------------------------------
    # Configuração
    # ------------------------------------------------------------------

    def _engine_cfg(self) -> Dict[str, Any]:
        return config_section(self.ctx.config, "engine")

    def _timeout_for(self, node: PipelineNode) -> Optional[float]:
        if self.node_timeout is not None:
            return float(self.node_timeout)
        node_value = node.config.get("timeout_seconds")
        if node_value is not None:
            return float(node_value)
        default = self._engine_cfg().get("node_timeout_seconds")
        return float(default) if default is not None else None

    def _progress_enabled(self) -> bool:
        return bool(self._engine_cfg().get("progress_callbacks", True))

    def _validate(self, order: List[str]) -> None:
        """Falhas de configuração são fatais e ocorrem antes de qualquer nó."""
        by_id = self.graph.nodes_by_id()
        for node_id in order:
            node = by_id[node_id]
            self.executors.get(node.type).validate(node)

    # ------------------------------------------------------------------
    # Callbacks (falhas nunca abortam a run)
    # ------------------------------------------------------------------

    def _emit(self, name: str, *args: Any) -> None:
        callback = getattr(self.callbacks, name, None)
        if callback is None:
            return
        if name == "on_progress" and not self._progress_enabled():
            return
        try:
            callback(*args)
        except Exception as exc:
            self.ctx.log(
                node_id=str(args[0]) if args and name != "on_progress" else "engine",
                level="error",
                message=f"callback '{name}' failed",
                error_type=exc.__class__.__name__,
                error_message=str(exc),
            )

    # ------------------------------------------------------------------
    # Exceção -> ErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, node: PipelineNode, exc: Exception) -> ErrorPayload:
        """Converte exceções de nó em ErrorPayload (serializável, sem stack trace)."""
        if isinstance(exc, NodeTimeoutError):
            return node_timeout(
                node_id=node.id,
                timeout_seconds=float(exc.details.get("timeout_seconds", 0.0)),
            )

        if isinstance(exc, JoinflowException):
            details = {"node_id": node.id, "exception_class": exc.__class__.__name__}
            details.update(exc.details or {})
            return ErrorPayload(
                type=CONNECTOR_ERROR if isinstance(exc, ConnectorError) else NODE_EXECUTION_ERROR,
                message=str(exc) or "Erro de execução",
                details=details,
                hint=exc.hint,
                decision_required=bool(exc.decision_required),
            )

        return node_execution_error(
            node_id=node.id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Execução de um nó
    # ------------------------------------------------------------------

    def _gather_inputs(self, node_id: str, results: Dict[str, ExecutionResult]) -> Dict[str, Dataset]:
        inputs: Dict[str, Dataset] = {}
        for source in self.graph.predecessors(node_id):
            upstream = results.get(source)
            if upstream is not None and upstream.success:
                inputs[source] = copy_dataset([upstream.data])
            else:
                inputs[source] = []
                self.ctx.add_warning(
                    node_id=node_id,
                    message=f"degraded input from '{source}'",
                )
        return inputs

    def _invoke(self, executor: NodeExecutor, node: PipelineNode, inputs: Dict[str, Dataset]) -> ExecutionResult:
        timeout = self._timeout_for(node)
        if timeout is None:
            return executor.execute(node, inputs, self.ctx)

        # Um worker por nó: um worker abandonado por timeout não atrasa os próximos.
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"joinflow-{node.id}")
        try:
            future = pool.submit(executor.execute, node, inputs, self.ctx)
            try:
                return future.result(timeout=timeout)
            except FutureTimeoutError:
                raise NodeTimeoutError(
                    message=f"Node '{node.id}' exceeded its deadline of {timeout}s",
                    details={"node_id": node.id, "timeout_seconds": timeout},
                )
        finally:
            pool.shutdown(wait=False)

    def _execute_node(self, node: PipelineNode, results: Dict[str, ExecutionResult]) -> ExecutionResult:
        executor = self.executors.get(node.type)
        inputs = self._gather_inputs(node.id, results)

        started_at = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        try:
            result = self._invoke(executor, node, inputs)
            if not isinstance(result, ExecutionResult):
                raise TypeError("NodeExecutor.execute must return ExecutionResult")
        except Exception as exc:
            error = self._exception_to_error(node, exc)
            result = ExecutionResult(
                node_id=node.id,
                node_type=node.type,
                status=NodeStatus.ERROR,
                error=error,
            )

        merged: List[str] = []
        for message in self.ctx.warnings_for(node.id) + list(result.warnings):
            if message not in merged:
                merged.append(message)

        return replace(
            result,
            node_id=node.id,
            node_type=node.type,
            warnings=tuple(merged),
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            execution_time_ms=_elapsed_ms(t0),
        )

    def _update_edges(self, node_id: str, result: ExecutionResult) -> None:
        for edge in self.graph.outgoing_edges(node_id):
            row_count = len(result.data) if result.success else 0
            state = EdgeState(
                edge_id=edge.id,
                row_count=row_count,
                schema=result.output_schema if result.success else None,
                is_active=result.success,
                bandwidth=bandwidth_for(row_count),
            )
            self.ctx.set_edge_state(state)
            self.ctx.log(
                node_id=node_id,
                level="debug",
                message="edge updated",
                edge_id=edge.id,
                row_count=row_count,
                is_active=state.is_active,
            )
            self._emit("on_edge_update", edge.id, {"row_count": row_count, "schema": state.schema})

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _check_cancelled(self, pending: List[str], *, completed_nodes: int) -> None:
        if not self.cancel_token.cancelled:
            return
        payload = run_cancelled(
            run_id=self.ctx.run_id,
            completed_nodes=completed_nodes,
            pending_nodes=list(pending),
        )
        raise CancellationError(message=payload.message, details=payload.details, hint=payload.hint)

    def run(self) -> RunResult:
        order = topological_order(self.graph.nodes, self.graph.edges)
        self._validate(order)

        by_id = self.graph.nodes_by_id()
        total = len(order)
        results: Dict[str, ExecutionResult] = {}
        cancellation: Optional[ErrorPayload] = None
        t0 = time.perf_counter()

        for node_id in order:
            self.ctx.set_status(node_id, NodeStatus.IDLE)

        self.ctx.log(
            node_id="engine",
            level="info",
            message="run started",
            node_count=total,
            execution_order=list(order),
        )
        self._emit("on_progress", 0, "Starting pipeline execution")

        for index, node_id in enumerate(order):
            try:
                self._check_cancelled(order[index:], completed_nodes=len(results))
            except CancellationError as exc:
                cancellation = _cancellation_to_error(exc)
                self.ctx.log(
                    node_id="engine",
                    level="warning",
                    message=str(exc),
                    pending_nodes=exc.details["pending_nodes"],
                )
                break

            node = by_id[node_id]
            self.ctx.set_status(node_id, NodeStatus.RUNNING)
            self.ctx.log(node_id=node_id, level="info", message="node started", node_type=node.type.value)
            self._emit("on_node_start", node_id)

            result = self._execute_node(node, results)
            results[node_id] = result
            self.ctx.set_status(node_id, result.status)

            if result.success:
                self.ctx.log(
                    node_id=node_id,
                    level="info",
                    message="node completed",
                    rows_processed=result.rows_processed,
                    execution_time_ms=result.execution_time_ms,
                )
            else:
                self.ctx.log(
                    node_id=node_id,
                    level="error",
                    message="node failed",
                    error_type=result.error.type if result.error else None,
                    error_message=result.error.message if result.error else None,
                    execution_time_ms=result.execution_time_ms,
                )

            self._emit("on_node_complete", node_id, result)
            self._update_edges(node_id, result)

            done = len(results)
            self._emit(
                "on_progress",
                round(done / total * 100),
                f"Executed node '{node_id}' ({done}/{total})",
            )

        failed = sum(1 for r in results.values() if not r.success)
        completed = len(results) - failed
        cancelled = cancellation is not None

        run_result = RunResult(
            run_id=self.ctx.run_id,
            success=failed == 0 and not cancelled,
            cancelled=cancelled,
            total_rows=sum(r.rows_processed for r in results.values()),
            completed_nodes=completed,
            failed_nodes=failed,
            results=results,
            execution_order=list(order),
            edges=dict(self.ctx.edge_state),
            config_hash=compute_config_hash(self.ctx.config or {}),
            execution_time_ms=_elapsed_ms(t0),
            cancellation=cancellation,
        )

        self.ctx.log(
            node_id="engine",
            level="info",
            message="run cancelled" if cancelled else "run completed",
            success=run_result.success,
            completed_nodes=completed,
            failed_nodes=failed,
            total_rows=run_result.total_rows,
        )
        percent = 100 if total == 0 else round(len(results) / total * 100)
        self._emit(
            "on_progress",
            percent,
            "Pipeline execution cancelled" if cancelled else "Pipeline execution completed",
        )
        return run_result
