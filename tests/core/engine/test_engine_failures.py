# tests/core/engine/test_engine_failures.py
"""
Testes da política de falhas do Engine.

Política validada:
    - A exceção de um nó vira ErrorPayload no ExecutionResult; a run continua
    - Sucessores recebem Dataset vazio daquela aresta e são marcados com
      warning de entrada degradada (executam, não são pulados)
    - Arestas de saída de um nó com falha ficam inativas com 0 linhas
    - Erros de configuração são fatais e ocorrem antes de qualquer nó
"""

import pytest

from joinflow.core.engine.engine import Engine
from joinflow.core.errors import NODE_EXECUTION_ERROR
from joinflow.core.exceptions import (
    ConfigurationError,
    CycleDetectedError,
    InvalidNodeConfigError,
    UnknownExecutorError,
)
from joinflow.core.pipeline.graph import PipelineGraph
from joinflow.core.pipeline.types import NodeStatus, PipelineEdge, PipelineNode


def _graph(transform_config=None):
    return PipelineGraph.from_iterables(
        [
            PipelineNode("src", "source"),
            PipelineNode("t", "transform", config=transform_config or {}),
            PipelineNode("out", "output"),
        ],
        [PipelineEdge("src", "t"), PipelineEdge("t", "out")],
    )


def test_failed_node_degrades_successors(dummy_ctx, DummyExecutor):
    output = DummyExecutor("output")
    executors = [DummyExecutor("source"), DummyExecutor("transform"), output]

    result = Engine(graph=_graph({"fail": True}), ctx=dummy_ctx, executors=executors).run()

    assert result.success is False
    assert result.failed_nodes == 1
    assert result.completed_nodes == 2

    failed = result.results["t"]
    assert failed.status == NodeStatus.ERROR
    assert failed.data == []
    assert failed.error.type == NODE_EXECUTION_ERROR
    assert failed.error.message == "boom in t"
    assert failed.error.details["exception_class"] == "RuntimeError"

    assert output.calls == ["out"]
    assert output.seen_inputs["out"] == {"t": []}
    assert result.results["out"].success is True
    assert "degraded input from 't'" in result.results["out"].warnings


def test_failed_node_edges_are_inactive(dummy_ctx, DummyExecutor):
    executors = [DummyExecutor("source"), DummyExecutor("transform"), DummyExecutor("output")]

    result = Engine(graph=_graph({"fail": True}), ctx=dummy_ctx, executors=executors).run()

    edge = result.edges["t->out"]
    assert edge.is_active is False
    assert edge.row_count == 0
    assert edge.schema is None
    assert dummy_ctx.status_of("t") == NodeStatus.ERROR


def test_failure_is_logged(dummy_ctx, DummyExecutor):
    executors = [DummyExecutor("source"), DummyExecutor("transform"), DummyExecutor("output")]

    Engine(graph=_graph({"fail": True}), ctx=dummy_ctx, executors=executors).run()

    events = [e for e in dummy_ctx.events_for("t") if e["message"] == "node failed"]
    assert len(events) == 1
    assert events[0]["level"] == "error"
    assert events[0]["error_type"] == NODE_EXECUTION_ERROR


def test_invalid_node_config_is_fatal_before_any_node(dummy_ctx, DummyExecutor):
    source = DummyExecutor("source")
    executors = [source, DummyExecutor("transform", reject=True), DummyExecutor("output")]

    with pytest.raises(InvalidNodeConfigError) as info:
        Engine(graph=_graph(), ctx=dummy_ctx, executors=executors).run()

    assert isinstance(info.value, ConfigurationError)
    assert source.calls == []


def test_missing_executor_is_fatal(dummy_ctx, DummyExecutor):
    source = DummyExecutor("source")

    with pytest.raises(UnknownExecutorError):
        Engine(graph=_graph(), ctx=dummy_ctx, executors=[source, DummyExecutor("output")]).run()

    assert source.calls == []


def test_cycle_is_fatal(dummy_ctx, DummyExecutor):
    graph = PipelineGraph.from_iterables(
        [PipelineNode("a", "transform"), PipelineNode("b", "transform")],
        [PipelineEdge("a", "b"), PipelineEdge("b", "a")],
    )
    executor = DummyExecutor("transform")

    with pytest.raises(CycleDetectedError):
        Engine(graph=graph, ctx=dummy_ctx, executors=[executor]).run()

    assert executor.calls == []
