# tests/core/engine/test_engine_timeout_and_cancel.py
"""
Testes de deadline por nó e de cancelamento cooperativo.

Deadline:
    - Precedência: argumento explícito → config.timeout_seconds do nó →
      engine.node_timeout_seconds
    - Estouro vira ErrorPayload NODE_TIMEOUT; a run continua

Cancelamento:
    - Checado antes de cada nó; o nó em andamento termina
    - Nós não iniciados ficam ausentes de `results`
    - A run cancelada nunca é `success`
"""

from joinflow.core.engine.engine import CancellationToken, Engine, RunCallbacks
from joinflow.core.errors import NODE_TIMEOUT, RUN_CANCELLED
from joinflow.core.pipeline.graph import PipelineGraph
from joinflow.core.pipeline.types import NodeStatus, PipelineEdge, PipelineNode


def _chain(first_config=None):
    return PipelineGraph.from_iterables(
        [
            PipelineNode("a", "transform", config=first_config or {}),
            PipelineNode("b", "transform"),
            PipelineNode("c", "transform"),
        ],
        [PipelineEdge("a", "b"), PipelineEdge("b", "c")],
    )


# -----------------------------
# Deadline
# -----------------------------

def test_explicit_node_timeout(dummy_ctx, DummyExecutor):
    engine = Engine(
        graph=_chain({"sleep_seconds": 1.0}),
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
        node_timeout=0.05,
    )

    result = engine.run()

    error = result.results["a"].error
    assert result.results["a"].status == NodeStatus.ERROR
    assert error.type == NODE_TIMEOUT
    assert error.details == {"node_id": "a", "timeout_seconds": 0.05}
    assert result.results["c"].success is True
    assert result.success is False


def test_timeout_from_node_config(dummy_ctx, DummyExecutor):
    result = Engine(
        graph=_chain({"sleep_seconds": 1.0, "timeout_seconds": 0.05}),
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
    ).run()

    assert result.results["a"].error.type == NODE_TIMEOUT


def test_timeout_from_engine_config(dummy_ctx, DummyExecutor):
    dummy_ctx.config["engine"]["node_timeout_seconds"] = 0.05

    result = Engine(
        graph=_chain({"sleep_seconds": 1.0}),
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
    ).run()

    assert result.results["a"].error.type == NODE_TIMEOUT
    assert result.results["b"].success is True


def test_hung_nodes_do_not_starve_later_deadlines(dummy_ctx, DummyExecutor):
    hung = [PipelineNode(f"h{i}", "transform", config={"sleep_seconds": 1.0}) for i in range(6)]
    graph = PipelineGraph.from_iterables(hung + [PipelineNode("fast", "transform")], [])

    result = Engine(
        graph=graph,
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
        node_timeout=0.1,
    ).run()

    assert [result.results[n.id].error.type for n in hung] == [NODE_TIMEOUT] * 6
    assert result.results["fast"].success is True
    assert result.results["fast"].rows_processed == 1


def test_generous_timeout_does_not_interfere(dummy_ctx, DummyExecutor):
    result = Engine(
        graph=_chain(),
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
        node_timeout=5,
    ).run()

    assert result.success is True
    assert result.total_rows == 1 + 2 + 3


# -----------------------------
# Cancelamento
# -----------------------------

def test_cancel_after_first_node(dummy_ctx, DummyExecutor):
    token = CancellationToken()
    executor = DummyExecutor("transform")

    result = Engine(
        graph=_chain(),
        ctx=dummy_ctx,
        executors=[executor],
        callbacks=RunCallbacks(on_node_complete=lambda node_id, _: token.cancel()),
        cancel_token=token,
    ).run()

    assert result.cancelled is True
    assert result.success is False
    assert result.completed_nodes == 1
    assert result.failed_nodes == 0
    assert list(result.results) == ["a"]
    assert executor.calls == ["a"]

    assert result.cancellation.type == RUN_CANCELLED
    assert result.cancellation.details == {
        "run_id": "run-test-001",
        "completed_nodes": 1,
        "pending_nodes": ["b", "c"],
    }
    assert result.cancellation.hint
    assert dummy_ctx.status_of("b") == NodeStatus.IDLE

    warning = [e for e in dummy_ctx.events_for("engine") if e["level"] == "warning"][-1]
    assert warning["message"] == "Run cancelled by caller"
    assert warning["pending_nodes"] == ["b", "c"]


def test_cancel_before_start_runs_nothing(dummy_ctx, DummyExecutor):
    token = CancellationToken()
    token.cancel()
    progress = []

    result = Engine(
        graph=_chain(),
        ctx=dummy_ctx,
        executors=[DummyExecutor("transform")],
        callbacks=RunCallbacks(on_progress=lambda p, m: progress.append((p, m))),
        cancel_token=token,
    ).run()

    assert result.results == {}
    assert result.completed_nodes == 0
    assert result.cancelled is True
    assert progress[-1] == (0, "Pipeline execution cancelled")
