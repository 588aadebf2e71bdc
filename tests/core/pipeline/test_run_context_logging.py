# tests/core/pipeline/test_run_context_logging.py
"""
Testes de logging estruturado e estado vivo do RunContext.

Este módulo valida que o RunContext:
- registra eventos estruturados sempre com run_id e node_id
- agrupa warnings por node_id
- mantém o status vivo de nós (default idle) e o estado de arestas

Decisões arquiteturais:
    - Eventos são dicionários simples, prontos para serialização
    - Campos extras do chamador são preservados no evento

Limites explícitos:
    - Não valida persistência de eventos
    - Não executa nós
"""

import pytest

try:
    from joinflow.core.pipeline.types import EdgeState, NodeStatus
except Exception as e:
    EdgeState = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing pipeline types. Implement:
- src/joinflow/core/pipeline/types.py (EdgeState, NodeStatus)
Import error: {_IMPORT_ERR}
""")


def test_structured_log_event(dummy_ctx):
    _require_imports()

    dummy_ctx.log(node_id="src", level="info", message="hello", foo=1)

    assert len(dummy_ctx.events) == 1
    ev = dummy_ctx.events[0]
    assert ev["run_id"] == dummy_ctx.run_id
    assert ev["node_id"] == "src"
    assert ev["level"] == "info"
    assert ev["message"] == "hello"
    assert ev["foo"] == 1
    assert "timestamp" in ev


def test_events_for_filters_by_node(dummy_ctx):
    _require_imports()

    dummy_ctx.log(node_id="a", level="info", message="one")
    dummy_ctx.log(node_id="b", level="info", message="two")

    assert [e["message"] for e in dummy_ctx.events_for("b")] == ["two"]


def test_warning_collection(dummy_ctx):
    _require_imports()

    dummy_ctx.add_warning(node_id="merge", message="degraded input from 'src'")

    assert dummy_ctx.warnings["merge"] == ["degraded input from 'src'"]
    assert dummy_ctx.warnings_for("merge") == ["degraded input from 'src'"]
    assert dummy_ctx.warnings_for("other") == []


def test_node_status_defaults_to_idle(dummy_ctx):
    _require_imports()

    assert dummy_ctx.status_of("unknown") == NodeStatus.IDLE
    dummy_ctx.set_status("src", NodeStatus.RUNNING)
    assert dummy_ctx.status_of("src") == NodeStatus.RUNNING


def test_edge_state_is_keyed_by_edge_id(dummy_ctx):
    _require_imports()

    state = EdgeState(edge_id="a->b", row_count=150, schema={"id": "integer"}, is_active=True, bandwidth="medium")
    dummy_ctx.set_edge_state(state)

    assert dummy_ctx.edge_state["a->b"] is state
    assert state.to_dict()["bandwidth"] == "medium"
