# tests/analysis/test_analysis_service.py
"""
Testes da passada completa de análise (`analyze_relationships`).

Este módulo valida a composição profiler → scorer → join planner:
- perfis na ordem de entrada dos datasets
- relações sugeridas acima do threshold de sugestão
- apenas planos válidos no ranking; inválidos preservados à parte
- logs estruturados sob node_id "analysis" quando há RunContext

Limites explícitos:
    - Não revalida pesos do scorer (ver test_scorer)
    - Não executa merges (ver tests/nodes/test_merge_node)
"""

import json

from joinflow.analysis import analyze_relationships


def test_customers_orders_analysis(customers, orders):
    result = analyze_relationships({"customers": customers, "orders": orders})

    assert [p.dataset_id for p in result.profiles] == ["customers", "orders"]

    top = result.candidates[0]
    assert top.id == "rel_customers_orders_id_customer_id"
    assert top.confidence > 0.6
    assert all(r.confidence > 0.6 for r in result.relationships)
    assert top in result.relationships

    assert len(result.join_plans) == 4
    assert result.invalid_plans == []
    best = result.best_plan()
    assert len(best.steps) == 1
    assert best.steps[0].join_condition == "customers.id = orders.customer_id"
    assert best.estimated_rows == 2


def test_unrelated_datasets_yield_no_valid_plan():
    result = analyze_relationships({"a": [{"label": "foo"}], "b": [{"price": 1.5}]})

    assert result.relationships == []
    assert result.join_plans == []
    assert result.best_plan() is None
    assert len(result.invalid_plans) == 4
    assert all(not p.is_valid for p in result.invalid_plans)


def test_analysis_logs_and_warnings(dummy_ctx):
    analyze_relationships(
        {"a": [{"label": "foo"}], "b": [{"price": 1.5}]},
        config=dummy_ctx.config,
        ctx=dummy_ctx,
    )

    messages = [e["message"] for e in dummy_ctx.events_for("analysis")]
    assert messages[:2] == ["datasets profiled", "relationships scored"]
    assert messages.count("join plan invalid") == 4
    assert len(dummy_ctx.warnings_for("analysis")) == 4


def test_analysis_result_is_serializable(customers, orders):
    payload = analyze_relationships({"customers": customers, "orders": orders}).to_dict()

    text = json.dumps(payload)
    assert "plan_left_heavy" in text
