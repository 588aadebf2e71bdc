# tests/analysis/test_join_planner.py
"""
Testes do planejador de joins multi-estratégia.

Invariantes:
    - um plano válido sobre N datasets possui N-1 passos
    - passos intermediários se chamam intermediate_<n>; o último, final
    - sem relação ligando um dataset ao acumulador → plano inválido
      (JOIN_PLAN_VALIDATION_ERROR), nunca um join "sobre nada"
    - planos inválidos ficam fora do ranking
"""

import pytest

from joinflow.analysis.join_planner import (
    build_join_plan,
    classify_performance,
    estimate_join_rows,
    generate_join_plans,
    order_datasets,
    rank_join_plans,
)
from joinflow.analysis.types import (
    Cardinality,
    DatasetProfile,
    JoinStrategy,
    JoinType,
    MatchType,
    Performance,
    RelationshipCandidate,
)
from joinflow.core.errors import JOIN_PLAN_VALIDATION_ERROR


def _rel(source, source_col, target, target_col, confidence, cardinality):
    return RelationshipCandidate(
        source_dataset_id=source,
        target_dataset_id=target,
        source_column=source_col,
        target_column=target_col,
        match_type=MatchType.SIMILAR,
        confidence=confidence,
        inferred_cardinality=cardinality,
    )


PROFILES = [
    DatasetProfile("customers", 100),
    DatasetProfile("orders", 1000),
    DatasetProfile("products", 10),
]

RELATIONSHIPS = [
    _rel("customers", "id", "orders", "customer_id", 0.9, Cardinality.ONE_TO_MANY),
    _rel("orders", "product_id", "products", "id", 0.8, Cardinality.MANY_TO_ONE),
]


@pytest.mark.parametrize(
    "left, right, cardinality, expected",
    [
        (100, 10, Cardinality.ONE_TO_ONE, 10),
        (100, 1000, Cardinality.ONE_TO_MANY, 1000),
        (100, 1000, Cardinality.MANY_TO_ONE, 1000),
        (10, 20, Cardinality.MANY_TO_MANY, 20),
    ],
)
def test_estimate_join_rows(left, right, cardinality, expected):
    assert estimate_join_rows(left, right, cardinality) == expected


def test_classify_performance():
    assert classify_performance(1000, 1.5) == Performance.FAST
    assert classify_performance(50000, 3.0) == Performance.MODERATE
    assert classify_performance(200000, 1.0) == Performance.SLOW
    assert classify_performance(10, 5.0) == Performance.SLOW
    assert classify_performance(1000, 1.5, config={"performance": {"fast_rows": 500}}) == Performance.MODERATE


def test_strategy_orderings():
    def ids(strategy):
        return [p.dataset_id for p in order_datasets(strategy, PROFILES, RELATIONSHIPS)]

    assert ids(JoinStrategy.LEFT_HEAVY) == ["orders", "customers", "products"]
    assert ids(JoinStrategy.BALANCED) == ["orders", "customers", "products"]
    assert ids(JoinStrategy.RELATIONSHIP_OPTIMAL) == ["customers", "orders", "products"]
    assert ids(JoinStrategy.MINIMAL_JOINS) == ["customers", "orders", "products"]


def test_relationship_optimal_plan():
    plan = build_join_plan(JoinStrategy.RELATIONSHIP_OPTIMAL, PROFILES, RELATIONSHIPS)

    assert plan.is_valid is True
    assert len(plan.steps) == len(PROFILES) - 1
    first, second = plan.steps

    assert (first.left_dataset_id, first.right_dataset_id) == ("customers", "orders")
    assert first.join_condition == "customers.id = orders.customer_id"
    assert first.is_intermediate is True
    assert first.output_name == "intermediate_1"
    assert first.estimated_rows == 1000

    assert (second.left_dataset_id, second.right_dataset_id) == ("orders", "products")
    assert second.join_condition == "orders.product_id = products.id"
    assert second.output_name == "final"
    assert second.join_type == JoinType.INNER

    assert plan.complexity == pytest.approx(1.7)
    assert plan.estimated_rows == 1000
    assert plan.performance == Performance.FAST
    assert plan.id == "plan_relationship_optimal"


def test_left_heavy_plan_starts_from_largest():
    plan = build_join_plan(JoinStrategy.LEFT_HEAVY, PROFILES, RELATIONSHIPS, join_type="left")

    assert plan.dataset_order == ("orders", "customers", "products")
    assert plan.steps[0].join_condition == "orders.customer_id = customers.id"
    assert all(s.join_type == JoinType.LEFT for s in plan.steps)


def test_disconnected_dataset_invalidates_plan():
    profiles = PROFILES + [DatasetProfile("weather", 5)]

    plan = build_join_plan(JoinStrategy.RELATIONSHIP_OPTIMAL, profiles, RELATIONSHIPS)

    assert plan.is_valid is False
    assert len(plan.steps) == 2
    error = plan.validation_errors[0]
    assert error.type == JOIN_PLAN_VALIDATION_ERROR
    assert error.details["dataset_id"] == "weather"
    assert error.decision_required is True


def test_single_dataset_is_not_a_plan():
    plan = build_join_plan(JoinStrategy.BALANCED, PROFILES[:1], [])

    assert plan.is_valid is False
    assert plan.steps == ()
    assert plan.validation_errors[0].type == JOIN_PLAN_VALIDATION_ERROR


def test_generate_and_rank_plans(dummy_ctx):
    plans = generate_join_plans(PROFILES, RELATIONSHIPS, config=dummy_ctx.config, ctx=dummy_ctx)

    assert [p.strategy.value for p in plans] == [
        "left_heavy",
        "relationship_optimal",
        "balanced",
        "minimal_joins",
    ]
    ranked = rank_join_plans(plans, config=dummy_ctx.config)
    assert len(ranked) == 4
    assert all(len(p.steps) == 2 for p in ranked)
    assert [e["message"] for e in dummy_ctx.events_for("analysis")] == ["join plan built"] * 4


def test_rank_excludes_invalid_and_honours_rank_by():
    invalid = build_join_plan(JoinStrategy.MINIMAL_JOINS, PROFILES + [DatasetProfile("weather", 5)], RELATIONSHIPS)
    narrow = build_join_plan(
        JoinStrategy.RELATIONSHIP_OPTIMAL,
        [DatasetProfile("customers", 100), DatasetProfile("orders", 50)],
        RELATIONSHIPS[:1],
    )
    wide = build_join_plan(
        JoinStrategy.BALANCED,
        [DatasetProfile("x", 100), DatasetProfile("y", 100)],
        [_rel("x", "k", "y", "k", 0.5, Cardinality.MANY_TO_MANY)],
    )
    assert (narrow.estimated_rows, narrow.complexity) == (100, 0.9)
    assert (wide.estimated_rows, wide.complexity) == (1000, 0.5)

    by_complexity = rank_join_plans([invalid, narrow, wide])
    by_rows = rank_join_plans([invalid, narrow, wide], config={"join_planner": {"rank_by": "estimated_rows"}})

    assert by_complexity == [wide, narrow]
    assert by_rows == [narrow, wide]
