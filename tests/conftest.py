# tests/conftest.py
"""
Fixtures compartilhados para testes do JoinFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configuração efetiva determinística (defaults do pacote)
- contexto de execução controlado (RunContext)
- conectores em memória pré-carregados
- executores dummy para testes estruturais do engine
- Datasets pequenos e canônicos (customers, orders, people)

O objetivo destas fixtures é permitir testes do core
(config, pipeline, engine), dos nós e da análise sem depender de:
- filesystem (exceto via tmp_path nos testes de loader)
- variáveis de ambiente
- conectores reais

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados (cópias por teste)
    - Executores dummy utilizam duck typing em vez de herança
    - Imports do pacote são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture contém lógica de domínio
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não validar semântica completa de config
"""

import time
from datetime import datetime, timezone

import pytest


# =====================================================
# Config + RunContext
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração efetiva derivada do `defaults.yaml` do pacote.

    Decisões arquiteturais:
        - Carregada via `load_config()` para que os testes exercitem os
          mesmos defaults usados em produção
        - Cada teste recebe um dicionário novo (mutação não vaza)

    Returns:
        dict: Configuração efetiva (defaults sem overrides).
    """
    from joinflow.core.config import load_config

    return load_config()


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    Invariantes:
        - run_id fixo ("run-test-001")
        - created_at fixo em UTC
        - eventos, warnings e estado vivo começam vazios
    """
    from joinflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"project": "joinflow-tests"},
    )


# =====================================================
# Datasets canônicos
# =====================================================

@pytest.fixture
def customers() -> list:
    return [
        {"id": 1, "name": "Ana", "city": "Lisboa"},
        {"id": 2, "name": "Bruno", "city": "Porto"},
    ]


@pytest.fixture
def orders() -> list:
    return [
        {"order_id": 10, "customer_id": 1, "amount": 99.5},
        {"order_id": 11, "customer_id": 2, "amount": 15.0},
    ]


@pytest.fixture
def people() -> list:
    return [
        {"id": 1, "name": "ana", "age": 30},
        {"id": 2, "name": "bruno", "age": 25},
        {"id": 3, "name": "carla", "age": 35},
        {"id": 4, "name": "diego", "age": 28},
        {"id": 5, "name": "elisa", "age": 32},
    ]


# =====================================================
# Conectores
# =====================================================

@pytest.fixture
def memory_connector(customers, orders, people):
    """MemoryConnector com os Datasets canônicos registrados por id."""
    from joinflow.connectors.memory import MemoryConnector

    return MemoryConnector({"customers": customers, "orders": orders, "people": people})


@pytest.fixture
def connector_registry(memory_connector):
    """Registry com o conector em memória registrado como "memory"."""
    from joinflow.connectors.registry import ConnectorRegistry

    registry = ConnectorRegistry()
    registry.register("memory", memory_connector)
    return registry


# =====================================================
# Executores dummy
# =====================================================

@pytest.fixture
def DummyExecutor():
    """
    Factory de executores dummy para testes estruturais do engine.

    O executor produzido:
        - declara `node_type`
        - concatena as entradas e acrescenta `rows` registros fixos
        - pode falhar (`fail=True`) ou dormir (`sleep_seconds`)
        - registra a ordem de chamada em `calls`

    Decisões arquiteturais:
        - Duck typing (protocolo NodeExecutor), sem herança
        - Comportamento configurável por nó via `node.config`
          (`fail`, `sleep_seconds`, `rows`)
    """
    from joinflow.core.pipeline.types import ExecutionResult, NodeStatus, NodeType

    class _DummyExecutor:
        def __init__(self, node_type=NodeType.TRANSFORM, *, reject=False):
            self.node_type = NodeType(node_type)
            self.reject = reject
            self.calls = []
            self.seen_inputs = {}

        def validate(self, node):
            if self.reject:
                from joinflow.core.exceptions import InvalidNodeConfigError

                raise InvalidNodeConfigError(
                    message=f"Node '{node.id}' rejected",
                    details={"node_id": node.id},
                )

        def execute(self, node, inputs, ctx):
            self.calls.append(node.id)
            self.seen_inputs[node.id] = {k: list(v) for k, v in inputs.items()}

            sleep_seconds = node.config.get("sleep_seconds")
            if sleep_seconds:
                time.sleep(float(sleep_seconds))
            if node.config.get("fail"):
                raise RuntimeError(f"boom in {node.id}")

            data = [dict(r) for ds in inputs.values() for r in ds]
            data.extend({"node": node.id, "n": i} for i in range(int(node.config.get("rows", 1))))
            return ExecutionResult(
                node_id=node.id,
                node_type=node.type,
                status=NodeStatus.SUCCESS,
                data=data,
                rows_processed=len(data),
            )

    return _DummyExecutor
