# tests/nodes/test_source_output_nodes.py
"""
Testes dos executores source e output.

Invariantes:
    - source busca no conector nomeado em `config.connector`
    - output concatena as entradas, entrega ao conector e reporta
      rows_processed como o número de linhas escritas
    - falhas do conector viram ConnectorError, inclusive itens que não são Records
    - conector não registrado é erro de configuração
"""

import pytest

from joinflow.core.exceptions import ConnectorError, InvalidNodeConfigError, UnknownConnectorError
from joinflow.core.pipeline.types import PipelineNode
from joinflow.nodes.output import OutputNodeExecutor
from joinflow.nodes.source import SourceNodeExecutor


def test_source_fetches_from_connector(connector_registry, dummy_ctx, people):
    node = PipelineNode("src", "source", config={"connector": "memory", "source_id": "people"})
    executor = SourceNodeExecutor(connectors=connector_registry)

    executor.validate(node)
    result = executor.execute(node, {}, dummy_ctx)

    assert result.success
    assert result.data == people
    assert result.rows_processed == 5
    assert result.output_schema == {"id": "integer", "name": "string", "age": "integer"}
    assert dummy_ctx.events_for("src")[-1]["message"] == "source fetched"


def test_source_requires_registered_connector(connector_registry):
    executor = SourceNodeExecutor(connectors=connector_registry)

    with pytest.raises(InvalidNodeConfigError):
        executor.validate(PipelineNode("src", "source"))
    with pytest.raises(UnknownConnectorError):
        executor.validate(PipelineNode("src", "source", config={"connector": "s3"}))


def test_source_connector_failure_is_wrapped(connector_registry, dummy_ctx):
    node = PipelineNode("src", "source", config={"connector": "memory", "source_id": "missing"})

    with pytest.raises(ConnectorError) as info:
        SourceNodeExecutor(connectors=connector_registry).execute(node, {}, dummy_ctx)

    assert info.value.details["exception_class"] == "KeyError"


def test_source_rejects_non_record_items(dummy_ctx):
    from joinflow.connectors.registry import ConnectorRegistry

    class MixedSource:
        def fetch(self, config):
            return [{"a": 1}, ("a", 2), {"a": 3}]

        def write(self, config, dataset):
            return {}

    registry = ConnectorRegistry()
    registry.register("mixed", MixedSource())
    node = PipelineNode("src", "source", config={"connector": "mixed"})

    with pytest.raises(ConnectorError) as info:
        SourceNodeExecutor(connectors=registry).execute(node, {}, dummy_ctx)

    assert info.value.details == {"connector": "mixed", "invalid_count": 1, "first_invalid_index": 1}
    assert dummy_ctx.events_for("src") == []


def test_output_writes_concatenated_inputs(connector_registry, memory_connector, dummy_ctx, customers, orders):
    node = PipelineNode("out", "output", config={"connector": "memory", "target": "warehouse"})
    executor = OutputNodeExecutor(connectors=connector_registry)

    result = executor.execute(node, {"a": customers, "b": orders}, dummy_ctx)

    assert result.rows_processed == 4
    assert memory_connector.last_written("warehouse") == customers + orders


def test_output_connector_failure_is_wrapped(dummy_ctx):
    from joinflow.connectors.registry import ConnectorRegistry

    class BrokenSink:
        def fetch(self, config):
            return []

        def write(self, config, dataset):
            raise OSError("disk full")

    registry = ConnectorRegistry()
    registry.register("broken", BrokenSink())
    node = PipelineNode("out", "output", config={"connector": "broken"})

    with pytest.raises(ConnectorError):
        OutputNodeExecutor(connectors=registry).execute(node, {"a": [{"x": 1}]}, dummy_ctx)
