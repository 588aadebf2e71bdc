# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do JoinFlow.

Este módulo contém testes mínimos cujo único objetivo é garantir que:
- o pacote `joinflow` é importável a partir de `src/`
- a superfície pública está exposta no pacote raiz
- os defaults empacotados são carregáveis

Invariantes:
    - Estes testes devem sempre passar em um setup correto
    - Não executam pipeline nem análise

Limites explícitos:
    - Não testar lógica de negócio
    - Não acumular asserts funcionais
"""


def test_smoke():
    import joinflow

    assert joinflow.__version__
    assert callable(joinflow.PipelineEngine)
    assert callable(joinflow.analyze_relationships)


def test_packaged_defaults_exist():
    from joinflow.core.config import DEFAULTS_PATH

    assert DEFAULTS_PATH.exists()
