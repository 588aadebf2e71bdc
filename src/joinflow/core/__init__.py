# src/joinflow/core/__init__.py
"""
Core do JoinFlow.

Este pacote reúne a implementação canônica do motor de execução de
pipelines, independente de conectores concretos, UI ou armazenamento.

Componentes principais:
    - records      → modelo de Record/Dataset e inferência de schema
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - pipeline     → tipos de nó/aresta, grafo, contexto de execução e registry de executores
    - engine       → ordenação topológica e coordenação da execução

Princípios fundamentais:
    - Nenhum estado global: colaboradores são injetados explicitamente
    - Falhas de nó são registradas, nunca abortam a run
    - Apenas erros de configuração (ex.: ciclos) são fatais

Limites explícitos:
    - Não persiste resultados
    - Não agenda execuções recorrentes
    - Não busca bytes de arquivos, bancos ou APIs diretamente
"""
