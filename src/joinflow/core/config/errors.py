# src/joinflow/core/config/errors.py
"""
Exceções da camada de configuração do JoinFlow.

Todas herdam de `ConfigError`, permitindo captura genérica de falhas
de carregamento e merge sem confundi-las com falhas de execução de nós.
"""


class ConfigError(Exception):
    """Exceção base para erros de carregamento/resolução de configuração."""


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de defaults não existe no caminho informado.

    Sem defaults não existe configuração efetiva válida; o loader não
    tenta criar ou inferir defaults ausentes.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada.

    Formatos aceitos (v1): YAML (.yaml, .yml) e JSON (.json).
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um mapa chave-valor."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"engine": {"progress_callbacks": true}}
        - override: {"engine": "fast"}

    `null` pode ser sobrescrito por qualquer valor (e vice-versa), e
    inteiros/floats são intercambiáveis; demais divergências são erro.
    """
