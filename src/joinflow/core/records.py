# src/joinflow/core/records.py
"""
Modelo de Record e Dataset do JoinFlow.

Um Record é um mapeamento ordenado `nome da coluna -> valor escalar`
(string, inteiro, float, booleano, data ou nulo). Um Dataset é uma
sequência finita e ordenada de Records que compartilham um schema
nominal, inferido a partir do primeiro Record.

Regras:
    - Colunas ausentes em Records posteriores são lidas como nulo
    - `None` e float NaN são nulos
    - Strings no formato `YYYY-MM-DD...` são datas; strings só com dígitos
      são inteiros

Limites explícitos:
    - Não converte valores (a inferência é apenas de tipo)
    - Não valida Records contra o schema
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


Record = Dict[str, Any]
Dataset = List[Record]

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DIGITS_PATTERN = re.compile(r"^\d+$")


class ColumnType(str, Enum):
    """Tipos inferidos de coluna (valores textuais estáveis)."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    UNKNOWN = "unknown"


def is_null(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def infer_value_type(value: Any) -> ColumnType:
    """Infere o ColumnType de um valor escalar.

    `bool` é testado antes de `int` (bool é subclasse de int em Python).
    """
    if is_null(value):
        return ColumnType.UNKNOWN
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, int):
        return ColumnType.INTEGER
    if isinstance(value, float):
        return ColumnType.FLOAT
    if isinstance(value, (date, datetime)):
        return ColumnType.DATE
    if isinstance(value, str):
        if _DATE_PATTERN.match(value):
            return ColumnType.DATE
        if _DIGITS_PATTERN.match(value):
            return ColumnType.INTEGER
        return ColumnType.STRING
    return ColumnType.UNKNOWN


def get_value(record: Mapping[str, Any], column: str) -> Any:
    """Lê uma coluna do Record; ausente ou NaN é lido como None."""
    value = record.get(column)
    return None if is_null(value) else value


def columns_of(dataset: Sequence[Mapping[str, Any]]) -> List[str]:
    """Colunas do schema nominal (as do primeiro Record, em ordem)."""
    if not dataset:
        return []
    return list(dataset[0].keys())


def infer_schema(dataset: Sequence[Mapping[str, Any]]) -> Optional[Dict[str, str]]:
    """Infere o schema `{coluna: tipo}` a partir do primeiro Record.

    Returns:
        None para Dataset vazio.
    """
    if not dataset:
        return None
    first = dataset[0]
    return {str(col): infer_value_type(value).value for col, value in first.items()}


def column_values(dataset: Sequence[Mapping[str, Any]], column: str) -> List[Any]:
    return [get_value(record, column) for record in dataset]


def copy_dataset(datasets: Iterable[Sequence[Mapping[str, Any]]]) -> Dataset:
    """Concatena Datasets produzindo Records novos (cópias rasas).

    Nenhum nó recebe referências aos Records de outro nó.
    """
    out: Dataset = []
    for ds in datasets:
        out.extend(dict(record) for record in ds)
    return out
