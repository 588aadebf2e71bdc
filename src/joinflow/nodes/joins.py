# src/joinflow/nodes/joins.py
"""
Primitiva de join binário sobre Datasets.

Semântica (v1):
    - o lado direito é indexado por chave, mantendo a primeira linha de
      cada chave; cada linha da esquerda casa com no máximo uma da direita
    - chaves nulas nunca casam
    - registro resultante = campos da esquerda atualizados pelos da direita
    - inner: apenas linhas casadas
    - left: toda linha da esquerda (sem campos da direita quando não casa)
    - outer: left + linhas da direita cuja chave nunca casou
"""

from __future__ import annotations

from typing import Any, Dict, Set

from joinflow.analysis.types import JoinType
from joinflow.core.records import Dataset, Record, get_value


def index_by_key(records: Dataset, key: str) -> Dict[Any, Record]:
    index: Dict[Any, Record] = {}
    for record in records:
        value = get_value(record, key)
        if value is None:
            continue
        index.setdefault(value, record)
    return index


def join_records(
    left: Dataset,
    right: Dataset,
    left_key: str,
    right_key: str,
    join_type: JoinType = JoinType.INNER,
) -> Dataset:
    join_type = JoinType(join_type)
    index = index_by_key(right, right_key)
    matched: Set[Any] = set()
    out: Dataset = []

    for record in left:
        value = get_value(record, left_key)
        match = index.get(value) if value is not None else None
        if match is not None:
            merged = dict(record)
            merged.update(match)
            out.append(merged)
            matched.add(value)
        elif join_type in (JoinType.LEFT, JoinType.OUTER):
            out.append(dict(record))

    if join_type == JoinType.OUTER:
        for record in right:
            value = get_value(record, right_key)
            if value is None or value not in matched:
                out.append(dict(record))

    return out
