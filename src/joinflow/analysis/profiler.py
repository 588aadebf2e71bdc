# src/joinflow/analysis/profiler.py
"""
Analisador de colunas (perfil por Dataset).

Para cada coluna presente no primeiro Record, uma única varredura da
coluna inteira produz um `ColumnProfile`:

    - inferred_type: tipo do primeiro valor não nulo
    - nullable / null_count: presença de nulos (None, NaN ou ausente)
    - distinct_count: valores distintos não nulos (`Series.nunique`)
    - sample_values: até `sample_size` valores distintos, em ordem de aparição
    - is_id_column: nome de id (`id`, `*_id`, contém `key`) E todos os
      valores não nulos, únicos e ordinais (inteiros ou strings de dígitos)
    - is_foreign_key: nome `*_id` (e não `id`) E distintos < ratio × linhas

Invariantes:
    - distinct_count <= record_count
    - Dataset vazio produz perfil sem colunas
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from joinflow.core.config import config_section
from joinflow.core.records import ColumnType, column_values, columns_of, infer_value_type

from .types import ColumnProfile, DatasetProfile


_DIGITS = re.compile(r"^\d+$")

DEFAULT_SAMPLE_SIZE = 5
DEFAULT_FOREIGN_KEY_RATIO = 0.9


def is_id_name(name: str) -> bool:
    lowered = name.lower()
    return lowered == "id" or lowered.endswith("_id") or "key" in lowered


def is_foreign_key_name(name: str) -> bool:
    lowered = name.lower()
    return lowered.endswith("_id") and lowered != "id"


def _is_ordinal(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and bool(_DIGITS.match(value))


def _first_non_null(values: List[Any]) -> Optional[Any]:
    for value in values:
        if value is not None:
            return value
    return None


def profile_column(
    name: str,
    values: List[Any],
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    foreign_key_ratio: float = DEFAULT_FOREIGN_KEY_RATIO,
) -> ColumnProfile:
    total = len(values)
    series = pd.Series(values, dtype=object)
    null_mask = series.isna()
    null_count = int(null_mask.sum())
    non_null = series[~null_mask]
    distinct = int(series.nunique(dropna=True))
    samples = tuple(pd.unique(non_null)[:sample_size].tolist()) if len(non_null) else ()

    first = _first_non_null(values)
    inferred = infer_value_type(first) if first is not None else ColumnType.UNKNOWN

    is_unique = total > 0 and null_count == 0 and distinct == total
    is_id = is_id_name(name) and is_unique and all(_is_ordinal(v) for v in non_null)
    is_fk = is_foreign_key_name(name) and distinct < foreign_key_ratio * total

    return ColumnProfile(
        name=name,
        inferred_type=inferred,
        nullable=null_count > 0,
        distinct_count=distinct,
        sample_values=samples,
        is_id_column=bool(is_id),
        is_foreign_key=bool(is_fk),
        null_count=null_count,
        is_unique=bool(is_unique),
    )


def profile_dataset(
    dataset_id: str,
    records: Sequence[Mapping[str, Any]],
    *,
    config: Optional[Dict[str, Any]] = None,
) -> DatasetProfile:
    """Perfila um Dataset: um ColumnProfile por coluna do primeiro Record."""
    analysis_cfg = config_section(config, "analysis")
    sample_size = int(analysis_cfg.get("sample_size", DEFAULT_SAMPLE_SIZE))
    ratio = float(analysis_cfg.get("foreign_key_distinct_ratio", DEFAULT_FOREIGN_KEY_RATIO))

    columns = tuple(
        profile_column(
            str(col),
            column_values(records, col),
            sample_size=sample_size,
            foreign_key_ratio=ratio,
        )
        for col in columns_of(records)
    )
    return DatasetProfile(dataset_id=dataset_id, record_count=len(records), columns=columns)
