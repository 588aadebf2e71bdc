# src/joinflow/core/serialization.py
"""
Conversão de valores para estruturas JSON-safe.

Usado pelos `to_dict()` de RunResult, ExecutionResult, JoinPlan e
RelationshipCandidate, que são os artefatos entregues ao store externo.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

import numpy as np


def jsonable(value: Any) -> Any:
    if value is None:
        return None

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, bool):
        return bool(value)

    if isinstance(value, (int, float, str)):
        if isinstance(value, float) and value != value:
            return None
        return value

    if isinstance(value, (np.integer, np.floating, np.bool_)):
        return jsonable(value.item())

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, Mapping):
        return {str(k): jsonable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonable(v) for v in value]

    if is_dataclass(value) and not isinstance(value, type):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return jsonable(asdict(value))

    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > 24:
            return repr(b[:24]) + "...(truncated)"
        return repr(b)

    return str(value)
