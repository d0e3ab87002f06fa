"""
Flattening of nested key/value structures into dotted-path records.

Arrays are deliberately not expanded into indexed keys: an array is kept
as its compact JSON text under its own key.
"""

from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict, Iterable, List, Mapping

from .tabular import TabularData

FlattenedRecord = Dict[str, Any]

# Integral floats at or above this keep exponent notation
_INTEGRAL_FLOAT_LIMIT = 1e21


def _is_integral_float(value: Any) -> bool:
    return (
        isinstance(value, float)
        and value.is_integer()
        and abs(value) < _INTEGRAL_FLOAT_LIMIT
    )


def _integral_floats_to_int(value: Any) -> Any:
    """Rewrite ``2.0`` as ``2`` anywhere inside nested lists and mappings."""
    if _is_integral_float(value):
        return int(value)
    if isinstance(value, (list, tuple)):
        return [_integral_floats_to_int(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _integral_floats_to_int(item) for key, item in value.items()}
    return value


def flatten_object(value: Mapping[str, Any], prefix: str = "") -> FlattenedRecord:
    """
    Collapse a nested mapping into ``{"a.b.c": scalar}``.

    ``None`` becomes ``""``, lists become JSON text, nested mappings recurse,
    everything else is stored as-is and stringified later by ``field_to_text``.
    """
    flattened: FlattenedRecord = {}

    for key, item in value.items():
        new_key = f"{prefix}.{key}" if prefix else str(key)

        if item is None:
            flattened[new_key] = ""
        elif isinstance(item, (list, tuple)):
            flattened[new_key] = json.dumps(
                _integral_floats_to_int(item),
                separators=(",", ":"),
                ensure_ascii=False,
                default=str,
            )
        elif isinstance(item, Mapping):
            flattened.update(flatten_object(item, new_key))
        else:
            flattened[new_key] = item

    return flattened


def field_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    if _is_integral_float(value):
        return str(int(value))
    return str(value)


def collect_headers(records: Iterable[FlattenedRecord]) -> List[str]:
    """Union of record keys, ordered by first appearance."""
    headers: Dict[str, None] = {}
    for record in records:
        for key in record:
            headers.setdefault(key, None)
    return list(headers)


def records_to_rows(records: List[FlattenedRecord]) -> TabularData:
    """Header row followed by one row per record; missing keys are empty."""
    headers = collect_headers(records)
    rows: TabularData = [headers]
    for record in records:
        rows.append([field_to_text(record.get(header)) for header in headers])
    return rows
