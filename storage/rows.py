"""Coercion helpers for rows returned by the store's SQL interface."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

import pyarrow as pa
import pyarrow.compute as pc


def require_str(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        raise ValueError(f"missing {key}")
    candidate = str(value).strip()
    if not candidate:
        raise ValueError(f"missing {key}")
    return candidate


def require_float(row: Mapping[str, Any], key: str) -> float:
    value = row.get(key)
    if value is None:
        raise ValueError(f"missing {key}")
    if isinstance(value, bool):
        raise ValueError(f"invalid numeric value for {key}: {value!r}")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid numeric value for {key}: {value!r}") from exc
    if not math.isfinite(parsed):
        raise ValueError(f"invalid numeric value for {key}: {value!r}")
    return parsed


def require_int(row: Mapping[str, Any], key: str) -> int:
    value = row.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = require_float(row, key)
    if not parsed.is_integer():
        raise ValueError(f"invalid integer value for {key}: {value!r}")
    return int(parsed)


def require_bool(row: Mapping[str, Any], key: str) -> bool:
    value = row.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "t", "1"}:
            return True
        if lowered in {"false", "f", "0"}:
            return False
    raise ValueError(f"invalid boolean value for {key}: {value!r}")


def parse_timestamp(value: Any) -> datetime:
    """Normalise a store timestamp to an aware UTC ``datetime``.

    Arrow hands back ``datetime`` objects (or pandas ``Timestamp`` for
    nanosecond columns when pandas is installed); integers are treated as
    nanoseconds since the epoch and strings as ISO-8601.
    """
    if value is None:
        raise ValueError("missing time")

    if hasattr(value, "to_pydatetime"):
        value = value.to_pydatetime()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value / 1_000_000_000, tz=timezone.utc)
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            raise ValueError("missing time")
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise ValueError("Invalid timestamp format") from exc
    else:
        raise ValueError(f"unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def batch_to_rows(batch: pa.RecordBatch) -> List[Dict[str, Any]]:
    """Convert an Arrow record batch into row dicts.

    Nanosecond timestamp columns are truncated to microseconds first so they
    convert to ``datetime`` without pandas.
    """
    columns = []
    for column_field, column in zip(batch.schema, batch.columns):
        if pa.types.is_timestamp(column_field.type) and column_field.type.unit == "ns":
            column = pc.cast(column, pa.timestamp("us", tz=column_field.type.tz), safe=False)
        columns.append(column)
    return pa.RecordBatch.from_arrays(columns, names=batch.schema.names).to_pylist()
