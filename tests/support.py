"""In-memory stand-ins for InfluxDB 3 clients used across the test suite.

Queries hand back real Arrow record batch readers, as ``mode="reader"`` does.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pyarrow as pa

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeInfluxClient:
    def __init__(self, store: "FakeStore") -> None:
        self._store = store
        self.closed = False

    def query(self, query: str, language: str, mode: str, database: str):
        self._store.queries.append(
            {"query": query, "language": language, "mode": mode, "database": database}
        )
        if self._store.query_error is not None:
            raise self._store.query_error
        if self._store.table is not None:
            return self._store.table.to_reader(max_chunksize=self._store.batch_size)
        table = pa.Table.from_pylist(self._store.rows)
        return table.to_reader(max_chunksize=self._store.batch_size)

    def write(self, record, database: str) -> None:
        self._store.writes.append({"points": list(record), "database": database})
        if self._store.write_error is not None:
            raise self._store.write_error

    def close(self) -> None:
        self.closed = True
        if self._store.close_error is not None:
            raise self._store.close_error


class FakeStore:
    """Client factory that hands out a fresh fake client per call."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, batch_size: int = 3) -> None:
        self.rows: List[Dict[str, Any]] = list(rows or [])
        self.table: Optional[pa.Table] = None
        self.batch_size = batch_size
        self.connect_error: Optional[Exception] = None
        self.query_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None
        self.clients: List[FakeInfluxClient] = []
        self.queries: List[Dict[str, Any]] = []
        self.writes: List[Dict[str, Any]] = []

    def __call__(self) -> FakeInfluxClient:
        if self.connect_error is not None:
            raise self.connect_error
        client = FakeInfluxClient(self)
        self.clients.append(client)
        return client

    @property
    def all_closed(self) -> bool:
        return all(client.closed for client in self.clients)


def sensor_row(
    node: str,
    value: float,
    seconds_ago: int = 0,
    temperature: float = 21.5,
    rssi: float = -60.0,
    hops: int = 1,
) -> Dict[str, Any]:
    return {
        "node": node,
        "sensor_value": value,
        "temperature": temperature,
        "rssi": rssi,
        "hops": hops,
        "time": BASE_TIME - timedelta(seconds=seconds_ago),
    }


def node_rows(node: str, values: List[float]) -> List[Dict[str, Any]]:
    """Rows for one node, newest first, five seconds apart."""
    return [sensor_row(node, value, seconds_ago=index * 5) for index, value in enumerate(values)]
