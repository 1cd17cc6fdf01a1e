"""Gateway over the mesh sensor measurement in InfluxDB 3."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache, partial
from typing import Any, Iterator, Mapping, Optional

from influxdb_client_3 import InfluxDBClient3

from errors import StoreError, StoreQueryFailed
from models.records import Reading
from settings import get_settings
from storage.rows import (
    batch_to_rows,
    parse_timestamp,
    require_float,
    require_int,
    require_str,
)
from storage.session import ClientFactory, classify_query_error, store_session

logger = logging.getLogger(__name__)

SENSOR_MEASUREMENT = "mesh_sensor"
LOOKBACK = timedelta(minutes=2)
QUERY_LIMIT = 100


def build_readings_query(
    lookback: timedelta = LOOKBACK,
    limit: int = QUERY_LIMIT,
    measurement: str = SENSOR_MEASUREMENT,
) -> str:
    seconds = int(lookback.total_seconds())
    return (
        "SELECT node, sensor_value, temperature, rssi, hops, time "
        f'FROM "{measurement}" '
        f"WHERE time >= now() - interval '{seconds} seconds' "
        "ORDER BY node, time DESC "
        f"LIMIT {limit}"
    )


def parse_reading(row: Mapping[str, Any]) -> Reading:
    """Coerce one raw result row into a fully typed ``Reading``."""
    return Reading(
        node=require_str(row, "node"),
        sensor_value=require_float(row, "sensor_value"),
        temperature=require_float(row, "temperature"),
        rssi=require_float(row, "rssi"),
        hops=require_int(row, "hops"),
        time=parse_timestamp(row.get("time")),
    )


class SensorStoreGateway:
    """Runs the bounded lookback query and streams typed readings."""

    name = "sensor"

    def __init__(
        self,
        client_factory: ClientFactory,
        database: str,
        lookback: timedelta = LOOKBACK,
        limit: int = QUERY_LIMIT,
    ) -> None:
        self._client_factory = client_factory
        self.database = database
        self.lookback = lookback
        self.limit = limit

    def fetch_readings(self) -> Iterator[Reading]:
        """Yield readings ordered by node, newest first.

        The client is opened when iteration starts and closed when the
        generator is exhausted, fails, or is closed early.
        """
        query = build_readings_query(self.lookback, self.limit)
        row_count = 0
        with store_session(self._client_factory, store=self.name) as client:
            try:
                batches = client.query(
                    query=query,
                    language="sql",
                    mode="reader",
                    database=self.database,
                )
                for batch in batches:
                    for row in batch_to_rows(batch):
                        try:
                            reading = parse_reading(row)
                        except ValueError as exc:
                            raise StoreQueryFailed(
                                f"Unparseable row from the {self.name} store: {exc}",
                                store=self.name,
                            ) from exc
                        row_count += 1
                        yield reading
            except StoreError:
                raise
            except Exception as exc:
                raise classify_query_error(exc, self.name) from exc

        logger.debug(
            "Fetched sensor readings",
            extra={"store": self.name, "database": self.database, "row_count": row_count},
        )


@lru_cache
def build_default_sensor_store(database: Optional[str] = None) -> SensorStoreGateway:
    settings = get_settings()
    sensor_database = settings.sensor_database if database is None else database
    factory = partial(
        InfluxDBClient3,
        host=settings.influx_url,
        token=settings.sensor_token,
        database=sensor_database,
    )
    return SensorStoreGateway(client_factory=factory, database=sensor_database)
