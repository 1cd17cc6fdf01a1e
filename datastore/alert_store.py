"""Alert persistence backed by an InfluxDB 3 database."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache, partial
from typing import Any, Dict, Mapping, Optional

from influxdb_client_3 import InfluxDBClient3, Point

from errors import StoreError, StoreQueryFailed, StoreWriteFailed
from models.records import AlertRecord
from settings import get_settings
from storage.rows import (
    batch_to_rows,
    parse_timestamp,
    require_bool,
    require_float,
    require_str,
)
from storage.sensor_store import LOOKBACK
from storage.session import ClientFactory, classify_query_error, store_session

logger = logging.getLogger(__name__)

ALERT_MEASUREMENT = "alert"
ALERT_TYPE = "turbidity_variance"


def alert_point_fields(record: AlertRecord) -> Dict[str, Any]:
    return {
        "delta": float(record.max_delta),
        "avg": float(record.average),
        "latest": float(record.latest_value),
        "active": bool(record.active),
    }


def to_point(record: AlertRecord) -> Point:
    point = (
        Point(ALERT_MEASUREMENT)
        .tag("node", record.node)
        .tag("type", ALERT_TYPE)
    )
    for name, value in alert_point_fields(record).items():
        point = point.field(name, value)
    return point.time(record.evaluated_at)


def alert_from_row(row: Mapping[str, Any]) -> AlertRecord:
    """Rebuild an ``AlertRecord`` from a row of the alert measurement."""
    return AlertRecord(
        node=require_str(row, "node"),
        max_delta=require_float(row, "delta"),
        active=require_bool(row, "active"),
        evaluated_at=parse_timestamp(row.get("time")),
        average=require_float(row, "avg"),
        latest_value=require_float(row, "latest"),
    )


def build_latest_alerts_query(lookback: timedelta = LOOKBACK) -> str:
    seconds = int(lookback.total_seconds())
    return (
        "SELECT node, delta, avg, latest, active, time "
        f'FROM "{ALERT_MEASUREMENT}" '
        f"WHERE type = '{ALERT_TYPE}' "
        f"AND time >= now() - interval '{seconds} seconds' "
        "ORDER BY node, time DESC"
    )


class AlertStore:
    """Writes alert verdicts as points and reads the newest one back per node."""

    name = "alert"

    def __init__(
        self,
        client_factory: ClientFactory,
        database: str,
        lookback: timedelta = LOOKBACK,
    ) -> None:
        self._client_factory = client_factory
        self.database = database
        self.lookback = lookback

    def write_alerts(self, records: Mapping[str, AlertRecord]) -> int:
        """Persist every record in a single batched write.

        Returns the number of points written. Nothing is opened or written
        when ``records`` is empty.
        """
        if not records:
            return 0

        points = [to_point(record) for record in records.values()]
        with store_session(
            self._client_factory, store=self.name, close_error=StoreWriteFailed
        ) as client:
            try:
                client.write(record=points, database=self.database)
            except Exception as exc:
                raise StoreWriteFailed(
                    f"Writing {len(points)} alert points failed: {exc}", store=self.name
                ) from exc

        logger.info(
            "Wrote %d alert updates",
            len(points),
            extra={"store": self.name, "database": self.database, "point_count": len(points)},
        )
        return len(points)

    def fetch_latest(self) -> Dict[str, AlertRecord]:
        """Return the newest alert point of every node inside the lookback window."""
        query = build_latest_alerts_query(self.lookback)
        latest: Dict[str, AlertRecord] = {}
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
                            record = alert_from_row(row)
                        except ValueError as exc:
                            raise StoreQueryFailed(
                                f"Unparseable row from the {self.name} store: {exc}",
                                store=self.name,
                            ) from exc
                        latest.setdefault(record.node, record)
            except StoreError:
                raise
            except Exception as exc:
                raise classify_query_error(exc, self.name) from exc
        return latest


@lru_cache
def build_default_alert_store(database: Optional[str] = None) -> AlertStore:
    settings = get_settings()
    alerts_database = settings.alerts_database if database is None else database
    factory = partial(
        InfluxDBClient3,
        host=settings.influx_url,
        token=settings.alerts_token,
        database=alerts_database,
    )
    return AlertStore(client_factory=factory, database=alerts_database)
