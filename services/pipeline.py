"""Sequencing of the read, reduce, evaluate and write stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Callable, Dict

from datastore.alert_store import AlertStore, build_default_alert_store
from models.records import AlertRecord, NodeSummary
from services.evaluator import AlertEvaluator, utcnow
from services.reducer import WindowedReducer
from storage.sensor_store import SensorStoreGateway, build_default_sensor_store

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of one pipeline run."""

    timestamp: datetime
    sensor_data: Dict[str, NodeSummary] = field(default_factory=dict)
    alert_data: Dict[str, AlertRecord] = field(default_factory=dict)


class SnapshotPipeline:
    """Coordinates the sensor gateway, reducer, evaluator and alert sink.

    The pipeline keeps no state between runs; every call re-reads the
    lookback window and opens its own store clients.
    """

    def __init__(
        self,
        gateway: SensorStoreGateway,
        reducer: WindowedReducer,
        evaluator: AlertEvaluator,
        alert_store: AlertStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.gateway = gateway
        self.reducer = reducer
        self.evaluator = evaluator
        self.alert_store = alert_store
        self._clock = clock

    def run(self) -> PipelineResult:
        sensor_data = self.reducer.reduce(self.gateway.fetch_readings())
        alert_data = self.evaluator.evaluate(sensor_data)
        self.alert_store.write_alerts(alert_data)
        logger.debug(
            "Snapshot pipeline completed",
            extra={"node_count": len(sensor_data)},
        )
        return PipelineResult(
            timestamp=self._clock(),
            sensor_data=sensor_data,
            alert_data=alert_data,
        )


@lru_cache
def build_default_pipeline() -> SnapshotPipeline:
    """Factory that wires the pipeline against the configured stores."""
    return SnapshotPipeline(
        gateway=build_default_sensor_store(),
        reducer=WindowedReducer(),
        evaluator=AlertEvaluator(),
        alert_store=build_default_alert_store(),
    )
