"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Reading:
    """A single mesh sensor observation as returned by the sensor store."""

    node: str
    sensor_value: float
    temperature: float
    rssi: float
    hops: int
    time: datetime


@dataclass(frozen=True, slots=True)
class NodeSummary:
    """Snapshot of one node's most recent window of readings."""

    node: str
    latest_value: float
    latest_temperature: float
    latest_rssi: float
    latest_hops: int
    latest_time: datetime
    average: float
    variance: float
    window: Tuple[float, ...]


@dataclass(frozen=True, slots=True)
class AlertRecord:
    """Alert verdict for one node, written once to the alert store."""

    node: str
    max_delta: float
    active: bool
    evaluated_at: datetime
    average: float
    latest_value: float
