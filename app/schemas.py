"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class NodeSnapshot(BaseModel):
    """Latest reading of a node plus statistics over its recent window."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_value: float
    temperature: float
    rssi: float
    hops: int
    time: datetime = Field(..., alias="_time")
    avg: float = Field(..., description="Mean of the values in the window.")
    variance: float = Field(
        ..., description="Latest value minus the window mean (signed)."
    )
    readings: List[float] = Field(
        default_factory=list, description="Window values, newest first."
    )


class AlertSnapshot(BaseModel):
    """Alert verdict computed during the current request."""

    model_config = ConfigDict(populate_by_name=True)

    delta: float = Field(..., ge=0, description="Largest deviation from the window mean.")
    active: bool
    time: datetime = Field(..., alias="_time")


class StoredAlert(AlertSnapshot):
    """Alert point read back from the alert store."""

    avg: float
    latest: float


class AllDataResponse(BaseModel):
    """Combined sensor and alert view returned by the snapshot endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_data: Dict[str, NodeSnapshot] = Field(default_factory=dict, alias="sensorData")
    alert_data: Dict[str, AlertSnapshot] = Field(default_factory=dict, alias="alertData")
    timestamp: datetime


class StoredAlertsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    alert_data: Dict[str, StoredAlert] = Field(default_factory=dict, alias="alertData")
    timestamp: datetime


class ErrorResponse(BaseModel):
    error: str
