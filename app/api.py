"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Union

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.schemas import (
    AlertSnapshot,
    AllDataResponse,
    ErrorResponse,
    NodeSnapshot,
    StoredAlert,
    StoredAlertsResponse,
)
from datastore.alert_store import AlertStore, build_default_alert_store
from models.records import AlertRecord, NodeSummary
from services.pipeline import SnapshotPipeline, build_default_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def get_pipeline() -> SnapshotPipeline:
    return build_default_pipeline()


def get_alert_store() -> AlertStore:
    return build_default_alert_store()


def _node_snapshot(summary: NodeSummary) -> NodeSnapshot:
    return NodeSnapshot(
        sensor_value=summary.latest_value,
        temperature=summary.latest_temperature,
        rssi=summary.latest_rssi,
        hops=summary.latest_hops,
        time=summary.latest_time,
        avg=summary.average,
        variance=summary.variance,
        readings=list(summary.window),
    )


def _alert_snapshot(record: AlertRecord) -> AlertSnapshot:
    return AlertSnapshot(delta=record.max_delta, active=record.active, time=record.evaluated_at)


def _stored_alert(record: AlertRecord) -> StoredAlert:
    return StoredAlert(
        delta=record.max_delta,
        active=record.active,
        time=record.evaluated_at,
        avg=record.average,
        latest=record.latest_value,
    )


def _error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


@router.get(
    "/api/allData",
    response_model=AllDataResponse,
    responses=_ERROR_RESPONSES,
    summary="Reduce recent readings per node, evaluate and persist alerts.",
)
async def all_data(
    pipeline: SnapshotPipeline = Depends(get_pipeline),
) -> Union[AllDataResponse, JSONResponse]:
    try:
        result = await run_in_threadpool(pipeline.run)
    except Exception as exc:
        logger.exception("allData request failed", extra={"reason": str(exc)})
        return _error_response(exc)

    return AllDataResponse(
        sensor_data={node: _node_snapshot(s) for node, s in result.sensor_data.items()},
        alert_data={node: _alert_snapshot(r) for node, r in result.alert_data.items()},
        timestamp=result.timestamp,
    )


@router.get(
    "/api/alerts",
    response_model=StoredAlertsResponse,
    responses=_ERROR_RESPONSES,
    summary="Newest persisted alert point per node.",
)
async def stored_alerts(
    alert_store: AlertStore = Depends(get_alert_store),
) -> Union[StoredAlertsResponse, JSONResponse]:
    try:
        records = await run_in_threadpool(alert_store.fetch_latest)
    except Exception as exc:
        logger.exception("alerts request failed", extra={"reason": str(exc)})
        return _error_response(exc)

    return StoredAlertsResponse(
        alert_data={node: _stored_alert(r) for node, r in records.items()},
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
