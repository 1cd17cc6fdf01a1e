"""Threshold evaluation of node summaries."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping

from models.records import AlertRecord, NodeSummary

logger = logging.getLogger(__name__)

ALERT_THRESHOLD = 50.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertEvaluator:
    """Flags nodes whose window strays further than ``threshold`` from its mean."""

    def __init__(
        self,
        threshold: float = ALERT_THRESHOLD,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.threshold = threshold
        self._clock = clock

    def evaluate(self, summaries: Mapping[str, NodeSummary]) -> Dict[str, AlertRecord]:
        evaluated_at = self._clock()
        records: Dict[str, AlertRecord] = {}
        for node, summary in summaries.items():
            record = self.evaluate_summary(summary, evaluated_at)
            records[node] = record
            # Reflects the current verdict only; no earlier state is consulted.
            logger.info(
                "%s for %s: Δ=%.2f",
                "Alert triggered" if record.active else "Cleared alert",
                node,
                record.max_delta,
                extra={"node": node, "delta": record.max_delta, "active": record.active},
            )
        return records

    def evaluate_summary(self, summary: NodeSummary, evaluated_at: datetime) -> AlertRecord:
        max_delta = max(abs(value - summary.average) for value in summary.window)
        return AlertRecord(
            node=summary.node,
            max_delta=max_delta,
            active=max_delta > self.threshold,
            evaluated_at=evaluated_at,
            average=summary.average,
            latest_value=summary.latest_value,
        )
