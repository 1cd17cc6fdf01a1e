"""Windowed reduction of raw readings into per-node summaries."""

from __future__ import annotations

from typing import Dict, Iterable, List

from models.records import NodeSummary, Reading

WINDOW_SIZE = 10


class WindowedReducer:
    """Pure reduction component that can be unit tested in isolation."""

    def __init__(self, window_size: int = WINDOW_SIZE) -> None:
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.window_size = window_size

    def reduce(self, readings: Iterable[Reading]) -> Dict[str, NodeSummary]:
        """Summarise the newest ``window_size`` readings of every node.

        Readings must arrive newest first per node; arrival order is kept
        and the first ``window_size`` readings of each node form its window.
        """
        groups: Dict[str, List[Reading]] = {}
        for reading in readings:
            group = groups.setdefault(reading.node, [])
            if len(group) < self.window_size:
                group.append(reading)

        summaries: Dict[str, NodeSummary] = {}
        for node, window in groups.items():
            if not window:
                continue
            summaries[node] = self._summarize(node, window)
        return summaries

    @staticmethod
    def _summarize(node: str, window: List[Reading]) -> NodeSummary:
        values = tuple(reading.sensor_value for reading in window)
        average = sum(values) / len(values)
        latest = window[0]
        return NodeSummary(
            node=node,
            latest_value=latest.sensor_value,
            latest_temperature=latest.temperature,
            latest_rssi=latest.rssi,
            latest_hops=latest.hops,
            latest_time=latest.time,
            average=average,
            variance=latest.sensor_value - average,
            window=values,
        )
