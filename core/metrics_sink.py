"""Metrics sink capability the governor publishes aggregate snapshots to."""

from __future__ import annotations

import logging
from collections import deque
from typing import Protocol, runtime_checkable

from core.performance_monitor import MetricsSnapshot

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class MetricsSink(Protocol):
    """Receives one snapshot per aggregate update; never read back by the core."""

    def publish(self, snapshot: MetricsSnapshot) -> None:
        ...

    def release(self) -> None:
        ...


class LoggingMetricsSink:
    """Writes each snapshot as a debug log line (headless overlay)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def publish(self, snapshot: MetricsSnapshot) -> None:
        metrics = snapshot.metrics
        self._logger.debug(
            "FPS: %d | Avg: %d | Min: %d | Mem: %s | Dropped: %d/%d (%.1f%%)",
            metrics.instantaneous_fps,
            metrics.average_fps,
            metrics.min_fps,
            snapshot.memory_label,
            metrics.dropped_frames,
            metrics.total_frames,
            metrics.dropped_percentage,
        )

    def release(self) -> None:
        return None


class RecordingMetricsSink:
    """Keeps the most recent snapshots in memory for tests and benchmarks."""

    def __init__(self, capacity: int = 256) -> None:
        self.snapshots: deque[MetricsSnapshot] = deque(maxlen=max(1, capacity))
        self.released = False

    def publish(self, snapshot: MetricsSnapshot) -> None:
        self.snapshots.append(snapshot)

    def latest(self) -> MetricsSnapshot | None:
        return self.snapshots[-1] if self.snapshots else None

    def release(self) -> None:
        self.released = True
