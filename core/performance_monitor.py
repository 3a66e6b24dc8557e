"""Frame-timing governor: FPS window, dropped frames and periodic reporting."""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

import psutil

if TYPE_CHECKING:
    from core.metrics_sink import MetricsSink

LOGGER = logging.getLogger(__name__)

# Nominal budget of a 60 Hz target. A design constant, not read from the display.
FRAME_BUDGET_MS = 1000.0 / 60.0
DROPPED_FRAME_FACTOR = 1.5
AGGREGATE_INTERVAL_MS = 1000.0
WINDOW_CAPACITY = 60
DEFAULT_LOG_INTERVAL_MS = 5000.0

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Return a monotonic timestamp in milliseconds."""
    return time.perf_counter() * 1000.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class GovernorState(str, Enum):
    WARMING = "warming"
    STEADY = "steady"


class PerformanceRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass(frozen=True)
class PerformanceMetrics:
    """Aggregate counters read from the governor."""

    instantaneous_fps: int = 0
    average_fps: int = 0
    min_fps: int = 0
    dropped_frames: int = 0
    total_frames: int = 0

    @property
    def dropped_ratio(self) -> float:
        if self.total_frames == 0:
            return 0.0
        return self.dropped_frames / self.total_frames

    @property
    def dropped_percentage(self) -> float:
        return round(self.dropped_ratio * 100.0, 1)


@dataclass(frozen=True)
class MemoryUsage:
    """Resident memory of this process."""

    rss_mb: float

    @property
    def label(self) -> str:
        return f"{self.rss_mb:.1f}MB"


@dataclass(frozen=True)
class MetricsSnapshot:
    """Everything a sink or a log record needs about one aggregate update."""

    metrics: PerformanceMetrics
    memory: MemoryUsage | None
    rating: PerformanceRating
    state: GovernorState
    fps_history: tuple[int, ...] = ()

    @property
    def memory_label(self) -> str:
        return self.memory.label if self.memory is not None else "N/A"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = asdict(self.metrics)
        payload.update(
            {
                "dropped_percentage": self.metrics.dropped_percentage,
                "memory_mb": self.memory.rss_mb if self.memory is not None else None,
                "memory": self.memory_label,
                "rating": self.rating.value,
                "state": self.state.value,
            }
        )
        return payload


def rate_performance(metrics: PerformanceMetrics) -> PerformanceRating:
    """Qualitative rating from average FPS and dropped-frame percentage."""
    dropped = metrics.dropped_percentage
    if metrics.average_fps >= 55 and dropped < 5:
        return PerformanceRating.EXCELLENT
    if metrics.average_fps >= 40 and dropped < 10:
        return PerformanceRating.GOOD
    if metrics.average_fps >= 25 and dropped < 20:
        return PerformanceRating.FAIR
    return PerformanceRating.POOR


def probe_memory() -> MemoryUsage | None:
    """Return process memory, or ``None`` when introspection is unavailable."""
    try:
        rss = psutil.Process().memory_info().rss
    except (psutil.Error, OSError) as exc:
        LOGGER.debug("Memory introspection unavailable: %s", exc)
        return None
    return MemoryUsage(rss_mb=rss / 1048576.0)


class PerformanceGovernor:
    """Samples frame timing and keeps a bounded window of per-second FPS.

    ``observe`` must be called once per rendered frame with a monotonic
    millisecond timestamp. All aggregation happens synchronously inside
    ``observe``; nothing runs on a timer.
    """

    def __init__(
        self,
        clock: Clock = monotonic_ms,
        log_interval_ms: float = DEFAULT_LOG_INTERVAL_MS,
        sink: MetricsSink | None = None,
        memory_probe: Callable[[], MemoryUsage | None] = probe_memory,
    ) -> None:
        self._clock = clock
        self.log_interval_ms = float(log_interval_ms)
        self.sink = sink
        self._memory_probe = memory_probe
        self._history: deque[int] = deque(maxlen=WINDOW_CAPACITY)
        self.reset()

    @property
    def state(self) -> GovernorState:
        return GovernorState.STEADY if self._history else GovernorState.WARMING

    @property
    def sample_count(self) -> int:
        """Aggregate samples recorded since the last reset (not capped)."""
        return self._samples_recorded

    @property
    def fps_history(self) -> tuple[int, ...]:
        return tuple(self._history)

    def reset(self) -> None:
        """Clear the window and every counter; timing restarts from now."""
        now = float(self._clock())
        self._fps = 0
        self._ticks_this_second = 0
        self._history.clear()
        self._dropped_frames = 0
        self._total_frames = 0
        self._samples_recorded = 0
        self._last_tick = now
        self._last_update = now
        self._last_log = now

    def observe(self, timestamp: float) -> None:
        """Record one frame that finished at ``timestamp`` (ms)."""
        timestamp = float(timestamp)
        delta = timestamp - self._last_tick
        self._last_tick = timestamp

        self._total_frames += 1
        if delta > FRAME_BUDGET_MS * DROPPED_FRAME_FACTOR:
            self._dropped_frames += 1

        elapsed = timestamp - self._last_update
        if elapsed >= AGGREGATE_INTERVAL_MS:
            self._fps = round_half_up(self._ticks_this_second * 1000.0 / elapsed)
            self._history.append(self._fps)
            self._samples_recorded += 1
            self._ticks_this_second = 0
            self._last_update = timestamp
            self._on_aggregate(timestamp)

        self._ticks_this_second += 1

    def get_metrics(self) -> PerformanceMetrics:
        """Return current aggregates; averages are over the sample window."""
        if self._history:
            average = round_half_up(sum(self._history) / len(self._history))
            minimum = min(self._history)
        else:
            average = 0
            minimum = 0
        return PerformanceMetrics(
            instantaneous_fps=self._fps,
            average_fps=average,
            min_fps=minimum,
            dropped_frames=self._dropped_frames,
            total_frames=self._total_frames,
        )

    def memory_usage(self) -> MemoryUsage | None:
        return self._memory_probe()

    def snapshot(self) -> MetricsSnapshot:
        metrics = self.get_metrics()
        return MetricsSnapshot(
            metrics=metrics,
            memory=self.memory_usage(),
            rating=rate_performance(metrics),
            state=self.state,
            fps_history=self.fps_history,
        )

    def _on_aggregate(self, timestamp: float) -> None:
        snapshot = self.snapshot()
        if self.sink is not None:
            self.sink.publish(snapshot)
        if timestamp - self._last_log >= self.log_interval_ms:
            self._log(snapshot)
            self._last_log = timestamp

    @staticmethod
    def _log(snapshot: MetricsSnapshot) -> None:
        metrics = snapshot.metrics
        LOGGER.info(
            "Performance: fps=%d avg=%d min=%d memory=%s dropped=%d/%d (%.1f%%) rating=%s",
            metrics.instantaneous_fps,
            metrics.average_fps,
            metrics.min_fps,
            snapshot.memory_label,
            metrics.dropped_frames,
            metrics.total_frames,
            metrics.dropped_percentage,
            snapshot.rating.value,
            extra={"metrics": snapshot.to_dict()},
        )
