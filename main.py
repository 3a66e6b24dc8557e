"""Headless background runner for benchmarking and frame snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from configs.loader import DEFAULT_CONFIG_PATH, BackgroundConfig, ConfigLoader
from core.background_host import BackgroundHost
from core.device_capabilities import DeviceCapabilities
from core.headless_surface import HeadlessSurface
from core.metrics_sink import LoggingMetricsSink
from core.performance_monitor import Clock, MetricsSnapshot, monotonic_ms
from core.render_state import Frame

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeadlessRun:
    """Outcome of a headless run."""

    frames_rendered: int
    snapshot: MetricsSnapshot
    last_frame: Frame | None


def run_headless(
    config: BackgroundConfig,
    frames: int,
    capabilities: DeviceCapabilities | None = None,
    pace_ms: float | None = None,
    clock: Clock = monotonic_ms,
) -> HeadlessRun:
    """Run the background on an in-memory surface for ``frames`` frames."""
    surface = HeadlessSurface(config.host.width, config.host.height, clock=clock)
    host = BackgroundHost(capabilities=capabilities, sink=LoggingMetricsSink(), clock=clock)
    with host.running(surface, config) as session:
        delivered = surface.run(frames, pace_ms=pace_ms)
        snapshot = session.governor.snapshot()
    return HeadlessRun(frames_rendered=delivered, snapshot=snapshot, last_frame=surface.latest())


def main(config_path: str | Path = DEFAULT_CONFIG_PATH, frames: int = 600) -> None:
    """Load config and run a paced headless session at the target frame rate."""
    logging.basicConfig(level=logging.INFO)
    config = ConfigLoader.load(config_path)
    result = run_headless(config, frames, pace_ms=1000.0 / config.host.target_fps)
    LOGGER.info("Rendered %d frames: %s", result.frames_rendered, result.snapshot.to_dict())


if __name__ == "__main__":
    main()
