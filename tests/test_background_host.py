"""Tests for the host adapter, the headless surface and the headless runner."""

from __future__ import annotations

import logging

from configs.loader import BackgroundConfig, GovernorSettings, HostSettings
from core.background_host import BackgroundHost
from core.device_capabilities import BatteryStatus, DeviceCapabilities
from core.headless_surface import HeadlessSurface
from core.metrics_sink import RecordingMetricsSink
from main import run_headless
from shapefield.generator import FieldConfig


class StepClock:
    """Fake monotonic clock advancing a fixed step on every read."""

    def __init__(self, step: float = 16.0) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def _config(**governor) -> BackgroundConfig:
    return BackgroundConfig(
        field=FieldConfig(seed=9, shape_count=20),
        governor=GovernorSettings(**governor),
        host=HostSettings(width=400, height=300),
    )


def _start(capabilities: DeviceCapabilities | None = None, config: BackgroundConfig | None = None, step: float = 16.0):
    clock = StepClock(step)
    surface = HeadlessSurface(400, 300, history_size=16, clock=clock)
    sink = RecordingMetricsSink()
    host = BackgroundHost(capabilities=capabilities or DeviceCapabilities(), sink=sink, clock=clock)
    session = host.start(surface, config or _config())
    return host, surface, sink, session


def test_start_applies_recommended_shape_count() -> None:
    _host, surface, _sink, session = _start()

    assert surface.attached
    assert len(session.field.shapes) == 80
    assert session.update_stride == 1
    assert session.recommendation.enable_blur


def test_configured_shape_count_wins_when_recommendation_is_off() -> None:
    config = BackgroundConfig(
        field=FieldConfig(shape_count=20),
        host=HostSettings(width=400, height=300, apply_recommendation=False),
    )
    _host, _surface, _sink, session = _start(config=config)

    assert len(session.field.shapes) == 20


def test_each_frame_is_presented_and_observed() -> None:
    _host, surface, _sink, session = _start()

    delivered = surface.run(5)

    assert delivered == 5
    assert [frame.frame_index for frame in surface.frames] == [0, 1, 2, 3, 4]
    assert session.governor.get_metrics().total_frames == 5
    assert all(frame.blur for frame in surface.frames)


def test_surface_timestamps_share_the_governor_clock() -> None:
    _host, surface, _sink, session = _start(step=16.0)

    surface.run(70)

    metrics = session.governor.get_metrics()
    assert session.governor.fps_history != ()
    assert metrics.min_fps > 55
    assert metrics.dropped_frames == 0


def test_update_stride_skips_ticks_between_updates() -> None:
    _host, surface, _sink, session = _start(DeviceCapabilities(is_mobile=True))
    assert session.update_stride == 2

    surface.run(3)

    frame0, frame1, frame2 = surface.frames
    assert len(frame0.commands) == 30
    assert frame1.commands == frame0.commands
    assert frame2.commands != frame1.commands
    assert not frame0.blur


def test_low_battery_doubles_stride() -> None:
    capabilities = DeviceCapabilities(battery=BatteryStatus(level=0.1, charging=False))
    _host, _surface, _sink, session = _start(capabilities)

    assert session.update_stride == 2


def test_reduced_motion_draws_a_static_field() -> None:
    _host, surface, _sink, session = _start(DeviceCapabilities(reduced_motion=True))

    surface.run(6)

    first = surface.frames[0]
    assert all(frame.commands == first.commands for frame in surface.frames)
    assert session.governor.get_metrics().total_frames == 6


def test_resize_rebuilds_field_and_restarts_motion() -> None:
    _host, surface, _sink, session = _start()
    surface.run(4)

    surface.resize(200, 100)

    assert (session.field.width, session.field.height) == (200.0, 100.0)
    assert session.frame_index == 0
    surface.run(1)
    assert surface.latest().width == 200.0
    assert surface.latest().frame_index == 0


def test_surface_loss_tears_down_and_releases_sink(caplog) -> None:
    _host, surface, sink, session = _start()
    surface.run(2)
    surface.lost = True

    with caplog.at_level(logging.WARNING, logger="core.background_host"):
        delivered = surface.run(10)

    assert delivered == 1
    assert not session.active
    assert not surface.attached
    assert sink.released
    assert session.governor.get_metrics().total_frames == 2
    assert any("surface lost" in r.getMessage() for r in caplog.records)


def test_stop_detaches_and_is_idempotent() -> None:
    host, surface, sink, session = _start()
    surface.run(3)

    host.stop(session)
    host.stop(session)

    assert not surface.attached
    assert sink.released
    assert surface.run(5) == 0
    session.frame(1.0)
    assert session.governor.get_metrics().total_frames == 3


def test_running_context_releases_on_exit() -> None:
    clock = StepClock()
    surface = HeadlessSurface(320, 240, clock=clock)
    sink = RecordingMetricsSink()
    host = BackgroundHost(capabilities=DeviceCapabilities(), sink=sink, clock=clock)

    with host.running(surface, _config()) as session:
        surface.run(2)
        assert session.active

    assert not session.active
    assert not surface.attached
    assert sink.released


def test_adaptive_session_degrades_on_poor_performance(caplog) -> None:
    config = _config(adaptive=True, adapt_after_samples=2)
    # 50 ms frames: 20 fps with every frame dropped.
    _host, surface, sink, session = _start(config=config, step=50.0)

    with caplog.at_level(logging.INFO, logger="core.background_host"):
        surface.run(50)

    assert len(session.field.shapes) == 40
    assert session.update_stride == 2
    assert not session.recommendation.enable_blur
    assert session.governor.sample_count == 0
    assert len(sink.snapshots) == 2
    assert any("Adapting background" in r.getMessage() for r in caplog.records)


def test_non_adaptive_session_keeps_recommendation() -> None:
    _host, surface, _sink, session = _start(step=50.0)

    surface.run(50)

    assert len(session.field.shapes) == 80
    assert session.governor.sample_count == 2


def test_run_headless_reports_metrics_and_last_frame() -> None:
    config = _config()

    result = run_headless(config, 130, capabilities=DeviceCapabilities(is_low_end=True), clock=StepClock(20.0))

    assert result.frames_rendered == 130
    assert result.last_frame is not None
    assert len(result.last_frame.commands) == 50
    metrics = result.snapshot.metrics
    assert metrics.total_frames == 130
    assert metrics.dropped_frames == 0
    assert result.snapshot.fps_history == (49, 50)
