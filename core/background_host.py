"""Host adapter wiring a drawing surface's frame loop to the field and governor."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Protocol

from configs.loader import BackgroundConfig
from core.device_capabilities import (
    DeviceCapabilities,
    Recommendation,
    recommend_configuration,
    refine_with_metrics,
)
from core.metrics_sink import MetricsSink
from core.performance_monitor import Clock, PerformanceGovernor, monotonic_ms
from core.render_state import Frame
from shapefield import generator
from shapefield.generator import FieldConfig, ShapeField
from shapefield.render import render

LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]
ResizeCallback = Callable[[int, int], None]


class SurfaceLostError(RuntimeError):
    """Raised by a surface whose drawing target no longer exists."""


class Surface(Protocol):
    """Drawing target with a per-frame hook and resize notifications."""

    def canvas_size(self) -> tuple[int, int]:
        ...

    def present(self, frame: Frame) -> None:
        ...

    def attach(self, on_frame: FrameCallback, on_resize: ResizeCallback) -> None:
        ...

    def detach(self) -> None:
        ...


class BackgroundSession:
    """Handle for one running background on one surface.

    Owns the shape field exclusively: only ``frame`` ticks it and only the
    render step inside ``frame`` reads it.
    """

    def __init__(
        self,
        surface: Surface,
        config: BackgroundConfig,
        recommendation: Recommendation,
        governor: PerformanceGovernor,
        sink: MetricsSink | None,
        low_battery: bool = False,
    ) -> None:
        self.surface = surface
        self.config = config
        self.governor = governor
        self.sink = sink
        self.recommendation = recommendation
        self.low_battery = low_battery
        self.active = True
        self.frame_index = 0
        self.field_config = self._effective_field_config(recommendation)
        width, height = surface.canvas_size()
        self.field: ShapeField = generator.initialize(width, height, self.field_config)
        self._samples_at_last_adapt = 0

    @property
    def update_stride(self) -> int:
        stride = max(1, int(self.recommendation.update_stride))
        return stride * 2 if self.low_battery else stride

    @property
    def animate(self) -> bool:
        return bool(self.recommendation.animate)

    def frame(self, timestamp: float) -> None:
        """Advance, render and present one frame, then record its timing."""
        if not self.active:
            return
        if self.frame_index == 0 or (self.animate and self.frame_index % self.update_stride == 0):
            generator.tick(self.field, self.frame_index)

        frame = render(
            self.field.shapes,
            self.field.width,
            self.field.height,
            frame_index=self.frame_index,
            trail_alpha=self.config.host.trail_alpha,
            blur=self.recommendation.enable_blur,
        )
        try:
            self.surface.present(frame)
        except SurfaceLostError as exc:
            LOGGER.warning("Drawing surface lost, stopping background: %s", exc)
            self.teardown()
            return

        self.governor.observe(timestamp)
        self.frame_index += 1
        if self.config.governor.adaptive:
            self._maybe_adapt()

    def resize(self, width: int, height: int) -> None:
        """Rebuild the field for the new canvas size; motion restarts at tick 0."""
        if not self.active:
            return
        self.field = generator.resize(width, height, self.field_config)
        self.frame_index = 0

    def teardown(self) -> None:
        """Detach from the surface and release the sink; safe to call twice."""
        if not self.active:
            return
        self.active = False
        self.surface.detach()
        if self.sink is not None:
            self.sink.release()

    def _effective_field_config(self, recommendation: Recommendation) -> FieldConfig:
        if recommendation.shape_count == self.config.field.shape_count:
            return self.config.field
        return replace(self.config.field, shape_count=int(recommendation.shape_count))

    def _maybe_adapt(self) -> None:
        samples = self.governor.sample_count
        if samples - self._samples_at_last_adapt < self.config.governor.adapt_after_samples:
            return
        self._samples_at_last_adapt = samples
        refined = refine_with_metrics(self.recommendation, self.governor.get_metrics())
        if refined == self.recommendation:
            return
        LOGGER.info(
            "Adapting background: shapes %d -> %d, stride %d -> %d, blur %s -> %s",
            self.recommendation.shape_count,
            refined.shape_count,
            self.recommendation.update_stride,
            refined.update_stride,
            self.recommendation.enable_blur,
            refined.enable_blur,
        )
        shape_count_changed = refined.shape_count != self.recommendation.shape_count
        self.recommendation = refined
        if shape_count_changed:
            self.field_config = self._effective_field_config(refined)
            self.field = generator.initialize(self.field.width, self.field.height, self.field_config)
            self.frame_index = 0
        self.governor.reset()
        self._samples_at_last_adapt = 0


class BackgroundHost:
    """Starts and stops background sessions on surfaces."""

    def __init__(
        self,
        capabilities: DeviceCapabilities | None = None,
        sink: MetricsSink | None = None,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.capabilities = capabilities or DeviceCapabilities()
        self.sink = sink
        self.clock = clock

    def start(self, surface: Surface, config: BackgroundConfig) -> BackgroundSession:
        """Build the field for ``surface`` and attach to its frame loop."""
        recommendation = recommend_configuration(self.capabilities)
        if not config.host.apply_recommendation:
            recommendation = replace(recommendation, shape_count=config.field.shape_count)
        battery = self.capabilities.battery
        governor = PerformanceGovernor(
            clock=self.clock,
            log_interval_ms=config.governor.log_interval_ms,
            sink=self.sink,
        )
        session = BackgroundSession(
            surface=surface,
            config=config,
            recommendation=recommendation,
            governor=governor,
            sink=self.sink,
            low_battery=battery is not None and battery.should_reduce_performance,
        )
        surface.attach(session.frame, session.resize)
        LOGGER.info(
            "Background started: %d shapes, stride %d, blur %s, animate %s",
            len(session.field.shapes),
            session.update_stride,
            recommendation.enable_blur,
            recommendation.animate,
        )
        return session

    def stop(self, session: BackgroundSession) -> None:
        """Synchronously detach ``session`` and release its resources."""
        session.teardown()
        LOGGER.info("Background stopped after %d frames", session.governor.get_metrics().total_frames)

    @contextmanager
    def running(self, surface: Surface, config: BackgroundConfig) -> Iterator[BackgroundSession]:
        session = self.start(surface, config)
        try:
            yield session
        finally:
            self.stop(session)
