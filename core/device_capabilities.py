"""Device capability hints and the rendering configuration they recommend."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from typing import Any

import psutil

from core.performance_monitor import PerformanceMetrics, PerformanceRating, rate_performance

LOGGER = logging.getLogger(__name__)

MOBILE_SCREEN_WIDTH = 768
LOW_END_CPU_COUNT = 4
LOW_BATTERY_LEVEL = 0.2
MIN_SHAPE_COUNT = 10
MAX_UPDATE_STRIDE = 4
_MOBILE_PLATFORMS = frozenset({"android", "ios"})


@dataclass(frozen=True)
class BatteryStatus:
    """Battery charge as a fraction in ``[0, 1]``."""

    level: float
    charging: bool

    @property
    def should_reduce_performance(self) -> bool:
        return not self.charging and self.level < LOW_BATTERY_LEVEL


@dataclass(frozen=True)
class DeviceCapabilities:
    """Static hints about the device the background runs on."""

    is_mobile: bool = False
    is_low_end: bool = False
    reduced_motion: bool = False
    battery: BatteryStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_mobile": self.is_mobile,
            "is_low_end": self.is_low_end,
            "reduced_motion": self.reduced_motion,
            "battery": None
            if self.battery is None
            else {
                "level": self.battery.level,
                "charging": self.battery.charging,
                "should_reduce_performance": self.battery.should_reduce_performance,
            },
        }


@dataclass(frozen=True)
class Recommendation:
    """Rendering configuration the host may apply."""

    shape_count: int
    enable_blur: bool
    enable_connections: bool
    update_stride: int
    animate: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape_count": self.shape_count,
            "enable_blur": self.enable_blur,
            "enable_connections": self.enable_connections,
            "update_stride": self.update_stride,
            "animate": self.animate,
        }


def get_battery_status() -> BatteryStatus | None:
    """Best-effort battery reading; ``None`` when there is no battery sensor."""
    sensors_battery = getattr(psutil, "sensors_battery", None)
    if sensors_battery is None:
        return None
    try:
        battery = sensors_battery()
    except (NotImplementedError, OSError, RuntimeError) as exc:
        LOGGER.warning("Battery status not available: %s", exc)
        return None
    if battery is None:
        return None
    charging = bool(battery.power_plugged) if battery.power_plugged is not None else False
    return BatteryStatus(level=float(battery.percent) / 100.0, charging=charging)


def detect_capabilities(
    screen_width: int | None = None,
    reduced_motion: bool = False,
    cpu_count: int | None = None,
) -> DeviceCapabilities:
    """Detect capability hints for the current process.

    ``screen_width`` comes from the host's display; a narrow screen counts as
    mobile. An unknown CPU count is not treated as low-end.
    """
    if cpu_count is None:
        cpu_count = psutil.cpu_count(logical=True)
    is_mobile = sys.platform in _MOBILE_PLATFORMS or (
        screen_width is not None and int(screen_width) < MOBILE_SCREEN_WIDTH
    )
    is_low_end = cpu_count is not None and int(cpu_count) <= LOW_END_CPU_COUNT
    return DeviceCapabilities(
        is_mobile=bool(is_mobile),
        is_low_end=bool(is_low_end),
        reduced_motion=bool(reduced_motion),
        battery=get_battery_status(),
    )


def recommend_configuration(capabilities: DeviceCapabilities) -> Recommendation:
    """Static, device-class policy; does not look at live FPS."""
    if capabilities.is_mobile:
        shape_count, enable_blur, stride = 30, False, 2
    elif capabilities.is_low_end:
        shape_count, enable_blur, stride = 50, False, 1
    else:
        shape_count, enable_blur, stride = 80, True, 1
    return Recommendation(
        shape_count=shape_count,
        enable_blur=enable_blur,
        enable_connections=True,
        update_stride=stride,
        animate=not capabilities.reduced_motion,
    )


def refine_with_metrics(recommendation: Recommendation, metrics: PerformanceMetrics) -> Recommendation:
    """Scale a recommendation down when observed performance is fair or poor.

    Never scales up; a device that keeps up simply keeps its recommendation.
    """
    if metrics.average_fps == 0:
        return recommendation
    rating = rate_performance(metrics)
    if rating is PerformanceRating.FAIR:
        return replace(
            recommendation,
            shape_count=_scaled(recommendation.shape_count, 0.75),
            enable_blur=False,
        )
    if rating is PerformanceRating.POOR:
        return replace(
            recommendation,
            shape_count=_scaled(recommendation.shape_count, 0.5),
            enable_blur=False,
            update_stride=min(MAX_UPDATE_STRIDE, recommendation.update_stride + 1),
        )
    return recommendation


def _scaled(shape_count: int, factor: float) -> int:
    return min(shape_count, max(MIN_SHAPE_COUNT, int(shape_count * factor)))
