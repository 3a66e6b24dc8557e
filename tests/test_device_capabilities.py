"""Tests for capability detection and rendering recommendations."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

import core.device_capabilities as device_capabilities
from core.device_capabilities import (
    BatteryStatus,
    DeviceCapabilities,
    Recommendation,
    detect_capabilities,
    get_battery_status,
    recommend_configuration,
    refine_with_metrics,
)
from core.performance_monitor import PerformanceMetrics


@pytest.mark.parametrize(
    ("capabilities", "expected"),
    [
        (DeviceCapabilities(is_mobile=True), (30, False, 2)),
        (DeviceCapabilities(is_mobile=True, is_low_end=True), (30, False, 2)),
        (DeviceCapabilities(is_low_end=True), (50, False, 1)),
        (DeviceCapabilities(), (80, True, 1)),
    ],
)
def test_recommendation_policy_table(capabilities: DeviceCapabilities, expected: tuple[int, bool, int]) -> None:
    recommendation = recommend_configuration(capabilities)

    assert (recommendation.shape_count, recommendation.enable_blur, recommendation.update_stride) == expected
    assert recommendation.enable_connections is True
    assert recommendation.animate is True


def test_reduced_motion_disables_animation() -> None:
    recommendation = recommend_configuration(DeviceCapabilities(reduced_motion=True))
    assert recommendation.animate is False
    assert recommendation.shape_count == 80


def test_detect_capabilities_from_hints(monkeypatch) -> None:
    monkeypatch.setattr(device_capabilities, "get_battery_status", lambda: None)

    narrow = detect_capabilities(screen_width=500, cpu_count=16)
    small_cpu = detect_capabilities(screen_width=1920, cpu_count=4)
    desktop = detect_capabilities(screen_width=1920, cpu_count=8, reduced_motion=True)

    assert narrow.is_mobile and not narrow.is_low_end
    assert small_cpu.is_low_end and not small_cpu.is_mobile
    assert not desktop.is_mobile and not desktop.is_low_end
    assert desktop.reduced_motion


def test_battery_status_from_psutil(monkeypatch) -> None:
    monkeypatch.setattr(
        device_capabilities.psutil,
        "sensors_battery",
        lambda: SimpleNamespace(percent=15.0, power_plugged=False),
        raising=False,
    )

    battery = get_battery_status()

    assert battery == BatteryStatus(level=0.15, charging=False)
    assert battery.should_reduce_performance


def test_missing_battery_is_absent_not_an_error(monkeypatch) -> None:
    monkeypatch.setattr(device_capabilities.psutil, "sensors_battery", lambda: None, raising=False)
    assert get_battery_status() is None

    def _unsupported():
        raise NotImplementedError("no sensors")

    monkeypatch.setattr(device_capabilities.psutil, "sensors_battery", _unsupported, raising=False)
    assert get_battery_status() is None


def test_charging_battery_never_reduces_performance() -> None:
    assert not BatteryStatus(level=0.05, charging=True).should_reduce_performance
    assert not BatteryStatus(level=0.2, charging=False).should_reduce_performance


def _metrics(average: int, dropped: int = 0) -> PerformanceMetrics:
    return PerformanceMetrics(instantaneous_fps=average, average_fps=average, min_fps=average, dropped_frames=dropped, total_frames=100)


def test_refine_scales_down_on_fair_performance() -> None:
    base = recommend_configuration(DeviceCapabilities())

    refined = refine_with_metrics(base, _metrics(30))

    assert refined.shape_count == 60
    assert refined.enable_blur is False
    assert refined.update_stride == 1


def test_refine_scales_down_harder_on_poor_performance() -> None:
    base = recommend_configuration(DeviceCapabilities())

    refined = refine_with_metrics(base, _metrics(20))

    assert refined.shape_count == 40
    assert refined.enable_blur is False
    assert refined.update_stride == 2


def test_refine_keeps_good_or_unmeasured_recommendation() -> None:
    base = recommend_configuration(DeviceCapabilities())

    assert refine_with_metrics(base, _metrics(58)) == base
    assert refine_with_metrics(base, _metrics(45, dropped=5)) == base
    assert refine_with_metrics(base, PerformanceMetrics()) == base


def test_refine_respects_floors_and_ceilings() -> None:
    small = Recommendation(shape_count=12, enable_blur=False, enable_connections=True, update_stride=4)

    refined = refine_with_metrics(small, _metrics(10))

    assert refined.shape_count == 10
    assert refined.update_stride == 4

    tiny = Recommendation(shape_count=5, enable_blur=False, enable_connections=True, update_stride=1)
    assert refine_with_metrics(tiny, _metrics(10)).shape_count == 5


def test_capabilities_serialise_to_plain_dict() -> None:
    payload = DeviceCapabilities(battery=BatteryStatus(level=0.5, charging=True)).to_dict()
    assert payload["battery"] == {"level": 0.5, "charging": True, "should_reduce_performance": False}
