"""Tests for frame serialization, FPS plotting and the CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import streaming.state_serializer as state_serializer
from cli.main import run_cli
from core.device_capabilities import DeviceCapabilities, recommend_configuration
from core.performance_monitor import PerformanceGovernor
from shapefield.generator import FieldConfig, initialize, tick
from shapefield.render import render
from streaming.state_serializer import serialize_state, to_jsonable
from visualization.plotting import plot_fps_history


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "field": {"seed": 4, "shape_count": 12},
                "host": {"width": 320, "height": 240, "apply_recommendation": False},
            }
        ),
        encoding="utf-8",
    )
    return config_path


def test_serialize_frame_is_deterministic() -> None:
    state = initialize(320, 240, FieldConfig(shape_count=6))
    tick(state, 4)

    first = serialize_state(render(state.shapes, 320, 240, frame_index=4))
    second = serialize_state(render(state.shapes, 320, 240, frame_index=4))

    assert first == second
    payload = json.loads(first)
    assert payload["frame_index"] == 4
    assert len(payload["commands"]) == 6
    assert set(payload["commands"][0]["transform"]) == {"x", "y", "rotation", "scale"}
    assert payload["overlay"]["alpha"] == 0.05


def test_to_jsonable_handles_snapshots_and_recommendations() -> None:
    snapshot = PerformanceGovernor(clock=lambda: 0.0, memory_probe=lambda: None).snapshot()

    payload = to_jsonable({"snapshot": snapshot, "recommendation": recommend_configuration(DeviceCapabilities())})

    assert payload["snapshot"]["state"] == "warming"
    assert payload["snapshot"]["memory"] == "N/A"
    assert payload["recommendation"]["shape_count"] == 80
    json.dumps(payload)


def test_serialize_rejects_oversized_payload(monkeypatch) -> None:
    monkeypatch.setattr(state_serializer, "MAX_FRAME_BYTES", 16)
    state = initialize(320, 240, FieldConfig(shape_count=3))

    with pytest.raises(ValueError, match="exceeds max size"):
        serialize_state(render(state.shapes, 320, 240))


def test_plot_fps_history_writes_png(tmp_path) -> None:
    out = plot_fps_history([58, 60, 41, 22], tmp_path / "plots" / "fps.png")
    assert out.exists()
    assert out.stat().st_size > 0


def test_cli_run_prints_metrics(tmp_path, capsys) -> None:
    config_path = _write_config(tmp_path)

    assert run_cli(["run", "--config", str(config_path), "--frames", "5"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["frames_rendered"] == 5
    assert payload["total_frames"] == 5
    assert payload["rating"] in {"excellent", "good", "fair", "poor"}


def test_cli_snapshot_writes_frame(tmp_path, capsys) -> None:
    config_path = _write_config(tmp_path)
    out_path = tmp_path / "out" / "frame.json"

    assert run_cli(["snapshot", "--config", str(config_path), "--frames", "3", "--out", str(out_path)]) == 0

    assert capsys.readouterr().out.strip() == str(out_path)
    frame = json.loads(out_path.read_text(encoding="utf-8"))
    assert frame["frame_index"] == 2
    assert len(frame["commands"]) == 12
    assert frame["width"] == 320.0


def test_cli_recommend_for_narrow_screen(capsys) -> None:
    assert run_cli(["recommend", "--screen-width", "500", "--reduced-motion"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["capabilities"]["is_mobile"] is True
    assert payload["recommendation"]["shape_count"] == 30
    assert payload["recommendation"]["update_stride"] == 2
    assert payload["recommendation"]["animate"] is False


def test_cli_plot(tmp_path, capsys) -> None:
    config_path = _write_config(tmp_path)
    out_path = tmp_path / "fps.png"

    assert run_cli(["plot", "--config", str(config_path), "--frames", "5", "--out", str(out_path)]) == 0

    assert out_path.exists()
    assert capsys.readouterr().out.strip() == str(out_path)


def test_cli_without_command_prints_help(capsys) -> None:
    assert run_cli([]) == 1
    assert "constellation" in capsys.readouterr().out
