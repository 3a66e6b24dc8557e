"""Metrics overlay: FPS text and a live FPS-history chart."""

from __future__ import annotations

import csv
from collections import deque
from pathlib import Path

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget

# Imported after PySide6 so pyqtgraph binds to it.
import pyqtgraph as pg  # noqa: E402

from core.performance_monitor import MetricsSnapshot

DEFAULT_HISTORY_SIZE = 600

_OVERLAY_STYLE = (
    "background: rgba(0, 0, 0, 204); color: #00ff00; font-family: monospace;"
    " font-size: 12px; padding: 10px; border-radius: 4px;"
)


def fps_color(fps: int) -> str:
    """Color band for an FPS value."""
    if fps >= 55:
        return "#00ff00"
    if fps >= 40:
        return "#ffff00"
    if fps >= 25:
        return "#ff9900"
    return "#ff0000"


class MetricsOverlay(QWidget):
    """Metrics sink that displays each aggregate snapshot.

    Purely observational: the governor writes to it and nothing reads back.
    """

    def __init__(self, parent: QWidget | None = None, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        super().__init__(parent)
        self.history: deque[dict[str, float]] = deque(maxlen=max(1, history_size))
        self.released = False
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setMinimumWidth(200)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        self.label = QLabel("FPS: --")
        self.label.setStyleSheet(_OVERLAY_STYLE)
        self.label.setTextFormat(Qt.TextFormat.RichText)
        root.addWidget(self.label)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground((0, 0, 0, 160))
        self.plot_widget.setYRange(0, 70)
        self.plot_widget.setFixedHeight(90)
        self.plot_widget.hideAxis("bottom")
        self._curve = self.plot_widget.plot(pen="#00ff00")
        root.addWidget(self.plot_widget)

    def publish(self, snapshot: MetricsSnapshot) -> None:
        if self.released:
            return
        metrics = snapshot.metrics
        self.history.append(
            {
                "fps": float(metrics.instantaneous_fps),
                "average_fps": float(metrics.average_fps),
                "min_fps": float(metrics.min_fps),
                "dropped_frames": float(metrics.dropped_frames),
                "total_frames": float(metrics.total_frames),
            }
        )
        self.label.setText(
            f'<div style="color: {fps_color(metrics.instantaneous_fps)}; font-weight: bold;">'
            f"FPS: {metrics.instantaneous_fps}</div>"
            f'<div style="font-size: 11px;">Avg: {metrics.average_fps} | Min: {metrics.min_fps}<br>'
            f"Mem: {snapshot.memory_label}<br>"
            f"Dropped: {metrics.dropped_frames}/{metrics.total_frames} ({metrics.dropped_percentage:.1f}%)</div>"
        )
        self._curve.setData(list(range(len(snapshot.fps_history))), list(snapshot.fps_history))

    def release(self) -> None:
        """Detach the overlay from the window; later snapshots are ignored."""
        self.released = True
        self.hide()

    def resume(self) -> None:
        """Accept snapshots again after a release, e.g. for a restarted session."""
        self.released = False
        self.show()

    def export_csv(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        columns = ["fps", "average_fps", "min_fps", "dropped_frames", "total_frames"]
        with out.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=columns)
            writer.writeheader()
            writer.writerows(self.history)
        return out
