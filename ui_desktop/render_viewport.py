"""Qt canvas that draws background frames and drives the frame loop."""

from __future__ import annotations

import math
from typing import Any

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QPainter, QPen, QPixmap, QPolygonF
from PySide6.QtWidgets import QGraphicsBlurEffect, QWidget
import shiboken6

from core.background_host import FrameCallback, ResizeCallback, SurfaceLostError
from core.performance_monitor import monotonic_ms
from core.render_state import Frame, ShapeCommand
from shapefield.shapes import PALETTE

BLUR_RADIUS = 1.5


class BackgroundViewport(QWidget):
    """Surface implementation backed by an offscreen pixmap.

    Frames paint into a persistent pixmap so the fade overlay leaves motion
    trails; ``paintEvent`` only blits it. A ``QTimer`` at the target frame
    rate is the per-frame hook.
    """

    def __init__(self, target_fps: int = 60, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)
        self._buffer: QPixmap | None = None
        self._on_frame: FrameCallback | None = None
        self._on_resize: ResizeCallback | None = None
        self._released = False
        self._blur: QGraphicsBlurEffect | None = None
        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, int(round(1000.0 / max(1, target_fps)))))
        self._timer.timeout.connect(self._on_timeout)

    def canvas_size(self) -> tuple[int, int]:
        return max(1, self.width()), max(1, self.height())

    def attach(self, on_frame: FrameCallback, on_resize: ResizeCallback) -> None:
        self._on_frame = on_frame
        self._on_resize = on_resize
        self._timer.start()

    def detach(self) -> None:
        self._timer.stop()
        self._on_frame = None
        self._on_resize = None

    def present(self, frame: Frame) -> None:
        if not shiboken6.isValid(self) or self._released:
            raise SurfaceLostError("viewport was closed or deleted")
        buffer = self._ensure_buffer(frame.background)
        painter = QPainter(buffer)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            if frame.overlay is not None:
                fade = QColor(frame.overlay.color)
                fade.setAlphaF(frame.overlay.alpha)
                painter.fillRect(buffer.rect(), fade)
            for command in frame.commands:
                _draw_command(painter, command)
        finally:
            painter.end()
        self._set_blur(frame.blur)
        self.update()

    def paintEvent(self, _event: Any) -> None:  # type: ignore[override]
        painter = QPainter(self)
        if self._buffer is None:
            painter.fillRect(self.rect(), QColor(PALETTE.background))
        else:
            painter.drawPixmap(0, 0, self._buffer)
        painter.end()

    def resizeEvent(self, event: Any) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._buffer = None
        if self._on_resize is not None:
            width, height = self.canvas_size()
            self._on_resize(width, height)

    def closeEvent(self, event: Any) -> None:  # type: ignore[override]
        self._released = True
        super().closeEvent(event)

    def _on_timeout(self) -> None:
        if self._on_frame is not None:
            self._on_frame(monotonic_ms())

    def _ensure_buffer(self, background: str) -> QPixmap:
        width, height = self.canvas_size()
        if self._buffer is None or self._buffer.width() != width or self._buffer.height() != height:
            self._buffer = QPixmap(width, height)
            self._buffer.fill(QColor(background))
        return self._buffer

    def _set_blur(self, enabled: bool) -> None:
        if enabled and self._blur is None:
            self._blur = QGraphicsBlurEffect(self)
            self._blur.setBlurRadius(BLUR_RADIUS)
            self.setGraphicsEffect(self._blur)
        elif not enabled and self._blur is not None:
            self.setGraphicsEffect(None)
            self._blur = None


def _draw_command(painter: QPainter, command: ShapeCommand) -> None:
    transform = command.transform
    painter.save()
    painter.translate(transform.x, transform.y)
    painter.rotate(math.degrees(transform.rotation))
    painter.scale(transform.scale, transform.scale)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.setPen(QPen(QColor(command.stroke.color), command.stroke.weight))

    half = command.size / 2.0
    if command.kind == "disc":
        painter.drawEllipse(QPointF(0.0, 0.0), half, half)
    elif command.kind == "rounded_square":
        painter.drawRoundedRect(QRectF(-half, -half, command.size, command.size), command.corner_radius, command.corner_radius)
    elif command.points:
        painter.drawPolygon(QPolygonF([QPointF(x, y) for x, y in command.points]))
    painter.restore()
