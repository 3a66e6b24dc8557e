"""Desktop window: full-bleed background canvas with an optional metrics overlay."""

from __future__ import annotations

from typing import Any

from PySide6.QtWidgets import QMainWindow

from configs.loader import BackgroundConfig
from core.background_host import BackgroundHost, BackgroundSession
from core.device_capabilities import DeviceCapabilities
from ui_desktop.metrics_panel import MetricsOverlay
from ui_desktop.render_viewport import BackgroundViewport

OVERLAY_MARGIN = 10


class MainWindow(QMainWindow):
    """Owns the viewport and the background session running on it."""

    def __init__(self, config: BackgroundConfig, capabilities: DeviceCapabilities) -> None:
        super().__init__()
        self.config = config
        self.setWindowTitle("Geometric Constellation")
        self.resize(config.host.width, config.host.height)

        self.viewport = BackgroundViewport(target_fps=config.host.target_fps)
        self.setCentralWidget(self.viewport)

        self.overlay: MetricsOverlay | None = None
        if config.governor.show_overlay:
            self.overlay = MetricsOverlay(parent=self.viewport)
            self.overlay.raise_()

        self.host = BackgroundHost(capabilities=capabilities, sink=self.overlay)
        self.session: BackgroundSession | None = None

    def start(self) -> BackgroundSession:
        """Start the background once the window has its real size."""
        if self.session is None or not self.session.active:
            if self.overlay is not None and self.overlay.released:
                self.overlay.resume()
                self._place_overlay()
            self.session = self.host.start(self.viewport, self.config)
        return self.session

    def stop(self) -> None:
        if self.session is not None:
            self.host.stop(self.session)
            self.session = None

    def resizeEvent(self, event: Any) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._place_overlay()

    def closeEvent(self, event: Any) -> None:  # type: ignore[override]
        self.stop()
        super().closeEvent(event)

    def _place_overlay(self) -> None:
        if self.overlay is None:
            return
        self.overlay.adjustSize()
        x = self.viewport.width() - self.overlay.width() - OVERLAY_MARGIN
        self.overlay.move(max(0, x), OVERLAY_MARGIN)
