"""In-memory drawing surface for tests, benchmarks and frame snapshots."""

from __future__ import annotations

import time
from collections import deque

from core.background_host import FrameCallback, ResizeCallback, SurfaceLostError
from core.performance_monitor import Clock, monotonic_ms
from core.render_state import Frame


class HeadlessSurface:
    """Keeps the most recent presented frames instead of drawing them."""

    def __init__(self, width: int, height: int, history_size: int = 8, clock: Clock = monotonic_ms) -> None:
        self.width = int(width)
        self.height = int(height)
        self.clock = clock
        self.frames: deque[Frame] = deque(maxlen=max(1, history_size))
        self.lost = False
        self._on_frame: FrameCallback | None = None
        self._on_resize: ResizeCallback | None = None

    @property
    def attached(self) -> bool:
        return self._on_frame is not None

    def canvas_size(self) -> tuple[int, int]:
        return self.width, self.height

    def present(self, frame: Frame) -> None:
        if self.lost:
            raise SurfaceLostError("headless surface was released")
        self.frames.append(frame)

    def attach(self, on_frame: FrameCallback, on_resize: ResizeCallback) -> None:
        self._on_frame = on_frame
        self._on_resize = on_resize

    def detach(self) -> None:
        self._on_frame = None
        self._on_resize = None

    def latest(self) -> Frame | None:
        return self.frames[-1] if self.frames else None

    def resize(self, width: int, height: int) -> None:
        """Change the canvas size and notify the attached session."""
        self.width = int(width)
        self.height = int(height)
        if self._on_resize is not None:
            self._on_resize(self.width, self.height)

    def run(self, frames: int, clock: Clock | None = None, pace_ms: float | None = None) -> int:
        """Drive up to ``frames`` frames; returns how many were delivered.

        Stops early once the session detaches. With ``pace_ms`` each frame is
        padded with a sleep to that budget, otherwise frames run back to back.
        Timestamps come from ``clock`` or, by default, the surface clock, which
        must be the clock the session's governor was built with.
        """
        clock = clock or self.clock
        delivered = 0
        for _ in range(max(0, int(frames))):
            if self._on_frame is None:
                break
            started = clock()
            self._on_frame(started)
            delivered += 1
            if pace_ms is not None:
                remaining = pace_ms - (clock() - started)
                if remaining > 0:
                    time.sleep(remaining / 1000.0)
        return delivered
