"""Turn shape state into draw commands."""

from __future__ import annotations

import math
from typing import Sequence

from core.render_state import FadeOverlay, Frame, ShapeCommand, Stroke, Transform
from shapefield.shapes import PALETTE, Shape, ShapeKind

CORNER_RADIUS_FRACTION = 0.1
DEFAULT_TRAIL_ALPHA = 0.05
_TRIANGLE_HEIGHT = math.sqrt(3.0) / 2.0


def shape_command(shape: Shape) -> ShapeCommand:
    """Build the stroke-only command for one shape at its current state."""
    size = float(shape.size)
    corner_radius = 0.0
    points: tuple[tuple[float, float], ...] = ()
    if shape.kind is ShapeKind.ROUNDED_SQUARE:
        corner_radius = size * CORNER_RADIUS_FRACTION
    elif shape.kind is ShapeKind.TRIANGLE:
        # Equilateral, apex up, centred on the bounding box.
        h = size * _TRIANGLE_HEIGHT
        points = ((0.0, -h / 2.0), (-size / 2.0, h / 2.0), (size / 2.0, h / 2.0))
    return ShapeCommand(
        kind=shape.kind.value,
        transform=Transform(x=float(shape.x), y=float(shape.y), rotation=float(shape.rotation), scale=float(shape.scale)),
        stroke=Stroke(color=shape.color, weight=float(shape.stroke_weight)),
        size=size,
        corner_radius=corner_radius,
        points=points,
    )


def render(
    shapes: Sequence[Shape],
    width: float,
    height: float,
    frame_index: int = 0,
    trail_alpha: float = DEFAULT_TRAIL_ALPHA,
    background: str = PALETTE.background,
    blur: bool = False,
) -> Frame:
    """Emit one frame: optional fade overlay, then shapes in creation order."""
    alpha = max(0.0, min(1.0, float(trail_alpha)))
    overlay = FadeOverlay(color=background, alpha=alpha) if alpha > 0.0 else None
    return Frame(
        frame_index=int(frame_index),
        width=float(width),
        height=float(height),
        background=background,
        overlay=overlay,
        commands=tuple(shape_command(shape) for shape in shapes),
        blur=bool(blur),
    )
