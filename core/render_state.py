"""Immutable draw-command contracts shared by the field and its surfaces."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Transform:
    """Translate, then rotate (radians), then uniformly scale."""

    x: float
    y: float
    rotation: float
    scale: float


@dataclass(frozen=True)
class Stroke:
    """Outline style; shapes are never filled."""

    color: str
    weight: float


@dataclass(frozen=True)
class ShapeCommand:
    """One primitive in local coordinates centred on the origin.

    ``size`` is the disc diameter or the square/triangle side.
    ``corner_radius`` applies to rounded squares, ``points`` to triangles.
    """

    kind: str
    transform: Transform
    stroke: Stroke
    size: float
    corner_radius: float = 0.0
    points: tuple[tuple[float, float], ...] = ()


@dataclass(frozen=True)
class FadeOverlay:
    """Low-opacity full-canvas fill drawn before the shapes (motion trails)."""

    color: str
    alpha: float


@dataclass(frozen=True)
class Frame:
    """Top-level immutable frame emitted once per rendered tick."""

    frame_index: int
    width: float
    height: float
    background: str
    overlay: FadeOverlay | None
    commands: tuple[ShapeCommand, ...] = field(default_factory=tuple)
    blur: bool = False
