"""Shape records and attribute distributions for the constellation field."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ShapeKind(str, Enum):
    """Closed set of primitives the field draws."""

    DISC = "disc"
    ROUNDED_SQUARE = "rounded_square"
    TRIANGLE = "triangle"


@dataclass(frozen=True)
class Palette:
    """Colors used by the background and its shapes."""

    background: str = "#0A3A52"
    blue_dark: str = "#004B72"
    blue_mid: str = "#006BA5"
    blue_light: str = "#3E9FD4"
    accent: str = "#F0000F"
    white: str = "#FFFFFF"


PALETTE = Palette()
BASE_SIZE = 30.0
DEFAULT_MAX_DRIFT = 60.0

# (lower, upper) multiples of BASE_SIZE per kind.
_SIZE_RANGES: dict[ShapeKind, tuple[float, float]] = {
    ShapeKind.DISC: (0.5, 2.0),
    ShapeKind.ROUNDED_SQUARE: (0.7, 1.5),
    ShapeKind.TRIANGLE: (0.6, 1.2),
}

_FIXED_FIELDS = frozenset(
    {
        "index",
        "kind",
        "home_x",
        "home_y",
        "size",
        "color",
        "stroke_weight",
        "noise_offset_x",
        "noise_offset_y",
        "rotation_speed",
        "breath_phase",
        "breath_amplitude",
        "max_drift",
    }
)


@dataclass
class Shape:
    """Single procedurally placed primitive.

    ``home_x``, ``home_y``, ``kind``, ``size``, ``color``, ``stroke_weight``
    and the noise offsets are fixed at creation. Position, rotation and scale
    are rewritten by every tick.
    """

    index: int
    kind: ShapeKind
    home_x: float
    home_y: float
    size: float
    color: str
    stroke_weight: float
    noise_offset_x: float
    noise_offset_y: float
    rotation: float
    rotation_speed: float
    breath_phase: float
    breath_amplitude: float
    max_drift: float = DEFAULT_MAX_DRIFT
    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0

    def __post_init__(self) -> None:
        self.x = self.home_x
        self.y = self.home_y

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FIXED_FIELDS and name in self.__dict__:
            raise AttributeError(f"Shape.{name} is fixed after creation")
        super().__setattr__(name, value)

    def to_dict(self) -> dict[str, Any]:
        """Serialize shape state for snapshots and debugging."""
        return {
            "index": int(self.index),
            "kind": self.kind.value,
            "home": [float(self.home_x), float(self.home_y)],
            "position": [float(self.x), float(self.y)],
            "size": float(self.size),
            "color": self.color,
            "stroke_weight": float(self.stroke_weight),
            "rotation": float(self.rotation),
            "scale": float(self.scale),
        }


def draw_kind(rng: random.Random) -> ShapeKind:
    roll = rng.random()
    if roll < 0.4:
        return ShapeKind.DISC
    if roll < 0.7:
        return ShapeKind.ROUNDED_SQUARE
    return ShapeKind.TRIANGLE


def draw_size(rng: random.Random, kind: ShapeKind) -> float:
    lower, upper = _SIZE_RANGES[kind]
    return rng.uniform(BASE_SIZE * lower, BASE_SIZE * upper)


def draw_stroke(rng: random.Random, accent_probability: float, palette: Palette = PALETTE) -> tuple[str, float]:
    """Return ``(color, stroke_weight)`` from the weighted palette.

    Thresholds are cumulative and fixed, so an accent probability above one
    of them shadows the bands below it.
    """
    roll = rng.random()
    if roll < accent_probability:
        return palette.accent, 3.0
    if roll < 0.3:
        return palette.white, 2.0
    if roll < 0.5:
        return palette.blue_light, 2.0
    if roll < 0.75:
        return palette.blue_mid, 3.0
    return palette.blue_dark, 4.0


def create_shape(
    rng: random.Random,
    index: int,
    home_x: float,
    home_y: float,
    accent_probability: float,
    max_drift: float = DEFAULT_MAX_DRIFT,
) -> Shape:
    """Draw every creation-time attribute of one shape from ``rng``."""
    kind = draw_kind(rng)
    size = draw_size(rng, kind)
    color, stroke_weight = draw_stroke(rng, accent_probability)
    noise_offset_x = rng.uniform(0.0, 1000.0)
    noise_offset_y = rng.uniform(0.0, 1000.0)
    rotation = rng.uniform(0.0, math.tau)
    # Smaller shapes spin faster.
    rotation_speed = rng.uniform(-0.01, 0.01) * (20.0 / size)
    breath_phase = rng.uniform(0.0, math.tau)
    breath_amplitude = rng.uniform(0.05, 0.15)
    return Shape(
        index=index,
        kind=kind,
        home_x=home_x,
        home_y=home_y,
        size=size,
        color=color,
        stroke_weight=stroke_weight,
        noise_offset_x=noise_offset_x,
        noise_offset_y=noise_offset_y,
        rotation=rotation,
        rotation_speed=rotation_speed,
        breath_phase=breath_phase,
        breath_amplitude=breath_amplitude,
        max_drift=max_drift,
    )
