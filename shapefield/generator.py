"""Shape field generator: golden-angle placement and per-tick motion."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from core.deterministic_rng import DeterministicRNG
from shapefield.noise import NoiseField
from shapefield.shapes import DEFAULT_MAX_DRIFT, Shape, create_shape

GOLDEN_RATIO = 1.618033988749895
SPIRAL_RADIUS_FRACTION = 0.45
PLACEMENT_JITTER = 50.0


class FieldConfigError(ValueError):
    """Raised when field configuration or canvas dimensions are invalid."""


@dataclass(frozen=True)
class FieldConfig:
    """Tuning parameters for one generated field.

    Frozen: any change means building a new config and re-initialising.
    """

    seed: int = 12345
    shape_count: int = 40
    drift_speed: float = 0.5
    noise_scale: float = 0.003
    breathing_rate: float = 0.02
    accent_probability: float = 0.15
    max_drift: float = DEFAULT_MAX_DRIFT


@dataclass
class ShapeField:
    """Shapes plus the noise source and canvas size they move within."""

    width: float
    height: float
    config: FieldConfig
    shapes: list[Shape]
    noise: NoiseField = field(repr=False)


def validate_config(config: FieldConfig) -> None:
    """Raise ``FieldConfigError`` if ``config`` cannot drive a field."""
    if isinstance(config.shape_count, bool) or not isinstance(config.shape_count, int):
        raise FieldConfigError(f"shape_count must be an int, got {type(config.shape_count).__name__}")
    if config.shape_count < 0:
        raise FieldConfigError(f"shape_count must be >= 0, got {config.shape_count}")
    for name in ("drift_speed", "noise_scale", "breathing_rate", "accent_probability", "max_drift"):
        value = getattr(config, name)
        if not math.isfinite(float(value)):
            raise FieldConfigError(f"{name} must be finite, got {value!r}")
    if config.drift_speed < 0:
        raise FieldConfigError(f"drift_speed must be >= 0, got {config.drift_speed}")
    if config.max_drift < 0:
        raise FieldConfigError(f"max_drift must be >= 0, got {config.max_drift}")
    if not 0.0 <= config.accent_probability <= 1.0:
        raise FieldConfigError(f"accent_probability must be in [0.0, 1.0], got {config.accent_probability}")


def validate_dimensions(width: float, height: float) -> None:
    for name, value in (("width", width), ("height", height)):
        if not math.isfinite(float(value)) or value <= 0:
            raise FieldConfigError(f"{name} must be a finite value > 0, got {value!r}")


def initialize(width: float, height: float, config: FieldConfig) -> ShapeField:
    """Place ``config.shape_count`` shapes on a golden-angle spiral.

    Deterministic for a given ``(width, height, config)``. Placement jitter
    and shape attributes come from separate named streams, so the attributes
    of shape ``i`` do not depend on the canvas size.
    """
    validate_dimensions(width, height)
    validate_config(config)

    rng = DeterministicRNG(int(config.seed))
    placement = rng.stream("placement")
    attributes = rng.stream("attributes")
    noise = NoiseField(rng.numpy_stream("noise"))

    count = config.shape_count
    angle_step = math.tau * GOLDEN_RATIO
    centre_x = width / 2.0
    centre_y = height / 2.0
    extent = min(width, height) * SPIRAL_RADIUS_FRACTION

    shapes: list[Shape] = []
    for index in range(count):
        angle = index * angle_step
        radius = math.sqrt(index / count) * extent
        x = centre_x + math.cos(angle) * radius + placement.uniform(-PLACEMENT_JITTER, PLACEMENT_JITTER)
        y = centre_y + math.sin(angle) * radius + placement.uniform(-PLACEMENT_JITTER, PLACEMENT_JITTER)
        shapes.append(
            create_shape(
                attributes,
                index=index,
                home_x=x,
                home_y=y,
                accent_probability=float(config.accent_probability),
                max_drift=float(config.max_drift),
            )
        )
    return ShapeField(width=float(width), height=float(height), config=config, shapes=shapes, noise=noise)


def resize(width: float, height: float, config: FieldConfig) -> ShapeField:
    """Rebuild the field for a new canvas size; shape identity is not kept."""
    return initialize(width, height, config)


def tick(state: ShapeField, elapsed_ticks: float) -> None:
    """Advance every shape to ``elapsed_ticks`` in place.

    Shapes never read each other, so the noise for the whole field is
    sampled in one vectorised call and written back in creation order.
    """
    shapes = state.shapes
    if not shapes:
        return
    config = state.config
    offset = elapsed_ticks * config.noise_scale
    xs = np.fromiter((shape.noise_offset_x for shape in shapes), dtype=np.float64, count=len(shapes)) + offset
    ys = np.fromiter((shape.noise_offset_y for shape in shapes), dtype=np.float64, count=len(shapes)) + offset
    noise_x, noise_y = state.noise.sample_many(xs, ys)

    for shape, nx, ny in zip(shapes, noise_x.tolist(), noise_y.tolist()):
        advance_shape(shape, nx, ny, elapsed_ticks, config, state.width, state.height)


def advance_shape(
    shape: Shape,
    noise_x: float,
    noise_y: float,
    elapsed_ticks: float,
    config: FieldConfig,
    width: float,
    height: float,
) -> None:
    """Apply drift, wrap, rotation and breathing to one shape."""
    drift_x = -shape.max_drift + noise_x * 2.0 * shape.max_drift
    drift_y = -shape.max_drift + noise_y * 2.0 * shape.max_drift
    shape.x = _wrap(shape.home_x + drift_x * config.drift_speed, width, shape.size)
    shape.y = _wrap(shape.home_y + drift_y * config.drift_speed, height, shape.size)
    shape.rotation += shape.rotation_speed * config.drift_speed
    shape.scale = 1.0 + math.sin(shape.breath_phase + elapsed_ticks * config.breathing_rate) * shape.breath_amplitude


def _wrap(value: float, extent: float, padding: float) -> float:
    # Toroidal: leaving one shape-size past an edge re-enters at the other.
    if value < -padding:
        return extent + padding
    if value > extent + padding:
        return -padding
    return value
