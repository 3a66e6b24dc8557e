"""Configuration loading and validation for the constellation background."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field as dataclass_field
from pathlib import Path
from typing import Any, Mapping

import yaml

from configs.schema import FieldSchema, GovernorSchema, HostSchema
from core.schema_validator import validate_section
from shapefield.generator import FieldConfig, validate_config

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "background.yaml"

_SECTIONS: tuple[str, ...] = ("field", "governor", "host")


@dataclass(frozen=True)
class GovernorSettings:
    """Performance governor reporting and adaptation settings."""

    log_interval_ms: float = 5000.0
    show_overlay: bool = False
    adaptive: bool = False
    adapt_after_samples: int = 5


@dataclass(frozen=True)
class HostSettings:
    """Canvas and frame-loop settings for the host adapter."""

    width: int = 1280
    height: int = 720
    target_fps: int = 60
    trail_alpha: float = 0.05
    apply_recommendation: bool = True


@dataclass(frozen=True)
class BackgroundConfig:
    """Validated background configuration container."""

    field: FieldConfig = dataclass_field(default_factory=FieldConfig)
    governor: GovernorSettings = dataclass_field(default_factory=GovernorSettings)
    host: HostSettings = dataclass_field(default_factory=HostSettings)

    def to_dict(self) -> dict[str, Any]:
        """Return a full dictionary view of the configuration."""
        return {
            "field": dict(vars(self.field)),
            "governor": dict(vars(self.governor)),
            "host": dict(vars(self.host)),
        }


class ConfigLoader:
    """Load and validate background configuration files (YAML or JSON)."""

    @staticmethod
    def load(path: str | Path = DEFAULT_CONFIG_PATH, strict: bool = True) -> BackgroundConfig:
        """Load a background config from ``path``.

        Args:
            path: Path to a YAML or JSON config file.
            strict: Reject unknown keys instead of warning about them.

        Returns:
            A validated ``BackgroundConfig`` instance.
        """
        payload = _read_config_payload(path)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError("Config file must contain a mapping object.")
        return build_config(payload, strict=strict)


def _read_config_payload(path: str | Path) -> Any:
    """Read raw config payload from JSON or YAML file."""
    config_path = Path(path)
    suffix = config_path.suffix.lower()
    content = config_path.read_text(encoding="utf-8")

    if suffix == ".json":
        return json.loads(content)
    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(content)
    raise ValueError(f"Unsupported config extension: {suffix}")


def build_config(payload: Mapping[str, Any], strict: bool = True) -> BackgroundConfig:
    """Validate a raw mapping and build ``BackgroundConfig``."""
    unknown = sorted(str(key) for key in payload if key not in _SECTIONS)
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")

    sections: dict[str, dict[str, Any]] = {}
    for name, schema in (("field", FieldSchema), ("governor", GovernorSchema), ("host", HostSchema)):
        raw = payload.get(name) or {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"Section '{name}' must be a mapping.")
        sections[name] = validate_section(raw, schema, name, strict=strict)

    field_params = sections["field"]
    field_config = FieldConfig(
        seed=int(field_params["seed"]),
        shape_count=int(field_params["shape_count"]),
        drift_speed=float(field_params["drift_speed"]),
        noise_scale=float(field_params["noise_scale"]),
        breathing_rate=float(field_params["breathing_rate"]),
        accent_probability=float(field_params["accent_probability"]),
        max_drift=float(field_params["max_drift"]),
    )
    validate_config(field_config)

    governor_params = sections["governor"]
    governor = GovernorSettings(
        log_interval_ms=float(governor_params["log_interval_ms"]),
        show_overlay=bool(governor_params["show_overlay"]),
        adaptive=bool(governor_params["adaptive"]),
        adapt_after_samples=int(governor_params["adapt_after_samples"]),
    )
    if not math.isfinite(governor.log_interval_ms) or governor.log_interval_ms <= 0:
        raise ValueError("governor.log_interval_ms must be > 0")
    if governor.adapt_after_samples <= 0:
        raise ValueError("governor.adapt_after_samples must be > 0")

    host_params = sections["host"]
    host = HostSettings(
        width=int(host_params["width"]),
        height=int(host_params["height"]),
        target_fps=int(host_params["target_fps"]),
        trail_alpha=float(host_params["trail_alpha"]),
        apply_recommendation=bool(host_params["apply_recommendation"]),
    )
    if host.width <= 0 or host.height <= 0:
        raise ValueError("host.width and host.height must be > 0")
    if host.target_fps <= 0:
        raise ValueError("host.target_fps must be > 0")
    if not 0.0 <= host.trail_alpha <= 1.0:
        raise ValueError("host.trail_alpha must be in [0.0, 1.0]")

    return BackgroundConfig(field=field_config, governor=governor, host=host)
