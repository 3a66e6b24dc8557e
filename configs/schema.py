"""Config schema tables for each section of a background config file."""


class FieldSchema:
    REQUIRED_PARAMS = {
        "seed": int,
    }

    DEFAULTS = {
        "seed": 12345,
        "shape_count": 40,
        "drift_speed": 0.5,
        "noise_scale": 0.003,
        "breathing_rate": 0.02,
        "accent_probability": 0.15,
        "max_drift": 60.0,
    }

    OPTIONAL_PARAMS = {
        "shape_count": int,
        "drift_speed": float,
        "noise_scale": float,
        "breathing_rate": float,
        "accent_probability": float,
        "max_drift": float,
    }


class GovernorSchema:
    REQUIRED_PARAMS: dict[str, type] = {}

    DEFAULTS = {
        "log_interval_ms": 5000.0,
        "show_overlay": False,
        "adaptive": False,
        "adapt_after_samples": 5,
    }

    OPTIONAL_PARAMS = {
        "log_interval_ms": float,
        "show_overlay": bool,
        "adaptive": bool,
        "adapt_after_samples": int,
    }


class HostSchema:
    REQUIRED_PARAMS: dict[str, type] = {}

    DEFAULTS = {
        "width": 1280,
        "height": 720,
        "target_fps": 60,
        "trail_alpha": 0.05,
        "apply_recommendation": True,
    }

    OPTIONAL_PARAMS = {
        "width": int,
        "height": int,
        "target_fps": int,
        "trail_alpha": float,
        "apply_recommendation": bool,
    }
