"""Frame and metrics serialization utilities."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any


MAX_FRAME_BYTES = 10 * 1024 * 1024


def _to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return _to_jsonable(value.to_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "tolist"):
        return value.tolist()
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def to_jsonable(value: Any) -> Any:
    """Convert frames, snapshots and recommendations to plain JSON types."""
    return _to_jsonable(value)


def serialize_state(state: Any) -> bytes:
    """Serialize a frame (or any dataclass payload) into deterministic JSON bytes."""
    payload = _to_jsonable(state)
    data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    if len(data) > MAX_FRAME_BYTES:
        raise ValueError(
            f"Serialized frame exceeds max size ({len(data)} bytes > {MAX_FRAME_BYTES})."
        )
    return data
