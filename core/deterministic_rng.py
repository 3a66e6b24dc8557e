"""Deterministic RNG container with independent named streams."""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass

import numpy as np


def derive_seed(seed: int, name: str) -> int:
    """Return a stable 32-bit seed for ``name`` derived from ``seed``."""
    # Use stable cross-process seed derivation instead of built-in hash().
    digest = hashlib.sha256(f"{seed}:{name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False) & 0xFFFFFFFF


@dataclass
class DeterministicRNG:
    """Owns deterministic RNG streams without touching global random state."""

    seed: int

    def __post_init__(self) -> None:
        self._streams: dict[str, random.Random] = {}
        self._numpy_streams: dict[str, np.random.Generator] = {}

    def stream(self, name: str) -> random.Random:
        """Return independent deterministic stream by name."""
        if name not in self._streams:
            self._streams[name] = random.Random(derive_seed(self.seed, name))
        return self._streams[name]

    def numpy_stream(self, name: str) -> np.random.Generator:
        """Return independent deterministic numpy generator by name."""
        if name not in self._numpy_streams:
            self._numpy_streams[name] = np.random.default_rng(derive_seed(self.seed, name))
        return self._numpy_streams[name]
