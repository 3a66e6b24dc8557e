"""Plot utilities for recorded FPS history."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from core.performance_monitor import FRAME_BUDGET_MS  # noqa: E402


def plot_fps_history(fps_history: Sequence[int], output_path: str | Path, title: str = "Background FPS") -> Path:
    """Render per-second FPS samples with the 60 Hz target and rating bands."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    seconds = list(range(1, len(fps_history) + 1))
    target = 1000.0 / FRAME_BUDGET_MS

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(seconds, [int(v) for v in fps_history], label="fps", color="tab:blue")
    ax.axhline(target, linestyle="--", color="tab:green", label="target")
    for threshold, color in ((55, "#00ff00"), (40, "#ffff00"), (25, "#ff9900")):
        ax.axhline(threshold, linestyle=":", linewidth=0.8, color=color)
    ax.set_xlabel("second")
    ax.set_ylabel("frames per second")
    ax.set_title(title)
    ax.set_ylim(bottom=0)
    ax.legend()

    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    return output
