"""Visualization of keyboard layouts and recorded taps."""

from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from tap_features.models.keyboard import KeyboardLayout


def plot_layout(
    keyboard: KeyboardLayout,
    taps: Optional[np.ndarray] = None,
    title: str = "Keyboard Layout",
    save_path: Optional[str] = None,
) -> plt.Figure:
    """
    Plot key hit boxes in keyboard-relative coordinates.

    Args:
        keyboard: Layout to draw.
        taps: Optional (N, 2) array of keyboard-relative tap positions.
        title: Plot title.
        save_path: If given, saves the figure to this path.

    Returns:
        The matplotlib Figure.
    """
    fig, ax = plt.subplots(figsize=(10, 4))

    for key, top, right, bottom, left, xcenter, ycenter in keyboard.relative_bounds():
        ax.add_patch(
            Rectangle(
                (left, top),
                right - left,
                bottom - top,
                fill=False,
                edgecolor="steelblue",
                linewidth=1.0,
            )
        )
        ax.text(xcenter, ycenter, "space" if key == " " else key,
                ha="center", va="center", fontsize=8)

    if taps is not None and len(taps) > 0:
        taps = np.asarray(taps, dtype=np.float64)
        ax.scatter(taps[:, 0], taps[:, 1], s=4, alpha=0.5, color="salmon", label="Taps")
        ax.legend()

    ax.autoscale_view()
    # Screen coordinates grow downward.
    ax.invert_yaxis()
    ax.set_aspect("equal")
    ax.set_title(title)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig
