"""Tests for layout plotting."""

import os
import tempfile

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from tap_features.evaluation.visualization import plot_layout  # noqa: E402
from tap_features.models.keyboard import KeyboardLayout  # noqa: E402


def _make_keyboard() -> KeyboardLayout:
    lines = ["width=300, xoffset=0, yoffset=100, hmargin=4, vmargin=6, keyheight=40"]
    for i, letter in enumerate("abcdefghijklmnopqrstuvwxyz"):
        x = (i % 10) * 30
        top = 100 + (i // 10) * 40
        lines.append(f"{letter}, left={x}, right={x + 30}, top={top}, bottom={top + 40}")
    lines.append(", left=90, right=210, top=220, bottom=260")
    return KeyboardLayout(lines)


def test_plot_layout_draws_every_key():
    fig = plot_layout(_make_keyboard())
    ax = fig.axes[0]
    assert len(ax.patches) == 27
    labels = {t.get_text() for t in ax.texts}
    assert "space" in labels
    assert "q" in labels
    plt.close(fig)


def test_plot_layout_with_taps_saves():
    taps = np.array([[15.0, 20.0], [150.0, 140.0]])
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "layout.png")
        fig = plot_layout(_make_keyboard(), taps=taps, save_path=path)
        assert os.path.exists(path)
        assert len(fig.axes[0].collections) == 1
        plt.close(fig)
