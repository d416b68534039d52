"""Matplotlib charts for HALT analytics and worry sessions.

All figures use the same dark palette as the terminal panels.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Optional

import matplotlib
matplotlib.use("Agg")  # non-interactive backend -- render to image buffers
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure
from PIL import Image

from steadymind.models import ConcernTally, HaltCategory

# -- Palette -------------------------------------------------------------
_BG = "#2b2b2b"
_FG = "#e0e0e0"
_ACCENT = "#6a9fb5"
_GRID = "#444444"
_TRACK = (0.70, 0.70, 0.70, 0.10)

# Bar colour per need (orange / red / blue / purple).
_NEED_COLOURS: dict[HaltCategory, str] = {
    HaltCategory.HUNGRY: "#e69545",
    HaltCategory.ANGRY: "#d9534f",
    HaltCategory.LONELY: "#5b8fd9",
    HaltCategory.TIRED: "#9b6fc9",
}
_BEFORE_LINE = "#d9534f"
_AFTER_LINE = "#6a9fb5"


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------

def _fig_to_pil(fig: Figure, dpi: int = 100) -> Image.Image:
    """Render a matplotlib Figure to a PIL Image and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight",
                facecolor=fig.get_facecolor(), edgecolor="none")
    plt.close(fig)
    buf.seek(0)
    return Image.open(buf)


def _style_axes(ax) -> None:
    ax.set_facecolor(_BG)
    ax.tick_params(colors=_FG, labelsize=8)
    ax.spines["bottom"].set_color(_GRID)
    ax.spines["left"].set_color(_GRID)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


# -----------------------------------------------------------------------
# Needs breakdown
# -----------------------------------------------------------------------

def needs_breakdown(
    tally: ConcernTally,
    *,
    title: str = "Needs Breakdown",
    size: tuple[int, int] = (560, 260),
    dpi: int = 100,
) -> Image.Image:
    """Horizontal bars: how often each need was flagged as a concern.

    Bars are scaled against the largest count; labels show the count and
    its share of all checks.
    """
    categories = list(HaltCategory)
    counts = np.array([tally.concern_count(c) for c in categories], dtype=float)
    max_count = counts.max() if counts.size else 0.0
    widths = counts / max_count if max_count > 0 else np.zeros_like(counts)

    fig_w, fig_h = size[0] / dpi, size[1] / dpi
    fig = Figure(figsize=(fig_w, fig_h), dpi=dpi, facecolor=_BG)
    ax = fig.add_subplot(111)
    _style_axes(ax)

    y = np.arange(len(categories))[::-1]  # Hungry on top
    ax.barh(y, np.ones_like(widths), color=_TRACK, height=0.6)
    ax.barh(y, widths, color=[_NEED_COLOURS[c] for c in categories], height=0.6)

    for yi, category, count in zip(y, categories, counts):
        pct = round(count / tally.total_checks * 100) if tally.total_checks else 0
        ax.text(1.02, yi, f"{int(count)} ({pct}%)", va="center", color=_FG, fontsize=8)

    ax.set_yticks(y)
    ax.set_yticklabels([c.label for c in categories], color=_FG, fontsize=9)
    ax.set_xlim(0, 1.2)
    ax.set_xticks([])
    ax.spines["bottom"].set_visible(False)
    ax.set_title(title, color=_FG, fontsize=11, fontweight="bold")

    return _fig_to_pil(fig, dpi=dpi)


# -----------------------------------------------------------------------
# Anxiety before / after
# -----------------------------------------------------------------------

def anxiety_trend(
    points: list[tuple[datetime, int, int]],
    *,
    title: str = "Anxiety Before / After",
    size: tuple[int, int] = (560, 240),
    dpi: int = 100,
) -> Optional[Image.Image]:
    """Line chart of (when, before, after) worry-session ratings.

    Returns *None* if fewer than two sessions are provided.
    """
    if len(points) < 2:
        return None
    points = sorted(points, key=lambda p: p[0])

    dates = [p[0] for p in points]
    before = [p[1] for p in points]
    after = [p[2] for p in points]

    fig_w, fig_h = size[0] / dpi, size[1] / dpi
    fig = Figure(figsize=(fig_w, fig_h), dpi=dpi, facecolor=_BG)
    ax = fig.add_subplot(111)
    _style_axes(ax)

    ax.plot(dates, before, color=_BEFORE_LINE, linewidth=1.5, marker="o",
            markersize=4, label="Before")
    ax.plot(dates, after, color=_AFTER_LINE, linewidth=2, marker="o",
            markersize=5, markerfacecolor=_ACCENT, markeredgecolor="white",
            markeredgewidth=0.5, label="After")
    ax.fill_between(dates, before, after, alpha=0.15, color=_ACCENT)

    ax.set_ylim(0, 10)
    ax.set_ylabel("Anxiety (0-10)", color=_FG, fontsize=9)
    ax.set_title(title, color=_FG, fontsize=11, fontweight="bold")
    ax.yaxis.grid(color=_GRID, linewidth=0.5)
    legend = ax.legend(facecolor=_BG, edgecolor=_GRID, fontsize=8)
    for text in legend.get_texts():
        text.set_color(_FG)

    fig.autofmt_xdate(rotation=30, ha="right")

    return _fig_to_pil(fig, dpi=dpi)
