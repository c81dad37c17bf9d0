from __future__ import annotations

from typing import Dict, List

import numpy as np  # type: ignore
import matplotlib
matplotlib.use("Agg")  # evaluation runs headless
import matplotlib.pyplot as plt  # type: ignore

from .error_metrics import compute_error_distribution


def fig_ranking(averages: Dict[str, float], title: str = "Detector Ranking"):
    """Horizontal bars of mean pixel distance per detector, best on top."""
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.set_title(title)
    if not averages:
        ax.text(0.5, 0.5, "no data", ha="center", va="center", transform=ax.transAxes)
        ax.axis("off")
        fig.tight_layout()
        return fig
    items = sorted(averages.items(), key=lambda kv: kv[1])
    names = [k for k, _ in items]
    values = np.array([v for _, v in items], dtype=float)
    colors = ["seagreen"] + ["steelblue"] * (len(items) - 1)
    ax.barh(names, values, color=colors, edgecolor="black", alpha=0.8)
    for i, v in enumerate(values):
        ax.text(v, i, f" {v:.2f} px", va="center", fontsize=8)
    ax.invert_yaxis()
    ax.set_xlabel("Mean error (px)")
    ax.grid(True, axis="x", alpha=0.3)
    fig.tight_layout()
    return fig


def fig_histogram(errors: Dict[str, List[float]], bin_width_px: float = 10.0):
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.set_title("Error Distribution")
    for name, dists in errors.items():
        hist, edges = compute_error_distribution(dists, bin_width_px=bin_width_px)
        centers = 0.5 * (edges[:-1] + edges[1:])
        ax.step(centers, hist, where="mid", label=name)
    ax.set_xlabel("Error (px)")
    ax.set_ylabel("Count")
    if errors:
        ax.legend(loc="best")
    fig.tight_layout()
    return fig


def save_figure(fig, path: str) -> None:
    fig.savefig(path, dpi=100)
    plt.close(fig)
