"""Visualization and diagnostics for intercept searches.

Samples the separation of two bodies over a time span, dumps it as plain
text for external plotting, and draws the distance history with the time
windows and intercepts found by the pipeline. :func:`generate_report`
bundles everything for one pair of orbits into a directory of PNGs and a
markdown summary.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .intercept import InterceptFinder, SearchSettings
from .orbit import Orbit
from .proximity import proximity_ranges
from .search import Intercept
from .windows import intercept_times


# Use a clean style
plt.rcParams.update({
    "figure.facecolor": "white",
    "axes.facecolor": "#fafafa",
    "axes.grid": True,
    "grid.alpha": 0.3,
    "font.family": "sans-serif",
    "font.size": 10,
})

DISTANCE_COLOR = "#2c3e50"
WINDOW_COLOR = "#3498db"
CLOSING_COLOR = "#e74c3c"
OPENING_COLOR = "#2ecc71"


def sample_distance(
    orbit1: Orbit,
    orbit2: Orbit,
    t0: float,
    t1: float,
    samples: int = 1000,
) -> pd.DataFrame:
    """Separation of two bodies at evenly spaced times.

    Returns:
        DataFrame with ``time``, ``distance`` and ``speed`` columns.
    """
    if samples < 2:
        raise ValueError(f"At least 2 samples required, got {samples}")

    records = []
    for t in np.linspace(t0, t1, samples):
        state = Intercept.at(orbit1, orbit2, float(t))
        records.append({
            "time": state.time,
            "distance": state.distance,
            "speed": state.speed,
        })
    return pd.DataFrame(records)


def write_distance_samples(samples_df: pd.DataFrame, filepath: str | Path) -> Path:
    """Write ``time<TAB>distance<TAB>speed`` rows, one per sample."""
    path = Path(filepath)
    samples_df[["time", "distance", "speed"]].to_csv(
        path, sep="\t", header=False, index=False, float_format="%f",
    )
    return path


def plot_distance_history(
    samples_df: pd.DataFrame,
    intercepts: Optional[list[Intercept]] = None,
    windows: Optional[list[tuple[float, float]]] = None,
    threshold: Optional[float] = None,
    target_distance: float = 0.0,
    title: str = "Separation",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (14, 6),
) -> plt.Figure:
    """Plot separation over time with windows and intercepts overlaid.

    Args:
        samples_df: DataFrame from :func:`sample_distance`.
        intercepts: Intercepts to mark (optional).
        windows: Time windows to shade (optional).
        threshold: Width of the accepted band around ``target_distance``.
        target_distance: Separation searched for.
        title: Plot title.
        save_path: Path to save figure (optional).

    Returns:
        matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.plot(samples_df["time"], samples_df["distance"],
            linewidth=0.8, color=DISTANCE_COLOR, label="Distance")

    for i, (t_begin, t_end) in enumerate(windows or []):
        ax.axvspan(t_begin, t_end, color=WINDOW_COLOR, alpha=0.15,
                   label="Window" if i == 0 else None)

    if threshold is not None:
        ax.axhspan(max(0.0, target_distance - threshold), target_distance + threshold,
                   color="#f39c12", alpha=0.2, label="Accepted band")

    for hit in intercepts or []:
        color = CLOSING_COLOR if hit.speed < 0 else OPENING_COLOR
        ax.scatter([hit.time], [hit.distance], c=color, s=40, zorder=3,
                   edgecolors="white", linewidths=0.5)

    ax.set_xlabel("Time")
    ax.set_ylabel("Distance")
    ax.set_title(title)
    ax.legend(loc="upper right", fontsize=8)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_intercept_windows(
    windows: list[tuple[float, float]],
    t0: float,
    t1: float,
    intercepts: Optional[list[Intercept]] = None,
    title: str = "Intercept Windows",
    save_path: Optional[str | Path] = None,
    figsize: tuple = (14, 3),
) -> plt.Figure:
    """Timeline of the search span with windows as bars and intercepts as ticks.
    """
    fig, ax = plt.subplots(figsize=figsize)

    if not windows:
        ax.text(0.5, 0.5, "No time windows", transform=ax.transAxes,
                ha="center", va="center", fontsize=14, color="#95a5a6")
    else:
        ax.broken_barh([(a, b - a) for a, b in windows], (0.25, 0.5),
                       facecolors=WINDOW_COLOR, alpha=0.6)

    for hit in intercepts or []:
        color = CLOSING_COLOR if hit.speed < 0 else OPENING_COLOR
        ax.axvline(hit.time, color=color, linewidth=1.5, linestyle="--")

    ax.set_xlim(t0, t1)
    ax.set_ylim(0.0, 1.0)
    ax.set_yticks([])
    ax.set_xlabel("Time")
    ax.set_title(title)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def generate_report(
    orbit1: Orbit,
    orbit2: Orbit,
    t0: float,
    t1: float,
    settings: Optional[SearchSettings] = None,
    output_dir: str | Path = "data/reports",
    samples: int = 1000,
) -> Path:
    """Run the pipeline on one pair and save plots plus a markdown summary.

    Returns the output directory path.
    """
    settings = settings or SearchSettings()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    name1 = orbit1.name or "body 1"
    name2 = orbit2.name or "body 2"

    reach = settings.target_distance + settings.threshold
    ranges1 = proximity_ranges(orbit1, orbit2, reach)
    ranges2 = proximity_ranges(orbit2, orbit1, reach)
    windows = intercept_times(orbit1, orbit2, t0, t1, ranges1, ranges2, settings.window_limit)
    intercepts = InterceptFinder(settings).find(orbit1, orbit2, t0, t1)
    samples_df = sample_distance(orbit1, orbit2, t0, t1, samples)

    summary = (
        f"# APSIS — Intercept Report\n"
        f"## {name1} / {name2}\n\n"
        f"- **Search span:** [{t0:.6g}, {t1:.6g}]\n"
        f"- **Target distance:** {settings.target_distance:.6g} "
        f"(± {settings.threshold:.6g})\n"
        f"- **Proximity ranges:** {ranges1.count} / {ranges2.count}\n"
        f"- **Time windows:** {len(windows)}\n"
        f"- **Intercepts:** {len(intercepts)}\n"
        f"- **Minimum sampled distance:** {samples_df['distance'].min():.6g}\n"
        f"- **Report generated:** {datetime.now():%Y-%m-%d %H:%M}\n\n"
    )
    if intercepts:
        summary += "### Intercepts\n"
        for hit in intercepts:
            summary += f"- {hit.summary()}\n"

    (output_dir / "report.md").write_text(summary)
    write_distance_samples(samples_df, output_dir / "distance.txt")
    if intercepts:
        pd.DataFrame([hit.to_dict() for hit in intercepts]).to_csv(
            output_dir / "intercepts.csv", index=False,
        )

    plot_distance_history(
        samples_df,
        intercepts=intercepts,
        windows=windows,
        threshold=settings.threshold,
        target_distance=settings.target_distance,
        title=f"{name1} / {name2} — Separation",
        save_path=output_dir / "distance.png",
    )
    plot_intercept_windows(
        windows,
        t0,
        t1,
        intercepts=intercepts,
        title=f"{name1} / {name2} — Windows",
        save_path=output_dir / "windows.png",
    )

    plt.close("all")
    return output_dir
