"""
Plotting helpers for analysis results.

Each helper draws into ``ax`` when one is given, otherwise into a new
figure, and returns the Axes it used.

Example:
    >>> from mdstats import plotting
    >>> from mdstats.analysis import rdf
    >>> result = rdf(particles, [0], [0], r_max=3.0, r_bins=60)
    >>> plotting.rdf(result, show=False)
    >>> plotting.save("rdf.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .analysis import DistanceDistribution, RDFResult, StructureFactor

logger = logging.getLogger(__name__)

try:
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False
    plt = None


def _check_matplotlib():
    if not HAS_MATPLOTLIB:
        raise ImportError(
            "matplotlib is required for plotting. "
            "Install it with: pip install matplotlib"
        )


def _target_axes(ax, figsize):
    _check_matplotlib()
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)
    return ax


def _finish(ax, show):
    ax.grid(True, alpha=0.3)
    ax.figure.tight_layout()
    if show:
        plt.show()
    return ax


def rdf(
    result: RDFResult,
    ax=None,
    label: str | None = None,
    show: bool = True,
    figsize: tuple[float, float] = (8, 5),
):
    """
    Plot a radial distribution function g(r).

    Args:
        result: RDFResult from `rdf`, `rdf_average` or
            `rdf_average_intermolecular`.
        ax: Axes to draw into; a new figure is made when None.
        label: Legend entry for the curve.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches, for new figures.

    Returns:
        The matplotlib Axes.
    """
    ax = _target_axes(ax, figsize)

    ax.plot(result.r, result.g_r, lw=1.5, label=label)
    ax.axhline(y=1.0, color="r", linestyle="--", alpha=0.5)
    ax.set_xlabel("r (σ)")
    ax.set_ylabel("g(r)")
    if result.n_frames > 1:
        ax.set_title(f"Radial Distribution Function ({result.n_frames} configurations)")
    else:
        ax.set_title("Radial Distribution Function")
    ax.set_xlim(result.bins.r_min, result.bins.r_max)
    ax.set_ylim(0, None)
    if label is not None:
        ax.legend()
    return _finish(ax, show)


def distance_distribution(
    result: DistanceDistribution,
    ax=None,
    show: bool = True,
    figsize: tuple[float, float] = (8, 5),
):
    """
    Plot a nearest-neighbor distance distribution.

    Cumulative distributions are drawn as steps, plain ones as bars.
    Logarithmic binnings get a logarithmic r axis.
    """
    ax = _target_axes(ax, figsize)

    if result.integrated:
        ax.step(result.r, result.distribution, "k-", where="mid", lw=1.5)
        ax.set_ylabel("P(r_min <= r)")
    else:
        widths = np.diff(result.bins.edges)
        ax.bar(result.r, result.distribution, width=widths, alpha=0.7, edgecolor="k")
        ax.set_ylabel("P(r)")
    if result.bins.log:
        ax.set_xscale("log")
    ax.set_xlabel("r (σ)")
    ax.set_title(f"Nearest-Neighbor Distances (below r_min: {result.low:.3f})")
    return _finish(ax, show)


def structure_factor(
    result: StructureFactor,
    threshold: float | None = None,
    ax=None,
    show: bool = True,
    figsize: tuple[float, float] = (8, 5),
):
    """Plot S(q), leaving out shells at or below ``threshold``."""
    ax = _target_axes(ax, figsize)

    shown = result.significant(threshold)
    ax.plot(shown.q, shown.s_q, "bo-", ms=3, lw=1)
    ax.axhline(y=1.0, color="r", linestyle="--", alpha=0.5)
    ax.set_xlabel("q (1/σ)")
    ax.set_ylabel("S(q)")
    ax.set_title("Static Structure Factor")
    return _finish(ax, show)


def overview(
    g_r: RDFResult,
    nearest: DistanceDistribution,
    s_q: StructureFactor,
    show: bool = True,
    figsize: tuple[float, float] = (15, 4.5),
):
    """
    Draw g(r), the nearest-neighbor distribution and S(q) side by side.

    Returns:
        Array of the three Axes.
    """
    _check_matplotlib()
    _, axes = plt.subplots(1, 3, figsize=figsize)
    rdf(g_r, ax=axes[0], show=False)
    distance_distribution(nearest, ax=axes[1], show=False)
    structure_factor(s_q, ax=axes[2], show=False)
    if show:
        plt.show()
    return axes


def save(filename: str | Path, dpi: int = 150) -> None:
    """
    Save the current figure to a file.

    Args:
        filename: Output filename (e.g., "plot.png", "plot.pdf").
        dpi: Resolution in dots per inch.
    """
    _check_matplotlib()
    plt.savefig(filename, dpi=dpi, bbox_inches="tight")
    logger.info("Saved plot to %s", filename)


def show() -> None:
    """Display all pending plots."""
    _check_matplotlib()
    plt.show()
