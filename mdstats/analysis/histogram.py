"""Shared radial binning helpers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..errors import DomainError, ValidationError


@dataclass(frozen=True)
class RadialBins:
    """
    Radial bins over [r_min, r_max), linear or logarithmic.

    Attributes:
        r_min: Lower bound.
        r_max: Upper bound.
        n_bins: Number of bins.
        log: Whether bins are equally spaced in log(r).
    """

    r_min: float
    r_max: float
    n_bins: int
    log: bool = False

    def __post_init__(self) -> None:
        if self.n_bins < 1:
            raise ValidationError(f"r_bins must be >= 1, got {self.n_bins}")
        if self.r_min < 0.0:
            raise ValidationError(f"r_min must be >= 0, got {self.r_min}")
        if self.log and self.r_min == 0.0:
            raise DomainError("logarithmic binning requires r_min > 0")
        if self.r_max <= self.r_min:
            raise ValidationError(
                f"r_max ({self.r_max}) must be larger than r_min ({self.r_min})"
            )

    @property
    def width(self) -> float:
        """Linear bin width (log-width for logarithmic bins)."""
        if self.log:
            return (np.log(self.r_max) - np.log(self.r_min)) / self.n_bins
        return (self.r_max - self.r_min) / self.n_bins

    @property
    def edges(self) -> NDArray[np.floating]:
        """Bin edges, shape (n_bins + 1,)."""
        if self.log:
            return np.geomspace(self.r_min, self.r_max, self.n_bins + 1)
        return self.r_min + self.width * np.arange(self.n_bins + 1)

    @property
    def centers(self) -> NDArray[np.floating]:
        """Bin centers (geometric centers for logarithmic bins)."""
        if self.log:
            factor = (self.r_max / self.r_min) ** (1.0 / self.n_bins)
            return self.r_min * np.sqrt(factor) * factor ** np.arange(self.n_bins)
        return self.r_min + self.width * (np.arange(self.n_bins) + 0.5)

    def index(self, r: NDArray[np.floating]) -> NDArray[np.integer]:
        """Truncated bin index for each distance (may fall outside [0, n_bins))."""
        r = np.asarray(r, dtype=np.float64)
        if self.log:
            return ((np.log(r) - np.log(self.r_min)) / self.width).astype(np.int64)
        return ((r - self.r_min) / self.width).astype(np.int64)

    def shell_volumes(self) -> NDArray[np.floating]:
        """Volume of each spherical shell, (4/3) pi (r_out^3 - r_in^3)."""
        edges = self.edges
        return (4.0 / 3.0) * np.pi * (edges[1:] ** 3 - edges[:-1] ** 3)
