"""Periodic simulation box and minimum-image geometry."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Box:
    """
    Orthorhombic periodic simulation box.

    Attributes:
        lengths: Box side lengths [Lx, Ly, Lz], all positive.
    """

    lengths: NDArray[np.floating]

    def __post_init__(self) -> None:
        """Validate and convert lengths to a float array."""
        lengths = np.asarray(self.lengths, dtype=np.float64)
        if lengths.shape != (3,):
            raise ValueError(f"Box lengths must have shape (3,), got {lengths.shape}")
        if np.any(lengths <= 0):
            raise ValueError(f"Box lengths must be positive, got {lengths}")
        lengths.flags.writeable = False
        object.__setattr__(self, "lengths", lengths)

    @classmethod
    def orthorhombic(cls, lx: float, ly: float, lz: float) -> Box:
        return cls(np.array([lx, ly, lz], dtype=np.float64))

    @classmethod
    def cubic(cls, length: float) -> Box:
        return cls(np.full(3, length, dtype=np.float64))

    @property
    def volume(self) -> float:
        """Lx * Ly * Lz."""
        return float(np.prod(self.lengths))

    @property
    def min_length(self) -> float:
        """Return the smallest side length (default cutoff basis)."""
        return float(np.min(self.lengths))

    def wrap_positions(self, positions: ArrayLike) -> NDArray[np.floating]:
        """
        Fold positions into the primary cell [0, L).

        Args:
            positions: Positions array of shape (3,) or (N, 3).

        Returns:
            Folded positions with the same shape.
        """
        positions = np.asarray(positions, dtype=np.float64)
        return positions - self.lengths * np.floor(positions / self.lengths)

    def minimum_image(self, r1: ArrayLike, r2: ArrayLike) -> NDArray[np.floating]:
        """
        Compute the minimum image displacement r2 - r1.

        Each component is wrapped into the half-open interval (-L/2, L/2].

        Args:
            r1: First position(s), shape (3,) or (N, 3).
            r2: Second position(s), shape (3,) or (N, 3).

        Returns:
            Displacement vector(s) under the minimum image convention.
        """
        dr = np.asarray(r2, dtype=np.float64) - np.asarray(r1, dtype=np.float64)
        return dr - self.lengths * np.ceil(dr / self.lengths - 0.5)

    def squared_distance(
        self, r1: ArrayLike, r2: ArrayLike
    ) -> float | NDArray[np.floating]:
        """Squared minimum image distance between positions."""
        dr = self.minimum_image(r1, r2)
        return np.sum(dr * dr, axis=-1)

    def minimum_image_distance(
        self, r1: ArrayLike, r2: ArrayLike
    ) -> float | NDArray[np.floating]:
        """Minimum image distance; broadcasts like `minimum_image`."""
        return np.sqrt(self.squared_distance(r1, r2))
