"""Shared bookkeeping of the spatial pair indices."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from ..system import Box

DOMAIN_DECOMPOSITION = "domain_decomposition"
NSQUARE = "nsquare"

_NO_PAIRS = np.empty((0, 2), dtype=np.int64)


class NeighborList(ABC):
    """
    Index of particle pairs that may lie within ``cutoff``.

    Pairs are collected up to ``cutoff + skin`` so the index stays usable
    until some particle has moved by more than ``skin / 2``. Subclasses only
    decide how candidate pairs are found; storage, neighbor lookup and the
    displacement check live here.

    Attributes:
        skin: Buffer added to the cutoff when the index is built.
    """

    def __init__(self, cutoff: float, skin: float = 0.3) -> None:
        """
        Args:
            cutoff: Interaction cutoff distance.
            skin: Buffer distance for list validity.
        """
        if cutoff <= 0:
            raise ValueError(f"cutoff must be positive, got {cutoff}")
        if skin < 0:
            raise ValueError(f"skin must be non-negative, got {skin}")
        self._cutoff = float(cutoff)
        self.skin = float(skin)

        self._pairs: NDArray[np.integer] = _NO_PAIRS
        self._neighbors: list[NDArray[np.integer]] = []
        self._reference: NDArray[np.floating] | None = None
        self._box: Box | None = None

    @property
    def cutoff(self) -> float:
        """Distance up to which pairs are guaranteed to be listed."""
        return self._cutoff

    @property
    def list_cutoff(self) -> float:
        return self._cutoff + self.skin

    @property
    @abstractmethod
    def cell_structure(self) -> str:
        """Kind of spatial decomposition backing this index."""
        ...

    @abstractmethod
    def _find_pairs(
        self, positions: NDArray[np.floating], box: Box
    ) -> NDArray[np.integer]:
        """Return (i, j) pairs with i < j closer than ``list_cutoff``."""
        ...

    @property
    def n_pairs(self) -> int:
        return len(self._pairs)

    def build(self, positions: ArrayLike, box: Box) -> None:
        """
        Index ``positions`` from scratch.

        Args:
            positions: Particle positions, shape (N, 3).
            box: Periodic box the positions live in.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        self._reference = positions.copy()
        self._box = box

        pairs = self._find_pairs(positions, box)
        if len(pairs):
            # Lexicographic order makes scans over the pairs reproducible
            self._pairs = np.unique(np.asarray(pairs, dtype=np.int64), axis=0)
        else:
            self._pairs = _NO_PAIRS

        buckets: list[list[int]] = [[] for _ in range(len(positions))]
        for i, j in self._pairs:
            buckets[i].append(int(j))
            buckets[j].append(int(i))
        self._neighbors = [np.array(b, dtype=np.int64) for b in buckets]

    def update_if_needed(self, positions: ArrayLike) -> bool:
        """
        Rebuild when the index may have gone stale.

        Args:
            positions: Current particle positions, shape (N, 3).

        Returns:
            True if the index was rebuilt.
        """
        if self._reference is None or self._box is None:
            raise RuntimeError("Neighbor list has not been built yet")

        positions = np.asarray(positions, dtype=np.float64)
        if positions.shape != self._reference.shape:
            self.build(positions, self._box)
            return True

        moved = np.linalg.norm(positions - self._reference, axis=1)
        # Two particles can close in on each other by skin/2 each
        if np.max(moved, initial=0.0) > self.skin / 2:
            self.build(positions, self._box)
            return True
        return False

    def get_pairs(self) -> NDArray[np.integer]:
        """Candidate pairs, shape (N_pairs, 2), i < j, sorted."""
        return self._pairs

    def get_neighbors(self, index: int) -> NDArray[np.integer]:
        """Indices paired with particle ``index``."""
        if not self._neighbors:
            return np.array([], dtype=np.int64)
        return self._neighbors[index]
