"""All-pairs neighbor list."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .base import NSQUARE, NeighborList

if TYPE_CHECKING:
    from ..system import Box


class VerletList(NeighborList):
    """
    Neighbor list from an O(N^2) scan of every pair.

    There is no cell grid behind it, so analyses that need a
    domain-decomposed index reject it.
    """

    @property
    def cell_structure(self) -> str:
        return NSQUARE

    def _find_pairs(
        self, positions: NDArray[np.floating], box: Box
    ) -> NDArray[np.integer]:
        cutoff_sq = self.list_cutoff**2
        chunks = []
        for i in range(len(positions) - 1):
            r_sq = box.squared_distance(positions[i], positions[i + 1 :])
            partners = np.flatnonzero(r_sq < cutoff_sq) + i + 1
            if len(partners):
                chunks.append(np.column_stack([np.full_like(partners, i), partners]))

        if not chunks:
            return np.empty((0, 2), dtype=np.int64)
        return np.concatenate(chunks)
