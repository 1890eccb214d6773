"""Linked-cell (domain-decomposed) neighbor list."""

from __future__ import annotations

from itertools import product
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .base import DOMAIN_DECOMPOSITION, NeighborList

if TYPE_CHECKING:
    from ..system import Box

# Offsets of a cell and its 26 periodic neighbors
_STENCIL = np.array(list(product((-1, 0, 1), repeat=3)), dtype=np.int64)


class CellList(NeighborList):
    """
    Linked-cell neighbor list.

    The box is cut into a grid of cells at least ``cutoff + skin`` wide and
    only particles in the same or adjacent cells are compared, which costs
    O(N) at fixed density. Each cell keeps its particles as a linked chain:
    ``_head[cell]`` is the last particle inserted and ``_next[i]`` the one
    inserted before ``i``, with -1 ending the chain.
    """

    def __init__(self, cutoff: float, skin: float = 0.3) -> None:
        super().__init__(cutoff, skin)
        self._n_cells: NDArray[np.integer] = np.ones(3, dtype=np.int64)
        self._head: NDArray[np.integer] = np.empty(0, dtype=np.int64)
        self._next: NDArray[np.integer] = np.empty(0, dtype=np.int64)

    @property
    def cell_structure(self) -> str:
        return DOMAIN_DECOMPOSITION

    @property
    def n_cells(self) -> tuple[int, int, int]:
        """Number of cells along x, y and z."""
        return tuple(int(n) for n in self._n_cells)

    def _cell_id(self, cell: NDArray[np.integer]) -> NDArray[np.integer]:
        cell = np.mod(cell, self._n_cells)
        ny, nz = self._n_cells[1], self._n_cells[2]
        return (cell[..., 0] * ny + cell[..., 1]) * nz + cell[..., 2]

    def _chain(self, cell_id: int) -> list[int]:
        members = []
        i = self._head[cell_id]
        while i != -1:
            members.append(int(i))
            i = self._next[i]
        return members

    def _fill_cells(self, positions: NDArray[np.floating], box: Box) -> None:
        # Three cells per axis at least, so no stencil entry is visited twice
        per_axis = (box.lengths / self.list_cutoff).astype(np.int64)
        self._n_cells = np.maximum(per_axis, 3)

        fractional = box.wrap_positions(positions) / box.lengths
        grid = (fractional * self._n_cells).astype(np.int64)
        grid = np.clip(grid, 0, self._n_cells - 1)
        owner = self._cell_id(grid)

        self._head = np.full(int(np.prod(self._n_cells)), -1, dtype=np.int64)
        self._next = np.full(len(positions), -1, dtype=np.int64)
        for i, cell_id in enumerate(owner):
            self._next[i] = self._head[cell_id]
            self._head[cell_id] = i

    def _find_pairs(
        self, positions: NDArray[np.floating], box: Box
    ) -> NDArray[np.integer]:
        self._fill_cells(positions, box)
        cutoff_sq = self.list_cutoff**2

        chunks = []
        for cell in product(*(range(n) for n in self.n_cells)):
            own = int(self._cell_id(np.array(cell)))
            members = self._chain(own)
            if not members:
                continue

            # Pairs of adjacent cells are visited from the lower id only
            across = [
                j
                for other in np.unique(self._cell_id(np.array(cell) + _STENCIL))
                if other > own
                for j in self._chain(int(other))
            ]
            for k, i in enumerate(members):
                others = np.array(members[k + 1 :] + across, dtype=np.int64)
                if not len(others):
                    continue
                r_sq = box.squared_distance(positions[i], positions[others])
                close = others[r_sq < cutoff_sq]
                if len(close):
                    pairs = [np.minimum(close, i), np.maximum(close, i)]
                    chunks.append(np.column_stack(pairs))

        if not chunks:
            return np.empty((0, 2), dtype=np.int64)
        return np.concatenate(chunks)
