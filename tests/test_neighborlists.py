"""Tests for neighbor list implementations."""

import numpy as np
import pytest

from mdstats.neighborlists import (
    DOMAIN_DECOMPOSITION,
    NSQUARE,
    CellList,
    VerletList,
)
from mdstats.system.box import Box


@pytest.fixture
def simple_positions():
    """Three atoms: 0 and 1 are close, 2 is far."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [0.5, 0.0, 0.0],
            [5.0, 0.0, 0.0],
        ]
    )


@pytest.mark.parametrize("nlist_class", [VerletList, CellList])
class TestCommonBehavior:
    """Behavior shared by both neighbor lists."""

    def test_build_finds_close_pairs(self, nlist_class, simple_positions):
        """Only pairs within cutoff + skin are listed."""
        nlist = nlist_class(cutoff=1.0, skin=0.3)
        nlist.build(simple_positions, Box.cubic(10.0))

        pairs = nlist.get_pairs()
        assert len(pairs) == 1
        assert list(pairs[0]) == [0, 1]
        assert nlist.n_pairs == 1

    def test_get_neighbors(self, nlist_class, simple_positions):
        """Neighbors are listed symmetrically."""
        nlist = nlist_class(cutoff=1.0, skin=0.3)
        nlist.build(simple_positions, Box.cubic(10.0))

        assert 1 in nlist.get_neighbors(0)
        assert 0 in nlist.get_neighbors(1)
        assert len(nlist.get_neighbors(2)) == 0

    def test_periodic_pair(self, nlist_class):
        """Pairs across the boundary are found."""
        positions = np.array([[0.2, 5.0, 5.0], [9.8, 5.0, 5.0]])
        nlist = nlist_class(cutoff=1.0, skin=0.0)
        nlist.build(positions, Box.cubic(10.0))
        assert nlist.n_pairs == 1

    def test_update_if_needed(self, nlist_class, simple_positions):
        """Small moves keep the list, large moves rebuild it."""
        nlist = nlist_class(cutoff=1.0, skin=0.4)
        nlist.build(simple_positions, Box.cubic(10.0))

        moved = simple_positions.copy()
        moved[2, 0] += 0.1
        assert not nlist.update_if_needed(moved)

        moved[2, 0] = 0.9
        assert nlist.update_if_needed(moved)
        assert nlist.n_pairs == 3

    def test_update_before_build(self, nlist_class, simple_positions):
        """Updating an unbuilt list is an error."""
        with pytest.raises(RuntimeError):
            nlist_class(cutoff=1.0).update_if_needed(simple_positions)

    def test_invalid_cutoff(self, nlist_class):
        """Cutoffs must be positive."""
        with pytest.raises(ValueError):
            nlist_class(cutoff=0.0)
        with pytest.raises(ValueError):
            nlist_class(cutoff=1.0, skin=-0.1)

    def test_empty_system(self, nlist_class):
        """An empty configuration has no pairs."""
        nlist = nlist_class(cutoff=1.0)
        nlist.build(np.empty((0, 3)), Box.cubic(5.0))
        assert nlist.n_pairs == 0
        assert nlist.get_pairs().shape == (0, 2)


class TestCellStructure:
    """Test cell-structure labels."""

    def test_labels(self):
        """Cell lists are domain-decomposed, Verlet lists are all-pairs."""
        assert CellList(cutoff=1.0).cell_structure == DOMAIN_DECOMPOSITION
        assert VerletList(cutoff=1.0).cell_structure == NSQUARE

    def test_cell_grid(self):
        """At least three cells per axis."""
        nlist = CellList(cutoff=1.0, skin=0.0)
        nlist.build(np.zeros((1, 3)), Box.orthorhombic(10.0, 2.0, 4.5))
        assert nlist.n_cells == (10, 3, 4)


class TestCellListMatchesVerlet:
    """Both lists produce the same candidate pairs."""

    def test_random_system(self):
        """Pairs agree on a random configuration."""
        rng = np.random.default_rng(7)
        box = Box.orthorhombic(8.0, 9.0, 10.0)
        positions = rng.uniform(0.0, 1.0, size=(200, 3)) * box.lengths

        cell = CellList(cutoff=1.2, skin=0.2)
        verlet = VerletList(cutoff=1.2, skin=0.2)
        cell.build(positions, box)
        verlet.build(positions, box)

        cell_pairs = {tuple(p) for p in cell.get_pairs()}
        verlet_pairs = {tuple(p) for p in verlet.get_pairs()}
        assert cell_pairs == verlet_pairs
        assert len(cell_pairs) == cell.n_pairs

    def test_unfolded_positions(self):
        """Positions outside the box are folded into cells."""
        box = Box.cubic(6.0)
        positions = np.array([[-0.1, 3.0, 3.0], [6.2, 3.0, 3.0]])
        nlist = CellList(cutoff=0.5, skin=0.0)
        nlist.build(positions, box)
        assert nlist.n_pairs == 1
