"""Tests for center of mass, inertia tensor and principal axes."""

import numpy as np
import pytest

from mdstats.analysis import (
    center_of_mass,
    eigenvalues_3x3,
    eigenvector_3x3,
    inertia_tensor,
    principal_axes,
)
from mdstats.errors import DomainError
from mdstats.system import Box, ParticleData


def random_symmetric(seed):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(3, 3))
    return a + a.T


@pytest.fixture
def cloud():
    """Anisotropic random cloud of type 1 plus a type 0 decoy."""
    rng = np.random.default_rng(3)
    positions = 5.0 + rng.normal(size=(50, 3)) * [1.5, 0.7, 0.3]
    positions = np.vstack([positions, [[0.0, 0.0, 0.0]]])
    types = np.array([1] * 50 + [0])
    masses = rng.uniform(0.5, 2.0, size=51)
    return ParticleData.create(positions, Box.cubic(10.0), types=types, masses=masses)


class TestCenterOfMass:
    """Test mass-weighted centers."""

    def test_mass_weighting(self):
        """Heavier particles pull the center."""
        p = ParticleData.create(
            [[0.0, 1.0, 1.0], [4.0, 1.0, 1.0]], Box.cubic(10.0), masses=[1.0, 3.0]
        )
        assert np.allclose(center_of_mass(p, 0), [3.0, 1.0, 1.0])

    def test_type_filter(self, cloud):
        """Only particles of the requested type contribute."""
        mask = cloud.types == 1
        expected = np.average(cloud.positions[mask], axis=0, weights=cloud.masses[mask])
        assert np.allclose(center_of_mass(cloud, 1), expected)

    def test_missing_type(self, cloud):
        """A type without particles has no center."""
        with pytest.raises(DomainError):
            center_of_mass(cloud, 7)

    def test_folded_coordinates(self):
        """A pair straddling the boundary is not unwrapped."""
        p = ParticleData.create([[0.5, 0.0, 0.0], [9.5, 0.0, 0.0]], Box.cubic(10.0))
        assert np.isclose(center_of_mass(p, 0)[0], 5.0)


class TestInertiaTensor:
    """Test the inertia tensor."""

    def test_dumbbell(self):
        """A dumbbell along x has no moment about x."""
        p = ParticleData.create([[4.0, 5.0, 5.0], [6.0, 5.0, 5.0]], Box.cubic(10.0))
        assert np.allclose(inertia_tensor(p, 0), np.diag([0.0, 2.0, 2.0]))

    def test_off_diagonal_sign(self):
        """Products of inertia enter with a minus sign."""
        p = ParticleData.create([[6.0, 6.0, 5.0], [4.0, 4.0, 5.0]], Box.cubic(10.0))
        tensor = inertia_tensor(p, 0)
        assert np.isclose(tensor[0, 1], -2.0)
        assert np.isclose(tensor[1, 0], -2.0)
        assert np.isclose(tensor[2, 2], 4.0)

    def test_symmetric(self, cloud):
        """The tensor is symmetric."""
        tensor = inertia_tensor(cloud, 1)
        assert np.allclose(tensor, tensor.T)


class TestEigenSolver:
    """Test the closed-form 3x3 eigen solver."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_eigenvalues_match_numpy(self, seed):
        """Eigenvalues agree with numpy's symmetric solver."""
        a = random_symmetric(seed)
        assert np.allclose(eigenvalues_3x3(a), np.linalg.eigvalsh(a))

    def test_diagonal(self):
        """Diagonal matrices return their sorted diagonal."""
        assert np.allclose(eigenvalues_3x3(np.diag([3.0, 1.0, 2.0])), [1.0, 2.0, 3.0])

    @pytest.mark.parametrize("seed", [4, 5])
    def test_eigenvectors(self, seed):
        """A v = lambda v for each eigenvalue."""
        a = random_symmetric(seed)
        for value in eigenvalues_3x3(a):
            v = eigenvector_3x3(a, value)
            assert np.isclose(np.linalg.norm(v), 1.0)
            assert np.allclose(a @ v, value * v, atol=1e-8)

    def test_repeated_eigenvalue(self):
        """A repeated eigenvalue still yields a unit eigenvector."""
        a = np.diag([2.0, 2.0, 5.0])
        v = eigenvector_3x3(a, 2.0)
        assert np.isclose(np.linalg.norm(v), 1.0)
        assert np.allclose(a @ v, 2.0 * v)


class TestPrincipalAxes:
    """Test principal axes of a particle group."""

    def test_orthonormal_axes(self, cloud):
        """Axes are orthonormal eigenvectors of the tensor."""
        axes = principal_axes(cloud, 1)
        tensor = inertia_tensor(cloud, 1)
        assert np.allclose(axes.eigenvectors @ axes.eigenvectors.T, np.eye(3))
        for value, vector in zip(axes.eigenvalues, axes.eigenvectors):
            assert np.allclose(tensor @ vector, value * vector, atol=1e-8)

    def test_long_axis(self, cloud):
        """The smallest moment lies along the longest extent (x)."""
        axes = principal_axes(cloud, 1)
        assert abs(axes.eigenvectors[0, 0]) > 0.9

    def test_degenerate_dumbbell(self):
        """Repeated moments still give an orthonormal frame."""
        p = ParticleData.create([[4.0, 5.0, 5.0], [6.0, 5.0, 5.0]], Box.cubic(10.0))
        axes = principal_axes(p, 0)
        assert np.allclose(axes.eigenvalues, [0.0, 2.0, 2.0])
        assert np.allclose(np.abs(axes.eigenvectors[0]), [1.0, 0.0, 0.0])
        assert np.allclose(axes.eigenvectors @ axes.eigenvectors.T, np.eye(3))

    def test_isotropic(self):
        """Fully degenerate moments return the coordinate axes."""
        positions = 5.0 + np.array(
            [[1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1]],
            dtype=float,
        )
        p = ParticleData.create(positions, Box.cubic(10.0))
        axes = principal_axes(p, 0)
        assert np.allclose(axes.eigenvalues, 4.0)
        assert np.allclose(axes.eigenvectors, np.eye(3))
