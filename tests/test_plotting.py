"""Smoke tests for plotting helpers."""

import numpy as np
import pytest

from mdstats import plotting
from mdstats.analysis import distance_distribution, rdf, structure_factor
from mdstats.system import Box, ParticleData

plt = pytest.importorskip("matplotlib.pyplot")


@pytest.fixture(autouse=True)
def headless_backend():
    """Draw off-screen and drop figures afterwards."""
    plt.switch_backend("Agg")
    yield
    plt.close("all")


@pytest.fixture
def particles():
    rng = np.random.default_rng(0)
    return ParticleData.create(rng.uniform(0.0, 6.0, size=(60, 3)), Box.cubic(6.0))


class TestPlots:
    """Each helper draws without showing."""

    def test_rdf(self, particles):
        result = rdf(particles, [0], [0], r_max=3.0, r_bins=10)
        ax = plotting.rdf(result, show=False)
        assert len(ax.lines) >= 1

    def test_distance_distribution(self, particles):
        result = distance_distribution(particles, [0], [0], r_max=3.0, r_bins=10)
        ax = plotting.distance_distribution(result, show=False)
        assert ax.get_xlabel() == "r (σ)"

    def test_log_distance_distribution(self, particles):
        result = distance_distribution(
            particles,
            [0],
            [0],
            r_min=0.1,
            r_max=3.0,
            r_bins=10,
            log=True,
            integrated=True,
        )
        ax = plotting.distance_distribution(result, show=False)
        assert ax.get_xscale() == "log"

    def test_structure_factor(self, particles):
        ax = plotting.structure_factor(structure_factor(particles, 0, 3), show=False)
        assert ax.get_ylabel() == "S(q)"

    def test_save(self, particles, tmp_path):
        plotting.rdf(rdf(particles, [0], [0], r_max=3.0, r_bins=10), show=False)
        target = tmp_path / "rdf.png"
        plotting.save(target)
        assert target.exists()

    def test_draw_into_existing_axes(self, particles):
        """Two curves can share one Axes."""
        _, ax = plt.subplots()
        first = rdf(particles, [0], [0], r_max=3.0, r_bins=10)
        second = rdf(particles, [0], [0], r_max=3.0, r_bins=20)
        assert plotting.rdf(first, ax=ax, label="coarse", show=False) is ax
        plotting.rdf(second, ax=ax, label="fine", show=False)
        assert ax.get_legend() is not None

    def test_overview(self, particles):
        """Three panels, one per observable."""
        axes = plotting.overview(
            rdf(particles, [0], [0], r_max=3.0, r_bins=10),
            distance_distribution(particles, [0], [0], r_max=3.0, r_bins=10),
            structure_factor(particles, 0, 3),
            show=False,
        )
        assert len(axes) == 3
        assert axes[2].get_ylabel() == "S(q)"
