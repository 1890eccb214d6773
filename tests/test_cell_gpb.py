"""Tests for the cell-model Poisson-Boltzmann solver."""

import logging
import math

import pytest

from mdstats.errors import ConvergenceError, DomainError, ValidationError
from mdstats.solvers import Regime, Status, cell_gpb, solve_cell_gpb
from mdstats.solvers.cell_gpb import select_regime

LOG_RATIO = math.log(10.0)
XI_MIN = LOG_RATIO / (1.0 + LOG_RATIO)


def real_residual(g, xi_m):
    return math.atan(1.0 / g) + math.atan((xi_m - 1.0) / g) - g * LOG_RATIO


def imaginary_residual(g, xi_m):
    return -(math.atanh(g) + math.atanh(g / (xi_m - 1.0))) - g * LOG_RATIO


class TestRegimes:
    """Test regime classification."""

    @pytest.mark.parametrize(
        "xi_m, regime",
        [
            (2.0, Regime.ABOVE_ONE),
            (1.0, Regime.AT_ONE),
            (XI_MIN, Regime.AT_MINIMUM),
            (0.8, Regime.REAL),
            (0.3, Regime.IMAGINARY),
            (0.0, Regime.ZERO),
            (-0.1, Regime.INVALID),
        ],
    )
    def test_select_regime(self, xi_m, regime):
        """Each Manning parameter falls into one regime."""
        assert select_regime(xi_m, LOG_RATIO) is regime


class TestClosedForms:
    """Test the non-iterative regimes."""

    def test_at_minimum(self):
        """xi_m == xi_min gives gamma = 0 and R_M = 0."""
        result = solve_cell_gpb(XI_MIN, 10.0, 1.0)
        assert result.ok
        assert (result.gamma, result.manning_radius, result.code) == (0.0, 0.0, 1)
        assert result.iterations == 0

    def test_zero(self):
        """xi_m == 0 gives gamma = 1 and R_M = -1."""
        result = solve_cell_gpb(0.0, 10.0, 1.0)
        assert result.ok
        assert (result.gamma, result.manning_radius, result.code) == (1.0, -1.0, -1)
        assert result.iterations == 0


class TestRealBranch:
    """Test the real-gamma bisection."""

    @pytest.mark.parametrize("xi_m", [2.0, 1.0, 0.8])
    def test_root(self, xi_m):
        """The returned gamma solves the real boundary condition."""
        result = solve_cell_gpb(xi_m, 10.0, 1.0, accuracy=1e-12)
        assert result.ok
        assert result.code == 1
        assert result.iterations > 0
        assert abs(real_residual(result.gamma, xi_m)) < 1e-9

    def test_manning_radius(self):
        """R_M = Rc exp(-atan(1/gamma) / gamma) lies inside the cell."""
        result = solve_cell_gpb(2.0, 10.0, 1.0)
        expected = 10.0 * math.exp(-math.atan(1.0 / result.gamma) / result.gamma)
        assert math.isclose(result.manning_radius, expected)
        assert 1.0 < result.manning_radius < 10.0

    def test_not_converged(self):
        """Too few iterations report the last midpoint and step."""
        result = solve_cell_gpb(2.0, 10.0, 1.0, accuracy=1e-12, max_iter=3)
        assert result.status is Status.NOT_CONVERGED
        assert result.iterations == 3
        assert len(result.diagnostics) == 2
        assert math.isnan(result.gamma)
        with pytest.raises(ConvergenceError):
            result.raise_for_status()

    def test_max_iter_at_least_one(self):
        """Non-positive iteration limits still take one step."""
        result = solve_cell_gpb(2.0, 10.0, 1.0, accuracy=1e-12, max_iter=0)
        assert result.iterations == 1

    def test_bracket_invalid(self, monkeypatch):
        """A bracket without a sign change is reported, not searched."""
        monkeypatch.setattr(cell_gpb, "initial_bracket", lambda *args: (1.0, 1.0))
        result = solve_cell_gpb(2.0, 10.0, 1.0)
        assert result.status is Status.BRACKET_INVALID
        assert result.iterations == 0
        f = real_residual(1.0, 2.0)
        assert result.diagnostics == (f, f)
        with pytest.raises(ConvergenceError):
            result.raise_for_status()


class TestImaginaryBranch:
    """Test the imaginary-gamma bisection."""

    @pytest.mark.parametrize("xi_m", [0.3, 0.5])
    def test_root(self, xi_m):
        """The returned value solves the imaginary boundary condition."""
        result = solve_cell_gpb(xi_m, 10.0, 1.0, accuracy=1e-12)
        assert result.ok
        assert result.code == -1
        assert result.regime is Regime.IMAGINARY
        assert abs(imaginary_residual(result.gamma, xi_m)) < 1e-8

    def test_manning_radius(self):
        """R_M = Rc exp(atan(1/gamma) / gamma)."""
        result = solve_cell_gpb(0.3, 10.0, 1.0)
        expected = 10.0 * math.exp(math.atan(1.0 / result.gamma) / result.gamma)
        assert math.isclose(result.manning_radius, expected)

    def test_flip_logged(self, monkeypatch, caplog):
        """A lower bound above the root widens the search and warns."""
        xi_m = 0.3
        g1 = 1.0 - xi_m
        # A lower bound close to g1 lies on the positive side of the root
        monkeypatch.setattr(
            cell_gpb, "initial_bracket", lambda *args: (g1, g1 - 1e-3)
        )
        with caplog.at_level(logging.WARNING, logger="mdstats.solvers.cell_gpb"):
            result = solve_cell_gpb(xi_m, 10.0, 1.0, accuracy=1e-12)
        assert "searching the whole interval" in caplog.text
        assert result.ok
        assert abs(imaginary_residual(result.gamma, xi_m)) < 1e-8


class TestInvalidInput:
    """Test rejected inputs."""

    def test_negative_manning_parameter(self):
        """Negative xi_m is an invalid domain."""
        result = solve_cell_gpb(-0.5, 10.0, 1.0)
        assert result.status is Status.INVALID_DOMAIN
        assert result.regime is Regime.INVALID
        with pytest.raises(DomainError):
            result.raise_for_status()

    @pytest.mark.parametrize("rc, ro", [(0.0, 1.0), (10.0, -1.0), (1.0, 1.0)])
    def test_bad_radii(self, rc, ro):
        """Radii must be positive with Rc > ro."""
        with pytest.raises(ValidationError):
            solve_cell_gpb(1.5, rc, ro)

    def test_raise_for_status_passes_ok(self):
        """Successful results are returned unchanged."""
        result = solve_cell_gpb(2.0, 10.0, 1.0)
        assert result.raise_for_status() is result
