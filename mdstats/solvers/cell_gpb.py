"""
Poisson-Boltzmann cell model for a charged cylinder.

Solves the boundary condition of the cell model for the integration
constant gamma and the Manning radius R_M, given the reduced Manning
parameter xi_m, the cell radius Rc and the cylinder radius ro.

With L = ln(Rc / ro) and xi_min = L / (1 + L) the solution is real for
xi_m > xi_min and imaginary (gamma -> -i gamma) for 0 < xi_m < xi_min:

    real:       atan(1/g) + atan((xi_m - 1)/g) - g L = 0
    imaginary:  -atanh(g) - atanh(g/(xi_m - 1)) - g L = 0

Both are solved by bisection from an analytic initial bracket.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field

from ..config import DEFAULTS
from ..errors import ConvergenceError, DomainError, ValidationError

logger = logging.getLogger(__name__)


class Regime(enum.Enum):
    """Analytic regime selected by the Manning parameter."""

    ABOVE_ONE = "above_one"
    AT_ONE = "at_one"
    AT_MINIMUM = "at_minimum"
    REAL = "real"
    IMAGINARY = "imaginary"
    ZERO = "zero"
    INVALID = "invalid"


class Status(enum.Enum):
    OK = "ok"
    BRACKET_INVALID = "bracket_invalid"
    NOT_CONVERGED = "not_converged"
    INVALID_DOMAIN = "invalid_domain"


@dataclass
class CellGPBResult:
    """
    Outcome of `solve_cell_gpb`.

    Attributes:
        gamma: Integration constant (-i gamma on the imaginary branch).
            NaN unless status is OK.
        manning_radius: Manning radius R_M. NaN unless status is OK.
        code: +1 for the real branch, -1 for the imaginary branch, 0 on failure.
        regime: Regime the Manning parameter fell into.
        iterations: Bisection steps taken.
        status: OK or the kind of failure.
        diagnostics: On BRACKET_INVALID the function values at both bracket
            ends, on NOT_CONVERGED the last midpoint and step. Empty otherwise.
    """

    gamma: float
    manning_radius: float
    code: int
    regime: Regime
    iterations: int = 0
    status: Status = Status.OK
    diagnostics: tuple[float, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def raise_for_status(self) -> CellGPBResult:
        """
        Raise if the solver failed, otherwise return self.

        Raises:
            DomainError: For a negative Manning parameter.
            ConvergenceError: For an invalid bracket or non-convergence.
        """
        if self.status is Status.INVALID_DOMAIN:
            raise DomainError("Manning parameter must be non-negative")
        if self.status is Status.BRACKET_INVALID:
            raise ConvergenceError(
                "gamma is not bracketed by the initial guess "
                f"(f(g1), f(g2) = {self.diagnostics})"
            )
        if self.status is Status.NOT_CONVERGED:
            raise ConvergenceError(
                f"maximum number of iterations exceeded after {self.iterations} "
                f"steps (gmid, dg = {self.diagnostics})"
            )
        return self


def _failure(
    regime: Regime, status: Status, iterations: int = 0, *diag: float
) -> CellGPBResult:
    return CellGPBResult(
        gamma=math.nan,
        manning_radius=math.nan,
        code=0,
        regime=regime,
        iterations=iterations,
        status=status,
        diagnostics=tuple(diag),
    )


def select_regime(xi_m: float, log_ratio: float) -> Regime:
    """Classify xi_m; the checks run in a fixed order, first match wins."""
    xi_min = log_ratio / (1.0 + log_ratio)
    if xi_m > 1.0:
        return Regime.ABOVE_ONE
    if xi_m == 1.0:
        return Regime.AT_ONE
    if xi_m == xi_min:
        return Regime.AT_MINIMUM
    if xi_m > xi_min:
        return Regime.REAL
    if xi_m > 0.0:
        return Regime.IMAGINARY
    if xi_m == 0.0:
        return Regime.ZERO
    return Regime.INVALID


def initial_bracket(
    xi_m: float, log_ratio: float, regime: Regime
) -> tuple[float, float]:
    """Analytic bracket [g1, g2] for the iterative regimes."""
    if regime is Regime.ABOVE_ONE:
        return math.pi / log_ratio, math.pi / (log_ratio + xi_m / (xi_m - 1.0))
    if regime is Regime.AT_ONE:
        return (math.pi / 2.0) / log_ratio, (math.pi / 2.0) / (log_ratio + 1.0)
    if regime is Regime.REAL:
        g2 = math.sqrt(
            3.0
            * (log_ratio - xi_m / (1.0 - xi_m))
            / (1.0 - (1.0 - xi_m) ** -3.0)
        )
        return (math.pi / 2.0) / log_ratio, g2
    if regime is Regime.IMAGINARY:
        return 1.0 - xi_m, xi_m * (6.0 - (3.0 - xi_m) * xi_m) / (3.0 * log_ratio)
    raise ValueError(f"regime {regime.name} has no bracket")


def _real_residual(g: float, xi_m: float, log_ratio: float) -> float:
    return math.atan(1.0 / g) + math.atan((xi_m - 1.0) / g) - g * log_ratio


def _imaginary_residual(g: float, xi_m: float, log_ratio: float) -> float:
    return -(math.atanh(g) + math.atanh(g / (xi_m - 1.0))) - g * log_ratio


def _solve_real(
    xi_m: float,
    rc: float,
    log_ratio: float,
    regime: Regime,
    accuracy: float,
    max_iter: int,
) -> CellGPBResult:
    g1, g2 = initial_bracket(xi_m, log_ratio, regime)
    f = _real_residual(g1, xi_m, log_ratio)
    fmid = _real_residual(g2, xi_m, log_ratio)
    if f * fmid >= 0.0:
        return _failure(regime, Status.BRACKET_INVALID, 0, f, fmid)

    # negative side on the left
    if f < 0.0:
        rtb, dg = g1, g2 - g1
    else:
        rtb, dg = g2, g1 - g2

    gmid = rtb
    iterations = 0
    for iterations in range(1, max_iter + 1):
        dg *= 0.5
        gmid = rtb + dg
        fmid = _real_residual(gmid, xi_m, log_ratio)
        if fmid <= 0.0:
            rtb = gmid
        if abs(dg) < accuracy or fmid == 0.0:
            break

    if abs(dg) > accuracy and fmid != 0.0:
        return _failure(regime, Status.NOT_CONVERGED, iterations, gmid, dg)

    return CellGPBResult(
        gamma=gmid,
        manning_radius=rc * math.exp(-math.atan(1.0 / gmid) / gmid),
        code=1,
        regime=regime,
        iterations=iterations,
    )


def _solve_imaginary(
    xi_m: float,
    rc: float,
    log_ratio: float,
    accuracy: float,
    max_iter: int,
) -> CellGPBResult:
    regime = Regime.IMAGINARY
    g1, g2 = initial_bracket(xi_m, log_ratio, regime)
    try:
        f = _imaginary_residual(g2, xi_m, log_ratio)
    except ValueError:
        return _failure(regime, Status.BRACKET_INVALID, 0, math.nan, g2)

    # search from the upper bound downwards
    if f < 0.0:
        rtb, dg = g1, g1 - g2
    else:
        logger.warning(
            "lower bracket bound %g lies above the root (f = %g), "
            "searching the whole interval [0, %g]",
            g2,
            f,
            g1,
        )
        rtb, dg = g1, g1

    gmid = rtb
    fmid = f
    iterations = 0
    try:
        for iterations in range(1, max_iter + 1):
            dg *= 0.5
            gmid = rtb - dg
            fmid = _imaginary_residual(gmid, xi_m, log_ratio)
            if fmid >= 0.0:
                rtb = gmid
            if abs(dg) < accuracy or fmid == 0.0:
                break
    except ValueError:
        return _failure(regime, Status.BRACKET_INVALID, iterations, f, gmid)

    if abs(dg) > accuracy and fmid != 0.0:
        return _failure(regime, Status.NOT_CONVERGED, iterations, gmid, dg)

    return CellGPBResult(
        gamma=gmid,
        manning_radius=rc * math.exp(math.atan(1.0 / gmid) / gmid),
        code=-1,
        regime=regime,
        iterations=iterations,
    )


def solve_cell_gpb(
    xi_m: float,
    rc: float,
    ro: float,
    accuracy: float | None = None,
    max_iter: int | None = None,
) -> CellGPBResult:
    """
    Solve the cell-model boundary condition for gamma and the Manning radius.

    Regimes, checked in this order:

    - xi_m > 1, xi_m == 1, xi_m > xi_min: real branch (code +1).
    - xi_m == xi_min: gamma = 0, R_M = 0 (code +1, no iteration).
    - 0 < xi_m < xi_min: imaginary branch (code -1).
    - xi_m == 0: gamma = 1, R_M = -1 (code -1, no iteration).
    - xi_m < 0: INVALID_DOMAIN.

    Failures are reported through `CellGPBResult.status`; call
    `raise_for_status()` to turn them into exceptions.

    Args:
        xi_m: Reduced Manning parameter.
        rc: Outer cell radius.
        ro: Inner (cylinder) radius.
        accuracy: Bracket width at which bisection stops (default 1e-6).
        max_iter: Maximum bisection steps (default 30000, at least 1).

    Returns:
        CellGPBResult.

    Raises:
        ValidationError: If a radius is not positive or Rc <= ro.
    """
    if not (rc > 0 and ro > 0):
        raise ValidationError(f"radii must be positive, got Rc={rc}, ro={ro}")
    if rc <= ro:
        raise ValidationError(
            f"cell radius must exceed the cylinder radius, got Rc={rc}, ro={ro}"
        )
    if accuracy is None:
        accuracy = DEFAULTS.solver_accuracy
    if max_iter is None:
        max_iter = DEFAULTS.solver_max_iter
    max_iter = max(int(max_iter), 1)

    log_ratio = math.log(rc / ro)
    regime = select_regime(xi_m, log_ratio)

    if regime is Regime.INVALID:
        return _failure(regime, Status.INVALID_DOMAIN)
    if regime is Regime.AT_MINIMUM:
        return CellGPBResult(gamma=0.0, manning_radius=0.0, code=1, regime=regime)
    if regime is Regime.ZERO:
        return CellGPBResult(gamma=1.0, manning_radius=-1.0, code=-1, regime=regime)
    if regime is Regime.IMAGINARY:
        return _solve_imaginary(xi_m, rc, log_ratio, accuracy, max_iter)
    return _solve_real(xi_m, rc, log_ratio, regime, accuracy, max_iter)
