"""Default analysis parameters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisDefaults:
    """
    Defaults applied when optional analysis parameters are omitted.

    Attributes:
        r_min: Lower histogram bound.
        r_max: Upper histogram bound. None means half the smallest box length.
        r_bins: Number of histogram bins. None means N / 20 (at least 1).
        particles_per_bin: Divisor used to derive r_bins from the particle count.
        min_contact: Contacts required before two molecules are merged.
        solver_accuracy: Bracket width at which the cell-model bisection stops.
        solver_max_iter: Maximum number of bisection steps.
        sf_threshold: S(q) values at or below this are dropped from reports.
    """

    r_min: float = 0.0
    r_max: float | None = None
    r_bins: int | None = None
    particles_per_bin: int = 20
    min_contact: int = 1
    solver_accuracy: float = 1e-6
    solver_max_iter: int = 30000
    sf_threshold: float = 1e-6

    def resolve_r_max(self, min_box_length: float, r_max: float | None = None) -> float:
        """Return r_max, falling back to half the smallest box length."""
        if r_max is not None:
            return float(r_max)
        if self.r_max is not None:
            return float(self.r_max)
        return min_box_length / 2.0

    def resolve_r_bins(self, n_particles: int, r_bins: int | None = None) -> int:
        """Return r_bins, falling back to one bin per `particles_per_bin` particles."""
        if r_bins is not None:
            return int(r_bins)
        if self.r_bins is not None:
            return int(self.r_bins)
        return max(n_particles // self.particles_per_bin, 1)


DEFAULTS = AnalysisDefaults()
