"""Exception taxonomy for analysis routines."""

from __future__ import annotations


class MDStatsError(Exception):
    """Base class for all errors raised by mdstats."""


class ValidationError(MDStatsError, ValueError):
    """Bad argument shape or range (e.g. r_bins < 1, r_max <= r_min)."""


class PreconditionError(MDStatsError, RuntimeError):
    """
    The system is not in a state the analysis can work with.

    Raised for unsortable or non-contiguous particle identities, too few
    particles, an unsupported execution topology, an insufficient
    neighbor-list cutoff, or an empty configuration history.
    """


class ConvergenceError(MDStatsError, RuntimeError):
    """A numerical solver failed to bracket or converge."""


class DomainError(MDStatsError, ValueError):
    """Input outside the mathematical domain of the operation."""
