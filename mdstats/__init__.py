"""
mdstats - Structural analysis of periodic particle simulations.

Computes observables from snapshots of a many-particle system under
periodic boundary conditions:

- Minimum distance and nearest-neighbor distance distributions
- Radial distribution functions, instantaneous or averaged over
  stored configurations
- Molecular aggregates from close contacts
- Center of mass, inertia tensor and principal axes
- Static structure factor by direct summation
- Cell-model Poisson-Boltzmann solution for a charged cylinder

Quick Start:
    >>> import numpy as np
    >>> from mdstats import Box, ParticleData, analysis
    >>> box = Box.cubic(10.0)
    >>> particles = ParticleData.create(np.random.rand(100, 3) * 10.0, box)
    >>> print(f"Minimum distance: {analysis.mindist(particles):.3f}")
"""

__version__ = "0.1.0"

# High-level APIs
from . import analysis, plotting
from .config import DEFAULTS, AnalysisDefaults
from .errors import (
    ConvergenceError,
    DomainError,
    MDStatsError,
    PreconditionError,
    ValidationError,
)
from .history import ConfigurationHistory
from .neighborlists import CellList, VerletList
from .solvers import CellGPBResult, solve_cell_gpb

# Core components for advanced users
from .system import Box, ParticleData

__all__ = [
    "analysis",
    "plotting",
    "Box",
    "ParticleData",
    "ConfigurationHistory",
    "CellList",
    "VerletList",
    "CellGPBResult",
    "solve_cell_gpb",
    "AnalysisDefaults",
    "DEFAULTS",
    "MDStatsError",
    "ValidationError",
    "PreconditionError",
    "ConvergenceError",
    "DomainError",
]
