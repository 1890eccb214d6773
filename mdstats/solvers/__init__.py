"""Numerical solvers for analytic polyelectrolyte models."""

from .cell_gpb import CellGPBResult, Regime, Status, solve_cell_gpb

__all__ = ["CellGPBResult", "Regime", "Status", "solve_cell_gpb"]
