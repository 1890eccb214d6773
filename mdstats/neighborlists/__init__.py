"""Spatial neighbor indices supplying candidate particle pairs."""

from .base import DOMAIN_DECOMPOSITION, NSQUARE, NeighborList
from .cell import CellList
from .verlet import VerletList

__all__ = [
    "NeighborList",
    "CellList",
    "VerletList",
    "DOMAIN_DECOMPOSITION",
    "NSQUARE",
]
