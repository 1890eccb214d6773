"""Particle snapshot and box management."""

from .box import Box
from .particles import ParticleData

__all__ = ["Box", "ParticleData"]
