"""Static structure factor by direct summation over lattice wave vectors."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..config import DEFAULTS
from ..errors import DomainError, ValidationError
from ..system import ParticleData

# Upper bound on the phases q.r held in memory at once
_PHASES_PER_CHUNK = 1 << 18


@dataclass
class StructureFactor:
    """
    Spherically averaged S(q).

    Attributes:
        n: Squared lattice norms i^2 + j^2 + k^2 that occur.
        q: Wave numbers 2 pi / L_x * sqrt(n).
        s_q: Structure factor per shell.
    """

    n: NDArray[np.integer]
    q: NDArray[np.floating]
    s_q: NDArray[np.floating]

    def significant(self, threshold: float | None = None) -> StructureFactor:
        """Shells with S(q) above `threshold` (default 1e-6)."""
        if threshold is None:
            threshold = DEFAULTS.sf_threshold
        keep = self.s_q > threshold
        return StructureFactor(n=self.n[keep], q=self.q[keep], s_q=self.s_q[keep])


def lattice_vectors(order: int) -> NDArray[np.int64]:
    """
    Integer vectors (i, j, k) with i >= 0, |j|, |k| <= order and
    0 < i^2 + j^2 + k^2 <= order^2.
    """
    i, j, k = np.meshgrid(
        np.arange(0, order + 1),
        np.arange(-order, order + 1),
        np.arange(-order, order + 1),
        indexing="ij",
    )
    vectors = np.stack([i.ravel(), j.ravel(), k.ravel()], axis=1)
    n = np.sum(vectors**2, axis=1)
    return vectors[(n > 0) & (n <= order * order)]


def structure_factor(
    particles: ParticleData,
    type_: int,
    order: int,
    chunk_size: int | None = None,
) -> StructureFactor:
    """
    S(q) of one particle type.

    For every lattice vector, |sum_p exp(i q.r_p)|^2 is accumulated into the
    shell n = |(i, j, k)|^2 with q = 2 pi / L_x * (i, j, k). Each shell is
    divided by N_type times the number of vectors that fell into it. Only
    the x box length sets the lattice spacing.

    Wave vectors are processed in blocks of `chunk_size`, so the phase
    matrix never exceeds N_type x chunk_size entries.

    Args:
        particles: Live particle snapshot.
        type_: Particle type.
        order: Largest lattice norm.
        chunk_size: Wave vectors per block (default: as many as fit in
            about 2^18 phases).

    Raises:
        DomainError: If the type does not exist or has no particles.
        ValidationError: If order < 1 or chunk_size < 1.
    """
    if type_ < 0 or type_ > particles.max_type:
        raise DomainError(f"type {type_} does not exist")
    if order < 1:
        raise ValidationError(f"order has to be a positive integer, got {order}")
    if chunk_size is not None and chunk_size < 1:
        raise ValidationError(f"chunk_size must be positive, got {chunk_size}")

    positions = particles.positions[particles.types == type_]
    n_type = len(positions)
    if n_type == 0:
        raise DomainError(f"no particles of type {type_}")
    if chunk_size is None:
        chunk_size = max(_PHASES_PER_CHUNK // n_type, 1)

    two_pi_l = 2.0 * np.pi / particles.box.lengths[0]
    vectors = lattice_vectors(order)
    norms = np.sum(vectors**2, axis=1)

    scaled = two_pi_l * positions
    power = np.empty(len(vectors), dtype=np.float64)
    for start in range(0, len(vectors), chunk_size):
        block = vectors[start : start + chunk_size]
        qr = scaled @ block.T
        power[start : start + len(block)] = (
            np.sum(np.cos(qr), axis=0) ** 2 + np.sum(np.sin(qr), axis=0) ** 2
        )

    totals = np.bincount(norms, weights=power, minlength=order * order + 1)
    counts = np.bincount(norms, minlength=order * order + 1)
    n = np.flatnonzero(counts)
    return StructureFactor(
        n=n,
        q=two_pi_l * np.sqrt(n),
        s_q=totals[n] / (n_type * counts[n]),
    )
