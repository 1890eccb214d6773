"""Minimum-distance and nearest-neighbor statistics."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..config import DEFAULTS
from ..errors import PreconditionError
from ..system import ParticleData
from .histogram import RadialBins


@dataclass
class DistanceDistribution:
    """
    Nearest-neighbor distance distribution.

    Attributes:
        r: Bin centers.
        distribution: Fraction of reference particles per bin (cumulative
            if `integrated`).
        low: Fraction of reference particles with nearest neighbor closer
            than r_min.
        bins: Binning used.
        integrated: Whether `distribution` is cumulative.
        n_reference: Number of reference particles used for normalization.
    """

    r: NDArray[np.floating]
    distribution: NDArray[np.floating]
    low: float
    bins: RadialBins
    integrated: bool
    n_reference: int


def _no_pair_distance(particles: ParticleData) -> float:
    """A distance larger than any minimum image separation in the box."""
    return float(np.sum(particles.box.lengths))


def mindist(
    particles: ParticleData,
    set1: Sequence[int] | None = None,
    set2: Sequence[int] | None = None,
) -> float:
    """
    Minimum periodic distance between particles of two type sets.

    A pair qualifies if one member's type is in `set1` and the other's is
    in `set2`. A set of None matches every type, so `mindist(p)` is the
    minimum over all pairs. The result is symmetric in the two sets.

    Returns:
        The minimum distance, or the sum of the box lengths (larger than
        any minimum image separation) if no pair qualifies.

    Raises:
        PreconditionError: With fewer than two particles.
    """
    if particles.n_particles <= 1:
        raise PreconditionError("not enough particles")

    in1 = particles.type_mask(set1)
    in2 = particles.type_mask(set2)
    positions = particles.positions
    box = particles.box

    min_dist2 = _no_pair_distance(particles) ** 2
    for j in range(particles.n_particles - 1):
        if not (in1[j] or in2[j]):
            continue
        accept = (in1[j] & in2[j + 1 :]) | (in2[j] & in1[j + 1 :])
        if not np.any(accept):
            continue
        others = positions[j + 1 :][accept]
        min_dist2 = min(
            min_dist2, float(np.min(box.squared_distance(positions[j], others)))
        )

    return float(np.sqrt(min_dist2))


def distance_distribution(
    particles: ParticleData,
    types1: Sequence[int],
    types2: Sequence[int],
    r_min: float | None = None,
    r_max: float | None = None,
    r_bins: int | None = None,
    log: bool = False,
    integrated: bool = False,
) -> DistanceDistribution:
    """
    Distribution of nearest-neighbor distances.

    For each particle of `types1` the distance to the closest other particle
    of `types2` is binned. Distances in [r_min, r_max] go to the histogram
    (the closed upper edge lands past the last bin and is dropped), shorter
    ones are counted in `low`. Everything is divided by the number of
    `types1` particles.

    Args:
        particles: Live particle snapshot.
        types1: Types of the reference particles.
        types2: Types of the neighbor particles.
        r_min: Lower bound (default 0).
        r_max: Upper bound (default half the smallest box length).
        r_bins: Number of bins (default N / 20).
        log: Use logarithmic bins (requires r_min > 0).
        integrated: Return the cumulative distribution, starting with `low`.

    Returns:
        DistanceDistribution result.

    Raises:
        ValidationError: For invalid binning parameters.
        DomainError: For logarithmic binning with r_min == 0.
        PreconditionError: If no particle has a type in `types1`.
    """
    bins = RadialBins(
        DEFAULTS.r_min if r_min is None else float(r_min),
        DEFAULTS.resolve_r_max(particles.box.min_length, r_max),
        DEFAULTS.resolve_r_bins(particles.n_particles, r_bins),
        log=log,
    )

    reference = np.flatnonzero(particles.type_mask(types1))
    if len(reference) == 0:
        raise PreconditionError(f"no particles of types {list(types1)}")
    in2 = particles.type_mask(types2)
    positions = particles.positions
    box = particles.box

    distribution = np.zeros(bins.n_bins, dtype=np.float64)
    low = 0.0
    no_pair = _no_pair_distance(particles)

    for i in reference:
        partners = in2.copy()
        partners[i] = False
        if np.any(partners):
            dist2 = box.squared_distance(positions[i], positions[partners])
            min_dist = float(np.sqrt(np.min(dist2)))
        else:
            min_dist = no_pair

        if min_dist > bins.r_max:
            continue
        if min_dist < bins.r_min:
            low += 1.0
            continue
        ind = int(bins.index(min_dist))
        if 0 <= ind < bins.n_bins:
            distribution[ind] += 1.0

    low /= len(reference)
    distribution /= len(reference)

    if integrated:
        distribution[0] += low
        distribution = np.cumsum(distribution)

    return DistanceDistribution(
        r=bins.centers,
        distribution=distribution,
        low=low,
        bins=bins,
        integrated=integrated,
        n_reference=len(reference),
    )


def reference_point(particles: ParticleData, identity: int) -> NDArray[np.floating]:
    """
    Position of the particle with the given identity.

    Raises:
        KeyError: If the particle does not exist.
    """
    return particles.positions[particles.index_of(identity)].copy()


def nbhood(particles: ParticleData, point: ArrayLike, r_catch: float) -> list[int]:
    """
    Identities of all particles closer than `r_catch` to `point`.

    Distances use the minimum image convention. Identities are returned in
    storage order.
    """
    if particles.n_particles == 0:
        return []
    distances = particles.box.minimum_image_distance(point, particles.positions)
    return [int(pid) for pid in particles.identities[distances < r_catch]]


def distto(
    particles: ParticleData, point: ArrayLike, exclude: int | None = None
) -> float:
    """
    Minimum periodic distance from `point` to any particle.

    Args:
        particles: Live particle snapshot.
        point: Reference position, shape (3,).
        exclude: Identity of a particle to skip (typically the particle
            the point was taken from).

    Returns:
        The distance, or the sum of the box lengths if no particle is left.
    """
    keep = np.ones(particles.n_particles, dtype=bool)
    if exclude is not None:
        keep &= particles.identities != exclude
    if not np.any(keep):
        return _no_pair_distance(particles)
    distances = particles.box.minimum_image_distance(point, particles.positions[keep])
    return float(np.min(distances))
