"""Radial distribution function analysis."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from ..config import DEFAULTS
from ..errors import PreconditionError
from .base import StreamingAnalyzer
from .histogram import RadialBins

if TYPE_CHECKING:
    from ..history import ConfigurationHistory
    from ..system import Box, ParticleData


@dataclass
class RDFResult:
    """
    Radial distribution function.

    Attributes:
        r: Bin centers.
        g_r: RDF value per bin.
        bins: Binning used.
        n_frames: Number of frames averaged.
        mixed: Whether all ordered pairs were counted (see `is_mixed`).
    """

    r: NDArray[np.floating]
    g_r: NDArray[np.floating]
    bins: RadialBins
    n_frames: int
    mixed: bool


def is_mixed(types1: Sequence[int], types2: Sequence[int]) -> bool:
    """
    Whether an RDF between two type lists counts all ordered pairs.

    Only lists equal element by element, in the same order, are treated as
    identical; each unordered pair is then counted once. The same types
    listed in a different order count as mixed.
    """
    return list(types1) != list(types2)


def frame_histogram(
    positions: NDArray[np.floating],
    box: Box,
    mask1: NDArray[np.bool_],
    mask2: NDArray[np.bool_],
    bins: RadialBins,
    mixed: bool,
    mol_ids: NDArray[np.integer] | None = None,
) -> tuple[NDArray[np.floating], int]:
    """
    Histogram pair distances of one frame.

    Distances strictly between r_min and r_max are binned. Every pair that
    passes the type (and, with `mol_ids`, different-molecule) filter counts
    toward the pair total, whether or not it was binned.

    Returns:
        (histogram, number of pairs considered)
    """
    n_particles = len(positions)
    histogram = np.zeros(bins.n_bins, dtype=np.float64)
    n_pairs = 0

    for i in np.flatnonzero(mask1):
        start = 0 if mixed else i + 1
        partners = np.flatnonzero(mask2[start:]) + start
        if mol_ids is not None:
            partners = partners[mol_ids[partners] != mol_ids[i]]
        n_pairs += len(partners)
        if len(partners) == 0:
            continue

        dist = box.minimum_image_distance(positions[i], positions[partners])
        dist = dist[(dist > bins.r_min) & (dist < bins.r_max)]
        ind = np.minimum(bins.index(dist), bins.n_bins - 1)
        histogram += np.bincount(ind, minlength=bins.n_bins)

    if n_pairs == 0 and n_particles > 0:
        raise PreconditionError("no particle pairs match the requested types")
    return histogram, n_pairs


def normalize_histogram(
    histogram: NDArray[np.floating], n_pairs: int, volume: float, bins: RadialBins
) -> NDArray[np.floating]:
    """g(r) = histogram * V / (shell_volume * pairs counted)."""
    return histogram * volume / (bins.shell_volumes() * n_pairs)


class RadialDistributionFunction(StreamingAnalyzer):
    """
    Radial distribution function g(r) between two type lists.

    Each frame is histogrammed and normalized on its own; `result()`
    returns the arithmetic mean of the normalized curves.

    g(r) = V / (N_pairs * shell_volume(r)) * <sum_pairs delta(r - r_ij)>
    """

    def __init__(
        self,
        types1: Sequence[int],
        types2: Sequence[int],
        r_max: float,
        r_bins: int,
        r_min: float = 0.0,
        intermolecular: bool = False,
    ) -> None:
        """
        Initialize RDF calculator.

        Args:
            types1: Types of the first particle of each pair.
            types2: Types of the second particle of each pair.
            r_max: Upper bound.
            r_bins: Number of histogram bins.
            r_min: Lower bound.
            intermolecular: Only count pairs from different molecules.
        """
        self.types1 = list(types1)
        self.types2 = list(types2)
        self.bins = RadialBins(float(r_min), float(r_max), int(r_bins))
        self.intermolecular = intermolecular
        self.mixed = is_mixed(self.types1, self.types2)

        self.reset()

    @property
    def name(self) -> str:
        """Analyzer name."""
        return "rdf-intermol" if self.intermolecular else "rdf"

    def reset(self) -> None:
        """Reset accumulated curves."""
        self._g_r_sum = np.zeros(self.bins.n_bins, dtype=np.float64)
        self._n_frames = 0

    @property
    def n_frames(self) -> int:
        return self._n_frames

    def update(
        self,
        particles: ParticleData,
        positions: NDArray[np.floating] | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Add one normalized frame.

        Args:
            particles: Snapshot providing types, molecule ids and the box.
            positions: Positions to use instead of `particles.positions`
                (a stored configuration in identity order).
        """
        if positions is None:
            positions = particles.positions

        histogram, n_pairs = frame_histogram(
            positions,
            particles.box,
            particles.type_mask(self.types1),
            particles.type_mask(self.types2),
            self.bins,
            self.mixed,
            mol_ids=particles.mol_ids if self.intermolecular else None,
        )
        self._g_r_sum += normalize_histogram(
            histogram, n_pairs, particles.box.volume, self.bins
        )
        self._n_frames += 1

    def result(self) -> dict[str, Any]:
        """
        Get RDF result.

        Returns:
            Dictionary with 'r' (bin centers), 'g_r' and 'n_frames'.
        """
        if self._n_frames == 0:
            g_r = np.zeros(self.bins.n_bins)
        else:
            g_r = self._g_r_sum / self._n_frames
        return {
            "r": self.bins.centers,
            "g_r": g_r,
            "n_frames": self._n_frames,
        }

    def to_result(self) -> RDFResult:
        """Return the current estimate as an RDFResult."""
        result = self.result()
        return RDFResult(
            r=result["r"],
            g_r=result["g_r"],
            bins=self.bins,
            n_frames=result["n_frames"],
            mixed=self.mixed,
        )


def _make_analyzer(
    particles: ParticleData,
    types1: Sequence[int],
    types2: Sequence[int],
    r_min: float | None,
    r_max: float | None,
    r_bins: int | None,
    intermolecular: bool = False,
) -> RadialDistributionFunction:
    return RadialDistributionFunction(
        types1,
        types2,
        r_max=DEFAULTS.resolve_r_max(particles.box.min_length, r_max),
        r_bins=DEFAULTS.resolve_r_bins(particles.n_particles, r_bins),
        r_min=DEFAULTS.r_min if r_min is None else r_min,
        intermolecular=intermolecular,
    )


def rdf(
    particles: ParticleData,
    types1: Sequence[int],
    types2: Sequence[int],
    r_min: float | None = None,
    r_max: float | None = None,
    r_bins: int | None = None,
) -> RDFResult:
    """
    Instantaneous RDF of the live snapshot.

    Args:
        particles: Live particle snapshot.
        types1: Types of the first particle of each pair.
        types2: Types of the second particle of each pair.
        r_min: Lower bound (default 0).
        r_max: Upper bound (default half the smallest box length).
        r_bins: Number of bins (default N / 20).

    Returns:
        RDFResult for a single frame.
    """
    analyzer = _make_analyzer(particles, types1, types2, r_min, r_max, r_bins)
    analyzer.update(particles)
    return analyzer.to_result()


def _average_over_history(
    analyzer: RadialDistributionFunction,
    particles: ParticleData,
    history: ConfigurationHistory,
    n_conf: int | None,
) -> RDFResult:
    if len(history) == 0:
        raise PreconditionError(
            "no configurations found, store some before averaging the RDF"
        )
    reference = particles.sorted_by_identity()
    if reference.n_particles != history.n_part_conf:
        raise PreconditionError(
            f"stored configurations hold {history.n_part_conf} particles, "
            f"live snapshot has {reference.n_particles}"
        )
    if n_conf is None:
        n_conf = len(history)

    for positions in history.latest(n_conf):
        analyzer.update(reference, positions=positions)
    return analyzer.to_result()


def rdf_average(
    particles: ParticleData,
    history: ConfigurationHistory,
    types1: Sequence[int],
    types2: Sequence[int],
    r_min: float | None = None,
    r_max: float | None = None,
    r_bins: int | None = None,
    n_conf: int | None = None,
) -> RDFResult:
    """
    RDF averaged over the most recent stored configurations.

    Types come from the live snapshot (in identity order), positions from
    the history. Each frame is normalized before averaging.

    Args:
        particles: Live snapshot providing types and the box.
        history: Stored configurations.
        types1: Types of the first particle of each pair.
        types2: Types of the second particle of each pair.
        r_min: Lower bound (default 0).
        r_max: Upper bound (default half the smallest box length).
        r_bins: Number of bins (default N / 20).
        n_conf: Number of most recent configurations (default all).

    Raises:
        PreconditionError: If the history is empty or does not match the
            live snapshot.
    """
    analyzer = _make_analyzer(particles, types1, types2, r_min, r_max, r_bins)
    return _average_over_history(analyzer, particles, history, n_conf)


def rdf_average_intermolecular(
    particles: ParticleData,
    history: ConfigurationHistory,
    types1: Sequence[int],
    types2: Sequence[int],
    r_min: float | None = None,
    r_max: float | None = None,
    r_bins: int | None = None,
    n_conf: int | None = None,
) -> RDFResult:
    """Like `rdf_average`, counting only pairs from different molecules."""
    analyzer = _make_analyzer(
        particles, types1, types2, r_min, r_max, r_bins, intermolecular=True
    )
    return _average_over_history(analyzer, particles, history, n_conf)
