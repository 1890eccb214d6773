"""Contact-based aggregation (cluster) analysis of molecules."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass

import numpy as np

from ..config import DEFAULTS
from ..errors import PreconditionError, ValidationError
from ..neighborlists import DOMAIN_DECOMPOSITION, NeighborList
from ..parallel import ParallelBackend, get_backend
from ..system import ParticleData

logger = logging.getLogger(__name__)


class ClusterPartition:
    """
    Partition of the molecule ids in [start, stop] into clusters.

    Every molecule starts as its own cluster. A cluster is stored as an
    ordered member chain under the slot of its representative. Merging
    cluster B into cluster A puts B's chain in front of A's chain, hands
    A's representative to every former member of B and retires B's slot.
    There is no path compression; the merge direction is fixed by the
    caller, which keeps the result deterministic for a given pair order.
    """

    def __init__(self, start: int, stop: int) -> None:
        self.start = start
        self.stop = stop
        self._chains: dict[int, list[int]] = {m: [m] for m in range(start, stop + 1)}
        self._representative: dict[int, int] = {
            m: m for m in range(start, stop + 1)
        }

    def __contains__(self, mol_id: int) -> bool:
        return self.start <= mol_id <= self.stop

    def representative(self, mol_id: int) -> int:
        """Current representative of the cluster holding `mol_id`."""
        return self._representative[mol_id]

    def is_head(self, slot: int) -> bool:
        """Whether `slot` still heads a cluster."""
        return slot in self._chains

    def merge(self, keep: int, absorb: int) -> int:
        """
        Merge the cluster of `absorb` into the cluster of `keep`.

        Returns:
            The representative of the merged cluster.
        """
        target = self._representative[keep]
        absorbed = self._chains.pop(self._representative[absorb])
        for member in absorbed:
            self._representative[member] = target
        self._chains[target] = absorbed + self._chains[target]
        return target

    def clusters(self) -> list[list[int]]:
        """Member chains of the surviving clusters, ordered by slot."""
        return [
            list(self._chains[slot])
            for slot in range(self.start, self.stop + 1)
            if slot in self._chains
        ]


@dataclass
class AggregationResult:
    """
    Aggregates found in a molecule range.

    Attributes:
        aggregates: Member molecule ids of each aggregate.
        sizes: Number of molecules in each aggregate.
        n_aggregates: Number of aggregates.
        max_size: Largest aggregate size.
        min_size: Smallest aggregate size.
        mean_size: Mean aggregate size.
        std_size: Population standard deviation of aggregate sizes.
    """

    aggregates: list[list[int]]
    sizes: list[int]
    n_aggregates: int
    max_size: int
    min_size: int
    mean_size: float
    std_size: float

    @classmethod
    def from_clusters(cls, clusters: list[list[int]]) -> AggregationResult:
        sizes = [len(c) for c in clusters]
        n = len(sizes)
        mean = sum(sizes) / n
        variance = sum(s * s for s in sizes) / n - mean * mean
        return cls(
            aggregates=clusters,
            sizes=sizes,
            n_aggregates=n,
            max_size=max(sizes),
            min_size=min(sizes),
            mean_size=mean,
            std_size=float(np.sqrt(max(variance, 0.0))),
        )


def aggregation(
    particles: ParticleData,
    neighbor_list: NeighborList,
    distance_criteria: float,
    s_mol_id: int,
    f_mol_id: int,
    min_contact: int | None = None,
    backend: ParallelBackend | None = None,
) -> AggregationResult:
    """
    Find aggregates of molecules connected by close contacts.

    Candidate particle pairs come from `neighbor_list`, rebuilt on the
    current positions. For each candidate pair whose molecules lie in
    [s_mol_id, f_mol_id] and belong to different aggregates, a contact is
    recorded if the pair is closer than `distance_criteria`. Once two
    molecules have `min_contact` contacts their aggregates are merged into
    the aggregate of the first particle of the pair.

    Args:
        particles: Live particle snapshot.
        neighbor_list: Domain-decomposed neighbor index.
        distance_criteria: Contact distance.
        s_mol_id: First molecule id of the range.
        f_mol_id: Last molecule id of the range (inclusive).
        min_contact: Contacts needed to merge (default 1).
        backend: Process topology (default: the process default).

    Returns:
        AggregationResult for the range.

    Raises:
        PreconditionError: If run on more than one process, with a neighbor
            index that is not domain-decomposed, or with a distance
            criterion beyond the index cutoff.
        ValidationError: For an invalid molecule range, contact count or
            distance.
    """
    if min_contact is None:
        min_contact = DEFAULTS.min_contact

    if not get_backend(backend).is_serial:
        raise PreconditionError(
            "aggregation can only be calculated on a single processor"
        )
    if neighbor_list.cell_structure != DOMAIN_DECOMPOSITION:
        raise PreconditionError(
            "aggregation can only be calculated with the domain decomposition "
            "cell system"
        )
    n_molecules = particles.n_molecules
    if not (0 <= s_mol_id <= f_mol_id < n_molecules):
        raise ValidationError(
            f"molecule range [{s_mol_id}, {f_mol_id}] invalid for "
            f"{n_molecules} molecules"
        )
    if distance_criteria < 0:
        raise ValidationError(
            f"distance_criteria must be non-negative, got {distance_criteria}"
        )
    if min_contact < 1:
        raise ValidationError(f"min_contact must be >= 1, got {min_contact}")
    if distance_criteria > neighbor_list.cutoff:
        raise PreconditionError(
            f"distance_criteria ({distance_criteria}) is larger than the "
            f"neighbor list cutoff ({neighbor_list.cutoff})"
        )

    neighbor_list.build(particles.positions, particles.box)

    partition = ClusterPartition(s_mol_id, f_mol_id)
    contacts: defaultdict[tuple[int, int], int] = defaultdict(int)
    criteria2 = distance_criteria**2
    positions = particles.positions
    mol_ids = particles.mol_ids
    n_merges = 0

    for p1, p2 in neighbor_list.get_pairs():
        mol1 = int(mol_ids[p1])
        mol2 = int(mol_ids[p2])
        if mol1 not in partition or mol2 not in partition:
            continue
        if partition.representative(mol1) == partition.representative(mol2):
            continue

        key = (mol1, mol2) if mol1 > mol2 else (mol2, mol1)
        if particles.box.squared_distance(positions[p1], positions[p2]) < criteria2:
            contacts[key] += 1
        if contacts[key] >= min_contact:
            partition.merge(keep=mol1, absorb=mol2)
            n_merges += 1

    result = AggregationResult.from_clusters(partition.clusters())
    logger.debug(
        "aggregation over molecules [%d, %d]: %d merges, %d aggregates",
        s_mol_id,
        f_mol_id,
        n_merges,
        result.n_aggregates,
    )
    return result
