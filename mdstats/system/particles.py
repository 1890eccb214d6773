"""Live particle snapshot representation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import PreconditionError
from .box import Box


@dataclass
class ParticleData:
    """
    Snapshot of the live particle store.

    This is a data container read by the analysis routines. Only
    `place_particle` writes into it (used when restoring a stored
    configuration).

    Attributes:
        positions: Particle positions, shape (N, 3).
        types: Particle type indices, shape (N,).
        mol_ids: Molecule id of each particle, shape (N,).
        masses: Particle masses, shape (N,).
        identities: Particle identities, shape (N,).
        box: Simulation box.
    """

    positions: NDArray[np.floating]
    types: NDArray[np.integer]
    mol_ids: NDArray[np.integer]
    masses: NDArray[np.floating]
    identities: NDArray[np.integer]
    box: Box

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3)
        self.types = np.asarray(self.types, dtype=np.int64)
        self.mol_ids = np.asarray(self.mol_ids, dtype=np.int64)
        self.masses = np.asarray(self.masses, dtype=np.float64)
        self.identities = np.asarray(self.identities, dtype=np.int64)

        n_particles = len(self.positions)
        for name in ("types", "mol_ids", "masses", "identities"):
            if getattr(self, name).shape != (n_particles,):
                raise ValueError(
                    f"{name} shape {getattr(self, name).shape} incompatible with "
                    f"{n_particles} particles"
                )

    @classmethod
    def create(
        cls,
        positions: ArrayLike,
        box: Box,
        types: ArrayLike | None = None,
        mol_ids: ArrayLike | None = None,
        masses: ArrayLike | None = None,
        identities: ArrayLike | None = None,
    ) -> ParticleData:
        """
        Create a snapshot with optional per-particle properties.

        Args:
            positions: Particle positions, shape (N, 3).
            box: Simulation box.
            types: Type indices. Defaults to all zeros.
            mol_ids: Molecule ids. Defaults to all zeros.
            masses: Masses. Defaults to ones.
            identities: Identities. Defaults to 0..N-1.

        Returns:
            New ParticleData instance.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        n_particles = len(positions)

        if types is None:
            types = np.zeros(n_particles, dtype=np.int64)
        if mol_ids is None:
            mol_ids = np.zeros(n_particles, dtype=np.int64)
        if masses is None:
            masses = np.ones(n_particles, dtype=np.float64)
        if identities is None:
            identities = np.arange(n_particles, dtype=np.int64)

        return cls(
            positions=positions,
            types=types,
            mol_ids=mol_ids,
            masses=masses,
            identities=identities,
            box=box,
        )

    @property
    def n_particles(self) -> int:
        """Return number of particles."""
        return len(self.positions)

    @property
    def n_molecules(self) -> int:
        """Return number of molecules (highest molecule id + 1)."""
        if self.n_particles == 0:
            return 0
        return int(np.max(self.mol_ids)) + 1

    @property
    def max_type(self) -> int:
        """Return the highest particle type index, or -1 without particles."""
        if self.n_particles == 0:
            return -1
        return int(np.max(self.types))

    def type_mask(self, types: Iterable[int] | None) -> NDArray[np.bool_]:
        """
        Boolean mask of particles whose type is in `types`.

        None selects every particle.
        """
        if types is None:
            return np.ones(self.n_particles, dtype=bool)
        return np.isin(self.types, np.fromiter(types, dtype=np.int64))

    def copy(self) -> ParticleData:
        """Create a deep copy of this snapshot."""
        return ParticleData(
            positions=self.positions.copy(),
            types=self.types.copy(),
            mol_ids=self.mol_ids.copy(),
            masses=self.masses.copy(),
            identities=self.identities.copy(),
            box=self.box,  # Box is immutable
        )

    def sorted_by_identity(self) -> ParticleData:
        """
        Return a copy ordered by identity.

        Raises:
            PreconditionError: If identities are not exactly 0..N-1.
        """
        order = self.identity_slots()
        return ParticleData(
            positions=self.positions[order],
            types=self.types[order],
            mol_ids=self.mol_ids[order],
            masses=self.masses[order],
            identities=self.identities[order],
            box=self.box,
        )

    def index_of(self, identity: int) -> int:
        """
        Return the array index of the particle with the given identity.

        Raises:
            KeyError: If no particle has this identity.
        """
        matches = np.flatnonzero(self.identities == identity)
        if len(matches) == 0:
            raise KeyError(f"particle {identity} does not exist")
        return int(matches[0])

    def identity_slots(self) -> NDArray[np.integer]:
        """
        Array index of every identity, ``slots[identity] == index``.

        Raises:
            PreconditionError: If identities are not exactly 0..N-1.
        """
        slots = np.argsort(self.identities, kind="stable")
        if not np.array_equal(self.identities[slots], np.arange(self.n_particles)):
            raise PreconditionError(
                "particles have to start at 0 and have consecutive identities"
            )
        return slots

    def place_particle(
        self, identity: int, position: ArrayLike, index: int | None = None
    ) -> None:
        """
        Overwrite the position of one particle.

        Args:
            identity: Identity of the particle to move.
            position: New position, shape (3,).
            index: Array index of the particle when already known (see
                `identity_slots`); skips the lookup by identity.

        Raises:
            KeyError: If no particle has this identity, or ``index`` holds
                another one.
        """
        position = np.asarray(position, dtype=np.float64)
        if position.shape != (3,):
            raise ValueError(f"position must have shape (3,), got {position.shape}")
        if index is None:
            index = self.index_of(identity)
        elif not 0 <= index < self.n_particles or self.identities[index] != identity:
            raise KeyError(f"particle {identity} is not stored at index {index}")
        self.positions[index] = position
