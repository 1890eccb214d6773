"""In-memory history of past particle configurations."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import PreconditionError, ValidationError
from ..system import ParticleData

logger = logging.getLogger(__name__)


class ConfigurationHistory:
    """
    Ordered store of position-only snapshots.

    Every stored configuration has the same number of particles
    (`n_part_conf`). Snapshots are copied on the way in and kept read-only.
    All mutating methods validate their inputs before touching the store,
    so a failed call leaves it unchanged.

    The store has no internal locking; callers serialize access.

    Example:
        history = ConfigurationHistory()
        for frame in frames:
            history.push(frame, size=10)
        g_r = rdf_average(frame, history, [0], [0])
    """

    def __init__(self) -> None:
        self._configs: list[NDArray[np.floating]] = []
        self._n_part_conf = 0

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self) -> Iterator[NDArray[np.floating]]:
        return iter(self._configs)

    @property
    def n_configs(self) -> int:
        """Number of stored configurations."""
        return len(self._configs)

    @property
    def n_part_conf(self) -> int:
        """Particle count shared by all stored configurations (0 when empty)."""
        return self._n_part_conf

    def configuration(self, index: int) -> NDArray[np.floating]:
        """
        Return the stored positions at `index`, shape (n_part_conf, 3).

        Raises:
            ValidationError: If the index is out of range.
        """
        self._check_index(index)
        return self._configs[index]

    def latest(self, n_conf: int) -> list[NDArray[np.floating]]:
        """Return the `n_conf` most recent configurations, newest first."""
        if n_conf < 1 or n_conf > len(self._configs):
            raise ValidationError(
                f"n_conf {n_conf} out of range (must be in [1,{len(self._configs)}])"
            )
        return [self._configs[-k] for k in range(1, n_conf + 1)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, particles: ParticleData) -> int:
        """
        Store the current configuration at the end of the history.

        Returns:
            New number of stored configurations.
        """
        snapshot = self._snapshot(particles)
        self._store(snapshot)
        logger.debug("appended configuration %d", len(self._configs) - 1)
        return len(self._configs)

    def push(self, particles: ParticleData, size: int | None = None) -> int:
        """
        Store the current configuration, keeping a bounded window.

        Without `size` the oldest entry is dropped and the new one appended
        (plain append on an empty history). With `size`, the history first
        grows by one if it holds fewer than `size` entries, otherwise the
        oldest entry is replaced by shifting; afterwards entries are dropped
        from the front until exactly `size` remain.

        Returns:
            New number of stored configurations.
        """
        if size is not None and size < 0:
            raise ValidationError(f"size must be non-negative, got {size}")
        snapshot = self._snapshot(particles)

        if size is None:
            if self._configs:
                self._configs.pop(0)
        elif self._configs and len(self._configs) >= size:
            self._configs.pop(0)
        self._store(snapshot)

        if size is not None:
            while len(self._configs) > size:
                self._configs.pop(0)
            if not self._configs:
                self._n_part_conf = 0

        logger.debug("pushed configuration, history holds %d", len(self._configs))
        return len(self._configs)

    def replace(self, index: int, particles: ParticleData) -> int:
        """
        Overwrite the configuration at `index` with the current one.

        On an empty history, index 0 appends.

        Returns:
            New number of stored configurations.
        """
        snapshot = self._snapshot(particles)
        if not self._configs and index == 0:
            self._store(snapshot)
        else:
            self._check_index(index)
            self._configs[index] = snapshot
        logger.debug("replaced configuration %d", index)
        return len(self._configs)

    def remove(self, index: int | None = None) -> int:
        """
        Remove the configuration at `index`, or all of them if None.

        Later entries shift down by one. `n_part_conf` resets to 0 once the
        history is empty.

        Returns:
            New number of stored configurations.
        """
        if index is None:
            self._configs.clear()
        else:
            self._check_index(index)
            del self._configs[index]
        if not self._configs:
            self._n_part_conf = 0
        logger.debug("removed configuration(s), history holds %d", len(self._configs))
        return len(self._configs)

    def add_configuration(self, positions: ArrayLike) -> int:
        """
        Store an explicitly supplied configuration.

        Args:
            positions: Positions, shape (n, 3) or flat (3n,).

        Returns:
            New number of stored configurations.
        """
        snapshot = np.array(positions, dtype=np.float64)
        if snapshot.ndim == 1:
            if len(snapshot) % 3 != 0:
                raise ValidationError(
                    f"flat configuration length {len(snapshot)} is not a multiple of 3"
                )
            snapshot = snapshot.reshape(-1, 3)
        if snapshot.ndim != 2 or snapshot.shape[1] != 3:
            raise ValidationError(
                f"configuration must have shape (n, 3), got {snapshot.shape}"
            )
        self._check_length(len(snapshot))
        snapshot.flags.writeable = False
        self._store(snapshot)
        return len(self._configs)

    def activate(self, index: int, particles: ParticleData) -> list[int]:
        """
        Write a stored configuration back into the live particle store.

        On an empty history, index 0 first stores the current configuration.
        Placement failures for single particles are collected and logged;
        the remaining particles are still placed.

        Returns:
            Identities of particles that could not be placed.
        """
        self._snapshot(particles)
        if not self._configs and index == 0:
            self.append(particles)
            return []
        self._check_index(index)

        slots = particles.identity_slots()
        failed = []
        for identity, position in enumerate(self._configs[index]):
            try:
                slot = int(slots[identity])
                particles.place_particle(identity, position, index=slot)
            except (KeyError, ValueError):
                failed.append(identity)
                logger.warning("failed upon replacing particle %d", identity)
        return failed

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _snapshot(self, particles: ParticleData) -> NDArray[np.floating]:
        """Validate the live store and return a read-only copy of its positions."""
        if particles.n_particles == 0:
            raise PreconditionError("no particles to store")
        self._check_length(particles.n_particles)
        snapshot = particles.sorted_by_identity().positions.copy()
        snapshot.flags.writeable = False
        return snapshot

    def _check_length(self, n_particles: int) -> None:
        if self._configs and n_particles != self._n_part_conf:
            raise PreconditionError(
                "All configurations stored must have the same length "
                f"(previously: {self._n_part_conf}, now: {n_particles})"
            )

    def _check_index(self, index: int) -> None:
        if not self._configs:
            raise ValidationError("there are no stored configurations")
        if index < 0 or index > len(self._configs) - 1:
            raise ValidationError(
                f"Index {index} out of range (must be in [0,{len(self._configs) - 1}])"
            )

    def _store(self, snapshot: NDArray[np.floating]) -> None:
        self._configs.append(snapshot)
        self._n_part_conf = len(snapshot)
