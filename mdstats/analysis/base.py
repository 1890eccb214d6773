"""Common interface of the frame-accumulating analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..system import ParticleData


class Analyzer(ABC):
    """
    Something that reports a dictionary of observables.

    The one-shot statistics in this package (``rdf``, ``mindist`` and
    friends) are plain functions; classes are kept for observables that
    carry state between calls.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Key under which results of this analyzer are reported."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Drop everything accumulated so far."""
        ...

    @abstractmethod
    def result(self) -> dict[str, Any]:
        """Current observables, keyed by name."""
        ...


class StreamingAnalyzer(Analyzer):
    """
    Analyzer fed one particle snapshot at a time.

    Only running sums are stored, never the snapshots.

    Example:
        volumes = VolumeFluctuation()
        volumes.consume(snapshots)
        print(volumes.result()["variance"])
    """

    @abstractmethod
    def update(self, particles: ParticleData, **kwargs: Any) -> None:
        """
        Add one snapshot to the running sums.

        Args:
            particles: Live particle data for this frame.
            **kwargs: Frame data specific to the analyzer.
        """
        ...

    def consume(self, frames: Iterable[ParticleData], **kwargs: Any) -> dict[str, Any]:
        """Feed every snapshot of ``frames`` and return the result."""
        for particles in frames:
            self.update(particles, **kwargs)
        return self.result()

    @property
    @abstractmethod
    def n_frames(self) -> int:
        """Number of snapshots accumulated since the last reset."""
        ...
