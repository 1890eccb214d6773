"""Volume fluctuations for isothermal compressibility estimates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ValidationError
from .base import StreamingAnalyzer

if TYPE_CHECKING:
    from ..system import ParticleData


class VolumeFluctuation(StreamingAnalyzer):
    """
    Running variance of the box volume, <V^2> - <V>^2.

    In the NpT ensemble this equals kT * kappa_T * <V>.
    """

    def __init__(self) -> None:
        self.reset()

    @property
    def name(self) -> str:
        """Analyzer name."""
        return "vkappa"

    def reset(self) -> None:
        """Drop all accumulated volumes."""
        self._v_sum = 0.0
        self._v2_sum = 0.0
        self._weight = 0.0

    @property
    def n_frames(self) -> int:
        """Number of frames accumulated (including restored ones)."""
        return int(self._weight)

    def update(self, particles: ParticleData, **kwargs: Any) -> None:
        """Add the current box volume."""
        volume = particles.box.volume
        self._v_sum += volume
        self._v2_sum += volume * volume
        self._weight += 1.0

    def variance(self) -> float:
        """<V^2> - <V>^2 of the accumulated frames (0 before any frame)."""
        if self._weight <= 0.0:
            return 0.0
        mean = self._v_sum / self._weight
        return self._v2_sum / self._weight - mean * mean

    def result(self) -> dict[str, Any]:
        """
        Get the volume fluctuation.

        Returns:
            Dictionary with 'variance', 'mean_volume' and 'n_frames'.
        """
        mean = self._v_sum / self._weight if self._weight > 0.0 else 0.0
        return {
            "variance": self.variance(),
            "mean_volume": mean,
            "n_frames": self.n_frames,
        }

    def read(self) -> tuple[float, float, float]:
        """Raw sums (sum V, sum V^2, number of samples)."""
        return self._v_sum, self._v2_sum, self._weight

    def set(self, v_sum: float, v2_sum: float, weight: float) -> float:
        """
        Restore raw sums, e.g. from a previous `read()`.

        Returns:
            The restored variance.

        Raises:
            ValidationError: If `weight` is not positive. The accumulator is
                reset in that case.
        """
        if weight <= 0.0:
            self.reset()
            raise ValidationError(
                f"number of samples must be positive, got {weight}"
            )
        self._v_sum = float(v_sum)
        self._v2_sum = float(v2_sum)
        self._weight = float(weight)
        return self.variance()
