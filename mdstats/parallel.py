"""
Process topology seen by the analyses.

Analyses never distribute work themselves. They only ask how many
processes share the particles, because some of them (aggregation) need
every particle in one address space.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ParallelBackend(ABC):
    """How the particle data is spread over processes."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short label, e.g. ``"serial"``."""
        ...

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Number of processes holding a share of the particles."""
        ...

    @property
    @abstractmethod
    def rank(self) -> int:
        """Index of this process among ``n_workers``."""
        ...

    @property
    def is_root(self) -> bool:
        return self.rank == 0

    @property
    def is_serial(self) -> bool:
        """True when this process holds the whole system."""
        return self.n_workers == 1

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rank={self.rank}, n_workers={self.n_workers})"


class SerialBackend(ParallelBackend):
    """Everything in one process; the default."""

    @property
    def name(self) -> str:
        """Always ``"serial"``."""
        return "serial"

    @property
    def n_workers(self) -> int:
        """A single process holds every particle."""
        return 1

    @property
    def rank(self) -> int:
        """The only process is the root."""
        return 0


_default: ParallelBackend | None = None


def get_backend(backend: ParallelBackend | None = None) -> ParallelBackend:
    """
    Resolve the backend an analysis runs under.

    Args:
        backend: Explicit backend, returned unchanged. ``None`` selects the
            process default, a shared ``SerialBackend`` unless another one
            was installed with :func:`set_default_backend`.

    Returns:
        ParallelBackend instance.
    """
    global _default

    if backend is not None:
        return backend
    if _default is None:
        _default = SerialBackend()
    return _default


def set_default_backend(backend: ParallelBackend) -> ParallelBackend:
    """Install ``backend`` as the process default and return it."""
    global _default

    if not isinstance(backend, ParallelBackend):
        raise TypeError(f"Expected a ParallelBackend, got {type(backend).__name__}")
    _default = backend
    return backend


def reset_default_backend() -> None:
    """Forget the installed default; the next lookup creates a serial one."""
    global _default
    _default = None


__all__ = [
    "ParallelBackend",
    "SerialBackend",
    "get_backend",
    "set_default_backend",
    "reset_default_backend",
]
