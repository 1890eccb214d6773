"""Center of mass, inertia tensor and principal axes of particle groups."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import DomainError
from ..system import ParticleData


@dataclass
class PrincipalAxes:
    """
    Eigen-decomposition of an inertia tensor.

    Attributes:
        eigenvalues: Principal moments in ascending order, shape (3,).
        eigenvectors: Unit principal axes as rows, shape (3, 3).
    """

    eigenvalues: NDArray[np.floating]
    eigenvectors: NDArray[np.floating]


def _select_type(particles: ParticleData, type_: int) -> NDArray[np.bool_]:
    mask = particles.types == type_
    if not np.any(mask):
        raise DomainError(f"no particles of type {type_}")
    return mask


def center_of_mass(particles: ParticleData, type_: int) -> NDArray[np.floating]:
    """
    Mass-weighted mean position of all particles of one type.

    Positions are used as stored (folded). Groups that straddle a periodic
    boundary are not unwrapped first, so their center of mass lands
    somewhere between the images.

    Raises:
        DomainError: If no particle has this type.
    """
    mask = _select_type(particles, type_)
    masses = particles.masses[mask]
    return masses @ particles.positions[mask] / np.sum(masses)


def inertia_tensor(particles: ParticleData, type_: int) -> NDArray[np.floating]:
    """
    Moment of inertia tensor about the center of mass of one type.

    I_ab = sum_i m_i (|r_i|^2 delta_ab - r_ia r_ib), with r_i relative to the
    center of mass (same folded-coordinate caveat as `center_of_mass`).

    Returns:
        Symmetric 3x3 tensor.
    """
    mask = _select_type(particles, type_)
    masses = particles.masses[mask]
    rel = particles.positions[mask] - center_of_mass(particles, type_)

    second_moment = (masses[:, np.newaxis] * rel).T @ rel
    return np.trace(second_moment) * np.eye(3) - second_moment


def eigenvalues_3x3(matrix: ArrayLike) -> NDArray[np.floating]:
    """
    Eigenvalues of a real symmetric 3x3 matrix, ascending.

    Closed-form solution of the characteristic cubic via its
    trigonometric parametrization; no iteration.
    """
    a = np.asarray(matrix, dtype=np.float64)
    off_diag = a[0, 1] ** 2 + a[0, 2] ** 2 + a[1, 2] ** 2
    if off_diag == 0.0:
        return np.sort(np.diag(a))

    q = np.trace(a) / 3.0
    p = np.sqrt((np.sum((np.diag(a) - q) ** 2) + 2.0 * off_diag) / 6.0)
    b = (a - q * np.eye(3)) / p
    r = np.clip(np.linalg.det(b) / 2.0, -1.0, 1.0)
    phi = np.arccos(r) / 3.0

    largest = q + 2.0 * p * np.cos(phi)
    smallest = q + 2.0 * p * np.cos(phi + 2.0 * np.pi / 3.0)
    middle = 3.0 * q - largest - smallest
    return np.array([smallest, middle, largest])


def _orthogonal_unit(v: NDArray[np.floating]) -> NDArray[np.floating]:
    """Some unit vector orthogonal to v."""
    axis = np.zeros(3)
    axis[np.argmin(np.abs(v))] = 1.0
    w = np.cross(v, axis)
    return w / np.linalg.norm(w)


def eigenvector_3x3(
    matrix: ArrayLike, eigenvalue: float, tol: float = 1e-10
) -> NDArray[np.floating]:
    """
    Unit eigenvector of a symmetric 3x3 matrix for a known eigenvalue.

    Taken as the largest cross product of two rows of (A - lambda I). For a
    repeated eigenvalue any unit vector of the eigenspace is returned.
    """
    a = np.asarray(matrix, dtype=np.float64)
    m = a - eigenvalue * np.eye(3)
    scale = max(np.max(np.abs(a)), 1.0)

    crosses = np.array(
        [np.cross(m[0], m[1]), np.cross(m[0], m[2]), np.cross(m[1], m[2])]
    )
    norms = np.linalg.norm(crosses, axis=1)
    best = int(np.argmax(norms))
    if norms[best] > tol * scale**2:
        return crosses[best] / norms[best]

    # Rank <= 1: eigenspace is the plane orthogonal to the non-zero row
    row_norms = np.linalg.norm(m, axis=1)
    row = int(np.argmax(row_norms))
    if row_norms[row] > tol * scale:
        return _orthogonal_unit(m[row] / row_norms[row])
    return np.array([1.0, 0.0, 0.0])


def principal_axes(particles: ParticleData, type_: int) -> PrincipalAxes:
    """
    Principal moments and axes of the inertia tensor of one type.

    Returns:
        PrincipalAxes with eigenvalues ascending and matching unit vectors
        as rows. Axes of repeated moments are made mutually orthogonal.
    """
    tensor = inertia_tensor(particles, type_)
    values = eigenvalues_3x3(tensor)

    scale = max(np.max(np.abs(values)), 1.0)
    if values[2] - values[0] <= 1e-12 * scale:
        return PrincipalAxes(eigenvalues=values, eigenvectors=np.eye(3))

    first = eigenvector_3x3(tensor, values[0])
    last = eigenvector_3x3(tensor, values[2])
    if values[1] - values[0] <= 1e-12 * scale:
        first = _orthogonal_unit(last) if abs(first @ last) > 1e-8 else first
    middle = np.cross(last, first)
    middle /= np.linalg.norm(middle)
    return PrincipalAxes(
        eigenvalues=values, eigenvectors=np.array([first, middle, last])
    )
