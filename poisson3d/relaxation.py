"""
Relaxation sweeps for the 3D Poisson lattice.

Each update visits every interior cell exactly once (i outermost, then j,
then k, all ascending) and returns the L1 norm of the change it made. The
boundary shell is never written.
"""

import numba
import numpy as np

from poisson3d.errors import LatticeShapeError
from poisson3d.lattice import PoissonLattice


@numba.njit(cache=True)
def _stencil(phi: np.ndarray, charge: np.ndarray, coeff: float, i: int, j: int, k: int) -> float:
    return (
        phi[k, j, i + 1] + phi[k, j, i - 1]
        + phi[k, j + 1, i] + phi[k, j - 1, i]
        + phi[k + 1, j, i] + phi[k - 1, j, i]
        + coeff * charge[k, j, i]
    ) / 6.0


@numba.njit(cache=True)
def _jacobi_sweep(current: np.ndarray, updated: np.ndarray, charge: np.ndarray, coeff: float) -> float:
    nz, ny, nx = current.shape
    convergence = 0.0
    for i in range(1, nx - 1):
        for j in range(1, ny - 1):
            for k in range(1, nz - 1):
                value = _stencil(current, charge, coeff, i, j, k)
                updated[k, j, i] = value
                convergence += abs(value - current[k, j, i])
    return convergence


@numba.njit(cache=True)
def _gauss_seidel_sweep(phi: np.ndarray, charge: np.ndarray, coeff: float) -> float:
    nz, ny, nx = phi.shape
    convergence = 0.0
    for i in range(1, nx - 1):
        for j in range(1, ny - 1):
            for k in range(1, nz - 1):
                current_value = phi[k, j, i]
                value = _stencil(phi, charge, coeff, i, j, k)
                convergence += abs(value - current_value)
                phi[k, j, i] = value
    return convergence


@numba.njit(cache=True)
def _sor_sweep(phi: np.ndarray, charge: np.ndarray, coeff: float, omega: float) -> float:
    nz, ny, nx = phi.shape
    convergence = 0.0
    for i in range(1, nx - 1):
        for j in range(1, ny - 1):
            for k in range(1, nz - 1):
                current_value = phi[k, j, i]
                gs_value = _stencil(phi, charge, coeff, i, j, k)
                value = (1.0 - omega) * current_value + omega * gs_value
                phi[k, j, i] = value
                convergence += abs(value - current_value)
    return convergence


def jacobi_update(current: PoissonLattice, updated: PoissonLattice) -> float:
    """
    Write one Jacobi sweep of ``current`` into ``updated``.

    Reads only from ``current`` (potential and charge density), writes only
    to the interior of ``updated``. The caller swaps the two before the next
    sweep.

    Returns:
        Sum over interior cells of |updated - current|
    """
    if current is updated:
        raise LatticeShapeError("Jacobi update needs two distinct lattices")
    if not current.matches(updated):
        raise LatticeShapeError(
            f"Jacobi lattices do not match: {current!r} vs {updated!r}"
        )
    return float(_jacobi_sweep(
        current.potential_grid,
        updated.potential_grid,
        current.charge_grid,
        current.source_coefficient,
    ))


def gauss_seidel_update(lattice: PoissonLattice) -> float:
    """
    Apply one in-place Gauss-Seidel sweep.

    Cells later in the traversal already see the new values of earlier
    cells within the same sweep.

    Returns:
        Sum over interior cells of |new - old|
    """
    return float(_gauss_seidel_sweep(
        lattice.potential_grid,
        lattice.charge_grid,
        lattice.source_coefficient,
    ))


def sor_update(lattice: PoissonLattice, omega: float) -> float:
    """
    Apply one in-place successive over-relaxation sweep.

    Each cell becomes (1 - omega) * old + omega * gs, where gs is the value
    Gauss-Seidel would write. omega = 1 is exactly Gauss-Seidel. Values of
    omega outside (0, 2) are accepted and will generally not converge.

    Returns:
        Sum over interior cells of |new - old| (the relaxed change)
    """
    return float(_sor_sweep(
        lattice.potential_grid,
        lattice.charge_grid,
        lattice.source_coefficient,
        float(omega),
    ))


def lattice_difference(first: PoissonLattice, second: PoissonLattice) -> float:
    """Sum over interior cells of |phi_first - phi_second|."""
    if first.shape != second.shape:
        raise LatticeShapeError(
            f"cannot compare lattices of shape {first.shape} and {second.shape}"
        )
    a = first.potential_grid[1:-1, 1:-1, 1:-1]
    b = second.potential_grid[1:-1, 1:-1, 1:-1]
    return float(np.abs(a - b).sum())
