"""
Lattice holding the potential and charge density of a 3D Poisson problem.

Both fields are flat float64 arrays addressed by

    flat_index(i, j, k) = i + j * x_range + k * x_range * y_range

The outermost shell of cells is the Dirichlet boundary: it is zero after
construction and nothing in the relaxation engine ever writes to it. The
``*_grid`` properties return (z, y, x) shaped views onto the same memory,
so ``potential_grid[k, j, i]`` is the cell at (i, j, k).
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np
from scipy.ndimage import convolve

from poisson3d import defaults
from poisson3d.errors import LatticeIndexError, LatticeShapeError, ParameterError

PRECISION = np.float64

# Six axis-aligned neighbours, centre weighted -6 (discrete Laplacian with dx=1)
_LAPLACIAN_KERNEL = np.zeros((3, 3, 3), dtype=PRECISION)
_LAPLACIAN_KERNEL[1, 1, 0] = _LAPLACIAN_KERNEL[1, 1, 2] = 1.0
_LAPLACIAN_KERNEL[1, 0, 1] = _LAPLACIAN_KERNEL[1, 2, 1] = 1.0
_LAPLACIAN_KERNEL[0, 1, 1] = _LAPLACIAN_KERNEL[2, 1, 1] = 1.0
_LAPLACIAN_KERNEL[1, 1, 1] = -6.0


class UniformSource(Protocol):
    """Anything that draws uniform samples like ``numpy.random.Generator``."""

    def uniform(self, low: float, high: float, size: tuple[int, ...]) -> np.ndarray: ...


class PoissonLattice:
    """Potential and charge density on a regular 3D grid.

    Attributes:
        x_range, y_range, z_range: Number of cells along each axis (boundary included)
        permittivity: Permittivity in the Poisson equation
        dx: Spatial discretisation step
        potential: Flat potential samples, one per cell
        charge_density: Flat charge density samples, same addressing as potential
    """

    def __init__(
        self,
        x_range: int,
        y_range: int,
        z_range: int,
        permittivity: float = defaults.DEFAULT_PERMITTIVITY,
        dx: float = defaults.DEFAULT_SPACE_STEP,
    ):
        for name, value in (("x_range", x_range), ("y_range", y_range), ("z_range", z_range)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise LatticeShapeError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise LatticeShapeError(f"{name} must be positive, got {value}")
        if not math.isfinite(permittivity) or permittivity <= 0.0:
            raise ParameterError(f"permittivity must be a positive number, got {permittivity!r}")
        if not math.isfinite(dx) or dx <= 0.0:
            raise ParameterError(f"dx must be a positive number, got {dx!r}")

        self.x_range = int(x_range)
        self.y_range = int(y_range)
        self.z_range = int(z_range)
        self.permittivity = float(permittivity)
        self.dx = float(dx)

        size = self.x_range * self.y_range * self.z_range
        self.potential = np.zeros(size, dtype=PRECISION)
        self.charge_density = np.zeros(size, dtype=PRECISION)

    def __repr__(self) -> str:
        return (
            f"PoissonLattice(shape={self.shape}, permittivity={self.permittivity}, "
            f"dx={self.dx})"
        )

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    @property
    def shape(self) -> tuple[int, int, int]:
        """Grid dimensions as (x_range, y_range, z_range)."""
        return (self.x_range, self.y_range, self.z_range)

    @property
    def size(self) -> int:
        return self.potential.size

    @property
    def grid_shape(self) -> tuple[int, int, int]:
        """Shape of the 3D views, (z_range, y_range, x_range)."""
        return (self.z_range, self.y_range, self.x_range)

    @property
    def potential_grid(self) -> np.ndarray:
        """Writable (z, y, x) view of the potential."""
        return self.potential.reshape(self.grid_shape)

    @property
    def charge_grid(self) -> np.ndarray:
        """Writable (z, y, x) view of the charge density."""
        return self.charge_density.reshape(self.grid_shape)

    @property
    def centre(self) -> tuple[int, int, int]:
        """Geometric centre, truncated to integer coordinates."""
        return (self.x_range // 2, self.y_range // 2, self.z_range // 2)

    @property
    def source_coefficient(self) -> float:
        """dx^2 / permittivity, the weight of the charge density in the stencil."""
        return self.dx * self.dx / self.permittivity

    def matches(self, other: PoissonLattice) -> bool:
        """True if ``other`` has the same dimensions and physical constants."""
        return (
            self.shape == other.shape
            and self.permittivity == other.permittivity
            and self.dx == other.dx
        )

    def flat_index(self, i: int, j: int, k: int) -> int:
        """Position of cell (i, j, k) in the flat arrays."""
        self._check_index(i, j, k)
        return i + j * self.x_range + k * self.x_range * self.y_range

    def is_boundary(self, i: int, j: int, k: int) -> bool:
        """True if (i, j, k) lies on the outermost shell."""
        self._check_index(i, j, k)
        return (
            i == 0 or i == self.x_range - 1
            or j == 0 or j == self.y_range - 1
            or k == 0 or k == self.z_range - 1
        )

    def interior_mask(self) -> np.ndarray:
        """Boolean (z, y, x) array, True on interior cells."""
        mask = np.zeros(self.grid_shape, dtype=bool)
        mask[1:-1, 1:-1, 1:-1] = True
        return mask

    def _check_index(self, i: int, j: int, k: int) -> None:
        for value in (i, j, k):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise LatticeIndexError(f"cell indices must be integers, got ({i!r}, {j!r}, {k!r})")
        # Negative indices would silently wrap in numpy
        if not (0 <= i < self.x_range and 0 <= j < self.y_range and 0 <= k < self.z_range):
            raise LatticeIndexError(
                f"cell ({i}, {j}, {k}) outside lattice of shape {self.shape}"
            )

    def _check_interior(self, i: int, j: int, k: int) -> None:
        self._check_index(i, j, k)
        if not (
            0 < i < self.x_range - 1
            and 0 < j < self.y_range - 1
            and 0 < k < self.z_range - 1
        ):
            raise LatticeIndexError(
                f"cell ({i}, {j}, {k}) is not an interior cell of lattice of shape {self.shape}"
            )

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def at(self, i: int, j: int, k: int) -> float:
        """Potential at cell (i, j, k)."""
        return float(self.potential[self.flat_index(i, j, k)])

    def __getitem__(self, index: tuple[int, int, int]) -> float:
        i, j, k = index
        return self.at(i, j, k)

    def __setitem__(self, index: tuple[int, int, int], value: float) -> None:
        i, j, k = index
        self.potential[self.flat_index(i, j, k)] = value

    def get_charge_density(self, i: int, j: int, k: int) -> float:
        return float(self.charge_density[self.flat_index(i, j, k)])

    def set_charge_density(self, i: int, j: int, k: int, value: float) -> None:
        self.charge_density[self.flat_index(i, j, k)] = value

    # ------------------------------------------------------------------
    # Set-up
    # ------------------------------------------------------------------

    def initialise(self, initial_value: float, noise: float, rng: UniformSource) -> None:
        """
        Fill interior cells with ``initial_value`` plus uniform noise in [-noise, noise].

        One sample is drawn per interior cell, k outermost and i innermost.
        Boundary cells are left at zero, which fixes the Dirichlet condition
        for the whole run.
        """
        interior = self.potential_grid[1:-1, 1:-1, 1:-1]
        if interior.size == 0:
            return
        interior[...] = initial_value + rng.uniform(-noise, noise, size=interior.shape)

    def clear_charge_density(self) -> None:
        self.charge_density.fill(0.0)

    def set_point_charge(self, charge: float = defaults.DEFAULT_POINT_CHARGE) -> None:
        """Place a single charge at the (integer-truncated) centre."""
        self.set_charge_density(*self.centre, charge)

    def set_wire_charge(self, density: float = defaults.DEFAULT_WIRE_DENSITY) -> None:
        """Place a line source parallel to z through the centre, interior cells only."""
        ci, cj, _ = self.centre
        self._check_index(ci, cj, 0)
        self.charge_grid[1:-1, cj, ci] = density

    def copy(self) -> PoissonLattice:
        """Deep copy with independent buffers."""
        other = PoissonLattice(self.x_range, self.y_range, self.z_range, self.permittivity, self.dx)
        np.copyto(other.potential, self.potential)
        np.copyto(other.charge_density, self.charge_density)
        return other

    # ------------------------------------------------------------------
    # Stencil and derived fields
    # ------------------------------------------------------------------

    def next_value_at(self, i: int, j: int, k: int) -> float:
        """
        Six-neighbour average plus source term at an interior cell.

        (phi(i+1) + phi(i-1) + phi(j+1) + phi(j-1) + phi(k+1) + phi(k-1)
         + dx^2/permittivity * rho) / 6
        """
        self._check_interior(i, j, k)
        phi = self.potential_grid
        total = (
            phi[k, j, i + 1] + phi[k, j, i - 1]
            + phi[k, j + 1, i] + phi[k, j - 1, i]
            + phi[k + 1, j, i] + phi[k - 1, j, i]
            + self.source_coefficient * self.charge_grid[k, j, i]
        )
        return float(total / 6.0)

    def electric_field(self, i: int, j: int, k: int) -> np.ndarray:
        """E = -grad(phi) by central differences; zero on boundary cells."""
        if self.is_boundary(i, j, k):
            return np.zeros(3, dtype=PRECISION)
        phi = self.potential_grid
        scale = -1.0 / (2.0 * self.dx)
        return np.array([
            scale * (phi[k, j, i + 1] - phi[k, j, i - 1]),
            scale * (phi[k, j + 1, i] - phi[k, j - 1, i]),
            scale * (phi[k + 1, j, i] - phi[k - 1, j, i]),
        ], dtype=PRECISION)

    def magnetic_field(self, i: int, j: int, k: int) -> np.ndarray:
        """B = curl(A) for A = (0, 0, phi), i.e. (dphi/dy, -dphi/dx, 0); zero on boundary cells."""
        if self.is_boundary(i, j, k):
            return np.zeros(3, dtype=PRECISION)
        phi = self.potential_grid
        scale = 1.0 / (2.0 * self.dx)
        return np.array([
            scale * (phi[k, j + 1, i] - phi[k, j - 1, i]),
            -scale * (phi[k, j, i + 1] - phi[k, j, i - 1]),
            0.0,
        ], dtype=PRECISION)

    def electric_field_grid(self) -> np.ndarray:
        """
        Electric field on every cell as a (3, z, y, x) array.

        Component 0 is E_x. The boundary shell is zero by convention.
        """
        phi = self.potential_grid
        field = np.zeros((3,) + self.grid_shape, dtype=PRECISION)
        scale = -1.0 / (2.0 * self.dx)
        inner = (slice(1, -1), slice(1, -1), slice(1, -1))
        field[(0,) + inner] = scale * (phi[1:-1, 1:-1, 2:] - phi[1:-1, 1:-1, :-2])
        field[(1,) + inner] = scale * (phi[1:-1, 2:, 1:-1] - phi[1:-1, :-2, 1:-1])
        field[(2,) + inner] = scale * (phi[2:, 1:-1, 1:-1] - phi[:-2, 1:-1, 1:-1])
        return field

    def magnetic_field_grid(self) -> np.ndarray:
        """Magnetic field on every cell as a (3, z, y, x) array; B_z is always zero."""
        phi = self.potential_grid
        field = np.zeros((3,) + self.grid_shape, dtype=PRECISION)
        scale = 1.0 / (2.0 * self.dx)
        inner = (slice(1, -1), slice(1, -1), slice(1, -1))
        field[(0,) + inner] = scale * (phi[1:-1, 2:, 1:-1] - phi[1:-1, :-2, 1:-1])
        field[(1,) + inner] = -scale * (phi[1:-1, 1:-1, 2:] - phi[1:-1, 1:-1, :-2])
        return field

    def residual(self) -> np.ndarray:
        """
        Discrete residual laplacian(phi) + rho/permittivity as a (z, y, x) array.

        Zero on the boundary shell. A converged solution has a residual close
        to zero everywhere in the interior.
        """
        phi = self.potential_grid
        lap = convolve(phi, _LAPLACIAN_KERNEL, mode="constant", cval=0.0) / (self.dx * self.dx)
        res = lap + self.charge_grid / self.permittivity
        res[~self.interior_mask()] = 0.0
        return res
