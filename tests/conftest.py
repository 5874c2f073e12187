"""Test configuration for poisson3d."""

import numpy as np
import pytest

from poisson3d.lattice import PoissonLattice
from poisson3d.types import RunParameters, SolutionMethod


@pytest.fixture
def rng():
    """Seeded generator so noisy lattices are reproducible."""
    return np.random.default_rng(20240611)


@pytest.fixture
def noisy_lattice(rng):
    """Small non-cubic lattice with random interior values and no charge."""
    lattice = PoissonLattice(6, 5, 7, permittivity=1.0, dx=1.0)
    lattice.initialise(0.5, 0.25, rng)
    return lattice


@pytest.fixture
def point_charge_params():
    """5x5x5 grid, zero initial state, unit charge at (2, 2, 2)."""
    return RunParameters(
        method=SolutionMethod.JACOBI,
        space_step=1.0,
        permittivity=1.0,
        initial_value=0.0,
        noise=0.0,
        precision=1e-6,
        x_range=5,
        y_range=5,
        z_range=5,
        output_name="unused",
        seed=0,
    )
