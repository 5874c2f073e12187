"""Core data types for poisson3d - run configuration and results."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np

from poisson3d import defaults
from poisson3d.errors import ParameterError

if TYPE_CHECKING:
    from poisson3d.lattice import PoissonLattice


class SolutionMethod(enum.Enum):
    """Relaxation algorithm used to converge the potential."""

    JACOBI = "jacobi"
    GAUSS_SEIDEL = "gauss-seidel"
    SOR = "sor"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


class Problem(enum.Enum):
    """Source configuration for the run.

    ELECTRO places a point charge at the centre and reads out the electric
    field. MAGNETO places a line source along z through the centre; the
    solved scalar is then the z component of the vector potential and the
    magnetic field is its 2D curl.
    """

    ELECTRO = "electro"
    MAGNETO = "magneto"

    @property
    def label(self) -> str:
        return _PROBLEM_LABELS[self]


_METHOD_LABELS = {
    SolutionMethod.JACOBI: "Jacobi",
    SolutionMethod.GAUSS_SEIDEL: "Gauss-Seidel",
    SolutionMethod.SOR: "SOR",
}

_PROBLEM_LABELS = {
    Problem.ELECTRO: "Point-charge",
    Problem.MAGNETO: "Current-wire",
}


def _timestamp() -> str:
    return datetime.now().strftime(defaults.TIMESTAMP_FORMAT)


@dataclass
class RunParameters:
    """Everything needed to set up and drive one relaxation run.

    The solver never mutates these; ``validate()`` is called once before a
    run starts.
    """

    method: SolutionMethod = SolutionMethod.JACOBI
    problem: Problem = Problem.ELECTRO
    space_step: float = defaults.DEFAULT_SPACE_STEP
    permittivity: float = defaults.DEFAULT_PERMITTIVITY
    initial_value: float = defaults.DEFAULT_INITIAL_VALUE
    noise: float = defaults.DEFAULT_NOISE
    precision: float = defaults.DEFAULT_PRECISION
    x_range: int = defaults.DEFAULT_X_RANGE
    y_range: int = defaults.DEFAULT_Y_RANGE
    z_range: int = defaults.DEFAULT_Z_RANGE
    output_name: str = field(default_factory=_timestamp)
    sor_parameter: float = defaults.DEFAULT_SOR_PARAMETER
    seed: int | None = None
    max_iterations: int | None = defaults.DEFAULT_MAX_ITERATIONS

    @property
    def shape(self) -> tuple[int, int, int]:
        """Grid dimensions as (x_range, y_range, z_range)."""
        return (self.x_range, self.y_range, self.z_range)

    def validate(self) -> None:
        """Raise ParameterError if the parameters cannot describe a run.

        SOR parameters outside (0, 2) are accepted: they are numerically
        valid, they just may not converge.
        """
        for name, value in zip(("x_range", "y_range", "z_range"), self.shape):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ParameterError(f"{name} must be an integer, got {value!r}")
            if value < defaults.MIN_RANGE:
                raise ParameterError(
                    f"{name} must be at least {defaults.MIN_RANGE} so the grid has an interior, got {value}"
                )
        for name in ("space_step", "permittivity", "precision"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ParameterError(f"{name} must be a positive number, got {value!r}")
        if not math.isfinite(self.noise) or self.noise < 0.0:
            raise ParameterError(f"noise must be a non-negative number, got {self.noise!r}")
        if not math.isfinite(self.initial_value):
            raise ParameterError(f"initial_value must be finite, got {self.initial_value!r}")
        if not math.isfinite(self.sor_parameter) or self.sor_parameter <= 0.0:
            raise ParameterError(f"sor_parameter must be a positive number, got {self.sor_parameter!r}")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ParameterError(f"max_iterations must be at least 1, got {self.max_iterations}")


@dataclass
class RelaxationResult:
    """Outcome of driving a lattice to convergence.

    Attributes:
        lattice: The lattice passed to relax, holding the final state (the
            Jacobi working copy is copied back into it)
        iterations: Number of full sweeps performed
        convergence: Convergence measure of the final sweep
        converged: False only when an iteration cap stopped the run
        method: Update rule used
        omega: Relaxation factor (only meaningful for SOR)
        runtime: Wall-clock seconds spent relaxing
        history: Per-sweep convergence measures, when recorded
    """

    lattice: PoissonLattice
    iterations: int
    convergence: float
    converged: bool
    method: SolutionMethod
    omega: float = 1.0
    runtime: float = 0.0
    history: list[float] = field(default_factory=list)
