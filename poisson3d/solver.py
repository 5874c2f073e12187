"""
Driving loop: sweep a lattice until the convergence measure drops below the
requested precision.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from poisson3d import defaults
from poisson3d.errors import ParameterError
from poisson3d.lattice import PoissonLattice, UniformSource
from poisson3d.relaxation import gauss_seidel_update, jacobi_update, sor_update
from poisson3d.types import Problem, RelaxationResult, RunParameters, SolutionMethod

logger = logging.getLogger(__name__)


def relax(
    lattice: PoissonLattice,
    method: SolutionMethod | str = SolutionMethod.JACOBI,
    precision: float = defaults.DEFAULT_PRECISION,
    omega: float = defaults.DEFAULT_SOR_PARAMETER,
    max_iterations: Optional[int] = defaults.DEFAULT_MAX_ITERATIONS,
    progress_interval: int = defaults.DEFAULT_PROGRESS_INTERVAL,
    callback: Optional[Callable[[int, float], None]] = None,
    record_history: bool = False,
) -> RelaxationResult:
    """
    Relax ``lattice`` in place until a sweep changes it by less than ``precision``.

    Args:
        lattice: Initialised lattice; holds the final state on return
        method: Update rule (Jacobi, Gauss-Seidel or SOR)
        precision: Stop once the L1 change of a sweep is strictly below this
        omega: SOR relaxation factor, must be finite and positive for SOR;
            ignored by the other methods
        max_iterations: Optional cap on the number of sweeps. None iterates
            until converged, which never happens for a divergent omega.
        progress_interval: Log iteration and convergence every this many
            sweeps (0 disables)
        callback: Called as ``callback(iteration, convergence)`` after every sweep
        record_history: Keep every sweep's convergence measure in the result

    Returns:
        RelaxationResult; ``converged`` is False only if the cap was hit
    """
    method = SolutionMethod(method)
    if not precision > 0.0:
        raise ParameterError(f"precision must be positive, got {precision!r}")
    if max_iterations is not None and max_iterations < 1:
        raise ParameterError(f"max_iterations must be at least 1, got {max_iterations}")
    if method is SolutionMethod.SOR and not (math.isfinite(omega) and omega > 0.0):
        raise ParameterError(f"SOR parameter must be a positive number, got {omega!r}")

    current = lattice
    # Jacobi reads one buffer and writes the other, swapping after each sweep
    updated = lattice.copy() if method is SolutionMethod.JACOBI else None

    history: list[float] = []
    iterations = 0
    converged = False
    start = time.perf_counter()

    while True:
        iterations += 1

        if method is SolutionMethod.JACOBI:
            convergence = jacobi_update(current, updated)
            current, updated = updated, current
        elif method is SolutionMethod.GAUSS_SEIDEL:
            convergence = gauss_seidel_update(current)
        else:
            convergence = sor_update(current, omega)

        if record_history:
            history.append(convergence)
        if callback is not None:
            callback(iterations, convergence)
        if progress_interval and iterations % progress_interval == 0:
            logger.info("%d %g", iterations, convergence)

        if convergence < precision:
            converged = True
            break
        if max_iterations is not None and iterations >= max_iterations:
            logger.warning(
                "%s stopped after %d iterations without converging (last change %g, precision %g)",
                method.label, iterations, convergence, precision,
            )
            break

    runtime = time.perf_counter() - start

    if current is not lattice:
        np.copyto(lattice.potential, current.potential)

    logger.debug(
        "%s finished: iterations=%d convergence=%g converged=%s runtime=%.3fs",
        method.label, iterations, convergence, converged, runtime,
    )

    return RelaxationResult(
        lattice=lattice,
        iterations=iterations,
        convergence=convergence,
        converged=converged,
        method=method,
        omega=float(omega),
        runtime=runtime,
        history=history,
    )


def build_lattice(params: RunParameters, rng: Optional[UniformSource] = None) -> PoissonLattice:
    """
    Create and initialise the lattice described by ``params``.

    The potential gets ``initial_value`` plus uniform noise on the interior;
    the source is a point charge at the centre for ELECTRO, a wire along z
    through the centre for MAGNETO.
    """
    params.validate()
    if rng is None:
        rng = np.random.default_rng(params.seed)

    lattice = PoissonLattice(
        params.x_range,
        params.y_range,
        params.z_range,
        params.permittivity,
        params.space_step,
    )
    lattice.initialise(params.initial_value, params.noise, rng)

    if params.problem is Problem.MAGNETO:
        lattice.set_wire_charge()
    else:
        lattice.set_point_charge()
    return lattice


def run(
    params: RunParameters,
    rng: Optional[UniformSource] = None,
    callback: Optional[Callable[[int, float], None]] = None,
    record_history: bool = False,
) -> RelaxationResult:
    """Build the lattice for ``params`` and relax it with the configured method."""
    lattice = build_lattice(params, rng)
    logger.info(
        "Relaxing %dx%dx%d lattice with %s (%s)",
        params.x_range, params.y_range, params.z_range,
        params.method.label, params.problem.label,
    )
    return relax(
        lattice,
        method=params.method,
        precision=params.precision,
        omega=params.sor_parameter,
        max_iterations=params.max_iterations,
        callback=callback,
        record_history=record_history,
    )
