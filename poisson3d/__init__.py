"""
Finite-difference relaxation solver for the 3D Poisson equation.
"""

from .errors import LatticeIndexError, LatticeShapeError, ParameterError, Poisson3DError
from .lattice import PoissonLattice
from .relaxation import gauss_seidel_update, jacobi_update, lattice_difference, sor_update
from .solver import build_lattice, relax, run
from .types import Problem, RelaxationResult, RunParameters, SolutionMethod

__all__ = [
    'PoissonLattice',
    'RunParameters',
    'RelaxationResult',
    'SolutionMethod',
    'Problem',
    'jacobi_update',
    'gauss_seidel_update',
    'sor_update',
    'lattice_difference',
    'relax',
    'run',
    'build_lattice',
    'Poisson3DError',
    'ParameterError',
    'LatticeShapeError',
    'LatticeIndexError',
]
