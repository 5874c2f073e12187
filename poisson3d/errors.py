"""Lattice and solver errors."""


class Poisson3DError(Exception):
    """Base class for poisson3d errors."""
    pass


class ParameterError(Poisson3DError, ValueError):
    """Run parameter outside its allowed range."""
    pass


class LatticeShapeError(Poisson3DError, ValueError):
    """Invalid lattice dimensions, or two lattices that do not match."""
    pass


class LatticeIndexError(Poisson3DError, IndexError):
    """Coordinate outside the lattice."""
    pass
