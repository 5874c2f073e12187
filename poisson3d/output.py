"""Text output for runs - parameter tables, field dumps and run statistics.

Field dumps use gnuplot's block layout: one line per cell with k outermost
and i innermost, a blank line after every row of constant (j, k) and a
second blank line after every plane of constant k.

Run directory layout (``save_run``):
    <output>/
    ├── input.txt            # format_parameters()
    ├── poissonOutput.dat    # write_field()
    └── results.txt          # format_results()
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np

from poisson3d import defaults
from poisson3d.lattice import PoissonLattice
from poisson3d.types import Problem, RelaxationResult, RunParameters, SolutionMethod

INDEX_COLUMNS: tuple[str, ...] = ("i", "j", "k")
FIELD_COLUMNS: tuple[str, ...] = ("r", "phi", "ex", "ey", "ez", "e_mag")
MAGNETIC_COLUMNS: tuple[str, ...] = ("bx", "by", "bz")

_FLOAT_FMT = "%.10g"


def _row(label: str, value: object) -> str:
    if isinstance(value, float):
        value = f"{value:g}"
    return f"{label:<{defaults.OUTPUT_COLUMN_WIDTH}}{value}"


def format_parameters(params: RunParameters) -> str:
    """Two-column table of the run parameters, one parameter per line."""
    lines = ["Input-Parameters...", _row("Solution-method: ", params.method.label)]
    if params.method is SolutionMethod.SOR:
        lines.append(_row("SOR-parameter: ", params.sor_parameter))
    lines.extend([
        _row("Problem: ", params.problem.label),
        _row("Spatial-discretisation: ", params.space_step),
        _row("Permittivity: ", params.permittivity),
        _row("Initial-value: ", params.initial_value),
        _row("Initial-noise: ", params.noise),
        _row("Convergence-precision: ", params.precision),
        _row("Domain-x-range: ", params.x_range),
        _row("Domain-y-range: ", params.y_range),
        _row("Domain-z-range: ", params.z_range),
        _row("Output-directory: ", params.output_name),
    ])
    if params.seed is not None:
        lines.append(_row("Random-seed: ", params.seed))
    if params.max_iterations is not None:
        lines.append(_row("Maximum-iterations: ", params.max_iterations))
    return "\n".join(lines) + "\n"


def format_results(result: RelaxationResult) -> str:
    """Iteration count, final convergence measure and runtime of a run."""
    lines = [
        _row("Number-of-iterations-until-convergence: ", result.iterations),
        _row("Converged: ", "yes" if result.converged else "no"),
        _row("Final-convergence-measure: ", float(result.convergence)),
        _row("Time-taken-to-execute(s): ", float(result.runtime)),
    ]
    return "\n".join(lines) + "\n"


def field_table(lattice: PoissonLattice, include_magnetic: bool = False) -> np.ndarray:
    """
    Per-cell record of coordinates, radius, potential and field.

    Records are ordered like the flat lattice arrays (k outermost, i
    innermost). ``r`` is the distance to the integer-truncated centre.
    Boundary cells report zero field vectors.

    Args:
        lattice: Lattice to read from
        include_magnetic: Also add the bx, by, bz columns

    Returns:
        Structured array with fields i, j, k, r, phi, ex, ey, ez, e_mag
        (and bx, by, bz)
    """
    k, j, i = np.indices(lattice.grid_shape)
    ci, cj, ck = lattice.centre

    names = FIELD_COLUMNS + (MAGNETIC_COLUMNS if include_magnetic else ())
    dtype = [(name, np.int64) for name in INDEX_COLUMNS] + [(name, np.float64) for name in names]
    table = np.empty(lattice.size, dtype=dtype)

    table["i"] = i.ravel()
    table["j"] = j.ravel()
    table["k"] = k.ravel()
    table["r"] = np.sqrt((i - ci) ** 2 + (j - cj) ** 2 + (k - ck) ** 2).ravel()
    table["phi"] = lattice.potential

    efield = lattice.electric_field_grid()
    table["ex"] = efield[0].ravel()
    table["ey"] = efield[1].ravel()
    table["ez"] = efield[2].ravel()
    table["e_mag"] = np.sqrt(np.sum(efield ** 2, axis=0)).ravel()

    if include_magnetic:
        bfield = lattice.magnetic_field_grid()
        table["bx"] = bfield[0].ravel()
        table["by"] = bfield[1].ravel()
        table["bz"] = bfield[2].ravel()

    return table


def _write_blocks(stream: TextIO, lattice: PoissonLattice, columns: np.ndarray, n_index: int) -> None:
    fmt = ["%d"] * n_index + [_FLOAT_FMT] * (columns.shape[1] - n_index)
    row = lattice.x_range
    start = 0
    for _ in range(lattice.z_range):
        for _ in range(lattice.y_range):
            np.savetxt(stream, columns[start:start + row], fmt=fmt, delimiter=" ")
            stream.write("\n")
            start += row
        stream.write("\n")


def write_field(lattice: PoissonLattice, stream: TextIO, include_magnetic: bool = False) -> None:
    """Write ``i j k r phi ex ey ez |E|`` (then ``bx by bz``) for every cell."""
    table = field_table(lattice, include_magnetic)
    columns = np.column_stack([table[name].astype(np.float64) for name in table.dtype.names])
    _write_blocks(stream, lattice, columns, len(INDEX_COLUMNS))


def write_potential(lattice: PoissonLattice, stream: TextIO) -> None:
    """Write ``i j k phi`` for every cell."""
    k, j, i = np.indices(lattice.grid_shape)
    columns = np.column_stack([i.ravel(), j.ravel(), k.ravel(), lattice.potential]).astype(np.float64)
    _write_blocks(stream, lattice, columns, len(INDEX_COLUMNS))


def write_electric_field(lattice: PoissonLattice, stream: TextIO) -> None:
    """Write ``i j k ex ey ez`` for every cell."""
    k, j, i = np.indices(lattice.grid_shape)
    efield = lattice.electric_field_grid()
    columns = np.column_stack([
        i.ravel(), j.ravel(), k.ravel(),
        efield[0].ravel(), efield[1].ravel(), efield[2].ravel(),
    ]).astype(np.float64)
    _write_blocks(stream, lattice, columns, len(INDEX_COLUMNS))


def save_run(output_dir: str | Path, params: RunParameters, result: RelaxationResult) -> Path:
    """
    Write the parameter table, the field dump and the run statistics.

    Args:
        output_dir: Directory to write into; created if missing
        params: Parameters the run was started with
        result: Outcome of the run

    Returns:
        The output directory as a Path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    (output_dir / defaults.INPUT_FILENAME).write_text(format_parameters(params))

    include_magnetic = params.problem is Problem.MAGNETO
    with open(output_dir / defaults.FIELD_FILENAME, "w") as f:
        write_field(result.lattice, f, include_magnetic=include_magnetic)

    (output_dir / defaults.RESULTS_FILENAME).write_text(format_results(result))
    return output_dir
