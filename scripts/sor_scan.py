#!/usr/bin/env python3
"""Scan the SOR parameter and report how many sweeps each value needs to converge."""

import argparse
from pathlib import Path
import sys

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from poisson3d.solver import run
from poisson3d.types import RunParameters, SolutionMethod


def scan(omegas, size: int, precision: float, max_iterations: int | None, seed: int | None):
    rows = []
    for omega in omegas:
        params = RunParameters(
            method=SolutionMethod.SOR,
            sor_parameter=float(omega),
            x_range=size,
            y_range=size,
            z_range=size,
            precision=precision,
            seed=seed,
            max_iterations=max_iterations,
        )
        history = []
        result = run(params, callback=lambda iteration, change: history.append(change))
        rows.append((float(omega), result.iterations, result.converged, result.runtime, history))
        print(f"omega={omega:.4f} | iterations={result.iterations:6d} | "
              f"converged={'yes' if result.converged else 'no ':3s} | "
              f"first={history[0]:.3e} last={history[-1]:.3e} | time={result.runtime:7.3f}s")
    return rows


def write_history(path: Path, rows) -> None:
    """One row per sweep, one column per omega; NaN pads runs that stopped earlier."""
    length = max(len(row[4]) for row in rows)
    table = np.full((length, len(rows)), np.nan)
    for column, row in enumerate(rows):
        table[:len(row[4]), column] = row[4]
    header = " ".join(f"omega={row[0]:.4f}" for row in rows)
    np.savetxt(path, table, fmt="%.10g", header=header)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--start", type=float, default=1.95)
    parser.add_argument("--stop", type=float, default=1.97)
    parser.add_argument("--steps", type=int, default=21)
    parser.add_argument("--size", type=int, default=100, help="Cells per axis (cubic domain).")
    parser.add_argument("--precision", type=float, default=1e-3)
    parser.add_argument("--max-iterations", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--history", type=Path, default=None,
                        help="Write per-sweep convergence measures, one column per omega, to this file.")
    args = parser.parse_args()

    omegas = np.linspace(args.start, args.stop, args.steps)
    rows = scan(omegas, args.size, args.precision, args.max_iterations, args.seed)

    converged = [row for row in rows if row[2]]
    if converged:
        best = min(converged, key=lambda row: row[1])
        print(f"\nFewest sweeps: omega={best[0]:.4f} ({best[1]} iterations)")

    if args.history is not None:
        write_history(args.history, rows)
        print(f"Convergence history written to {args.history}")


if __name__ == "__main__":
    main()
