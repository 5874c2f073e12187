"""Command-line front end: parse options, run, save the output directory."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from poisson3d import defaults
from poisson3d.errors import ParameterError
from poisson3d.output import format_parameters, format_results, save_run
from poisson3d.solver import run
from poisson3d.types import Problem, RunParameters, SolutionMethod


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poisson3d",
        description="Relax the 3D Poisson equation for a point charge or current wire.",
    )
    parser.add_argument("-x", "--spatial-discretisation", dest="space_step", type=float,
                        default=defaults.DEFAULT_SPACE_STEP, help="Spatial discretisation step size.")
    parser.add_argument("-p", "--permittivity", type=float, default=defaults.DEFAULT_PERMITTIVITY,
                        help="Permittivity in the Poisson equation.")
    parser.add_argument("-v", "--initial-value", type=float, default=defaults.DEFAULT_INITIAL_VALUE,
                        help="Initial value of the potential away from the boundary.")
    parser.add_argument("-n", "--noise", type=float, default=defaults.DEFAULT_NOISE,
                        help="Maximum magnitude of initial noise.")
    parser.add_argument("-d", "--precision", type=float, default=defaults.DEFAULT_PRECISION,
                        help="Precision of convergence.")
    parser.add_argument("-r", "--x-range", type=int, default=defaults.DEFAULT_X_RANGE,
                        help="Number of x points in the simulation domain.")
    parser.add_argument("-c", "--y-range", type=int, default=defaults.DEFAULT_Y_RANGE,
                        help="Number of y points in the simulation domain.")
    parser.add_argument("-t", "--z-range", type=int, default=defaults.DEFAULT_Z_RANGE,
                        help="Number of z points in the simulation domain.")
    parser.add_argument("-o", "--output", default=None,
                        help="Output directory (default: a time stamp).")
    parser.add_argument("-w", "--sor-parameter", type=float, default=defaults.DEFAULT_SOR_PARAMETER,
                        help="Parameter for the successive over-relaxation algorithm.")
    parser.add_argument("--Jacobi", dest="jacobi", action="store_true",
                        help="Use the Jacobi relaxation method (default).")
    parser.add_argument("--Gauss-Seidel", dest="gauss_seidel", action="store_true",
                        help="Use the Gauss-Seidel method (takes precedence over Jacobi).")
    parser.add_argument("--SOR", dest="sor", action="store_true",
                        help="Use successive over-relaxation (takes precedence over both).")
    parser.add_argument("--magneto", action="store_true",
                        help="Solve for a current wire along z instead of a point charge.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the initial noise.")
    parser.add_argument("--max-iterations", type=int, default=defaults.DEFAULT_MAX_ITERATIONS,
                        help="Stop after this many sweeps even if not converged.")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def params_from_args(args: argparse.Namespace) -> RunParameters:
    if args.sor:
        method = SolutionMethod.SOR
    elif args.gauss_seidel:
        method = SolutionMethod.GAUSS_SEIDEL
    else:
        method = SolutionMethod.JACOBI

    params = RunParameters(
        method=method,
        problem=Problem.MAGNETO if args.magneto else Problem.ELECTRO,
        space_step=args.space_step,
        permittivity=args.permittivity,
        initial_value=args.initial_value,
        noise=args.noise,
        precision=args.precision,
        x_range=args.x_range,
        y_range=args.y_range,
        z_range=args.z_range,
        sor_parameter=args.sor_parameter,
        seed=args.seed,
        max_iterations=args.max_iterations,
    )
    if args.output is not None:
        params.output_name = args.output
    return params


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    params = params_from_args(args)
    try:
        params.validate()
    except ParameterError as e:
        parser.error(str(e))

    print(format_parameters(params))
    result = run(params)
    save_run(params.output_name, params, result)
    print(format_results(result))

    return 0 if result.converged else 1
