"""Tests for the command-line front end."""

import pytest

from poisson3d import defaults
from poisson3d.cli import build_parser, main, params_from_args
from poisson3d.types import Problem, SolutionMethod

SMALL_GRID = ["-r", "5", "-c", "5", "-t", "5", "-d", "1e-6", "--seed", "1"]


def parse(*argv):
    return params_from_args(build_parser().parse_args(list(argv)))


class TestParams:
    def test_defaults(self):
        params = parse()
        assert params.method is SolutionMethod.JACOBI
        assert params.problem is Problem.ELECTRO
        assert params.shape == (defaults.DEFAULT_X_RANGE, defaults.DEFAULT_Y_RANGE, defaults.DEFAULT_Z_RANGE)
        assert params.output_name

    @pytest.mark.parametrize("flags, method", [
        (["--Jacobi"], SolutionMethod.JACOBI),
        (["--Gauss-Seidel"], SolutionMethod.GAUSS_SEIDEL),
        (["--Jacobi", "--Gauss-Seidel"], SolutionMethod.GAUSS_SEIDEL),
        (["--SOR"], SolutionMethod.SOR),
        (["--Gauss-Seidel", "--SOR"], SolutionMethod.SOR),
    ])
    def test_method_precedence(self, flags, method):
        assert parse(*flags).method is method

    def test_short_options(self):
        params = parse("-x", "0.5", "-p", "2", "-v", "0.1", "-n", "0.01", "-d", "1e-4",
                       "-r", "7", "-c", "8", "-t", "9", "-o", "out", "-w", "1.8", "--magneto")
        assert params.space_step == 0.5
        assert params.permittivity == 2.0
        assert params.initial_value == 0.1
        assert params.noise == 0.01
        assert params.precision == 1e-4
        assert params.shape == (7, 8, 9)
        assert params.output_name == "out"
        assert params.sor_parameter == 1.8
        assert params.problem is Problem.MAGNETO


def test_main_runs_and_saves(tmp_path, capsys):
    out = tmp_path / "run"
    status = main(SMALL_GRID + ["--Gauss-Seidel", "-o", str(out), "--log-level", "WARNING"])

    assert status == 0
    printed = capsys.readouterr().out
    assert "Input-Parameters..." in printed
    assert "Gauss-Seidel" in printed
    assert "Number-of-iterations-until-convergence" in printed
    for name in (defaults.INPUT_FILENAME, defaults.FIELD_FILENAME, defaults.RESULTS_FILENAME):
        assert (out / name).exists()


def test_main_reports_iteration_cap(tmp_path):
    status = main(SMALL_GRID + ["--SOR", "-w", "2.5", "--max-iterations", "20",
                                "-o", str(tmp_path / "run"), "--log-level", "ERROR"])
    assert status == 1


@pytest.mark.parametrize("bad", [["-r", "2"], ["-d", "0"], ["-w", "0"], ["-n", "-1"]])
def test_main_rejects_invalid_parameters(tmp_path, bad):
    with pytest.raises(SystemExit) as excinfo:
        main(SMALL_GRID + bad + ["-o", str(tmp_path / "run")])
    assert excinfo.value.code == 2
    assert not (tmp_path / "run").exists()
