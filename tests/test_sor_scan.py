"""Tests for the SOR parameter scan script."""

import importlib.util
from pathlib import Path

import numpy as np
import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "sor_scan.py"


@pytest.fixture(scope="module")
def sor_scan():
    spec = importlib.util.spec_from_file_location("sor_scan", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_scan_records_history_for_every_sweep(sor_scan, capsys):
    rows = sor_scan.scan([1.0, 1.5], size=5, precision=1e-6, max_iterations=None, seed=0)

    assert [row[0] for row in rows] == [1.0, 1.5]
    for omega, iterations, converged, _, history in rows:
        assert converged
        assert len(history) == iterations
        assert history[-1] < 1e-6 <= history[-2]
    assert "omega=1.5000" in capsys.readouterr().out


def test_write_history_pads_shorter_runs(sor_scan, tmp_path):
    rows = [
        (1.0, 3, True, 0.0, [3.0, 2.0, 1.0]),
        (1.5, 2, True, 0.0, [4.0, 0.5]),
    ]
    path = tmp_path / "history.txt"
    sor_scan.write_history(path, rows)

    table = np.loadtxt(path)
    assert table.shape == (3, 2)
    np.testing.assert_array_equal(table[:, 0], [3.0, 2.0, 1.0])
    np.testing.assert_array_equal(table[:2, 1], [4.0, 0.5])
    assert np.isnan(table[2, 1])
    assert path.read_text().startswith("# omega=1.0000 omega=1.5000")
