"""Tests for the Jacobi, Gauss-Seidel and SOR sweeps."""

import numpy as np
import pytest

from poisson3d.errors import LatticeShapeError
from poisson3d.lattice import PoissonLattice
from poisson3d.relaxation import gauss_seidel_update, jacobi_update, lattice_difference, sor_update


def reference_sor_sweep(lattice, omega):
    """Slow in-place sweep in i, j, k order using the lattice's own stencil."""
    total = 0.0
    for i in range(1, lattice.x_range - 1):
        for j in range(1, lattice.y_range - 1):
            for k in range(1, lattice.z_range - 1):
                old = lattice.at(i, j, k)
                new = (1.0 - omega) * old + omega * lattice.next_value_at(i, j, k)
                lattice[i, j, k] = new
                total += abs(new - old)
    return total


def sweep(lattice, method, omega=1.5):
    if method == "jacobi":
        return jacobi_update(lattice, lattice.copy())
    if method == "gauss-seidel":
        return gauss_seidel_update(lattice)
    return sor_update(lattice, omega)


@pytest.fixture
def charged_lattice(noisy_lattice):
    noisy_lattice.set_point_charge(3.0)
    return noisy_lattice


class TestJacobi:
    def test_sweep_is_neighbour_mean_without_charge(self, noisy_lattice):
        """With no charge the new interior value is the mean of the six neighbours."""
        updated = noisy_lattice.copy()
        jacobi_update(noisy_lattice, updated)

        phi = noisy_lattice.potential_grid
        expected = (
            phi[1:-1, 1:-1, 2:] + phi[1:-1, 1:-1, :-2]
            + phi[1:-1, 2:, 1:-1] + phi[1:-1, :-2, 1:-1]
            + phi[2:, 1:-1, 1:-1] + phi[:-2, 1:-1, 1:-1]
        ) / 6.0
        np.testing.assert_allclose(updated.potential_grid[1:-1, 1:-1, 1:-1], expected, rtol=1e-14)

    def test_source_lattice_is_untouched(self, charged_lattice):
        before = charged_lattice.potential.copy()
        jacobi_update(charged_lattice, charged_lattice.copy())
        np.testing.assert_array_equal(charged_lattice.potential, before)

    def test_uses_stencil_of_current_lattice(self, charged_lattice):
        updated = PoissonLattice(*charged_lattice.shape)
        jacobi_update(charged_lattice, updated)
        for i, j, k in [(1, 1, 1), (3, 2, 3), (4, 3, 5)]:
            assert updated.at(i, j, k) == pytest.approx(charged_lattice.next_value_at(i, j, k))

    def test_measure_is_l1_change(self, charged_lattice):
        updated = charged_lattice.copy()
        measure = jacobi_update(charged_lattice, updated)
        assert measure == pytest.approx(lattice_difference(charged_lattice, updated))

    def test_rejects_mismatched_lattices(self, noisy_lattice):
        with pytest.raises(LatticeShapeError):
            jacobi_update(noisy_lattice, PoissonLattice(6, 5, 6))
        with pytest.raises(LatticeShapeError):
            jacobi_update(noisy_lattice, PoissonLattice(6, 5, 7, permittivity=3.0))

    def test_rejects_single_buffer(self, noisy_lattice):
        with pytest.raises(LatticeShapeError):
            jacobi_update(noisy_lattice, noisy_lattice)


class TestInPlaceSweeps:
    def test_gauss_seidel_matches_reference_order(self, charged_lattice):
        reference = charged_lattice.copy()
        expected_measure = reference_sor_sweep(reference, 1.0)
        measure = gauss_seidel_update(charged_lattice)
        np.testing.assert_allclose(charged_lattice.potential, reference.potential, rtol=1e-13, atol=1e-15)
        assert measure == pytest.approx(expected_measure)

    def test_gauss_seidel_differs_from_jacobi(self, charged_lattice):
        jacobi = charged_lattice.copy()
        jacobi_update(charged_lattice, jacobi)
        gauss_seidel_update(charged_lattice)
        assert lattice_difference(charged_lattice, jacobi) > 0.0

    @pytest.mark.parametrize("omega", [0.5, 1.5, 1.9])
    def test_sor_matches_reference_order(self, charged_lattice, omega):
        reference = charged_lattice.copy()
        expected_measure = reference_sor_sweep(reference, omega)
        measure = sor_update(charged_lattice, omega)
        np.testing.assert_allclose(charged_lattice.potential, reference.potential, rtol=1e-13, atol=1e-15)
        assert measure == pytest.approx(expected_measure)

    def test_sor_with_unit_omega_is_gauss_seidel(self, charged_lattice):
        gs = charged_lattice.copy()
        for _ in range(5):
            gs_measure = gauss_seidel_update(gs)
            sor_measure = sor_update(charged_lattice, 1.0)
            assert sor_measure == gs_measure
        np.testing.assert_array_equal(charged_lattice.potential, gs.potential)

    def test_sor_measure_uses_relaxed_change(self, charged_lattice):
        before = charged_lattice.copy()
        unrelaxed = charged_lattice.copy()
        gs_measure = gauss_seidel_update(unrelaxed)

        measure = sor_update(charged_lattice, 0.25)
        assert measure == pytest.approx(lattice_difference(before, charged_lattice))
        assert measure < gs_measure


class TestCommonContract:
    @pytest.mark.parametrize("method", ["jacobi", "gauss-seidel", "sor"])
    def test_measure_is_non_negative(self, charged_lattice, method):
        assert sweep(charged_lattice, method) >= 0.0

    @pytest.mark.parametrize("method", ["jacobi", "gauss-seidel", "sor"])
    def test_measure_is_zero_at_fixed_point(self, method):
        lattice = PoissonLattice(5, 5, 5)
        assert sweep(lattice, method) == 0.0
        assert not lattice.potential.any()

    @pytest.mark.parametrize("method", ["jacobi", "gauss-seidel", "sor"])
    def test_boundary_never_written(self, charged_lattice, method):
        """Boundary cells keep their values over many sweeps, even when non-zero."""
        boundary = ~charged_lattice.interior_mask()
        charged_lattice.potential_grid[boundary] = np.linspace(-1.0, 1.0, boundary.sum())
        before = charged_lattice.potential_grid[boundary].copy()

        current, updated = charged_lattice, charged_lattice.copy()
        for _ in range(25):
            if method == "jacobi":
                jacobi_update(current, updated)
                current, updated = updated, current
            else:
                sweep(current, method)
            np.testing.assert_array_equal(current.potential_grid[boundary], before)
        np.testing.assert_array_equal(updated.potential_grid[boundary], before)


def test_lattice_difference_ignores_boundary(noisy_lattice):
    other = noisy_lattice.copy()
    other[0, 0, 0] = 10.0
    assert lattice_difference(noisy_lattice, other) == 0.0
    other[1, 1, 1] += 0.5
    assert lattice_difference(noisy_lattice, other) == pytest.approx(0.5)


def test_lattice_difference_rejects_shape_mismatch(noisy_lattice):
    with pytest.raises(LatticeShapeError):
        lattice_difference(noisy_lattice, PoissonLattice(3, 3, 3))
