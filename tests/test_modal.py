# tests/test_modal.py
"""
MODAL ANALYSIS TESTS
====================

The reference case is the uniform cantilever, whose first bending frequency
is known in closed form:

    f₁ = (β₁L)² / (2π) · sqrt(EI / (m̄·L⁴)),   β₁L = 1.875104,  m̄ = ρA

A 20-element Hermite mesh reproduces it to well under 0.1%.
"""

import numpy as np
import pytest
import scipy.sparse.linalg

from frame_engine import (
    AnalysisConfig,
    ConvergenceError,
    Element,
    Material,
    Node,
    StructuralModel,
    Supports,
    UnstableStructureError,
    analyze_modal,
)
from frame_engine.assembly import assemble_mass, assemble_stiffness, restrained_dofs
from frame_engine.kernel.modal import natural_frequencies

L = 3.0
E = 200e9
RHO = 7850.0
B, H = 0.2, 0.4
A = B * H
BETA1 = 1.8751040687


def cantilever_f1(I):
    return BETA1**2 / (2 * np.pi) * np.sqrt(E * I / (RHO * A * L**4))


CONFIG_2D = AnalysisConfig(dimension="2d", n_modes=5)


def test_first_frequency_matches_closed_form_2d(make_cantilever):
    modal = analyze_modal(make_cantilever(n_elements=20, L=L), CONFIG_2D)
    assert np.isclose(modal.modes[0].frequency, cantilever_f1(B * H**3 / 12), rtol=1e-3)


def test_first_frequency_lumped_mass(make_cantilever):
    config = AnalysisConfig(dimension="2d", n_modes=3, mass_formulation="lumped")
    modal = analyze_modal(make_cantilever(n_elements=20, L=L), config)
    assert np.isclose(modal.modes[0].frequency, cantilever_f1(B * H**3 / 12), rtol=1e-2)


def test_first_frequency_3d_is_weak_axis(make_cantilever):
    modal = analyze_modal(make_cantilever(n_elements=12, L=L), AnalysisConfig(n_modes=2))
    f_weak = cantilever_f1(H * B**3 / 12)
    f_strong = cantilever_f1(B * H**3 / 12)

    assert np.isclose(modal.modes[0].frequency, f_weak, rtol=1e-3)
    assert np.isclose(modal.modes[1].frequency, f_strong, rtol=1e-3)


def test_frequencies_strictly_ascending(make_cantilever):
    modal = analyze_modal(make_cantilever(n_elements=10, L=L), CONFIG_2D)
    freqs = np.array(modal.frequencies)

    assert np.all(np.diff(freqs) > 0)
    assert [m.mode for m in modal.modes] == [1, 2, 3, 4, 5]
    for m in modal.modes:
        assert np.isclose(m.period, 1.0 / m.frequency)
        assert np.isclose(m.angular_frequency, 2 * np.pi * m.frequency)


def test_requested_modes_count_and_vector_lengths(make_cantilever):
    model = make_cantilever(n_elements=10, L=L)
    modal = analyze_modal(model, CONFIG_2D)

    ndof = 3 * len(model.nodes)
    assert len(modal.mode_shapes) == 5
    for shape in modal.mode_shapes:
        assert len(shape.vector) == ndof
        assert len(shape.free_vector) == ndof - 3
        assert len(shape.nodes) == len(model.nodes)


def test_mode_shapes_zero_at_restrained_dofs(make_cantilever):
    model = make_cantilever(n_elements=10, L=L)
    modal = analyze_modal(model, AnalysisConfig(n_modes=4))

    for shape in modal.mode_shapes:
        base = shape.nodes[0]
        assert base.as_tuple() == (0.0,) * 6
        assert shape.vector[:6] == (0.0,) * 6


def test_mode_shapes_are_mass_normalized(make_cantilever):
    model = make_cantilever(n_elements=8, L=L)
    config = AnalysisConfig(dimension="2d")
    stiffness = assemble_stiffness(model, config)
    mass = assemble_mass(model, config)
    fixed = restrained_dofs(model, stiffness.dof, config)

    _, phi, free = natural_frequencies(stiffness.K, mass.M, fixed, n_modes=4)
    Mff = mass.M[np.ix_(free, free)]

    np.testing.assert_allclose(phi.T @ Mff @ phi, np.eye(4), atol=1e-8)
    for k in range(4):
        assert phi[np.argmax(np.abs(phi[:, k])), k] > 0


def test_arpack_matches_dense(make_cantilever):
    model = make_cantilever(n_elements=20, L=L)
    dense = analyze_modal(model, AnalysisConfig(dimension="2d", n_modes=3, eigen_solver="dense"))
    arpack = analyze_modal(model, AnalysisConfig(dimension="2d", n_modes=3, eigen_solver="arpack"))

    np.testing.assert_allclose(arpack.frequencies, dense.frequencies, rtol=1e-6)
    for a, d in zip(arpack.mode_shapes, dense.mode_shapes):
        np.testing.assert_allclose(a.vector, d.vector, atol=1e-6)


class TestConvergenceFailures:
    def test_too_many_modes_then_retry_with_fewer(self, make_cantilever):
        model = make_cantilever(n_elements=1, L=L)  # 3 free DOFs in 2D

        with pytest.raises(ConvergenceError) as excinfo:
            analyze_modal(model, AnalysisConfig(dimension="2d", n_modes=4))
        assert excinfo.value.requested == 4
        assert excinfo.value.kind == "convergence"

        modal = analyze_modal(model, AnalysisConfig(dimension="2d", n_modes=3))
        assert len(modal.modes) == 3

    def test_arpack_cannot_return_every_mode(self, make_cantilever):
        model = make_cantilever(n_elements=1, L=L)
        with pytest.raises(ConvergenceError):
            analyze_modal(model, AnalysisConfig(dimension="2d", n_modes=3, eigen_solver="arpack"))

    def test_arpack_iteration_budget(self, make_cantilever, monkeypatch):
        def no_convergence(*args, **kwargs):
            raise scipy.sparse.linalg.ArpackNoConvergence(
                "ARPACK error -1: No convergence", np.array([1.0]), np.ones((3, 1))
            )

        monkeypatch.setattr(scipy.sparse.linalg, "eigsh", no_convergence)
        config = AnalysisConfig(dimension="2d", n_modes=2, eigen_solver="arpack", max_iterations=5)

        with pytest.raises(ConvergenceError) as excinfo:
            analyze_modal(make_cantilever(n_elements=4, L=L), config)
        assert excinfo.value.converged == 1
        assert "5 iterations" in str(excinfo.value)

    def test_massless_structure(self, make_cantilever):
        massless = Material("steel", E=200e9, density=0.0)
        model = make_cantilever(n_elements=2, L=L, material=massless)
        with pytest.raises(ConvergenceError):
            analyze_modal(model, CONFIG_2D)


class TestUnstableStructures:
    """Rigid-body modes must not come back as zero frequencies."""

    @pytest.mark.parametrize("solver", ["dense", "arpack"])
    def test_free_floating_beam(self, steel, rect_section, solver):
        model = StructuralModel(
            nodes=[Node(k, 1.5 * k, 0.0) for k in range(4)],
            elements=[Element(k, k, k + 1, "steel", "R200x400") for k in range(3)],
            materials=[steel],
            sections=[rect_section],
        )
        config = AnalysisConfig(dimension="2d", n_modes=3, eigen_solver=solver)

        with pytest.raises(UnstableStructureError) as excinfo:
            analyze_modal(model, config)
        assert excinfo.value.kind == "unstable_structure"
        assert excinfo.value.dofs

    @pytest.mark.parametrize("solver", ["dense", "arpack"])
    def test_pinned_beam_with_free_torsion(self, steel, rect_section, solver):
        model = StructuralModel(
            nodes=[Node(k, 1.0 * k, 0.0, supports=Supports.pinned() if k in (0, 4) else None)
                   for k in range(5)],
            elements=[Element(k, k, k + 1, "steel", "R200x400") for k in range(4)],
            materials=[steel],
            sections=[rect_section],
        )
        config = AnalysisConfig(n_modes=3, eigen_solver=solver)

        with pytest.raises(UnstableStructureError):
            analyze_modal(model, config)

    def test_torsion_restraint_makes_it_stable(self, steel, rect_section):
        held = Supports(ux=True, uy=True, uz=True, rx=True)
        model = StructuralModel(
            nodes=[Node(k, 1.0 * k, 0.0, supports=held if k in (0, 4) else None) for k in range(5)],
            elements=[Element(k, k, k + 1, "steel", "R200x400") for k in range(4)],
            materials=[steel],
            sections=[rect_section],
        )
        modal = analyze_modal(model, AnalysisConfig(n_modes=3))

        freqs = np.array(modal.frequencies)
        assert np.all(freqs > 0)
        assert np.all(np.isfinite([m.period for m in modal.modes]))


def test_effective_mass_sums_to_unrestrained_mass(make_cantilever):
    model = make_cantilever(n_elements=6, L=L)
    config = AnalysisConfig(dimension="2d", n_modes=18)  # every free DOF
    modal = analyze_modal(model, config)

    mass = assemble_mass(model, config)
    free = np.array(modal.free_dofs)
    r = (free % 3 == 1).astype(float)
    expected = r @ mass.M[np.ix_(free, free)] @ r

    assert np.isclose(sum(modal.effective_masses["y"]), expected, rtol=1e-8)
    assert set(modal.participation_factors) == {"x", "y"}
    # bending modes of an x-cantilever do not move it along x
    assert modal.mass_ratio("y") < 1.0


def test_modal_result_export(make_cantilever):
    phases = []
    modal = analyze_modal(make_cantilever(n_elements=4, L=L), AnalysisConfig(n_modes=3), on_phase=phases.append)

    assert phases == ["validate", "assemble", "solve"]
    frame = modal.to_frame()
    assert len(frame) == 3
    assert {"mode", "frequency_hz", "period_s", "gamma_x", "gamma_z", "meff_y"} <= set(frame.columns)

    out = modal.to_dict()
    assert [f["mode"] for f in out["frequencies"]] == [1, 2, 3]
    assert out["responseSpectrum"] is None
    assert len(out["modeShapes"][0]["shape"]) == 5
