import numpy as np

from frame_engine import AnalysisConfig, NodalLoad, analyze

L = 3.0
E = 200e9
P = 1000.0
B, H = 0.2, 0.4
IZ = B * H**3 / 12  # bending in the local x-y plane
IY = H * B**3 / 12
SZ = B * H**2 / 6


def test_cantilever_tip_load_deflection_3d(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fz=-P))
    result = analyze(model)

    assert result.is_valid
    tip = result.displacement_of(1)

    # Beam along X: local y is global Z, so a vertical load bends about Iz
    uz_expected = -P * L**3 / (3 * E * IZ)
    ry_expected = P * L**2 / (2 * E * IZ)

    assert np.isclose(tip.uz, uz_expected, rtol=1e-4)
    assert np.isclose(tip.ry, ry_expected, rtol=1e-4)
    assert np.isclose(result.max_displacement, abs(uz_expected), rtol=1e-4)


def test_cantilever_weak_axis_3d(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fy=-P))
    tip = analyze(model).displacement_of(1)

    assert np.isclose(tip.uy, -P * L**3 / (3 * E * IY), rtol=1e-4)
    assert abs(tip.uz) < 1e-12


def test_cantilever_tip_load_deflection_2d(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fy=-P))
    result = analyze(model, AnalysisConfig(dimension="2d"))

    tip = result.displacement_of(1)
    assert np.isclose(tip.uy, -P * L**3 / (3 * E * IZ), rtol=1e-4)
    assert np.isclose(tip.rz, -P * L**2 / (2 * E * IZ), rtol=1e-4)

    # 2D results leave the out-of-plane slots at zero
    assert tip.uz == 0.0 and tip.rx == 0.0 and tip.ry == 0.0


def test_cantilever_reactions_2d(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fy=-P))
    result = analyze(model, AnalysisConfig(dimension="2d"))

    assert len(result.reactions) == 1
    base = result.reactions[0]
    assert base.node_id == 0
    assert np.isclose(base.fy, P, rtol=1e-6)
    assert np.isclose(base.mz, P * L, rtol=1e-6)
    assert abs(base.fx) < 1e-6


def test_cantilever_end_forces_and_stress(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fz=-P))
    result = analyze(model)

    forces = result.forces_of(0)
    assert np.isclose(abs(forces.i.mz), P * L, rtol=1e-6)
    assert abs(forces.j.mz) < 1e-6 * P * L
    assert np.isclose(abs(forces.i.vy), P, rtol=1e-6)
    assert abs(forces.i.n) < 1e-6

    stress = result.stresses[0]
    assert np.isclose(stress.peak, P * L / SZ, rtol=1e-6)
    assert np.isclose(result.max_stress, P * L / SZ, rtol=1e-6)
    # 0.6·fy allowable with fy = 250 MPa
    assert np.isclose(stress.utilization, stress.peak / (0.6 * 250e6))


def test_mesh_refinement_does_not_change_tip_deflection(make_cantilever):
    coarse = analyze(make_cantilever(n_elements=1, L=L, load=NodalLoad(fz=-P)))
    fine = analyze(make_cantilever(n_elements=8, L=L, load=NodalLoad(fz=-P)))

    assert np.isclose(coarse.displacement_of(1).uz, fine.displacement_of(8).uz, rtol=1e-8)


def test_axial_tip_load(make_cantilever):
    model = make_cantilever(L=L, load=NodalLoad(fx=P))
    result = analyze(model)

    assert np.isclose(result.displacement_of(1).ux, P * L / (E * B * H), rtol=1e-8)
    forces = result.forces_of(0)
    # tension is positive at both ends
    assert np.isclose(forces.i.n, P, rtol=1e-8)
    assert np.isclose(forces.j.n, P, rtol=1e-8)
    assert np.isclose(result.stresses[0].axial, P / (B * H), rtol=1e-8)
