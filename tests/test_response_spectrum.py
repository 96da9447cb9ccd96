import numpy as np
import pytest

from frame_engine import AnalysisConfig, ResponseSpectrum, analyze_modal, design_spectrum
from frame_engine.assembly import assemble_mass
from frame_engine.dynamic import response_spectrum_analysis
from frame_engine.kernel.spectrum import STANDARD_GRAVITY, cqc, cqc_correlation, srss


class TestDesignSpectrum:
    spec = design_spectrum(sds=0.8, sd1=0.4, tl=8.0)

    def test_corner_periods(self):
        assert np.isclose(self.spec.ts, 0.5)
        assert np.isclose(self.spec.t0, 0.1)

    def test_branches(self):
        assert np.isclose(self.spec.sa(0.0), 0.4 * 0.8)
        assert np.isclose(self.spec.sa(0.05), 0.8 * (0.4 + 0.6 * 0.5))
        assert np.isclose(self.spec.sa(0.3), 0.8)
        assert np.isclose(self.spec.sa(1.0), 0.4)
        assert np.isclose(self.spec.sa(10.0), 0.4 * 8.0 / 100.0)

    def test_continuous_at_corners(self):
        for T in (self.spec.t0, self.spec.ts, 8.0):
            assert np.isclose(self.spec.sa(T - 1e-9), self.spec.sa(T + 1e-9), rtol=1e-6)

    def test_reduction_factors(self):
        reduced = design_spectrum(sds=0.8, sd1=0.4, r=8.0, ie=1.5)
        assert np.isclose(reduced.sa(0.3), 0.8 * 1.5 / 8.0)

    def test_array_input(self):
        values = self.spec.sa(np.array([0.3, 1.0]))
        np.testing.assert_allclose(values, [0.8, 0.4])

    def test_sampled_curve(self):
        curve = self.spec.to_curve([0.0, 0.1, 0.5, 1.0, 2.0])
        assert np.isclose(curve.sa(0.3), 0.8)

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            design_spectrum(sds=0.0, sd1=0.4)
        with pytest.raises(ValueError):
            design_spectrum(sds=0.8, sd1=0.4, r=0.0)


class TestTabulatedSpectrum:
    def test_interpolation_and_clamping(self):
        spec = ResponseSpectrum((0.0, 1.0, 2.0), (0.2, 1.0, 0.5))
        assert np.isclose(spec.sa(0.5), 0.6)
        assert np.isclose(spec.sa(5.0), 0.5)
        assert spec.g == STANDARD_GRAVITY

    def test_rejects_bad_curves(self):
        with pytest.raises(ValueError):
            ResponseSpectrum((1.0, 0.5), (0.2, 0.3))
        with pytest.raises(ValueError):
            ResponseSpectrum((0.0, 1.0), (0.2,))
        with pytest.raises(ValueError):
            ResponseSpectrum((), ())


class TestCombination:
    def test_srss(self):
        assert np.isclose(srss([3.0, 4.0]), 5.0)
        np.testing.assert_allclose(srss([[3.0, 1.0], [4.0, 0.0]]), [5.0, 1.0])

    def test_cqc_identical_frequencies_adds_absolutely(self):
        assert np.isclose(cqc([3.0, 4.0], [10.0, 10.0]), 7.0)

    def test_cqc_well_separated_is_srss(self):
        assert np.isclose(cqc([3.0, 4.0], [1.0, 30.0]), 5.0, rtol=1e-3)

    def test_correlation_matrix(self):
        rho = cqc_correlation([5.0, 6.0, 20.0], damping=0.05)
        np.testing.assert_allclose(np.diag(rho), 1.0)
        np.testing.assert_allclose(rho, rho.T)
        assert 0.0 < rho[0, 1] < 1.0
        assert rho[0, 2] < rho[0, 1]


FLAT = ResponseSpectrum((0.0, 10.0), (0.5, 0.5))


def test_flat_spectrum_base_shear(make_cantilever):
    """With constant Sa every mode sees the same acceleration: V = Sa·g·sqrt(Σ Meff²)."""
    model = make_cantilever(n_elements=8, vertical=True)
    config = AnalysisConfig(dimension="2d", n_modes=4)
    modal = analyze_modal(model, config, spectrum=FLAT, direction="x")

    rs = modal.response
    meff = np.array(modal.effective_masses["x"])
    assert rs.direction == "x"
    assert rs.combination == "srss"
    assert rs.spectral_accelerations == (0.5,) * 4
    np.testing.assert_allclose(rs.modal_base_shears, 0.5 * STANDARD_GRAVITY * meff)
    assert np.isclose(rs.base_shear, 0.5 * STANDARD_GRAVITY * np.sqrt(np.sum(meff**2)))
    assert rs.base_shear <= 0.5 * STANDARD_GRAVITY * modal.total_mass

    # one lateral force per free node, none at the fixed base
    assert [s.node_id for s in rs.story_forces] == list(range(1, 9))
    assert all(s.force >= 0 for s in rs.story_forces)


def test_cqc_combination_not_below_largest_mode(make_cantilever):
    model = make_cantilever(n_elements=8, vertical=True)
    config = AnalysisConfig(dimension="2d", n_modes=3)
    spectrum = design_spectrum(sds=0.8, sd1=0.5)

    srss_rs = analyze_modal(model, config, spectrum=spectrum).response
    cqc_rs = analyze_modal(model, config, spectrum=spectrum, combination="cqc").response

    assert cqc_rs.combination == "cqc"
    assert cqc_rs.base_shear >= max(cqc_rs.modal_base_shears) - 1e-9
    # well separated cantilever modes: CQC ~ SRSS
    assert np.isclose(cqc_rs.base_shear, srss_rs.base_shear, rtol=0.05)


def test_spectrum_phase_and_export(make_cantilever):
    phases = []
    modal = analyze_modal(
        make_cantilever(n_elements=4, vertical=True),
        AnalysisConfig(dimension="2d", n_modes=2),
        spectrum=FLAT,
        on_phase=phases.append,
    )
    assert phases[-1] == "spectrum"

    out = modal.to_dict()["responseSpectrum"]
    assert out["direction"] == "x"
    assert out["baseShear"] > 0
    assert len(out["spectralAccelerations"]) == 2
    assert len(out["storyForces"]) == 4


def test_direction_must_exist_in_analysis(make_cantilever):
    model = make_cantilever(n_elements=2, vertical=True)
    config = AnalysisConfig(dimension="2d", n_modes=2)
    modal = analyze_modal(model, config)
    mass = assemble_mass(model, config)

    with pytest.raises(ValueError, match="direction"):
        response_spectrum_analysis(modal, mass, FLAT, direction="z")
    with pytest.raises(ValueError, match="combination"):
        response_spectrum_analysis(modal, mass, FLAT, combination="abs")
