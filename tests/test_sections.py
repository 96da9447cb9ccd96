import numpy as np
import pytest

from frame_engine import Material, MaterialKind, Section
from frame_engine.catalog import STANDARD_SECTIONS, default_material
from frame_engine.section import rectangle_torsion_constant, section_properties


class TestRectangularSection:
    def test_area_and_inertia(self):
        p = section_properties(Section.rectangular("R", width=0.2, height=0.4))
        assert np.isclose(p.A, 0.08)
        assert np.isclose(p.Iz, 0.2 * 0.4**3 / 12)
        assert np.isclose(p.Iy, 0.4 * 0.2**3 / 12)

    def test_section_moduli(self):
        p = section_properties(Section.rectangular("R", width=0.2, height=0.4))
        assert np.isclose(p.Sz, 0.2 * 0.4**2 / 6)
        assert np.isclose(p.Sy, 0.4 * 0.2**2 / 6)

    def test_square_torsion_constant(self):
        # exact Saint-Venant value for a square is 0.1406·a⁴
        a = 0.3
        assert np.isclose(rectangle_torsion_constant(a, a), 0.1406 * a**4, rtol=5e-3)

    def test_torsion_constant_is_orientation_independent(self):
        assert rectangle_torsion_constant(0.2, 0.5) == rectangle_torsion_constant(0.5, 0.2)

    def test_explicit_values_override_derived(self):
        p = section_properties(Section("R", width=0.2, height=0.4, J=1e-3))
        assert p.J == 1e-3
        assert np.isclose(p.A, 0.08)


def test_circular_section():
    d = 0.1
    p = section_properties(Section.circular("C", diameter=d))
    r = d / 2
    assert np.isclose(p.A, np.pi * r**2)
    assert np.isclose(p.Iy, np.pi * r**4 / 4)
    assert p.Iy == p.Iz
    assert np.isclose(p.J, np.pi * r**4 / 2)
    assert np.isclose(p.Sz, np.pi * r**3 / 4)


def test_general_section_uses_equivalent_rectangle_for_moduli():
    p = section_properties(Section.general("G", area=0.01, Iy=2e-6, Iz=8e-5, J=1e-7))
    assert (p.A, p.Iy, p.Iz, p.J) == (0.01, 2e-6, 8e-5, 1e-7)
    # half depth c = sqrt(3I/A) reproduces S = b·h²/6 for a real rectangle
    assert np.isclose(p.Sz, 8e-5 / np.sqrt(3 * 8e-5 / 0.01))


def test_general_section_missing_values():
    with pytest.raises(ValueError, match="missing"):
        section_properties(Section("G", shape="general", area=0.01))


def test_standard_sections_resolve():
    for name, section in STANDARD_SECTIONS.items():
        p = section_properties(section)
        assert section.id == name
        assert min(p.A, p.Iy, p.Iz, p.J, p.Sy, p.Sz) > 0


class TestMaterials:
    def test_shear_modulus_from_default_poisson(self):
        m = Material("m", E=260e9)
        assert np.isclose(m.shear_modulus, 100e9)

    def test_explicit_shear_modulus_wins(self):
        assert Material("m", E=200e9, G=50e9, poisson=0.1).shear_modulus == 50e9

    def test_presets(self):
        steel = default_material(MaterialKind.STEEL)
        assert steel.E == 200e9 and steel.fy <= steel.fu
        concrete = default_material("concrete", id="C30")
        assert concrete.id == "C30"
        assert concrete.kind == MaterialKind.CONCRETE
        assert np.isclose(concrete.E, 4700 * np.sqrt(30) * 1e6)
