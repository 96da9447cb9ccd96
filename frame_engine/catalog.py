# frame_engine/catalog.py
"""
CATALOG: MATERIAL PRESETS AND STANDARD SECTIONS
===============================================

Instead of hardcoding E=200e9, density=7850 in every script or test, callers
pick a preset by material kind and a section by name.

MATERIAL KINDS:
---------------
Concrete, steel and timber share the same frame formulation; they differ only
in their numbers:

    kind       E (GPa)   density (kg/m³)   fy (MPa)   fu (MPa)
    concrete   25.7      2400              -          -
    steel      200       7850              240        370
    timber     12        550               -          -

Concrete E follows 4700·√f'c (MPa) for f'c = 30 MPa. The steel grade is the
common mild structural grade (fy 240 / fu 370 MPa).
"""

from dataclasses import replace
from typing import Dict, Hashable, Optional

from .model import Material, MaterialKind, Section


MATERIAL_PRESETS: Dict[MaterialKind, Material] = {
    MaterialKind.CONCRETE: Material(
        id="concrete",
        E=4700.0 * 30.0**0.5 * 1e6,
        poisson=0.2,
        density=2400.0,
        kind=MaterialKind.CONCRETE,
    ),
    MaterialKind.STEEL: Material(
        id="steel",
        E=200e9,
        poisson=0.3,
        density=7850.0,
        fy=240e6,
        fu=370e6,
        kind=MaterialKind.STEEL,
    ),
    MaterialKind.TIMBER: Material(
        id="timber",
        E=12e9,
        G=0.75e9,
        density=550.0,
        kind=MaterialKind.TIMBER,
    ),
}


def default_material(kind: MaterialKind, id: Optional[Hashable] = None) -> Material:
    """
    Return the preset for a material kind, optionally under a different id.

    >>> default_material(MaterialKind.STEEL).E
    200000000000.0
    """
    preset = MATERIAL_PRESETS[MaterialKind(kind)]
    if id is None:
        return preset
    return replace(preset, id=id)


# Rectangular concrete members (width x height, metres) and two rolled steel
# shapes given by their tabulated properties.
STANDARD_SECTIONS: Dict[str, Section] = {
    "C300x300": Section.rectangular("C300x300", width=0.30, height=0.30),
    "C400x400": Section.rectangular("C400x400", width=0.40, height=0.40),
    "B250x500": Section.rectangular("B250x500", width=0.25, height=0.50),
    "B300x600": Section.rectangular("B300x600", width=0.30, height=0.60),
    "W12x26": Section.general("W12x26", area=0.00495, Iy=7.41e-6, Iz=8.49e-5, J=3.5e-7),
    "W8x31": Section.general("W8x31", area=0.00590, Iy=1.54e-5, Iz=4.57e-5, J=4.5e-7),
}
