# frame_engine/section.py
"""
SECTION PROPERTIES
==================

Turns a Section description into the numbers the element formulas need.

LOCAL AXES:
-----------
    x: along the member (node i -> node j)
    y: the section "height" direction
    z: the section "width" direction

So for a rectangle of width b and height h:

    A  = b·h
    Iz = b·h³/12     bending in the local x-y plane (strong axis when h > b)
    Iy = h·b³/12     bending in the local x-z plane
    Sz = Iz / (h/2)  extreme fibre for Mz
    Sy = Iy / (b/2)  extreme fibre for My

Torsion constant for a solid rectangle (a >= c the long and short sides):

    J = a·c³·(1/3 − 0.21·(c/a)·(1 − c⁴/(12·a⁴)))
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .model import Section, SectionShape


@dataclass(frozen=True)
class SectionProperties:
    """Derived section properties (SI units)."""
    A: float
    Iy: float
    Iz: float
    J: float
    Sy: float
    Sz: float


def rectangle_torsion_constant(width: float, height: float) -> float:
    a = max(width, height)
    c = min(width, height)
    return a * c**3 * (1.0 / 3.0 - 0.21 * (c / a) * (1.0 - c**4 / (12.0 * a**4)))


def _modulus(I: float, A: float, half_depth: Optional[float]) -> float:
    # no extents given: use the half-depth of the rectangle with the same A and I
    if half_depth is None or half_depth <= 0.0:
        half_depth = float(np.sqrt(3.0 * I / A))
    return I / half_depth


def section_properties(section: Section) -> SectionProperties:
    """
    Compute (A, Iy, Iz, J, Sy, Sz) for a section.

    Explicit area / Iy / Iz / J on the Section take precedence over the values
    derived from width and height.

    Raises:
    -------
    ValueError
        If the section does not carry enough data for its shape.
    """
    b = section.width
    h = section.height

    if section.shape == SectionShape.RECTANGULAR:
        if b is None or h is None:
            raise ValueError(f"Section {section.id}: rectangular section needs width and height")
        A = b * h
        Iz = b * h**3 / 12.0
        Iy = h * b**3 / 12.0
        J = rectangle_torsion_constant(b, h)
        half_y, half_z = h / 2.0, b / 2.0
    elif section.shape == SectionShape.CIRCULAR:
        if b is None:
            raise ValueError(f"Section {section.id}: circular section needs width (diameter)")
        r = b / 2.0
        A = np.pi * r**2
        Iz = Iy = np.pi * r**4 / 4.0
        J = np.pi * r**4 / 2.0
        half_y = half_z = r
    else:
        missing = [name for name in ("area", "Iy", "Iz", "J") if getattr(section, name) is None]
        if missing:
            raise ValueError(f"Section {section.id}: general section is missing {', '.join(missing)}")
        A, Iy, Iz, J = section.area, section.Iy, section.Iz, section.J
        half_y = h / 2.0 if h else None
        half_z = b / 2.0 if b else None

    if section.area is not None:
        A = section.area
    if section.Iy is not None:
        Iy = section.Iy
    if section.Iz is not None:
        Iz = section.Iz
    if section.J is not None:
        J = section.J

    return SectionProperties(
        A=float(A),
        Iy=float(Iy),
        Iz=float(Iz),
        J=float(J),
        Sy=float(_modulus(Iy, A, half_z)),
        Sz=float(_modulus(Iz, A, half_y)),
    )
