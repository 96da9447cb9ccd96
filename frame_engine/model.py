# frame_engine/model.py
"""
STRUCTURAL MODEL: Nodes, Elements, Materials, Sections, Loads
=============================================================

PURPOSE:
--------
These are the input types of the engine. The caller (a form layer, a script,
the HTTP adapter) builds one StructuralModel and hands it to the engine, which
only ever READS it. Every class here is a frozen dataclass, so a model cannot
be modified halfway through an analysis.

DEGREES OF FREEDOM:
-------------------
Each node has up to 6 DOFs, always listed in this order:

    0: ux   1: uy   2: uz   3: rx   4: ry   5: rz

The 2D-reduced analysis (x-y plane) keeps only (ux, uy, rz).

CLOSED VARIANTS:
----------------
Element "type" and material "kind" are enums, not free strings. The element
type only labels results (beam/column/brace/slab proxy all use the same 2-node
frame formulation); the material kind only selects catalog defaults.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, Optional, Tuple, Union


DOF_NAMES = ("ux", "uy", "uz", "rx", "ry", "rz")
LOAD_NAMES = ("fx", "fy", "fz", "mx", "my", "mz")


class ElementType(str, Enum):
    BEAM = "beam"
    COLUMN = "column"
    BRACE = "brace"
    SLAB = "slab"  # slab modelled as an equivalent beam strip


class MaterialKind(str, Enum):
    CONCRETE = "concrete"
    STEEL = "steel"
    TIMBER = "timber"


class SectionShape(str, Enum):
    RECTANGULAR = "rectangular"
    CIRCULAR = "circular"
    GENERAL = "general"


@dataclass(frozen=True)
class Supports:
    """
    Restraint flags for the six nodal DOFs. A flagged DOF is held at zero
    displacement.

    Examples:
    ---------
    >>> Supports.fixed().as_tuple()
    (True, True, True, True, True, True)
    >>> Supports.pinned().as_tuple()
    (True, True, True, False, False, False)
    """
    ux: bool = False
    uy: bool = False
    uz: bool = False
    rx: bool = False
    ry: bool = False
    rz: bool = False

    @classmethod
    def fixed(cls) -> "Supports":
        return cls(True, True, True, True, True, True)

    @classmethod
    def pinned(cls) -> "Supports":
        return cls(True, True, True, False, False, False)

    @classmethod
    def roller(cls, axis: str = "uy") -> "Supports":
        """Restrain a single translation (default: vertical in the 2D plane)."""
        if axis not in DOF_NAMES[:3]:
            raise ValueError(f"Roller axis must be one of ux/uy/uz, got {axis!r}")
        return cls(**{axis: True})

    def as_tuple(self) -> Tuple[bool, ...]:
        return (self.ux, self.uy, self.uz, self.rx, self.ry, self.rz)

    def any(self) -> bool:
        return any(self.as_tuple())


@dataclass(frozen=True)
class NodalLoad:
    """Concentrated force/moment components at a node (N, N·m)."""
    fx: float = 0.0
    fy: float = 0.0
    fz: float = 0.0
    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0

    def as_tuple(self) -> Tuple[float, ...]:
        return (self.fx, self.fy, self.fz, self.mx, self.my, self.mz)


@dataclass(frozen=True)
class Node:
    """
    A joint in 3D space.

    Parameters:
    -----------
    id : hashable
        Unique within the model (int or str)
    x, y, z : float
        Global coordinates (m). For 2D analysis z is ignored.
    supports : Supports, optional
        Restrained DOFs. None means free.
    load : NodalLoad, optional
        Load embedded directly on the node.
    """
    id: Hashable
    x: float
    y: float
    z: float = 0.0
    supports: Optional[Supports] = None
    load: Optional[NodalLoad] = None


@dataclass(frozen=True)
class PointLoad:
    """A nodal load listed separately from the node it acts on."""
    node_id: Hashable
    load: NodalLoad


@dataclass(frozen=True)
class Material:
    """
    Linear elastic material.

    Parameters:
    -----------
    id : hashable
    E : float
        Young's modulus (Pa). Must be > 0.
    G : float, optional
        Shear modulus (Pa). Derived from E and Poisson's ratio if omitted.
    poisson : float, optional
        Poisson's ratio, 0.3 when omitted.
    density : float
        Mass density (kg/m³). Only used by modal analysis.
    fy, fu : float, optional
        Yield and ultimate strength (Pa). fy drives the utilization ratio.
    kind : MaterialKind
    """
    id: Hashable
    E: float
    G: Optional[float] = None
    poisson: Optional[float] = None
    density: float = 0.0
    fy: Optional[float] = None
    fu: Optional[float] = None
    kind: MaterialKind = MaterialKind.STEEL

    @property
    def shear_modulus(self) -> float:
        if self.G is not None:
            return self.G
        nu = self.poisson if self.poisson is not None else 0.3
        return self.E / (2.0 * (1.0 + nu))


@dataclass(frozen=True)
class Section:
    """
    Cross-section geometry. See frame_engine.section for how each shape turns
    into (A, Iy, Iz, J, Sy, Sz).

    RECTANGULAR needs width and height, CIRCULAR needs width (the diameter),
    GENERAL needs area, Iy, Iz and J. Explicit values always override the
    ones derived from the shape.
    """
    id: Hashable
    shape: SectionShape = SectionShape.RECTANGULAR
    width: Optional[float] = None
    height: Optional[float] = None
    area: Optional[float] = None
    Iy: Optional[float] = None
    Iz: Optional[float] = None
    J: Optional[float] = None

    @classmethod
    def rectangular(cls, id: Hashable, width: float, height: float) -> "Section":
        return cls(id=id, shape=SectionShape.RECTANGULAR, width=width, height=height)

    @classmethod
    def circular(cls, id: Hashable, diameter: float) -> "Section":
        return cls(id=id, shape=SectionShape.CIRCULAR, width=diameter)

    @classmethod
    def general(cls, id: Hashable, area: float, Iy: float, Iz: float, J: float) -> "Section":
        return cls(id=id, shape=SectionShape.GENERAL, area=area, Iy=Iy, Iz=Iz, J=J)


@dataclass(frozen=True)
class Element:
    """
    2-node frame element (Euler–Bernoulli, axial + torsion + biaxial bending).

    material / section may be an id into the model's tables or an inline
    Material / Section object.

    roll : float
        Rotation (radians) of the local y/z axes about the member axis.
    """
    id: Hashable
    ni: Hashable
    nj: Hashable
    material: Union[Hashable, Material]
    section: Union[Hashable, Section]
    type: ElementType = ElementType.BEAM
    roll: float = 0.0


@dataclass(frozen=True)
class StructuralModel:
    """
    The complete analysis input.

    Nodes and elements are kept in the given order; global DOF numbering
    follows the node order.
    """
    nodes: Tuple[Node, ...] = ()
    elements: Tuple[Element, ...] = ()
    materials: Tuple[Material, ...] = ()
    sections: Tuple[Section, ...] = ()
    loads: Tuple[PointLoad, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # accept lists from callers but store tuples
        for name in ("nodes", "elements", "materials", "sections", "loads"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.elements

    def node_map(self) -> dict:
        return {n.id: n for n in self.nodes}

    def material_of(self, element: Element) -> Material:
        if isinstance(element.material, Material):
            return element.material
        for m in self.materials:
            if m.id == element.material:
                return m
        raise KeyError(f"Element {element.id}: unknown material {element.material!r}")

    def section_of(self, element: Element) -> Section:
        if isinstance(element.section, Section):
            return element.section
        for s in self.sections:
            if s.id == element.section:
                return s
        raise KeyError(f"Element {element.id}: unknown section {element.section!r}")
