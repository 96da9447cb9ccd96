# tests/conftest.py
"""Shared model builders for the test suite."""

import pytest

from frame_engine import (
    Element,
    ElementType,
    Material,
    NodalLoad,
    Node,
    Section,
    StructuralModel,
    Supports,
)


@pytest.fixture
def steel():
    return Material("steel", E=200e9, density=7850.0, fy=250e6, fu=400e6)


@pytest.fixture
def rect_section():
    # b = 0.2 along local z, h = 0.4 along local y
    return Section.rectangular("R200x400", width=0.2, height=0.4)


@pytest.fixture
def simply_supported_model(steel, rect_section):
    """
    The canonical 1-element fixture: nodes at (0,0,0) and (5,0,0).

    Node 0 is pinned with torsion held, node 1 rests on a roller (uy, uz)
    and carries an axial pull and an end moment.
    """
    nodes = [
        Node(0, 0.0, 0.0, 0.0, supports=Supports(ux=True, uy=True, uz=True, rx=True)),
        Node(1, 5.0, 0.0, 0.0, supports=Supports(uy=True, uz=True),
             load=NodalLoad(fx=10e3, mz=5e3)),
    ]
    elements = [Element(0, 0, 1, material="steel", section="R200x400")]
    return StructuralModel(nodes=nodes, elements=elements, materials=[steel], sections=[rect_section])


@pytest.fixture
def make_cantilever(steel, rect_section):
    """
    Factory for a cantilever along +X (or +Y when vertical=True) fixed at
    node 0, split into n elements, with `load` at the free end.
    """
    def make(n_elements=1, L=3.0, load=None, vertical=False, material=None):
        mat = material or steel
        nodes = []
        for k in range(n_elements + 1):
            s = L * k / n_elements
            x, y = (0.0, s) if vertical else (s, 0.0)
            nodes.append(Node(
                k, x, y, 0.0,
                supports=Supports.fixed() if k == 0 else None,
                load=load if k == n_elements else None,
            ))
        etype = ElementType.COLUMN if vertical else ElementType.BEAM
        elements = [Element(k, k, k + 1, material=mat.id, section=rect_section.id, type=etype)
                    for k in range(n_elements)]
        return StructuralModel(nodes=nodes, elements=elements, materials=[mat], sections=[rect_section])

    return make


@pytest.fixture
def portal_model(steel, rect_section):
    """3D portal: two 4 m columns along Z, 6 m beam along X, lateral + gravity load at the eaves."""
    nodes = [
        Node("A", 0.0, 0.0, 0.0, supports=Supports.fixed()),
        Node("B", 0.0, 0.0, 4.0, load=NodalLoad(fx=20e3, fz=-50e3)),
        Node("C", 6.0, 0.0, 4.0, load=NodalLoad(fz=-50e3)),
        Node("D", 6.0, 0.0, 0.0, supports=Supports.fixed()),
    ]
    elements = [
        Element("c1", "A", "B", "steel", "R200x400", type=ElementType.COLUMN),
        Element("b1", "B", "C", "steel", "R200x400", type=ElementType.BEAM),
        Element("c2", "D", "C", "steel", "R200x400", type=ElementType.COLUMN),
    ]
    return StructuralModel(nodes=nodes, elements=elements, materials=[steel], sections=[rect_section])
