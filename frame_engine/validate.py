# frame_engine/validate.py
"""
VALIDATOR: Model Integrity Checks Before Any Matrix Work
========================================================

The validator looks at a StructuralModel and either returns quietly or raises
ValidationError listing what is wrong. Nothing is assembled or solved until the
model passes.

CATEGORIES (checked in this order):
-----------------------------------
    model         model is None
    topology      no nodes / no elements (only when require_elements=True)
    identity      duplicate ids
    coordinates   NaN / Infinity in node coordinates
    connectivity  element references (nodes, material, section, zero length)
    materials     E > 0, fy <= fu, density >= 0, G > 0
    sections      every geometric property > 0
    loads         every load component finite, point loads on known nodes

The first category that finds a problem stops the check, but every problem
inside that category is reported. That way a model with ten bad coordinates
gets one error listing all ten, not ten round trips.
"""

import math
import numbers
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Hashable, List, Optional

from .model import Material, Section, StructuralModel
from .section import section_properties


@dataclass(frozen=True)
class Violation:
    """One broken rule on one entity."""
    entity: str  # "model", "node", "element", "material", "section", "load"
    entity_id: Optional[Hashable]
    rule: str
    message: str

    def __str__(self) -> str:
        if self.entity_id is None:
            return f"{self.entity}: {self.message}"
        return f"{self.entity} {self.entity_id}: {self.message}"


class ValidationError(ValueError):
    """Raised when the model is malformed. Carries the list of violations."""

    def __init__(self, violations: List[Violation]):
        self.violations = list(violations)
        lines = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Invalid structural model ({len(self.violations)} problem(s)): {lines}")

    @property
    def rules(self) -> List[str]:
        return [v.rule for v in self.violations]


def _finite(*values) -> bool:
    # numpy scalars count as numbers, bools do not
    return all(
        isinstance(v, numbers.Real) and not isinstance(v, bool) and math.isfinite(float(v))
        for v in values
    )


def _check_topology(model: StructuralModel, require_elements: bool) -> List[Violation]:
    if not require_elements:
        return []
    out = []
    if not model.nodes:
        out.append(Violation("model", None, "no_nodes", "model has no nodes"))
    if not model.elements:
        out.append(Violation("model", None, "no_elements", "model must have at least one element"))
    return out


def _check_identity(model: StructuralModel) -> List[Violation]:
    out = []
    groups = [
        ("node", [n.id for n in model.nodes]),
        ("element", [e.id for e in model.elements]),
        ("material", [m.id for m in model.materials]),
        ("section", [s.id for s in model.sections]),
    ]
    for entity, ids in groups:
        for entity_id, count in Counter(ids).items():
            if count > 1:
                out.append(Violation(entity, entity_id, "duplicate_id", f"id used {count} times"))
    return out


def _check_coordinates(model: StructuralModel) -> List[Violation]:
    return [
        Violation("node", n.id, "non_finite_coordinate", f"coordinates ({n.x}, {n.y}, {n.z}) are not finite")
        for n in model.nodes
        if not _finite(n.x, n.y, n.z)
    ]


def _check_connectivity(model: StructuralModel) -> List[Violation]:
    out = []
    nodes = model.node_map()
    material_ids = {m.id for m in model.materials}
    section_ids = {s.id for s in model.sections}

    for e in model.elements:
        if e.ni == e.nj:
            out.append(Violation("element", e.id, "same_node", f"both ends reference node {e.ni}"))
            continue
        unknown = [nid for nid in (e.ni, e.nj) if nid not in nodes]
        for nid in unknown:
            out.append(Violation("element", e.id, "unknown_node", f"references unknown node {nid!r}"))
        if not isinstance(e.material, Material) and e.material not in material_ids:
            out.append(Violation("element", e.id, "unknown_material", f"references unknown material {e.material!r}"))
        if not isinstance(e.section, Section) and e.section not in section_ids:
            out.append(Violation("element", e.id, "unknown_section", f"references unknown section {e.section!r}"))
        if unknown:
            continue
        a, b = nodes[e.ni], nodes[e.nj]
        if (a.x, a.y, a.z) == (b.x, b.y, b.z):
            out.append(Violation("element", e.id, "zero_length", f"nodes {e.ni} and {e.nj} coincide"))
    return out


def _element_materials(model: StructuralModel) -> List[Material]:
    seen = {m.id: m for m in model.materials}
    for e in model.elements:
        if isinstance(e.material, Material):
            seen.setdefault(e.material.id, e.material)
    return list(seen.values())


def _element_sections(model: StructuralModel) -> List[Section]:
    seen = {s.id: s for s in model.sections}
    for e in model.elements:
        if isinstance(e.section, Section):
            seen.setdefault(e.section.id, e.section)
    return list(seen.values())


def _check_materials(model: StructuralModel) -> List[Violation]:
    out = []
    for m in _element_materials(model):
        if not _finite(m.E) or m.E <= 0:
            out.append(Violation("material", m.id, "non_positive_modulus", f"elastic modulus must be > 0, got {m.E}"))
        if m.fy is not None and m.fu is not None and m.fy > m.fu:
            out.append(Violation("material", m.id, "yield_exceeds_ultimate",
                                 f"yield strength {m.fy} exceeds ultimate strength {m.fu}"))
        if not _finite(m.density) or m.density < 0:
            out.append(Violation("material", m.id, "negative_density", f"density must be >= 0, got {m.density}"))
        if m.G is not None and (not _finite(m.G) or m.G <= 0):
            out.append(Violation("material", m.id, "non_positive_shear_modulus", f"shear modulus must be > 0, got {m.G}"))
    return out


def _check_sections(model: StructuralModel) -> List[Violation]:
    out = []
    for s in _element_sections(model):
        given = {name: getattr(s, name) for name in ("width", "height", "area", "Iy", "Iz", "J")}
        bad = [name for name, v in given.items() if v is not None and (not _finite(v) or v <= 0)]
        if bad:
            out.append(Violation("section", s.id, "non_positive_section_property",
                                 f"{', '.join(bad)} must be > 0"))
            continue
        try:
            props = section_properties(s)
        except ValueError as exc:
            out.append(Violation("section", s.id, "non_positive_section_property", str(exc)))
            continue
        if not all(_finite(v) and v > 0 for v in (props.A, props.Iy, props.Iz, props.J)):
            out.append(Violation("section", s.id, "non_positive_section_property",
                                 "derived area, inertia and torsion constant must be > 0"))
    return out


def _check_loads(model: StructuralModel) -> List[Violation]:
    out = []
    nodes = model.node_map()
    for n in model.nodes:
        if n.load is not None and not _finite(*n.load.as_tuple()):
            out.append(Violation("node", n.id, "non_finite_load", f"load {n.load.as_tuple()} is not finite"))
    for pl in model.loads:
        if pl.node_id not in nodes:
            out.append(Violation("load", pl.node_id, "unknown_node", f"point load on unknown node {pl.node_id!r}"))
        if not _finite(*pl.load.as_tuple()):
            out.append(Violation("load", pl.node_id, "non_finite_load", f"load {pl.load.as_tuple()} is not finite"))
    return out


def validate(model: Optional[StructuralModel], require_elements: bool = False) -> None:
    """
    Check model integrity. Returns None when the model is usable.

    Parameters:
    -----------
    model : StructuralModel or None
    require_elements : bool
        If True, a model without nodes or elements is rejected. The plain
        static path passes False (an empty model is a trivial valid case);
        modal analysis passes True.

    Raises:
    -------
    ValidationError
        With every violation of the first failing category.
    """
    if model is None:
        raise ValidationError([Violation("model", None, "missing_model", "no model was supplied")])

    checks: List[Callable[[], List[Violation]]] = [
        lambda: _check_topology(model, require_elements),
        lambda: _check_identity(model),
        lambda: _check_coordinates(model),
        lambda: _check_connectivity(model),
        lambda: _check_materials(model),
        lambda: _check_sections(model),
        lambda: _check_loads(model),
    ]
    for check in checks:
        violations = check()
        if violations:
            raise ValidationError(violations)
