# frame_engine/assembly.py
"""
ASSEMBLER: From StructuralModel to Global K, M and F
====================================================

This is the only place that reads the model's elements. It turns each element
into an ElementFrame (geometry, transformation, local stiffness, section
properties) and scatter-adds the global-coordinate matrices through the kernel.

The returned GlobalStiffness carries everything the static solver needs to
recover element forces, so solvers never look at the model again and results
keep no link back to it.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Hashable, List, Optional, Tuple

from .config import AnalysisConfig, DEFAULT_CONFIG
from .elements import (
    element_geometry,
    frame2d_consistent_mass,
    frame2d_local_stiffness,
    frame2d_lumped_mass,
    frame2d_transform,
)
from .kernel.assemble import add_nodal_load, assemble_global_K
from .kernel.dof import DOFManager
from .kernel.solve import NumericOverflowError
from .model import ElementType, StructuralModel
from .section import SectionProperties, section_properties
from .v3d.elements import (
    element_geometry_3d,
    frame3d_consistent_mass,
    frame3d_local_stiffness,
    frame3d_lumped_mass,
    frame3d_rotation,
    frame3d_transform,
)
from .validate import ValidationError, Violation

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ElementFrame:
    """Per-element data derived from the model for one analysis."""
    id: Hashable
    type: ElementType
    ni: Hashable
    nj: Hashable
    length: float
    T: np.ndarray  # global → local DOF transform
    k_local: np.ndarray
    props: SectionProperties
    fy: Optional[float]
    dof_map: Tuple[int, ...]

    @property
    def k_global(self) -> np.ndarray:
        return self.T.T @ self.k_local @ self.T


@dataclass(frozen=True, eq=False)
class GlobalStiffness:
    K: np.ndarray
    dof: DOFManager
    frames: Tuple[ElementFrame, ...]
    dimension: str

    @property
    def ndof(self) -> int:
        return self.dof.ndof


@dataclass(frozen=True, eq=False)
class GlobalMass:
    M: np.ndarray
    dof: DOFManager
    total_mass: float
    formulation: str


def make_dof_manager(model: StructuralModel, config: AnalysisConfig = DEFAULT_CONFIG) -> DOFManager:
    return DOFManager(dof_per_node=config.dof_per_node, node_ids=[n.id for n in model.nodes])


def _element_geometry(nodes, element, config):
    """(L, T) for an element, raising ValidationError on zero length."""
    ni, nj = nodes[element.ni], nodes[element.nj]
    try:
        if config.dimension == "2d":
            L, c, s = element_geometry(ni, nj, element.id)
            return L, frame2d_transform(c, s)
        L, direction = element_geometry_3d(ni, nj, element.id)
        return L, frame3d_transform(frame3d_rotation(direction, element.roll))
    except ValueError as e:
        raise ValidationError([Violation("element", element.id, "zero_length", str(e))]) from e


def element_frames(model: StructuralModel, dof: DOFManager, config: AnalysisConfig = DEFAULT_CONFIG) -> List[ElementFrame]:
    nodes = model.node_map()
    frames = []
    for e in model.elements:
        material = model.material_of(e)
        props = section_properties(model.section_of(e))
        L, T = _element_geometry(nodes, e, config)

        if config.dimension == "2d":
            k_local = frame2d_local_stiffness(material.E, props.A, props.Iz, L)
        else:
            k_local = frame3d_local_stiffness(
                material.E, material.shear_modulus, props.A, props.Iy, props.Iz, props.J, L
            )

        frames.append(ElementFrame(
            id=e.id,
            type=ElementType(e.type),
            ni=e.ni,
            nj=e.nj,
            length=L,
            T=T,
            k_local=k_local,
            props=props,
            fy=material.fy,
            dof_map=tuple(dof.element_dof_map([e.ni, e.nj])),
        ))
    return frames


def assemble_stiffness(model: StructuralModel, config: Optional[AnalysisConfig] = None) -> GlobalStiffness:
    """
    Build the global stiffness matrix.

    Size is 6 × n_nodes (3D) or 3 × n_nodes (2D). Element blocks accumulate
    at shared nodes.

    Raises:
    -------
    ValidationError
        If an element has zero length
    NumericOverflowError
        If any assembled entry is not finite
    """
    config = config or DEFAULT_CONFIG
    dof = make_dof_manager(model, config)
    frames = element_frames(model, dof, config)

    K = assemble_global_K(dof.ndof, ((f.dof_map, f.k_global) for f in frames))
    if not np.all(np.isfinite(K)):
        raise NumericOverflowError("Global stiffness matrix contains non-finite entries")

    _logger.debug("Assembled K: %d DOFs from %d elements", dof.ndof, len(frames))
    return GlobalStiffness(K=K, dof=dof, frames=tuple(frames), dimension=config.dimension)


def assemble_mass(model: StructuralModel, config: Optional[AnalysisConfig] = None) -> GlobalMass:
    """
    Build the global mass matrix from material density, section area and
    element length, on the same DOF numbering as the stiffness.

    config.mass_formulation selects "consistent" or "lumped" (HRZ diagonal).
    """
    config = config or DEFAULT_CONFIG
    dof = make_dof_manager(model, config)
    lumped = config.mass_formulation == "lumped"

    nodes = model.node_map()
    contributions = []
    total = 0.0
    for e in model.elements:
        material = model.material_of(e)
        props = section_properties(model.section_of(e))
        L, T = _element_geometry(nodes, e, config)
        rho = material.density

        if config.dimension == "2d":
            m_local = frame2d_lumped_mass(rho, props.A, L) if lumped else frame2d_consistent_mass(rho, props.A, L)
        else:
            build = frame3d_lumped_mass if lumped else frame3d_consistent_mass
            m_local = build(rho, props.A, props.Iy, props.Iz, L)

        contributions.append((dof.element_dof_map([e.ni, e.nj]), T.T @ m_local @ T))
        total += rho * props.A * L

    M = assemble_global_K(dof.ndof, contributions)
    if not np.all(np.isfinite(M)):
        raise NumericOverflowError("Global mass matrix contains non-finite entries")

    _logger.debug("Assembled %s M: %d DOFs, total mass %.3f kg", config.mass_formulation, dof.ndof, total)
    return GlobalMass(M=M, dof=dof, total_mass=total, formulation=config.mass_formulation)


def assemble_loads(model: StructuralModel, dof: DOFManager, config: Optional[AnalysisConfig] = None) -> np.ndarray:
    """
    Global load vector from loads embedded on nodes plus PointLoad records.
    Components outside the analysis' DOF set (e.g. fz in 2D) are dropped.
    """
    config = config or DEFAULT_CONFIG
    active = config.active_dofs
    F = np.zeros(dof.ndof, dtype=float)

    for node in model.nodes:
        if node.load is not None:
            full = node.load.as_tuple()
            add_nodal_load(F, dof.node_dofs(node.id), [full[i] for i in active])
    for pl in model.loads:
        full = pl.load.as_tuple()
        add_nodal_load(F, dof.node_dofs(pl.node_id), [full[i] for i in active])

    return F


def restrained_dofs(model: StructuralModel, dof: DOFManager, config: Optional[AnalysisConfig] = None) -> List[int]:
    """Global indices of every DOF flagged in a node's Supports."""
    config = config or DEFAULT_CONFIG
    fixed = []
    for node in model.nodes:
        if node.supports is None:
            continue
        flags = node.supports.as_tuple()
        for local, full_index in enumerate(config.active_dofs):
            if flags[full_index]:
                fixed.append(dof.idx(node.id, local))
    return fixed
