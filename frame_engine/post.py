# element end forces, section stresses, utilization, reactions

import numpy as np
from typing import Hashable, List, Sequence, Tuple

from .assembly import ElementFrame
from .kernel.dof import DOFManager
from .results import ElementForces, ElementStress, EndForces, NodeDisplacement, Reaction

# fraction of fy allowed under working loads
ALLOWABLE_STRESS_RATIO = 0.6


def full_components(values: Sequence[float], active_dofs: Sequence[int]) -> Tuple[float, ...]:
    """
    Spread an analysis-ordered nodal vector onto the six (ux..rz) slots.

    >>> full_components([1.0, 2.0, 3.0], (0, 1, 5))
    (1.0, 2.0, 0.0, 0.0, 0.0, 3.0)
    """
    out = [0.0] * 6
    for value, slot in zip(values, active_dofs):
        out[slot] = float(value)
    return tuple(out)


def element_end_forces_local(frame: ElementFrame, d_global: np.ndarray) -> np.ndarray:
    """
    End forces in LOCAL coordinates from global displacements.

    The process:
    1. Gather the element's global displacements
    2. Transform to local coordinates (d_local = T·d)
    3. f_local = k_local·d_local

    Returns:
    --------
    np.ndarray
        3D: [N1, Vy1, Vz1, T1, My1, Mz1, N2, Vy2, Vz2, T2, My2, Mz2]
        2D: [N1, V1, M1, N2, V2, M2]
        Forces exerted BY the nodes ON the element, local axes.
    """
    d_elem_global = d_global[list(frame.dof_map)]
    d_local = frame.T @ d_elem_global
    return frame.k_local @ d_local


def element_forces(frame: ElementFrame, d_global: np.ndarray) -> ElementForces:
    """
    Internal actions at both ends.

    The i-end nodal force is negated so both ends follow one sign
    convention, with N > 0 in tension.
    """
    f = element_end_forces_local(frame, d_global)
    half = f.size // 2
    fi, fj = -f[:half], f[half:]

    if half == 3:
        i = EndForces(n=float(fi[0]), vy=float(fi[1]), mz=float(fi[2]))
        j = EndForces(n=float(fj[0]), vy=float(fj[1]), mz=float(fj[2]))
    else:
        i = EndForces(*(float(v) for v in fi))
        j = EndForces(*(float(v) for v in fj))

    return ElementForces(element_id=frame.id, element_type=frame.type.value, i=i, j=j)


def _end_peak(ef: EndForces, frame: ElementFrame) -> float:
    p = frame.props
    return abs(ef.n) / p.A + abs(ef.my) / p.Sy + abs(ef.mz) / p.Sz


def element_stress(frame: ElementFrame, forces: ElementForces) -> ElementStress:
    """
    Section stresses by superposition, taking the worse end.

    axial      N/A (signed, + tension) at the end with the larger |N|
    bending    |M|/S about each local axis
    shear      1.5·V/A (rectangular average-to-peak factor, report only)
    peak       |N|/A + |My|/Sy + |Mz|/Sz
    """
    p = frame.props
    ends = (forces.i, forces.j)

    n = max((ef.n for ef in ends), key=abs)
    my = max(abs(ef.my) for ef in ends)
    mz = max(abs(ef.mz) for ef in ends)
    v = max(float(np.hypot(ef.vy, ef.vz)) for ef in ends)
    peak = max(_end_peak(ef, frame) for ef in ends)

    utilization = None
    if frame.fy:
        utilization = peak / (ALLOWABLE_STRESS_RATIO * frame.fy)

    return ElementStress(
        element_id=frame.id,
        element_type=frame.type.value,
        axial=n / p.A,
        bending_y=my / p.Sy,
        bending_z=mz / p.Sz,
        shear=1.5 * v / p.A,
        peak=peak,
        utilization=utilization,
    )


def nodal_displacements(dof: DOFManager, d_global: np.ndarray, active_dofs: Sequence[int]) -> List[NodeDisplacement]:
    return [
        NodeDisplacement(nid, *full_components(d_global[dof.node_dofs(nid)], active_dofs))
        for nid in dof.node_ids
    ]


def support_reactions(
    dof: DOFManager,
    R: np.ndarray,
    fixed_dofs: Sequence[int],
    active_dofs: Sequence[int],
) -> List[Reaction]:
    """
    Reaction components at every node with at least one restrained DOF.
    Components on unrestrained DOFs are reported as zero.
    """
    by_node = {}
    for g in sorted(set(int(i) for i in fixed_dofs)):
        nid, local = dof.locate(g)
        by_node.setdefault(nid, {})[local] = float(R[g])

    reactions = []
    for nid in dof.node_ids:
        if nid not in by_node:
            continue
        values = [by_node[nid].get(k, 0.0) for k in range(dof.dof_per_node)]
        reactions.append(Reaction(nid, *full_components(values, active_dofs)))
    return reactions


def nodes_of_dofs(dof: DOFManager, dofs: Sequence[int]) -> List[Hashable]:
    """Node ids owning the given global DOFs, in node order."""
    owners = {dof.locate(g)[0] for g in dofs}
    return [nid for nid in dof.node_ids if nid in owners]
