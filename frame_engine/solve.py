# frame_engine/solve.py
"""
STATIC SOLVER
=============

    solve_static(stiffness, loads, supports) -> AnalysisResult

1. Partition the DOFs into free / restrained
2. Solve Kff·df = Ff (kernel.solve.solve_linear, Cholesky)
3. Re-insert zeros at restrained DOFs
4. Recover element end forces (f = k_local·T·d) and section stresses
5. Summaries: max translational displacement, max stress

An unstable structure or a non-finite value does NOT raise here: the result
comes back with is_valid=False and an ErrorInfo naming the condition, so the
caller can still show the model. result.raise_for_error() turns it back into
the exception.
"""

import logging
import numpy as np
from typing import Sequence

from .assembly import GlobalStiffness
from .config import AnalysisConfig
from .kernel.solve import AnalysisError, NumericOverflowError, UnstableStructureError, solve_linear
from .post import (
    element_forces,
    element_stress,
    nodal_displacements,
    nodes_of_dofs,
    support_reactions,
)
from .results import AnalysisResult, ElementForces, ElementStress, EndForces, ErrorInfo, NodeDisplacement

_logger = logging.getLogger(__name__)


def _invalid_result(stiffness: GlobalStiffness, exc: AnalysisError) -> AnalysisResult:
    """Zero-valued result carrying the error, one row per node / element."""
    dof = stiffness.dof
    return AnalysisResult(
        displacements=tuple(NodeDisplacement(nid) for nid in dof.node_ids),
        forces=tuple(
            ElementForces(f.id, f.type.value, EndForces(), EndForces()) for f in stiffness.frames
        ),
        stresses=tuple(
            ElementStress(f.id, f.type.value, 0.0, 0.0, 0.0, 0.0, 0.0) for f in stiffness.frames
        ),
        is_valid=False,
        error=ErrorInfo.from_exception(exc, nodes_of_dofs(dof, exc.dofs)),
        dimension=stiffness.dimension,
    )


def solve_static(
    stiffness: GlobalStiffness,
    loads: np.ndarray,
    supports: Sequence[int],
    *,
    cond_limit: float = 1e12,
) -> AnalysisResult:
    """
    Solve the linear static problem and recover forces and stresses.

    Parameters:
    -----------
    stiffness : GlobalStiffness
        From assembly.assemble_stiffness
    loads : np.ndarray
        Global load vector (ndof,)
    supports : sequence of int
        Restrained global DOF indices
    cond_limit : float
        Reduced stiffness with a larger condition number is unstable

    Returns:
    --------
    AnalysisResult
        is_valid=False with error.kind "unstable_structure" or
        "numeric_overflow" instead of raising for those conditions.
    """
    dof = stiffness.dof
    active = AnalysisConfig(dimension=stiffness.dimension).active_dofs
    F = np.asarray(loads, dtype=float)
    if F.shape != (dof.ndof,):
        raise ValueError(f"Load vector has shape {F.shape}, expected ({dof.ndof},)")

    try:
        d, R, free = solve_linear(stiffness.K, F, supports, cond_limit=cond_limit)
    except (UnstableStructureError, NumericOverflowError) as e:
        _logger.warning("Static analysis invalid (%s): %s", e.kind, e)
        return _invalid_result(stiffness, e)

    forces = [element_forces(f, d) for f in stiffness.frames]
    stresses = [element_stress(f, ef) for f, ef in zip(stiffness.frames, forces)]

    peaks = np.array([s.peak for s in stresses], dtype=float)
    if not (np.all(np.isfinite(R)) and np.all(np.isfinite(peaks))):
        e = NumericOverflowError("Recovered forces or stresses are not finite")
        _logger.warning("Static analysis invalid (%s): %s", e.kind, e)
        return _invalid_result(stiffness, e)

    displacements = nodal_displacements(dof, d, active)
    max_disp = max((nd.translation for nd in displacements), default=0.0)
    max_stress = float(peaks.max()) if peaks.size else 0.0

    _logger.debug("Static solve: %d free DOFs, max displacement %.4e m", free.size, max_disp)
    return AnalysisResult(
        displacements=tuple(displacements),
        forces=tuple(forces),
        stresses=tuple(stresses),
        reactions=tuple(support_reactions(dof, R, supports, active)),
        is_valid=True,
        max_displacement=float(max_disp),
        max_stress=max_stress,
        max_abs_dof=float(np.max(np.abs(d))) if d.size else 0.0,
        dimension=stiffness.dimension,
    )
