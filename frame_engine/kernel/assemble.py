# frame_engine/kernel/assemble.py
"""
ASSEMBLY: Dimension-Agnostic Global Matrix Assembly
===================================================

PURPOSE:
--------
The scatter-add operation that builds global K (or M) from element-level
data. Assembly does not care about the element type; it only needs

- the total number of DOFs
- for each element: its DOF map and its matrix in GLOBAL coordinates

Whether the element is a 2D frame (6×6) or a 3D frame (12×12), the logic is
identical.

THE ONE INVARIANT:
------------------
Entries ACCUMULATE. Two elements meeting at a node both add their stiffness to
that node's rows/columns; nothing ever overwrites.

USAGE:
------
    contributions = []
    for frame in frames:
        dof_map = dof.element_dof_map([frame.ni, frame.nj])
        contributions.append((dof_map, frame.k_global))

    K = assemble_global_K(dof.ndof, contributions)
"""

import numpy as np
from typing import Iterable, List, Sequence, Tuple


def assemble_global_K(
    ndof: int,
    contributions: Iterable[Tuple[Sequence[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global square matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        K[dof_map, dof_map] += ke

    Used for both stiffness and mass (the operation is the same).

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system
    contributions : iterable of (dof_map, ke)
        dof_map: global DOF indices of the element, no repeats
        ke: element matrix in global coordinates, shape (len(dof_map), len(dof_map))

    Returns:
    --------
    np.ndarray
        Global matrix, shape (ndof, ndof)
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)
        if ke.shape != (n_element_dofs, n_element_dofs):
            raise ValueError(
                f"Element matrix shape {ke.shape} doesn't match dof_map length {n_element_dofs}"
            )
        idx = np.asarray(dof_map, dtype=int)
        K[np.ix_(idx, idx)] += ke

    return K


def add_nodal_load(
    F: np.ndarray,
    node_dofs: List[int],
    load_vector: Sequence[float],
) -> None:
    """
    Add a nodal load to the global load vector (in-place).

    Parameters:
    -----------
    F : np.ndarray
        Global load vector (modified in-place)
    node_dofs : List[int]
        Global DOF indices of the node (DOFManager.node_dofs)
    load_vector : sequence of float
        Load components in the node's DOF order
        - 2D frame: [Fx, Fy, Mz]
        - 3D frame: [Fx, Fy, Fz, Mx, My, Mz]

    Example:
    --------
    >>> F = np.zeros(6)
    >>> add_nodal_load(F, [3, 4, 5], [1000.0, 0.0, 0.0])
    >>> float(F[3])
    1000.0
    """
    if len(load_vector) != len(node_dofs):
        raise ValueError(f"Load has {len(load_vector)} components for {len(node_dofs)} DOFs")
    for dof, val in zip(node_dofs, load_vector):
        F[dof] += val
