# frame_engine/v3d/elements.py
"""
3D FRAME ELEMENT: 12×12 Stiffness and Mass from Direction Cosines
=================================================================

PURPOSE:
--------
This module computes the matrices of a 2-node 3D frame element (Euler–Bernoulli
beam with axial, torsion and biaxial bending). Each node carries 6 DOFs:

    [ux, uy, uz, rx, ry, rz]

so one element contributes a 12×12 block to the global system.

LOCAL AXES:
-----------
    x: along the member, node i → node j
    y: perpendicular to x, in the vertical plane through the member
       (the global Z axis projected off x). For vertical members, where that
       plane is undefined, the global X axis is used instead.
    z: x × y (right-handed)

An optional roll angle turns y and z about x.

    Horizontal beam along X:   x = X,  y = Z,  z = −Y
    Column along +Z:           x = Z,  y = X,  z =  Y

Bending in the local x-y plane uses Iz, bending in the local x-z plane uses Iy
(see frame_engine.section for which section dimension is which).

TRANSFORMATION:
---------------
With R the 3×3 matrix whose rows are the local axes in global components,

    T = blockdiag(R, R, R, R)          (12×12)
    k_global = Tᵀ · k_local · T

The same T carries global displacements into local ones during force recovery:

    d_local = T · d_global,   f_local = k_local · d_local
"""

import numpy as np
from typing import Tuple

from ..model import Node


def element_geometry_3d(ni: Node, nj: Node, element_id=None) -> Tuple[float, np.ndarray]:
    """
    Length and unit direction vector (l, m, n) of a member.

    Raises:
    -------
    ValueError
        If the nodes coincide (zero length)
    """
    d = np.array([nj.x - ni.x, nj.y - ni.y, nj.z - ni.z], dtype=float)
    L = float(np.sqrt(d @ d))
    if L <= 0.0:
        raise ValueError(
            f"Element {element_id} has zero length (nodes {ni.id} and {nj.id} "
            f"at same location: ({ni.x}, {ni.y}, {ni.z}))"
        )
    return L, d / L


def frame3d_rotation(direction: np.ndarray, roll: float = 0.0) -> np.ndarray:
    """
    3×3 rotation matrix whose rows are the local x, y, z axes.

    Examples:
    ---------
    >>> frame3d_rotation(np.array([1.0, 0.0, 0.0]))[1].tolist()
    [0.0, 0.0, 1.0]
    """
    x = np.asarray(direction, dtype=float)
    Z = np.array([0.0, 0.0, 1.0])

    if abs(x @ Z) > 1.0 - 1e-9:
        ref = np.array([1.0, 0.0, 0.0])
    else:
        ref = Z

    y = ref - (ref @ x) * x
    y /= np.linalg.norm(y)
    z = np.cross(x, y)

    if roll:
        c, s = np.cos(roll), np.sin(roll)
        y, z = c * y + s * z, -s * y + c * z

    return np.vstack([x, y, z])


def frame3d_transform(R: np.ndarray) -> np.ndarray:
    """12×12 block-diagonal transform from global to local DOFs."""
    T = np.zeros((12, 12), dtype=float)
    for k in range(4):
        T[3*k:3*k+3, 3*k:3*k+3] = R
    return T


def frame3d_local_stiffness(
    E: float, G: float, A: float, Iy: float, Iz: float, J: float, L: float
) -> np.ndarray:
    """
    Local 12×12 stiffness matrix.

    DOF order: [u1, v1, w1, θx1, θy1, θz1, u2, v2, w2, θx2, θy2, θz2]

    Axial EA/L, torsion GJ/L, and the EI/L³ family for each bending plane.
    The x-z plane terms carry the opposite rotation sign because a positive
    θy lifts w downwards along +x.
    """
    L2 = L * L
    L3 = L2 * L
    k = np.zeros((12, 12), dtype=float)

    # Axial
    EA_L = E * A / L
    k[0, 0] = k[6, 6] = EA_L
    k[0, 6] = -EA_L

    # Torsion
    GJ_L = G * J / L
    k[3, 3] = k[9, 9] = GJ_L
    k[3, 9] = -GJ_L

    # Bending in x-y plane (v, θz): Iz
    EIz = E * Iz
    k[1, 1] = k[7, 7] = 12 * EIz / L3
    k[1, 7] = -12 * EIz / L3
    k[1, 5] = k[1, 11] = 6 * EIz / L2
    k[5, 7] = k[7, 11] = -6 * EIz / L2
    k[5, 5] = k[11, 11] = 4 * EIz / L
    k[5, 11] = 2 * EIz / L

    # Bending in x-z plane (w, θy): Iy
    EIy = E * Iy
    k[2, 2] = k[8, 8] = 12 * EIy / L3
    k[2, 8] = -12 * EIy / L3
    k[2, 4] = k[2, 10] = -6 * EIy / L2
    k[4, 8] = k[8, 10] = 6 * EIy / L2
    k[4, 4] = k[10, 10] = 4 * EIy / L
    k[4, 10] = 2 * EIy / L

    # Mirror the upper triangle
    k = np.triu(k) + np.triu(k, 1).T
    return k


def frame3d_consistent_mass(rho: float, A: float, Iy: float, Iz: float, L: float) -> np.ndarray:
    """
    Local 12×12 consistent mass matrix (same DOF order as the stiffness).

    Translational inertia from ρAL, torsional inertia from ρ(Iy+Iz)L, and the
    cubic Hermite mass in each bending plane.
    """
    m = rho * A * L
    Ip = Iy + Iz
    b = m / 420.0
    L2 = L * L
    M = np.zeros((12, 12), dtype=float)

    # Axial
    M[0, 0] = M[6, 6] = m / 3.0
    M[0, 6] = m / 6.0

    # Torsion
    M[3, 3] = M[9, 9] = rho * Ip * L / 3.0
    M[3, 9] = rho * Ip * L / 6.0

    # x-y plane (v, θz)
    M[1, 1] = M[7, 7] = 156 * b
    M[1, 7] = 54 * b
    M[1, 5] = 22 * L * b
    M[1, 11] = -13 * L * b
    M[5, 7] = 13 * L * b
    M[7, 11] = -22 * L * b
    M[5, 5] = M[11, 11] = 4 * L2 * b
    M[5, 11] = -3 * L2 * b

    # x-z plane (w, θy), rotation sign flipped
    M[2, 2] = M[8, 8] = 156 * b
    M[2, 8] = 54 * b
    M[2, 4] = -22 * L * b
    M[2, 10] = 13 * L * b
    M[4, 8] = -13 * L * b
    M[8, 10] = 22 * L * b
    M[4, 4] = M[10, 10] = 4 * L2 * b
    M[4, 10] = -3 * L2 * b

    M = np.triu(M) + np.triu(M, 1).T
    return M


def frame3d_lumped_mass(rho: float, A: float, Iy: float, Iz: float, L: float) -> np.ndarray:
    """
    Diagonal (HRZ) lumped mass in local coordinates.

    Half the element mass on each translation, m·L²/78 on each bending
    rotation and ρ(Iy+Iz)L/2 on each torsional rotation.
    """
    m = rho * A * L
    rot = m * L * L / 78.0
    tor = rho * (Iy + Iz) * L / 2.0
    node = [m / 2, m / 2, m / 2, tor, rot, rot]
    return np.diag(node + node).astype(float)
