# frame_engine/elements.py
"""
Planar (x-y) frame element: stiffness, rotation and mass.

Local DOF order at each end is [u, v, θz]; an element vector is
[ui, vi, θzi, uj, vj, θzj]. The 2D analysis only ever sees Iz.
"""

import numpy as np
from typing import Tuple

from .model import Node


def element_geometry(ni: Node, nj: Node, element_id=None) -> Tuple[float, float, float]:
    """Length and direction cosines (c, s) of the member projected on x-y."""
    dx, dy = nj.x - ni.x, nj.y - ni.y
    L = float(np.hypot(dx, dy))
    if L <= 0.0:
        raise ValueError(f"Element {element_id} has zero length in the x-y plane.")
    return L, dx / L, dy / L


def frame2d_local_stiffness(E: float, A: float, I: float, L: float) -> np.ndarray:
    """Euler-Bernoulli stiffness in local coordinates (x along the member)."""
    k = np.zeros((6, 6))

    axial = E * A / L
    k[np.ix_([0, 3], [0, 3])] = axial * np.array([[1.0, -1.0], [-1.0, 1.0]])

    # bending block on [vi, θi, vj, θj]
    bend = (E * I / L**3) * np.array([
        [12.0,   6*L,  -12.0,   6*L],
        [6*L, 4*L*L,   -6*L, 2*L*L],
        [-12.0, -6*L,   12.0,  -6*L],
        [6*L, 2*L*L,   -6*L, 4*L*L],
    ])
    k[np.ix_([1, 2, 4, 5], [1, 2, 4, 5])] = bend
    return k


def frame2d_transform(c: float, s: float) -> np.ndarray:
    """Global-to-local rotation for both ends (6×6, block diagonal)."""
    r = np.array([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]])
    return np.kron(np.eye(2), r)


def frame2d_consistent_mass(rho: float, A: float, L: float) -> np.ndarray:
    """
    Consistent mass matrix in local coords, same DOF order as the stiffness.
    Axial part ρAL/6·[2 1; 1 2], bending part the cubic Hermite mass.
    """
    m = rho * A * L
    a = m / 6.0
    b = m / 420.0
    L2 = L * L
    M = np.array([
        [2*a,      0.0,       0.0,   a,       0.0,       0.0],
        [0.0,   156*b,    22*L*b,  0.0,     54*b,   -13*L*b],
        [0.0,  22*L*b,    4*L2*b,  0.0,   13*L*b,   -3*L2*b],
        [  a,      0.0,       0.0, 2*a,       0.0,       0.0],
        [0.0,     54*b,    13*L*b, 0.0,    156*b,   -22*L*b],
        [0.0, -13*L*b,   -3*L2*b,  0.0,  -22*L*b,    4*L2*b],
    ], dtype=float)
    return M


def frame2d_lumped_mass(rho: float, A: float, L: float) -> np.ndarray:
    """
    Diagonal (HRZ) lumped mass: half the element mass on each translation,
    m·L²/78 on each rotation.
    """
    m = rho * A * L
    rot = m * L * L / 78.0
    return np.diag([m / 2, m / 2, rot, m / 2, m / 2, rot]).astype(float)
