# frame_engine/kernel/solve.py
"""Linear system solver with boundary conditions, mechanism detection, and the solver error taxonomy."""

import numpy as np
import scipy.linalg
from typing import List, Optional, Sequence, Tuple


class AnalysisError(RuntimeError):
    """Base class for failures detected while solving a (valid) model."""
    kind = "analysis_error"

    def __init__(self, message: str, dofs: Optional[Sequence[int]] = None):
        super().__init__(message)
        self.dofs = list(dofs or [])


class UnstableStructureError(AnalysisError):
    """Raised when the reduced stiffness is singular or ill-conditioned (mechanism, missing supports)."""
    kind = "unstable_structure"

    def __init__(self, message: str, dofs: Optional[Sequence[int]] = None, cond: float = float("inf")):
        super().__init__(message, dofs)
        self.cond = cond


# Historical name used throughout the kernel
MechanismError = UnstableStructureError


class ConvergenceError(AnalysisError):
    """Raised when the eigensolver does not deliver the requested modes."""
    kind = "convergence"

    def __init__(self, message: str, requested: int = 0, converged: int = 0):
        super().__init__(message)
        self.requested = requested
        self.converged = converged


class NumericOverflowError(AnalysisError):
    """Raised when inputs or intermediate results are not finite."""
    kind = "numeric_overflow"


def partition_dofs(ndof: int, fixed_dofs: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split 0..ndof-1 into (free, fixed) index arrays, both sorted.

    >>> free, fixed = partition_dofs(6, [0, 1, 2])
    >>> free.tolist(), fixed.tolist()
    ([3, 4, 5], [0, 1, 2])
    """
    fixed = np.array(sorted(set(int(i) for i in fixed_dofs)), dtype=int)
    if fixed.size and (fixed[0] < 0 or fixed[-1] >= ndof):
        raise IndexError(f"Fixed DOF index out of range for ndof={ndof}")
    mask = np.ones(ndof, dtype=bool)
    mask[fixed] = False
    free = np.flatnonzero(mask)
    return free, fixed


def expand_free(values: np.ndarray, free: np.ndarray, ndof: int) -> np.ndarray:
    """
    Re-insert a reduced vector (or column stack) into the full DOF space,
    leaving exact zeros at the restrained DOFs.
    """
    values = np.asarray(values, dtype=float)
    if values.ndim == 1:
        full = np.zeros(ndof, dtype=float)
        full[free] = values
    else:
        full = np.zeros((ndof, values.shape[1]), dtype=float)
        full[free, :] = values
    return full


def unrestrained_dofs_without_stiffness(Kff: np.ndarray, free: np.ndarray, rtol: float = 1e-12) -> List[int]:
    """Global indices of free DOFs whose diagonal stiffness is (numerically) zero."""
    if Kff.size == 0:
        return []
    diag = np.abs(np.diag(Kff))
    scale = diag.max() if diag.max() > 0 else 1.0
    return [int(free[i]) for i in np.flatnonzero(diag <= rtol * scale)]


def softest_mode_dofs(Kff: np.ndarray, free: np.ndarray, fraction: float = 0.5) -> List[int]:
    """
    Global indices of the free DOFs that dominate the softest deformation
    pattern of Kff (its lowest eigenvector). For a mechanism this is the
    near-null vector, so the returned DOFs locate the unrestrained motion.
    """
    if Kff.size == 0:
        return []
    _, vectors = np.linalg.eigh(Kff)
    weight = np.abs(vectors[:, 0])
    return [int(free[i]) for i in np.flatnonzero(weight >= fraction * weight.max())]


def check_reduced_stiffness(Kff: np.ndarray, free: np.ndarray, cond_limit: float = 1e12) -> float:
    """
    Reject a singular or ill-conditioned reduced stiffness.

    Returns:
        cond: Condition number of Kff

    Raises:
        UnstableStructureError: If a free DOF has no stiffness or
            cond(Kff) > cond_limit. `dofs` names the offending DOFs.
    """
    dead = unrestrained_dofs_without_stiffness(Kff, free)
    if dead:
        raise UnstableStructureError(
            f"Unstable system: {len(dead)} free DOF(s) have no stiffness. Check supports.",
            dofs=dead,
        )

    cond = np.linalg.cond(Kff)
    if not np.isfinite(cond) or cond > cond_limit:
        raise UnstableStructureError(
            f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {cond_limit:.0e}.",
            dofs=softest_mode_dofs(Kff, free),
            cond=float(cond),
        )
    return float(cond)


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    cond_limit: float = 1e12
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with fixed boundary conditions via partitioning.

    Args:
        K: Global stiffness matrix (ndof x ndof)
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices (displacement = 0)
        cond_limit: Max condition number before raising UnstableStructureError

    Returns:
        d: Displacement vector (ndof,), exact zeros at fixed DOFs
        R: Reaction vector (ndof,) = K·d − F
        free: Array of free DOF indices

    Raises:
        NumericOverflowError: If K or F contain NaN/Inf, or the solution does
        UnstableStructureError: If the reduced system is singular,
            not positive definite, or cond > cond_limit
    """
    ndof = K.shape[0]
    if not np.all(np.isfinite(F)):
        raise NumericOverflowError("Load vector contains non-finite values")
    if not np.all(np.isfinite(K)):
        raise NumericOverflowError("Stiffness matrix contains non-finite values")

    free, _ = partition_dofs(ndof, fixed_dofs)

    # Fully restrained: nothing to solve
    if free.size == 0:
        d = np.zeros(ndof, dtype=float)
        return d, K @ d - F, free

    # Extract reduced system
    Kff = K[np.ix_(free, free)]
    Ff = F[free]

    cond = check_reduced_stiffness(Kff, free, cond_limit)

    # Symmetric positive definite for any properly supported structure
    try:
        factor = scipy.linalg.cho_factor(Kff)
    except np.linalg.LinAlgError as e:
        raise UnstableStructureError(
            f"Reduced stiffness is not positive definite ({e}). Check supports.",
            dofs=softest_mode_dofs(Kff, free),
            cond=float(cond),
        ) from e
    df = scipy.linalg.cho_solve(factor, Ff)

    if not np.all(np.isfinite(df)):
        raise NumericOverflowError("Solution contains non-finite displacements")

    # Assemble full displacement
    d = expand_free(df, free, ndof)

    # Compute reactions: R = K·d - F
    R = K @ d - F

    return d, R, free
