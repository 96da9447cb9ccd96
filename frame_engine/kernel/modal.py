# frame_engine/kernel/modal.py
"""Modal analysis: generalized eigenproblem, participation factors and effective modal mass."""

import numpy as np
import scipy.linalg
import scipy.sparse.linalg
from typing import Sequence, Tuple

from .solve import ConvergenceError, UnstableStructureError, check_reduced_stiffness, partition_dofs


def natural_frequencies(
    K: np.ndarray,
    M: np.ndarray,
    fixed_dofs: Sequence[int],
    n_modes: int = 5,
    solver: str = "auto",
    dense_limit: int = 300,
    max_iterations: int = 1000,
    tol: float = 0.0,
    cond_limit: float = 1e12,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compute the lowest natural frequencies and mode shapes.

    Solves the generalized eigenvalue problem: K·φ = ω²·M·φ

    Args:
        K: Global stiffness matrix
        M: Global mass matrix
        fixed_dofs: Constrained DOF indices
        n_modes: Number of modes to return
        solver: "dense" (scipy.linalg.eigh), "arpack" (shift-invert eigsh) or "auto"
        dense_limit: auto uses the dense solver up to this many free DOFs
        max_iterations: ARPACK iteration budget
        tol: ARPACK relative tolerance (0 = machine precision)
        cond_limit: Reduced stiffness with a larger condition number is unstable

    Returns:
        omega2: Eigenvalues ω² (rad²/s²), ascending
        mode_shapes: Reduced mode shape matrix (n_free x n_modes), φᵀ·Mff·φ = I
        free: Array of free DOF indices

    Raises:
        ValueError: If n_modes < 1 or there are no free DOFs
        ConvergenceError: If more modes are requested than the system has, M is
            not positive definite, or ARPACK runs out of iterations
        UnstableStructureError: If the reduced stiffness is singular or
            ill-conditioned (rigid-body modes), has non-positive eigenvalues,
            or cannot be factorized for shift-invert
    """
    if n_modes < 1:
        raise ValueError(f"n_modes must be >= 1, got {n_modes}")

    ndof = K.shape[0]
    free, _ = partition_dofs(ndof, fixed_dofs)
    n_free = free.size
    if n_free == 0:
        raise ValueError("No free DOFs - cannot compute modes")

    Kff = K[np.ix_(free, free)]
    Mff = M[np.ix_(free, free)]

    # Rigid-body modes would come back as zero frequencies
    check_reduced_stiffness(Kff, free, cond_limit)

    if solver == "auto":
        solver = "dense" if n_free <= dense_limit else "arpack"

    if solver == "dense":
        if n_modes > n_free:
            raise ConvergenceError(
                f"Requested {n_modes} modes but the system has only {n_free} free DOFs",
                requested=n_modes,
                converged=n_free,
            )
        try:
            eigenvalues, eigenvectors = scipy.linalg.eigh(Kff, Mff, subset_by_index=[0, n_modes - 1])
        except np.linalg.LinAlgError as e:
            raise ConvergenceError(
                f"Eigenvalue solve failed: {e}", requested=n_modes, converged=0
            ) from e
    else:
        # ARPACK cannot return all eigenpairs of the system
        if n_modes >= n_free:
            raise ConvergenceError(
                f"Requested {n_modes} modes but ARPACK can extract at most {n_free - 1}",
                requested=n_modes,
                converged=0,
            )
        try:
            eigenvalues, eigenvectors = scipy.sparse.linalg.eigsh(
                Kff, k=n_modes, M=Mff, sigma=0.0, which="LM", maxiter=max_iterations, tol=tol
            )
        except scipy.sparse.linalg.ArpackNoConvergence as e:
            raise ConvergenceError(
                f"Eigensolver did not converge in {max_iterations} iterations "
                f"({len(e.eigenvalues)} of {n_modes} modes)",
                requested=n_modes,
                converged=len(e.eigenvalues),
            ) from e
        except (RuntimeError, np.linalg.LinAlgError) as e:
            # Shift-invert factorizes Kff; a singular stiffness fails here
            raise UnstableStructureError(f"Cannot factorize reduced stiffness: {e}. Check supports.") from e
        order = np.argsort(eigenvalues)
        eigenvalues, eigenvectors = eigenvalues[order], eigenvectors[:, order]

    if not (np.all(np.isfinite(eigenvalues)) and np.all(np.isfinite(eigenvectors))):
        raise ConvergenceError("Eigensolver returned non-finite values", requested=n_modes, converged=0)

    # ω² must be strictly positive once the stiffness check has passed
    if np.any(eigenvalues <= 0.0):
        raise UnstableStructureError(
            f"Non-positive eigenvalue {eigenvalues.min():.3e}: reduced stiffness is not "
            f"positive definite. Check supports."
        )

    mode_shapes = normalize_modes(eigenvectors, Mff)
    return eigenvalues, mode_shapes, free


def normalize_modes(phi: np.ndarray, Mff: np.ndarray) -> np.ndarray:
    """
    Mass-normalize each column (φᵀMφ = 1) and flip its sign so the largest
    component is positive.
    """
    phi = np.array(phi, dtype=float, copy=True)
    for k in range(phi.shape[1]):
        m_star = phi[:, k] @ Mff @ phi[:, k]
        if m_star > 0:
            phi[:, k] /= np.sqrt(m_star)
        peak = np.argmax(np.abs(phi[:, k]))
        if phi[peak, k] < 0:
            phi[:, k] = -phi[:, k]
    return phi


def influence_vector(free_dofs: np.ndarray, dof_per_node: int, direction: int) -> np.ndarray:
    """
    Unit ground acceleration in one translational direction, over the free DOFs.

    direction is the local DOF slot of the translation (0=ux, 1=uy, 2=uz).

    >>> influence_vector(np.array([0, 1, 3, 4]), 3, 0).tolist()
    [1.0, 0.0, 1.0, 0.0]
    """
    free_dofs = np.asarray(free_dofs, dtype=int)
    return (free_dofs % dof_per_node == direction).astype(float)


def modal_participation_factors(
    mode_shapes: np.ndarray,
    M: np.ndarray,
    free_dofs: np.ndarray,
    dof_per_node: int,
    direction: int,
) -> np.ndarray:
    """
    Γₙ = φₙᵀ·M·r / φₙᵀ·M·φₙ for each mode.

    Measures how strongly each mode is excited by a uniform ground
    acceleration in the given direction.
    """
    Mff = M[np.ix_(free_dofs, free_dofs)]
    r = influence_vector(free_dofs, dof_per_node, direction)

    n_modes = mode_shapes.shape[1]
    participation = np.zeros(n_modes)
    for mode in range(n_modes):
        phi = mode_shapes[:, mode]
        m_star = phi @ Mff @ phi
        if m_star > 0:
            participation[mode] = (phi @ Mff @ r) / m_star
    return participation


def effective_modal_mass(
    mode_shapes: np.ndarray,
    M: np.ndarray,
    free_dofs: np.ndarray,
    dof_per_node: int,
    direction: int,
) -> np.ndarray:
    """
    Mₙ* = (φₙᵀ·M·r)² / φₙᵀ·M·φₙ for each mode.

    Summed over all modes this equals the unrestrained mass in that direction.
    """
    Mff = M[np.ix_(free_dofs, free_dofs)]
    r = influence_vector(free_dofs, dof_per_node, direction)

    n_modes = mode_shapes.shape[1]
    eff_mass = np.zeros(n_modes)
    for mode in range(n_modes):
        phi = mode_shapes[:, mode]
        m_star = phi @ Mff @ phi
        if m_star > 0:
            eff_mass[mode] = (phi @ Mff @ r) ** 2 / m_star
    return eff_mass
