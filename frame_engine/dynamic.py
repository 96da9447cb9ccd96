# frame_engine/dynamic.py
"""
DYNAMIC SOLVER: Natural Frequencies, Mode Shapes, Response Spectrum
===================================================================

PURPOSE:
--------
Free vibration of the undamped structure:

    K·φ = ω²·M·φ     (over the free DOFs only)

gives ω (rad/s), f = ω/2π (Hz), T = 1/f (s) and the mode shapes φ. The
fundamental mode is always mode 1.

Each reduced eigenvector is re-expanded to the full DOF vector with exact
zeros at the supports, so a mode shape lines up with the static displacement
layout (one row per node, translations + rotations).

RESPONSE SPECTRUM (optional):
-----------------------------
For ground shaking in one direction with influence vector r:

    Γₙ   = φₙᵀMr / φₙᵀMφₙ                 participation factor
    Mₙ*  = (φₙᵀMr)² / φₙᵀMφₙ              effective modal mass
    Vₙ   = Saₙ·g·Mₙ*                      modal base shear
    fₙ   = Γₙ·Saₙ·g·M·φₙ                  modal lateral forces

then Vₙ and fₙ are combined over the modes by SRSS (or CQC).

FAILURE MODES:
--------------
    ConvergenceError        eigensolver did not deliver the requested modes
                            (too many modes, iteration budget exhausted,
                            mass not positive definite)
    UnstableStructureError  negative / singular stiffness
"""

import logging
import numpy as np
from typing import Sequence

from .assembly import GlobalMass, GlobalStiffness
from .config import AnalysisConfig
from .kernel.modal import effective_modal_mass, modal_participation_factors, natural_frequencies
from .kernel.solve import expand_free
from .kernel.spectrum import cqc, srss
from .post import nodal_displacements
from .results import ModalResult, ModeInfo, ModeShape, ResponseSpectrumResult, StoryForce

_logger = logging.getLogger(__name__)

DIRECTIONS = {"x": 0, "y": 1, "z": 2}


def modal_directions(dimension: str) -> dict:
    """Translational directions available for excitation ("z" only in 3D)."""
    if dimension == "2d":
        return {"x": 0, "y": 1}
    return dict(DIRECTIONS)


def solve_modal(
    stiffness: GlobalStiffness,
    mass: GlobalMass,
    supports: Sequence[int],
    mode_count: int,
    *,
    solver: str = "auto",
    max_iterations: int = 1000,
    tol: float = 0.0,
    dense_limit: int = 300,
    cond_limit: float = 1e12,
) -> ModalResult:
    """
    Extract the lowest `mode_count` modes.

    Parameters:
    -----------
    stiffness, mass : GlobalStiffness, GlobalMass
        On the same DOF numbering (from the assembler)
    supports : sequence of int
        Restrained global DOF indices
    mode_count : int
        Number of modes to return. The result always has exactly this many.
    cond_limit : float
        Reduced stiffness with a larger condition number is unstable

    Raises:
    -------
    ValueError
        mode_count < 1, or every DOF is restrained
    ConvergenceError
        If the eigensolver cannot deliver mode_count modes; retry with fewer
    UnstableStructureError
        If the reduced stiffness is singular, ill-conditioned or not positive
        definite (missing supports, mechanisms)
    """
    dof = stiffness.dof
    if mass.M.shape != stiffness.K.shape:
        raise ValueError(f"Mass matrix {mass.M.shape} does not match stiffness {stiffness.K.shape}")
    active = AnalysisConfig(dimension=stiffness.dimension).active_dofs

    omega2, phi, free = natural_frequencies(
        stiffness.K,
        mass.M,
        supports,
        n_modes=mode_count,
        solver=solver,
        dense_limit=dense_limit,
        max_iterations=max_iterations,
        tol=tol,
        cond_limit=cond_limit,
    )

    omega = np.sqrt(omega2)
    freqs = omega / (2.0 * np.pi)
    modes = tuple(
        ModeInfo(
            mode=k + 1,
            frequency=float(freqs[k]),
            period=float(1.0 / freqs[k]),
            angular_frequency=float(omega[k]),
        )
        for k in range(len(freqs))
    )

    full = expand_free(phi, free, dof.ndof)
    shapes = tuple(
        ModeShape(
            mode=k + 1,
            vector=tuple(float(v) for v in full[:, k]),
            free_vector=tuple(float(v) for v in phi[:, k]),
            nodes=tuple(nodal_displacements(dof, full[:, k], active)),
        )
        for k in range(phi.shape[1])
    )

    participation = {}
    effective = {}
    for name, slot in modal_directions(stiffness.dimension).items():
        participation[name] = tuple(
            float(v) for v in modal_participation_factors(phi, mass.M, free, dof.dof_per_node, slot)
        )
        effective[name] = tuple(
            float(v) for v in effective_modal_mass(phi, mass.M, free, dof.dof_per_node, slot)
        )

    _logger.info(
        "Modal analysis: %d modes, f1 = %.4g Hz, %d free DOFs", len(modes), modes[0].frequency, free.size
    )
    return ModalResult(
        modes=modes,
        mode_shapes=shapes,
        participation_factors=participation,
        effective_masses=effective,
        total_mass=mass.total_mass,
        free_dofs=tuple(int(i) for i in free),
        dimension=stiffness.dimension,
    )


def response_spectrum_analysis(
    modal: ModalResult,
    mass: GlobalMass,
    spectrum,
    direction: str = "x",
    combination: str = "srss",
    damping: float = 0.05,
) -> ResponseSpectrumResult:
    """
    Peak base shear and lateral nodal forces for ground motion along `direction`.

    Parameters:
    -----------
    modal : ModalResult
        From solve_modal on the same mass
    mass : GlobalMass
    spectrum : ResponseSpectrum or DesignSpectrum
        Anything with sa(period) in g and a `g` attribute
    direction : "x", "y" or "z"
    combination : "srss" or "cqc"
    damping : float
        Damping ratio for the CQC correlation coefficients

    Returns:
    --------
    ResponseSpectrumResult
        story_forces holds one combined force per node whose DOF in that
        direction is free.
    """
    directions = modal_directions(modal.dimension)
    if direction not in directions:
        raise ValueError(f"direction must be one of {sorted(directions)}, got {direction!r}")
    if combination not in ("srss", "cqc"):
        raise ValueError(f"combination must be 'srss' or 'cqc', got {combination!r}")

    dof = mass.dof
    slot = directions[direction]
    free = np.asarray(modal.free_dofs, dtype=int)
    Mff = mass.M[np.ix_(free, free)]
    phi = np.column_stack([np.asarray(s.free_vector) for s in modal.mode_shapes])

    gamma = np.asarray(modal.participation_factors[direction])
    meff = np.asarray(modal.effective_masses[direction])
    sa = np.array([spectrum.sa(m.period) for m in modal.modes], dtype=float)
    omegas = [m.angular_frequency for m in modal.modes]

    modal_shear = sa * spectrum.g * meff

    # lateral forces on the free DOFs of this direction, one row per mode
    in_direction = free % dof.dof_per_node == slot
    modal_forces = (gamma * sa * spectrum.g)[:, None] * (Mff @ phi).T
    modal_forces = modal_forces[:, in_direction]

    if combination == "cqc":
        base_shear = float(cqc(modal_shear, omegas, damping))
        node_forces = cqc(modal_forces, omegas, damping)
    else:
        base_shear = float(srss(modal_shear))
        node_forces = srss(modal_forces)

    story = tuple(
        StoryForce(dof.locate(g)[0], float(force))
        for g, force in zip(free[in_direction], node_forces)
    )

    _logger.info("Response spectrum (%s, %s): base shear %.4g N", direction, combination.upper(), base_shear)
    return ResponseSpectrumResult(
        direction=direction,
        combination=combination,
        spectral_accelerations=tuple(float(v) for v in sa),
        modal_base_shears=tuple(float(v) for v in modal_shear),
        base_shear=base_shear,
        story_forces=story,
    )
