# frame_engine/kernel - Dimension-agnostic numerical core
"""
KERNEL: THE DIMENSION-AGNOSTIC FOUNDATION
=========================================

Assembly, solving and eigen extraction do not care whether the frame is the
2D-reduced (3 DOF/node) or full 3D (6 DOF/node) model. They only need:

- a map (node_id, local_dof) → global index   (dof.py)
- element matrices of any size                 (assemble.py)
- restrained DOF lists and load vectors        (solve.py, modal.py)

The element formulas live outside the kernel (frame_engine.elements for 2D,
frame_engine.v3d for 3D).
"""

from .dof import DOFManager
from .solve import (
    AnalysisError,
    ConvergenceError,
    MechanismError,
    NumericOverflowError,
    UnstableStructureError,
    solve_linear,
)
from .modal import natural_frequencies
from .spectrum import DesignSpectrum, ResponseSpectrum, design_spectrum

__all__ = [
    'DOFManager',
    'solve_linear',
    'natural_frequencies',
    'AnalysisError',
    'UnstableStructureError',
    'MechanismError',
    'ConvergenceError',
    'NumericOverflowError',
    'ResponseSpectrum',
    'DesignSpectrum',
    'design_spectrum',
]
