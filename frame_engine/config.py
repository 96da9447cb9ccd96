# frame_engine/config.py
"""
Analysis configuration. Passed explicitly to every entry point; the engine
keeps no global settings.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisConfig:
    """Numerical settings for one analysis call."""

    # "3d": 6 DOF/node (ux, uy, uz, rx, ry, rz), 12x12 elements
    # "2d": x-y plane, 3 DOF/node (ux, uy, rz), 6x6 elements
    dimension: str = "3d"

    # Reduced stiffness with a larger condition number is treated as singular
    cond_limit: float = 1e12

    # Modal analysis
    n_modes: int = 5
    mass_formulation: str = "consistent"  # or "lumped"
    eigen_solver: str = "auto"  # "dense", "arpack", or "auto"
    dense_eigen_limit: int = 300  # auto switches to ARPACK above this many free DOFs
    max_iterations: int = 1000  # ARPACK iteration budget
    eigen_tol: float = 0.0  # ARPACK tolerance, 0 = machine precision

    def __post_init__(self):
        if self.dimension not in ("2d", "3d"):
            raise ValueError(f"dimension must be '2d' or '3d', got {self.dimension!r}")
        if self.mass_formulation not in ("lumped", "consistent"):
            raise ValueError(f"mass_formulation must be 'lumped' or 'consistent', got {self.mass_formulation!r}")
        if self.eigen_solver not in ("auto", "dense", "arpack"):
            raise ValueError(f"eigen_solver must be 'auto', 'dense' or 'arpack', got {self.eigen_solver!r}")
        if self.cond_limit <= 0:
            raise ValueError(f"cond_limit must be positive, got {self.cond_limit}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")

    @property
    def dof_per_node(self) -> int:
        return 6 if self.dimension == "3d" else 3

    @property
    def active_dofs(self) -> tuple:
        """Indices into (ux, uy, uz, rx, ry, rz) that the analysis keeps."""
        return (0, 1, 2, 3, 4, 5) if self.dimension == "3d" else (0, 1, 5)


DEFAULT_CONFIG = AnalysisConfig()
