# frame_engine/v3d - 3D frame element
"""
3D frame element matrices (12×12 stiffness and mass, direction-cosine
transformation). See elements.py for the local axis convention.
"""

from .elements import (
    element_geometry_3d,
    frame3d_consistent_mass,
    frame3d_local_stiffness,
    frame3d_lumped_mass,
    frame3d_rotation,
    frame3d_transform,
)

__all__ = [
    'element_geometry_3d',
    'frame3d_rotation',
    'frame3d_transform',
    'frame3d_local_stiffness',
    'frame3d_consistent_mass',
    'frame3d_lumped_mass',
]
