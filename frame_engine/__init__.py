# frame_engine - Structural analysis engine for 2-node frame models
"""
FRAME ENGINE: Static and Modal Analysis of Frame Structures
===========================================================

This package provides:
- Model types (nodes, elements, materials, sections, supports, loads)
- Model validation before any numerical work
- 3D (6 DOF/node) and 2D-reduced (3 DOF/node) frame assembly
- Linear static analysis: displacements, end forces, stresses, reactions
- Modal analysis: frequencies, mode shapes, participation, response spectrum

ARCHITECTURE:
-------------
    kernel/         Dimension-agnostic core (DOF indexing, assembly, solve, eigen, spectrum)
    v3d/            3D frame element matrices
    model.py        Input types
    section.py      Section property derivation
    catalog.py      Material presets and standard sections
    validate.py     Model integrity checks
    config.py       AnalysisConfig (per-call numerical settings)
    elements.py     2D frame element matrices
    assembly.py     Model → global K, M, F
    post.py         Force / stress / reaction recovery
    solve.py        Static solver
    dynamic.py      Dynamic solver
    results.py      Result types, dict / DataFrame export
    engine.py       analyze, analyze_modal, analyze_batch

USAGE:
------
    from frame_engine import analyze, StructuralModel, Node, Element, ...
    result = analyze(model)
    result.to_dict()
"""

from .config import AnalysisConfig, DEFAULT_CONFIG
from .engine import analyze, analyze_batch, analyze_modal
from .kernel import (
    AnalysisError,
    ConvergenceError,
    DesignSpectrum,
    MechanismError,
    NumericOverflowError,
    ResponseSpectrum,
    UnstableStructureError,
    design_spectrum,
)
from .model import (
    Element,
    ElementType,
    Material,
    MaterialKind,
    NodalLoad,
    Node,
    PointLoad,
    Section,
    SectionShape,
    StructuralModel,
    Supports,
)
from .results import AnalysisResult, ModalResult, ResponseSpectrumResult
from .validate import ValidationError, Violation, validate

__version__ = "0.1.0"
