# frame_engine/results.py
"""
Analysis results: plain, fully-owned values with no link back to the model.

Every result converts to a JSON-ready dict (`to_dict`, camelCase keys for the
UI/report consumers) and to pandas DataFrames for tabular work.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Tuple

import pandas as pd

from .kernel.solve import (
    AnalysisError,
    ConvergenceError,
    NumericOverflowError,
    UnstableStructureError,
)
from .model import DOF_NAMES


_ERRORS = {
    cls.kind: cls
    for cls in (AnalysisError, UnstableStructureError, ConvergenceError, NumericOverflowError)
}


@dataclass(frozen=True)
class ErrorInfo:
    """Why an analysis is marked invalid."""
    kind: str
    message: str
    node_ids: Tuple[Hashable, ...] = ()

    @classmethod
    def from_exception(cls, exc: AnalysisError, node_ids=()) -> "ErrorInfo":
        return cls(kind=exc.kind, message=str(exc), node_ids=tuple(node_ids))

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "nodeIds": list(self.node_ids)}


@dataclass(frozen=True)
class NodeDisplacement:
    node_id: Hashable
    ux: float = 0.0
    uy: float = 0.0
    uz: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0

    @property
    def translation(self) -> float:
        return (self.ux**2 + self.uy**2 + self.uz**2) ** 0.5

    def as_tuple(self) -> Tuple[float, ...]:
        return (self.ux, self.uy, self.uz, self.rx, self.ry, self.rz)

    def to_dict(self) -> dict:
        return {"nodeId": self.node_id, **dict(zip(DOF_NAMES, self.as_tuple()))}


@dataclass(frozen=True)
class EndForces:
    """
    Internal actions at one element end, local axes.
    n > 0 is tension; vy, vz shear; t torsion; my, mz bending moments.
    """
    n: float = 0.0
    vy: float = 0.0
    vz: float = 0.0
    t: float = 0.0
    my: float = 0.0
    mz: float = 0.0

    def to_dict(self) -> dict:
        return {"nx": self.n, "vy": self.vy, "vz": self.vz, "tx": self.t, "my": self.my, "mz": self.mz}


@dataclass(frozen=True)
class ElementForces:
    element_id: Hashable
    element_type: str
    i: EndForces
    j: EndForces

    def to_dict(self) -> dict:
        return {"elementId": self.element_id, "type": self.element_type,
                "i": self.i.to_dict(), "j": self.j.to_dict()}


@dataclass(frozen=True)
class ElementStress:
    """
    Section stresses (Pa). `peak` is the superposition |N|/A + |My|/Sy + |Mz|/Sz
    at the worse end. `utilization` is peak / (0.6·fy), None without fy.
    """
    element_id: Hashable
    element_type: str
    axial: float
    bending_y: float
    bending_z: float
    shear: float
    peak: float
    utilization: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "elementId": self.element_id,
            "type": self.element_type,
            "axialStress": self.axial,
            "bendingStressY": self.bending_y,
            "bendingStressZ": self.bending_z,
            "shearStress": self.shear,
            "peakStress": self.peak,
            "utilization": self.utilization,
        }


@dataclass(frozen=True)
class Reaction:
    node_id: Hashable
    fx: float = 0.0
    fy: float = 0.0
    fz: float = 0.0
    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0

    def to_dict(self) -> dict:
        return {"nodeId": self.node_id, "fx": self.fx, "fy": self.fy, "fz": self.fz,
                "mx": self.mx, "my": self.my, "mz": self.mz}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Static analysis output.

    is_valid is False when the structure is unstable or a value went
    non-finite; `error` then says which, and displacements/forces are zero.
    """
    displacements: Tuple[NodeDisplacement, ...] = ()
    forces: Tuple[ElementForces, ...] = ()
    stresses: Tuple[ElementStress, ...] = ()
    reactions: Tuple[Reaction, ...] = ()
    is_valid: bool = True
    max_displacement: float = 0.0
    max_stress: float = 0.0
    max_abs_dof: float = 0.0  # largest |value| over every DOF, rotations included
    error: Optional[ErrorInfo] = None
    dimension: str = "3d"

    @classmethod
    def empty(cls, dimension: str = "3d") -> "AnalysisResult":
        return cls(dimension=dimension)

    def displacement_of(self, node_id: Hashable) -> NodeDisplacement:
        for d in self.displacements:
            if d.node_id == node_id:
                return d
        raise KeyError(f"No displacement for node {node_id!r}")

    def forces_of(self, element_id: Hashable) -> ElementForces:
        for f in self.forces:
            if f.element_id == element_id:
                return f
        raise KeyError(f"No forces for element {element_id!r}")

    def raise_for_error(self) -> None:
        """Re-raise the recorded analysis error, if any."""
        if self.error is None:
            return
        raise _ERRORS.get(self.error.kind, AnalysisError)(self.error.message)

    def to_dict(self) -> dict:
        return {
            "displacements": [d.to_dict() for d in self.displacements],
            "forces": [f.to_dict() for f in self.forces],
            "stresses": [s.to_dict() for s in self.stresses],
            "reactions": [r.to_dict() for r in self.reactions],
            "isValid": self.is_valid,
            "maxDisplacement": self.max_displacement,
            "maxStress": self.max_stress,
            "maxAbsDof": self.max_abs_dof,
            "error": self.error.to_dict() if self.error else None,
        }

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """Displacements, forces, stresses and reactions as DataFrames."""
        forces = []
        for f in self.forces:
            for end, ef in (("i", f.i), ("j", f.j)):
                forces.append({"element_id": f.element_id, "type": f.element_type, "end": end,
                               "n": ef.n, "vy": ef.vy, "vz": ef.vz, "t": ef.t, "my": ef.my, "mz": ef.mz})
        return {
            "displacements": pd.DataFrame(
                [{"node_id": d.node_id, **dict(zip(DOF_NAMES, d.as_tuple()))} for d in self.displacements],
                columns=["node_id", *DOF_NAMES],
            ),
            "forces": pd.DataFrame(forces, columns=["element_id", "type", "end", "n", "vy", "vz", "t", "my", "mz"]),
            "stresses": pd.DataFrame(
                [{"element_id": s.element_id, "type": s.element_type, "axial": s.axial,
                  "bending_y": s.bending_y, "bending_z": s.bending_z, "shear": s.shear,
                  "peak": s.peak, "utilization": s.utilization} for s in self.stresses],
                columns=["element_id", "type", "axial", "bending_y", "bending_z", "shear", "peak", "utilization"],
            ),
            "reactions": pd.DataFrame(
                [r.to_dict() for r in self.reactions],
                columns=["nodeId", "fx", "fy", "fz", "mx", "my", "mz"],
            ).rename(columns={"nodeId": "node_id"}),
        }


@dataclass(frozen=True)
class ModeInfo:
    mode: int  # 1-based, 1 = fundamental
    frequency: float  # Hz
    period: float  # s
    angular_frequency: float  # rad/s

    def to_dict(self) -> dict:
        return {"mode": self.mode, "frequency": self.frequency, "period": self.period,
                "angularFrequency": self.angular_frequency}


@dataclass(frozen=True)
class ModeShape:
    """
    One mass-normalized mode shape.

    vector: full DOF space, exact zeros at restrained DOFs
    free_vector: the reduced eigenvector over the free DOFs only
    nodes: per-node view of `vector`
    """
    mode: int
    vector: Tuple[float, ...]
    free_vector: Tuple[float, ...]
    nodes: Tuple[NodeDisplacement, ...]

    def to_dict(self) -> dict:
        return {"mode": self.mode, "shape": [n.to_dict() for n in self.nodes]}


@dataclass(frozen=True)
class StoryForce:
    node_id: Hashable
    force: float

    def to_dict(self) -> dict:
        return {"nodeId": self.node_id, "force": self.force}


@dataclass(frozen=True)
class ResponseSpectrumResult:
    """Peak response estimate for one excitation direction."""
    direction: str
    combination: str
    spectral_accelerations: Tuple[float, ...]  # Sa per mode (g)
    modal_base_shears: Tuple[float, ...]  # N, signed per mode
    base_shear: float  # combined, N
    story_forces: Tuple[StoryForce, ...]

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "combination": self.combination,
            "spectralAccelerations": [
                {"mode": k + 1, "spectralAcceleration": sa} for k, sa in enumerate(self.spectral_accelerations)
            ],
            "modalBaseShears": list(self.modal_base_shears),
            "baseShear": self.base_shear,
            "storyForces": [s.to_dict() for s in self.story_forces],
        }


@dataclass(frozen=True)
class ModalResult:
    """
    Natural frequencies (ascending), mode shapes, and per-direction modal
    participation factors and effective masses ("x", "y", "z" keys; only
    "x", "y" in 2D).
    """
    modes: Tuple[ModeInfo, ...]
    mode_shapes: Tuple[ModeShape, ...]
    participation_factors: Dict[str, Tuple[float, ...]] = field(default_factory=dict)
    effective_masses: Dict[str, Tuple[float, ...]] = field(default_factory=dict)
    total_mass: float = 0.0
    response: Optional[ResponseSpectrumResult] = None
    free_dofs: Tuple[int, ...] = ()
    dimension: str = "3d"

    @property
    def frequencies(self) -> List[float]:
        return [m.frequency for m in self.modes]

    @property
    def periods(self) -> List[float]:
        return [m.period for m in self.modes]

    def mass_ratio(self, direction: str) -> float:
        """Cumulative effective mass / total mass for the extracted modes."""
        if self.total_mass <= 0:
            return 0.0
        return sum(self.effective_masses.get(direction, ())) / self.total_mass

    def to_dict(self) -> dict:
        return {
            "frequencies": [m.to_dict() for m in self.modes],
            "modeShapes": [s.to_dict() for s in self.mode_shapes],
            "participationFactors": {k: list(v) for k, v in self.participation_factors.items()},
            "effectiveMasses": {k: list(v) for k, v in self.effective_masses.items()},
            "totalMass": self.total_mass,
            "responseSpectrum": self.response.to_dict() if self.response else None,
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per mode: frequency, period, participation and effective mass."""
        rows = []
        for k, m in enumerate(self.modes):
            row = {"mode": m.mode, "frequency_hz": m.frequency, "period_s": m.period}
            for direction, values in self.participation_factors.items():
                row[f"gamma_{direction}"] = values[k]
            for direction, values in self.effective_masses.items():
                row[f"meff_{direction}"] = values[k]
            rows.append(row)
        return pd.DataFrame(rows)
