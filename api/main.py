# api/main.py
"""
FastAPI backend - exposes the frame_engine analysis entry points as a REST API.
"""

import logging
from typing import List, Literal, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from frame_engine import (
    AnalysisConfig,
    AnalysisError,
    Element,
    ElementType,
    Material,
    MaterialKind,
    NodalLoad,
    Node,
    PointLoad,
    ResponseSpectrum,
    Section,
    SectionShape,
    StructuralModel,
    Supports,
    ValidationError,
    analyze,
    analyze_modal,
    design_spectrum,
)

_logger = logging.getLogger(__name__)

app = FastAPI(
    title="Frame Engine API",
    description="Static and modal analysis of 2-node frame models",
    version="0.1.0"
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Id = Union[int, str]


# =============================================================================
# Request Models
# =============================================================================

class SupportsData(BaseModel):
    """Restrained DOFs (true = held at zero)."""
    ux: bool = False
    uy: bool = False
    uz: bool = False
    rx: bool = False
    ry: bool = False
    rz: bool = False


class LoadData(BaseModel):
    """Nodal force (N) and moment (N·m) components."""
    fx: float = 0.0
    fy: float = 0.0
    fz: float = 0.0
    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0


class NodeData(BaseModel):
    id: Id
    x: float
    y: float
    z: float = 0.0
    supports: Optional[SupportsData] = None
    load: Optional[LoadData] = None


class MaterialData(BaseModel):
    id: Id
    E: float = Field(..., description="Elastic modulus (Pa)")
    G: Optional[float] = Field(None, description="Shear modulus (Pa)")
    poisson: Optional[float] = None
    density: float = Field(0.0, description="Mass density (kg/m³)")
    fy: Optional[float] = Field(None, description="Yield strength (Pa)")
    fu: Optional[float] = Field(None, description="Ultimate strength (Pa)")
    kind: MaterialKind = MaterialKind.STEEL


class SectionData(BaseModel):
    id: Id
    shape: SectionShape = SectionShape.RECTANGULAR
    width: Optional[float] = Field(None, description="Width b, or diameter (m)")
    height: Optional[float] = Field(None, description="Height h (m)")
    area: Optional[float] = None
    Iy: Optional[float] = None
    Iz: Optional[float] = None
    J: Optional[float] = None


class ElementData(BaseModel):
    id: Id
    ni: Id
    nj: Id
    material: Id
    section: Id
    type: ElementType = ElementType.BEAM
    roll: float = 0.0


class PointLoadData(BaseModel):
    node_id: Id
    load: LoadData


class ModelData(BaseModel):
    """Structural model, mirroring frame_engine.StructuralModel."""
    nodes: List[NodeData] = []
    elements: List[ElementData] = []
    materials: List[MaterialData] = []
    sections: List[SectionData] = []
    loads: List[PointLoadData] = []

    def to_model(self) -> StructuralModel:
        return StructuralModel(
            nodes=[
                Node(
                    id=n.id, x=n.x, y=n.y, z=n.z,
                    supports=Supports(**n.supports.model_dump()) if n.supports else None,
                    load=NodalLoad(**n.load.model_dump()) if n.load else None,
                )
                for n in self.nodes
            ],
            elements=[Element(**e.model_dump()) for e in self.elements],
            materials=[Material(**m.model_dump()) for m in self.materials],
            sections=[Section(**s.model_dump()) for s in self.sections],
            loads=[PointLoad(node_id=pl.node_id, load=NodalLoad(**pl.load.model_dump())) for pl in self.loads],
        )


class ConfigData(BaseModel):
    dimension: Literal["2d", "3d"] = "3d"
    cond_limit: float = Field(1e12, gt=0)
    n_modes: int = Field(5, ge=1, le=200)
    mass_formulation: Literal["lumped", "consistent"] = "consistent"
    eigen_solver: Literal["auto", "dense", "arpack"] = "auto"
    max_iterations: int = Field(1000, ge=1)


class SpectrumData(BaseModel):
    """Either a tabulated curve (periods + accelerations) or SDS/SD1 design parameters."""
    periods: Optional[List[float]] = None
    accelerations: Optional[List[float]] = Field(None, description="Spectral acceleration (g)")
    sds: Optional[float] = None
    sd1: Optional[float] = None
    tl: float = 8.0
    r: float = 1.0
    ie: float = 1.0

    def to_spectrum(self):
        if self.periods is not None and self.accelerations is not None:
            return ResponseSpectrum(tuple(self.periods), tuple(self.accelerations))
        if self.sds is not None and self.sd1 is not None:
            return design_spectrum(self.sds, self.sd1, tl=self.tl, r=self.r, ie=self.ie)
        raise ValueError("spectrum needs periods + accelerations, or sds + sd1")


class AnalyzeRequest(BaseModel):
    model: ModelData
    config: ConfigData = ConfigData()


class ModalRequest(AnalyzeRequest):
    spectrum: Optional[SpectrumData] = None
    direction: Literal["x", "y", "z"] = "x"
    combination: Literal["srss", "cqc"] = "srss"


# =============================================================================
# Helpers
# =============================================================================

def _validation_detail(e: ValidationError) -> dict:
    return {
        "message": str(e),
        "violations": [
            {"entity": v.entity, "entityId": v.entity_id, "rule": v.rule, "message": v.message}
            for v in e.violations
        ],
    }


def _config(data: ConfigData) -> AnalysisConfig:
    return AnalysisConfig(**data.model_dump())


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "Frame Engine API"}


@app.post("/api/analyze")
def run_analyze(request: AnalyzeRequest):
    """Linear static analysis. An unstable structure is a 200 with isValid=false."""
    try:
        result = analyze(request.model.to_model(), _config(request.config))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    return result.to_dict()


@app.post("/api/modal")
def run_modal(request: ModalRequest):
    """Natural frequencies, mode shapes and an optional response spectrum."""
    try:
        spectrum = request.spectrum.to_spectrum() if request.spectrum else None
        result = analyze_modal(
            request.model.to_model(),
            _config(request.config),
            spectrum=spectrum,
            direction=request.direction,
            combination=request.combination,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=_validation_detail(e))
    except (AnalysisError, ValueError) as e:
        _logger.warning("Modal analysis failed: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
