# frame_engine/engine.py
"""
ENTRY POINTS
============

    analyze(model, config)        validate → assemble → solve_static
    analyze_modal(model, config)  validate → assemble K, M → solve_modal [→ spectrum]
    analyze_batch(models, config) many independent static analyses, one DataFrame

These are pure functions: the engine keeps no state between calls and never
mutates the model, so independent analyses can run on separate threads
without locks.

PHASES:
-------
A caller that wants progress feedback passes on_phase; it is called with
"validate", "assemble", "solve" (and "spectrum" for a modal run with a
spectrum) as each phase completes. The engine itself does no timing or UI.

EMPTY MODELS:
-------------
    analyze        empty model → valid result, all lists empty, maxima 0
    analyze_modal  empty model → ValidationError (nothing to vibrate)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd

from .assembly import assemble_loads, assemble_mass, assemble_stiffness, restrained_dofs
from .config import AnalysisConfig, DEFAULT_CONFIG
from .dynamic import response_spectrum_analysis, solve_modal
from .kernel.solve import AnalysisError
from .model import StructuralModel
from .results import AnalysisResult, ModalResult, NodeDisplacement
from .solve import solve_static
from .validate import ValidationError, validate

_logger = logging.getLogger(__name__)

PhaseCallback = Optional[Callable[[str], None]]


def _phase(on_phase: PhaseCallback, name: str) -> None:
    _logger.debug("Phase complete: %s", name)
    if on_phase is not None:
        on_phase(name)


def analyze(
    model: StructuralModel,
    config: Optional[AnalysisConfig] = None,
    on_phase: PhaseCallback = None,
) -> AnalysisResult:
    """
    Linear static analysis.

    Raises:
    -------
    ValidationError
        Malformed model (nothing is assembled)

    An unstable structure is NOT raised: the result has is_valid=False and
    error.kind == "unstable_structure".
    """
    config = config or DEFAULT_CONFIG
    validate(model, require_elements=False)
    _phase(on_phase, "validate")

    if model.is_empty:
        _logger.info("Empty model: returning trivial zero result")
        _phase(on_phase, "assemble")
        _phase(on_phase, "solve")
        return AnalysisResult.empty(config.dimension)

    stiffness = assemble_stiffness(model, config)
    F = assemble_loads(model, stiffness.dof, config)
    fixed = restrained_dofs(model, stiffness.dof, config)
    _phase(on_phase, "assemble")

    if not model.elements and not np.any(F):
        # free-standing unloaded nodes: nothing moves
        _phase(on_phase, "solve")
        return AnalysisResult(
            displacements=tuple(NodeDisplacement(nid) for nid in stiffness.dof.node_ids),
            dimension=config.dimension,
        )

    result = solve_static(stiffness, F, fixed, cond_limit=config.cond_limit)
    _phase(on_phase, "solve")

    if result.is_valid:
        _logger.info(
            "Static analysis: %d nodes, %d elements, max displacement %.4e m, max stress %.4e Pa",
            len(model.nodes), len(model.elements), result.max_displacement, result.max_stress,
        )
    return result


def analyze_modal(
    model: StructuralModel,
    config: Optional[AnalysisConfig] = None,
    spectrum=None,
    direction: str = "x",
    combination: str = "srss",
    damping: float = 0.05,
    on_phase: PhaseCallback = None,
) -> ModalResult:
    """
    Natural frequencies and mode shapes, plus an optional response-spectrum
    estimate when `spectrum` (ResponseSpectrum or DesignSpectrum) is given.

    Raises:
    -------
    ValidationError
        Malformed model, including one without nodes or elements
    ConvergenceError
        Eigensolver could not deliver config.n_modes modes; the caller may
        retry with fewer
    UnstableStructureError
        Reduced stiffness is singular or not positive definite
    """
    config = config or DEFAULT_CONFIG
    validate(model, require_elements=True)
    _phase(on_phase, "validate")

    stiffness = assemble_stiffness(model, config)
    mass = assemble_mass(model, config)
    fixed = restrained_dofs(model, stiffness.dof, config)
    _phase(on_phase, "assemble")

    modal = solve_modal(
        stiffness,
        mass,
        fixed,
        config.n_modes,
        solver=config.eigen_solver,
        max_iterations=config.max_iterations,
        tol=config.eigen_tol,
        dense_limit=config.dense_eigen_limit,
        cond_limit=config.cond_limit,
    )
    _phase(on_phase, "solve")

    if spectrum is not None:
        response = response_spectrum_analysis(
            modal, mass, spectrum, direction=direction, combination=combination, damping=damping
        )
        modal = replace(modal, response=response)
        _phase(on_phase, "spectrum")

    return modal


def _batch_row(index: int, model: StructuralModel, config: AnalysisConfig) -> dict:
    row = {"index": index}
    try:
        result = analyze(model, config)
    except ValidationError as e:
        row.update({"ok": False, "reason": f"invalid: {e}", "max_displacement": np.nan, "max_stress": np.nan})
        return row
    except AnalysisError as e:
        row.update({"ok": False, "reason": f"{e.kind}: {e}", "max_displacement": np.nan, "max_stress": np.nan})
        return row

    if result.is_valid:
        row.update({
            "ok": True,
            "reason": "",
            "max_displacement": result.max_displacement,
            "max_stress": result.max_stress,
        })
    else:
        row.update({
            "ok": False,
            "reason": f"{result.error.kind}: {result.error.message}",
            "max_displacement": np.nan,
            "max_stress": np.nan,
        })
    return row


def analyze_batch(
    models: Iterable[StructuralModel],
    config: Optional[AnalysisConfig] = None,
    max_workers: Optional[int] = None,
) -> pd.DataFrame:
    """
    Run independent static analyses concurrently.

    A failing model never aborts the batch; its row has ok=False and a reason.

    Returns:
    --------
    pd.DataFrame
        One row per model, in input order: index, ok, reason,
        max_displacement (m), max_stress (Pa)
    """
    config = config or DEFAULT_CONFIG
    models = list(models)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="frame-engine") as pool:
        rows = list(pool.map(lambda item: _batch_row(item[0], item[1], config), enumerate(models)))

    n_ok = sum(r["ok"] for r in rows)
    _logger.info("Batch complete: %d successful, %d failed", n_ok, len(rows) - n_ok)
    return pd.DataFrame(rows, columns=["index", "ok", "reason", "max_displacement", "max_stress"])
