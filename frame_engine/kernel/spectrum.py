# frame_engine/kernel/spectrum.py
"""
RESPONSE SPECTRUM: Curves and Modal Combination
===============================================

PURPOSE:
--------
Peak seismic response is estimated mode by mode from a curve of spectral
acceleration Sa (in g) against period T, then the modal peaks are combined
statistically because they do not occur at the same instant.

Two curve types share the `sa(period)` interface:

    ResponseSpectrum   tabulated (T, Sa) points, linear interpolation
    DesignSpectrum     the two-parameter code shape built from SDS and SD1

DESIGN SPECTRUM SHAPE:
----------------------
    T0 = 0.2·SD1/SDS,   Ts = SD1/SDS

    T < T0          Sa = SDS·(0.4 + 0.6·T/T0)
    T0 ≤ T ≤ Ts     Sa = SDS
    Ts < T ≤ TL     Sa = SD1/T
    T > TL          Sa = SD1·TL/T²

and the whole curve is scaled by Ie/R.

COMBINATION:
------------
    SRSS:  R = sqrt(Σ Rₙ²)
    CQC:   R = sqrt(Σᵢ Σⱼ ρᵢⱼ Rᵢ Rⱼ)   (Der Kiureghian, equal damping ζ)

CQC reduces to SRSS when the frequencies are well separated; it matters when
two modes are close (e.g. the two sway modes of a square building).
"""

import numpy as np
from dataclasses import dataclass
from typing import Sequence, Tuple

STANDARD_GRAVITY = 9.80665  # m/s²


@dataclass(frozen=True)
class ResponseSpectrum:
    """
    Tabulated spectral acceleration (in g) against period (s).

    Outside the tabulated range the end values are held constant.
    """
    periods: Tuple[float, ...]
    accelerations: Tuple[float, ...]
    g: float = STANDARD_GRAVITY

    def __post_init__(self):
        periods = tuple(float(t) for t in self.periods)
        accelerations = tuple(float(a) for a in self.accelerations)
        object.__setattr__(self, "periods", periods)
        object.__setattr__(self, "accelerations", accelerations)

        if len(periods) == 0:
            raise ValueError("Response spectrum needs at least one point")
        if len(periods) != len(accelerations):
            raise ValueError(
                f"Response spectrum has {len(periods)} periods but {len(accelerations)} accelerations"
            )
        if not (np.all(np.isfinite(periods)) and np.all(np.isfinite(accelerations))):
            raise ValueError("Response spectrum values must be finite")
        if min(periods) < 0 or min(accelerations) < 0:
            raise ValueError("Response spectrum periods and accelerations must be non-negative")
        if np.any(np.diff(periods) <= 0):
            raise ValueError("Response spectrum periods must be strictly increasing")

    def sa(self, period):
        """Spectral acceleration (g) at one period or an array of periods."""
        value = np.interp(period, self.periods, self.accelerations)
        return float(value) if np.ndim(value) == 0 else value


@dataclass(frozen=True)
class DesignSpectrum:
    """Code design spectrum from the short- and 1-second spectral accelerations."""
    sds: float
    sd1: float
    tl: float = 8.0
    r: float = 1.0
    ie: float = 1.0
    g: float = STANDARD_GRAVITY

    def __post_init__(self):
        if self.sds <= 0 or self.sd1 <= 0:
            raise ValueError(f"SDS and SD1 must be positive, got {self.sds}, {self.sd1}")
        if self.r <= 0 or self.ie <= 0:
            raise ValueError(f"R and Ie must be positive, got {self.r}, {self.ie}")
        if self.tl <= self.ts:
            raise ValueError(f"TL ({self.tl}) must exceed Ts ({self.ts:.3f})")

    @property
    def ts(self) -> float:
        return self.sd1 / self.sds

    @property
    def t0(self) -> float:
        return 0.2 * self.ts

    def _elastic(self, T: float) -> float:
        if T < self.t0:
            return self.sds * (0.4 + 0.6 * T / self.t0)
        if T <= self.ts:
            return self.sds
        if T <= self.tl:
            return self.sd1 / T
        return self.sd1 * self.tl / T**2

    def sa(self, period):
        """Design spectral acceleration (g), including the Ie/R scaling."""
        factor = self.ie / self.r
        if np.ndim(period) == 0:
            return factor * self._elastic(float(period))
        return factor * np.array([self._elastic(float(T)) for T in np.ravel(period)]).reshape(np.shape(period))

    def to_curve(self, periods: Sequence[float]) -> ResponseSpectrum:
        """Sample the design shape into a tabulated ResponseSpectrum."""
        periods = np.asarray(periods, dtype=float)
        return ResponseSpectrum(tuple(periods), tuple(self.sa(periods)), g=self.g)


def design_spectrum(sds: float, sd1: float, tl: float = 8.0, r: float = 1.0, ie: float = 1.0) -> DesignSpectrum:
    """
    Build a design spectrum.

    >>> spec = design_spectrum(sds=0.8, sd1=0.4)
    >>> spec.sa(0.3), spec.sa(1.0)
    (0.8, 0.4)
    """
    return DesignSpectrum(sds=sds, sd1=sd1, tl=tl, r=r, ie=ie)


def srss(modal_values: np.ndarray) -> np.ndarray:
    """Square root of the sum of squares over modes (axis 0)."""
    modal_values = np.asarray(modal_values, dtype=float)
    return np.sqrt(np.sum(modal_values**2, axis=0))


def cqc_correlation(omegas: Sequence[float], damping: float = 0.05) -> np.ndarray:
    """
    Modal correlation coefficients ρᵢⱼ for equal damping ratio ζ:

        ρᵢⱼ = 8ζ²(1 + β)β^1.5 / ((1 − β²)² + 4ζ²β(1 + β)²),   β = ωⱼ/ωᵢ
    """
    omegas = np.asarray(omegas, dtype=float)
    n = omegas.size
    z2 = damping * damping
    rho = np.eye(n)
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            if omegas[i] <= 0 or omegas[j] <= 0:
                rho[i, j] = 1.0 if omegas[i] == omegas[j] else 0.0
                continue
            b = omegas[j] / omegas[i]
            rho[i, j] = 8 * z2 * (1 + b) * b**1.5 / ((1 - b * b) ** 2 + 4 * z2 * b * (1 + b) ** 2)
    return rho


def cqc(modal_values: np.ndarray, omegas: Sequence[float], damping: float = 0.05) -> np.ndarray:
    """Complete quadratic combination over modes (axis 0)."""
    modal_values = np.asarray(modal_values, dtype=float)
    rho = cqc_correlation(omegas, damping)
    combined = np.einsum("i...,ij,j...->...", modal_values, rho, modal_values)
    return np.sqrt(np.maximum(combined, 0.0))
