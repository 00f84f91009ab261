"""
Tonal Interval Vectors
Six-coefficient DFT of a 12-bin chroma vector and the measures built on it
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.midi_data import NoteEvent

logger = logging.getLogger(__name__)

# Perceptual weights for f1..f6 (Bernardes et al., 2016)
TIV_WEIGHTS = (2.0, 11.0, 17.0, 16.0, 19.0, 7.0)

DFT_COMPONENT_NAMES = (
    'chromaticity', 'dyadicity', 'triadicity',
    'octatonicity', 'diatonicity', 'whole_tone',
)

_K = np.arange(1, 7).reshape(6, 1)
_N = np.arange(12).reshape(1, 12)
_ANGLES = 2.0 * np.pi * _K * _N / 12.0
_COS = np.cos(_ANGLES)
_SIN = np.sin(_ANGLES)


@dataclass(frozen=True)
class TonalIntervalVector:
    """DFT coefficients f1..f6 with their magnitudes and phases"""
    real: Tuple[float, ...]
    imag: Tuple[float, ...]
    magnitudes: Tuple[float, ...]
    phases: Tuple[float, ...]
    energy: float

    @property
    def coefficients(self) -> Tuple[complex, ...]:
        return tuple(complex(re, im) for re, im in zip(self.real, self.imag))

    @property
    def diatonicity(self) -> float:
        return self.magnitudes[4]

    def as_array(self, weights: Optional[Sequence[float]] = None) -> np.ndarray:
        """Coefficients as a 12-element real vector (re1, im1, ..., re6, im6)"""
        w = np.ones(6) if weights is None else _validate_weights(weights)
        stacked = np.empty(12)
        stacked[0::2] = np.asarray(self.real) * w
        stacked[1::2] = np.asarray(self.imag) * w
        return stacked

    def to_dict(self) -> Dict:
        return {
            'magnitudes': list(self.magnitudes),
            'phases': list(self.phases),
            'energy': self.energy,
        }


def validate_chroma(chroma: Sequence[float]) -> np.ndarray:
    """Return chroma as a float array, raising for bad length or weights"""
    arr = np.asarray(chroma, dtype=float)
    if arr.shape != (12,):
        raise TonalDomainError(f"chroma must have 12 elements (got shape {arr.shape})")
    bad = np.flatnonzero(~np.isfinite(arr) | (arr < 0))
    if bad.size:
        idx = int(bad[0])
        raise TonalDomainError(f"chroma values must be finite and non-negative (got {arr[idx]} at index {idx})")
    return arr


def _validate_weights(weights: Sequence[float]) -> np.ndarray:
    w = np.asarray(weights, dtype=float)
    if w.shape != (6,) or not np.all(np.isfinite(w)) or np.any(w < 0):
        raise TonalDomainError("TIV weights must be six finite, non-negative numbers")
    return w


def chroma_vector(events: Iterable[NoteEvent], weight_by_duration: bool = True) -> np.ndarray:
    """Total duration (or count) of each pitch class"""
    chroma = np.zeros(12)
    for event in events:
        chroma[event.pitch_class] += event.duration if weight_by_duration else 1.0
    return chroma


def tiv(chroma: Sequence[float]) -> TonalIntervalVector:
    """
    Compute the Tonal Interval Vector of a chroma vector

    For k = 1..6: re = sum c[n] cos(2 pi k n / 12), im = sum c[n] sin(2 pi k n / 12).
    A zero coefficient reports phase 0.
    """
    arr = validate_chroma(chroma)
    real = _COS @ arr
    imag = _SIN @ arr
    magnitudes = np.hypot(real, imag)
    phases = np.where(magnitudes > 1e-12, np.arctan2(imag, real), 0.0)

    return TonalIntervalVector(
        real=tuple(float(v) for v in real),
        imag=tuple(float(v) for v in imag),
        magnitudes=tuple(float(v) for v in magnitudes),
        phases=tuple(float(v) for v in phases),
        energy=float(np.linalg.norm(magnitudes)),
    )


def tiv_distance(a: TonalIntervalVector, b: TonalIntervalVector,
                 weights: Optional[Sequence[float]] = None) -> float:
    """Euclidean distance between (optionally weighted) coefficient vectors"""
    return float(np.linalg.norm(a.as_array(weights) - b.as_array(weights)))


def chroma_distance(a: Sequence[float], b: Sequence[float],
                    weights: Optional[Sequence[float]] = None) -> float:
    return tiv_distance(tiv(a), tiv(b), weights)


def tiv_consonance(chroma: Sequence[float]) -> float:
    """Share of TIV energy carried by the diatonic coefficient, in [0, 1]"""
    vector = tiv(chroma)
    if vector.energy == 0:
        return 0.0
    return min(1.0, vector.magnitudes[4] / vector.energy)


def dft_components(chroma: Sequence[float]) -> Dict[str, float]:
    """Coefficient magnitudes keyed by their musical reading"""
    return dict(zip(DFT_COMPONENT_NAMES, tiv(chroma).magnitudes))
