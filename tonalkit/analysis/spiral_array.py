"""
Spiral Array
Chew's helical embedding of pitch classes along the line of fifths and the
chord descriptors derived from it
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist

from tonalkit.core.errors import TonalDomainError
from tonalkit.core.pitch import validate_pitch_class
from tonalkit.utils.music_theory import PC_TO_FIFTHS

logger = logging.getLogger(__name__)

RADIUS = 1.0
HEIGHT_PER_FIFTH = 0.5


@dataclass(frozen=True)
class SpiralPoint:
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def distance_to(self, other: 'SpiralPoint') -> float:
        return float(np.linalg.norm(self.as_array() - other.as_array()))


ORIGIN = SpiralPoint(0.0, 0.0, 0.0)


def spiral_array_position(pc: int) -> SpiralPoint:
    """Helix point for a pitch class: a quarter turn and 0.5 in height per fifth"""
    fifth_index = PC_TO_FIFTHS[validate_pitch_class(pc)]
    angle = fifth_index * math.pi / 2
    return SpiralPoint(RADIUS * math.cos(angle), RADIUS * math.sin(angle), fifth_index * HEIGHT_PER_FIFTH)


def center_of_effect(pcs: Sequence[int], weights: Optional[Sequence[float]] = None) -> SpiralPoint:
    """
    Weighted centroid of the pitch classes' helix points

    Omitted weights count every entry once. An empty set gives the origin.
    """
    if len(pcs) == 0:
        return ORIGIN

    points = np.array([spiral_array_position(pc).as_array() for pc in pcs])
    if weights is None:
        w = np.ones(len(points))
    else:
        w = np.asarray(weights, dtype=float)
        if w.shape != (len(points),):
            raise TonalDomainError(f"expected {len(points)} weights (got {len(w)})")
        if not np.all(np.isfinite(w)) or np.any(w < 0):
            raise TonalDomainError("weights must be finite and non-negative")

    total = w.sum()
    if total == 0:
        raise TonalDomainError("weights must not sum to zero")

    x, y, z = (points * w[:, None]).sum(axis=0) / total
    return SpiralPoint(float(x), float(y), float(z))


def cloud_diameter(pcs: Sequence[int]) -> float:
    """Largest distance between the helix points of the distinct pitch classes"""
    distinct = sorted({validate_pitch_class(pc) for pc in pcs})
    if len(distinct) < 2:
        return 0.0
    points = np.array([spiral_array_position(pc).as_array() for pc in distinct])
    return float(pdist(points).max())


def cloud_momentum(chord_sequence: Sequence[Sequence[int]],
                   weights: Optional[Sequence[Optional[Sequence[float]]]] = None) -> List[float]:
    """Distances between consecutive chord centroids; n - 1 values for n chords"""
    if weights is not None and len(weights) != len(chord_sequence):
        raise TonalDomainError(f"expected {len(chord_sequence)} weight lists (got {len(weights)})")

    centroids = [
        center_of_effect(chord, weights[i] if weights is not None else None)
        for i, chord in enumerate(chord_sequence)
    ]
    return [a.distance_to(b) for a, b in zip(centroids, centroids[1:])]


def tensile_strain(chord_pcs: Sequence[int], scale_pcs: Sequence[int],
                   chord_weights: Optional[Sequence[float]] = None,
                   scale_weights: Optional[Sequence[float]] = None) -> float:
    """Distance from the chord's center of effect to the key context's"""
    return center_of_effect(chord_pcs, chord_weights).distance_to(center_of_effect(scale_pcs, scale_weights))
