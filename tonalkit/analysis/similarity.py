"""
Pitch-class set similarity measures
Interval-vector correlation and angle, membership cosine, Z-relation and
earth mover's distance between pitch-class distributions
"""
import logging
import math
from typing import Callable, Iterable, Optional, Sequence, Union

import numpy as np
from scipy.optimize import linprog

from tonalkit.analysis.pitch_class_set import PitchClassSet
from tonalkit.core.errors import TonalDomainError

logger = logging.getLogger(__name__)

SetLike = Union[PitchClassSet, Iterable[int]]
GroundDistance = Callable[[int, int], float]


def _as_set(value: SetLike) -> PitchClassSet:
    return value if isinstance(value, PitchClassSet) else PitchClassSet(value)


def _cosine(a: np.ndarray, b: np.ndarray) -> float:
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return 0.0
    return float(np.clip(np.dot(a, b) / denom, -1.0, 1.0))


def z_related(a: SetLike, b: SetLike) -> bool:
    """Same interval-class vector, different prime form"""
    a, b = _as_set(a), _as_set(b)
    return (a.interval_class_vector() == b.interval_class_vector()
            and a.prime_form() != b.prime_form())


def icv_similarity(a: SetLike, b: SetLike) -> float:
    """
    Pearson correlation between interval-class vectors, in [-1, 1]

    Identical vectors score 1 even when they are flat (e.g. the all-interval
    tetrachords), where the correlation itself is undefined.
    """
    va = np.array(_as_set(a).interval_class_vector(), dtype=float)
    vb = np.array(_as_set(b).interval_class_vector(), dtype=float)
    if np.array_equal(va, vb):
        return 1.0

    da, db = va - va.mean(), vb - vb.mean()
    denom = math.sqrt(float(np.sum(da ** 2) * np.sum(db ** 2)))
    return float(np.sum(da * db) / denom) if denom > 0 else 0.0


def icv_cosine(a: SetLike, b: SetLike) -> float:
    """Cosine similarity between interval-class vectors, 1 for identical vectors"""
    va = np.array(_as_set(a).interval_class_vector(), dtype=float)
    vb = np.array(_as_set(b).interval_class_vector(), dtype=float)
    if np.array_equal(va, vb):
        return 1.0
    return _cosine(va, vb)


def angle_similarity(a: SetLike, b: SetLike) -> float:
    """Angle in radians between interval-class vectors; 0 means identical direction"""
    va = np.array(_as_set(a).interval_class_vector(), dtype=float)
    vb = np.array(_as_set(b).interval_class_vector(), dtype=float)
    if np.linalg.norm(va) * np.linalg.norm(vb) == 0:
        return 0.0
    return float(math.acos(_cosine(va, vb)))


def pc_set_cosine(a: SetLike, b: SetLike) -> float:
    """Cosine between 12-element membership vectors: 0 for disjoint sets, 1 for equal ones"""
    va = np.zeros(12)
    vb = np.zeros(12)
    va[list(_as_set(a).pcs)] = 1.0
    vb[list(_as_set(b).pcs)] = 1.0
    return _cosine(va, vb)


def circular_semitone_distance(a: int, b: int) -> int:
    steps = abs(a - b) % 12
    return min(steps, 12 - steps)


def _validate_distribution(values: Sequence[float], label: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.shape != (12,):
        raise TonalDomainError(f"{label} must have exactly 12 elements (got shape {arr.shape})")
    if not np.all(np.isfinite(arr)) or np.any(arr < 0):
        raise TonalDomainError(f"{label} values must be finite and non-negative")
    return arr


def earth_movers_distance(a: Sequence[float], b: Sequence[float],
                          ground_distance: Optional[GroundDistance] = None) -> float:
    """
    Minimum cost of reshaping distribution a into b

    Both inputs are normalized to unit mass first. Without a ground distance
    the circular semitone distance is used and solved in closed form;
    a custom ground distance is solved as a transportation problem.

    Args:
        a, b: 12-element non-negative weights
        ground_distance: Optional cost between two pitch classes

    Returns: Non-negative distance, 0 for identical distributions
    """
    arr_a = _validate_distribution(a, "first distribution")
    arr_b = _validate_distribution(b, "second distribution")

    sum_a, sum_b = arr_a.sum(), arr_b.sum()
    if sum_a == 0 and sum_b == 0:
        return 0.0
    if sum_a == 0 or sum_b == 0:
        raise TonalDomainError("Cannot compute EMD when one distribution sums to zero")

    norm_a, norm_b = arr_a / sum_a, arr_b / sum_b
    if ground_distance is None:
        return _circular_emd(norm_a, norm_b)
    return _transport_emd(norm_a, norm_b, ground_distance)


def _circular_emd(norm_a: np.ndarray, norm_b: np.ndarray) -> float:
    # On a circle the optimal flow shifts the cumulative difference by its median
    cum = np.cumsum(norm_a - norm_b)
    median = np.sort(cum)[6]
    return float(np.sum(np.abs(cum - median)))


def _transport_emd(supply: np.ndarray, demand: np.ndarray, distance: GroundDistance) -> float:
    cost = np.array([[distance(i, j) for j in range(12)] for i in range(12)], dtype=float)
    if not np.all(np.isfinite(cost)) or np.any(cost < 0):
        raise TonalDomainError("ground distance must return finite, non-negative values")

    # Flow variables f[i, j] flattened row-major; rows ship supply, columns receive demand
    a_eq = np.zeros((24, 144))
    for i in range(12):
        a_eq[i, i * 12:(i + 1) * 12] = 1.0
        a_eq[12 + i, i::12] = 1.0
    b_eq = np.concatenate([supply, demand])

    result = linprog(cost.ravel(), A_eq=a_eq, b_eq=b_eq, bounds=(0, None), method='highs')
    if not result.success:
        logger.error("Transport solver failed: %s", result.message)
        raise TonalDomainError(f"EMD transport problem could not be solved: {result.message}")
    return max(0.0, float(result.fun))
